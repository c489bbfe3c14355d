from pydantic import BaseModel, ConfigDict
from typing import Optional, Dict, Any, List


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: int
    qty: int


class OrderRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    customer_id: int
    items: List[LineItem]
    idempotency_key: str
    correlation_id: Optional[str] = None


class UpstreamResult(BaseModel):
    """Normalized outcome of one remote call.

    status_code is 0 when no HTTP response was received; `error` then says why
    ("timeout" or the transport error text).
    """

    success: bool
    status_code: int
    body: Any = None
    error: Optional[str] = None


class OrderResult(BaseModel):
    customer: Optional[Any] = None
    order: Any


class ResponseEnvelope(BaseModel):
    status_code: int
    correlation_id: str
    success: bool
    data: Optional[OrderResult] = None
    error: Optional[str] = None
    upstream_status: Optional[int] = None
    details: Optional[Any] = None

    def to_content(self) -> Dict[str, Any]:
        content: Dict[str, Any] = {
            "success": self.success,
            "correlationId": self.correlation_id,
        }
        if self.data is not None:
            data: Dict[str, Any] = {}
            if self.data.customer is not None:
                data["customer"] = self.data.customer
            data["order"] = self.data.order
            content["data"] = data
        if self.error is not None:
            content["error"] = self.error
        if self.upstream_status:
            content["upstream_status"] = self.upstream_status
        if self.details is not None:
            content["details"] = self.details
        return content
