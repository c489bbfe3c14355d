import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from order_orchestrator.config import Settings
from order_orchestrator.models import LineItem, UpstreamResult

logger = logging.getLogger("order_orchestrator.client")


def _base_headers(correlation_id: str) -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "X-Correlation-Id": correlation_id,
    }


def _parse_body(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return {"raw": text}


async def _send(
    method: str,
    url: str,
    headers: Dict[str, str],
    timeout_sec: float,
    payload: Optional[Dict[str, Any]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> UpstreamResult:
    # never log the Authorization header
    logger.info(f"{method} {url} correlation_id={headers.get('X-Correlation-Id')}")
    try:
        async with httpx.AsyncClient(transport=transport) as client:
            # httpx timeouts are per phase; wait_for bounds the whole call
            response = await asyncio.wait_for(
                client.request(method, url, json=payload, headers=headers, timeout=timeout_sec),
                timeout_sec,
            )
    except (httpx.TimeoutException, asyncio.TimeoutError):
        logger.error(f"{method} {url} timed out after {timeout_sec}s")
        return UpstreamResult(success=False, status_code=0, error="timeout")
    except httpx.RequestError as e:
        logger.error(f"{method} {url} unreachable: {e}")
        return UpstreamResult(success=False, status_code=0, error=str(e) or type(e).__name__)
    except (httpx.InvalidURL, UnicodeEncodeError) as e:
        logger.error(f"{method} {url} could not be built: {e}")
        return UpstreamResult(success=False, status_code=0, error="invalid request")

    return UpstreamResult(
        success=response.is_success,
        status_code=response.status_code,
        body=_parse_body(response.text),
    )


async def fetch_customer(
    settings: Settings,
    customer_id: int,
    correlation_id: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> UpstreamResult:
    url = f"{settings.CUSTOMERS_API_BASE}/internal/customers/{customer_id}"
    headers = _base_headers(correlation_id)
    headers["Authorization"] = f"Bearer {settings.SERVICE_TOKEN}"
    return await _send("GET", url, headers, settings.timeout_sec, transport=transport)


async def create_order(
    settings: Settings,
    token: str,
    customer_id: int,
    items: List[LineItem],
    correlation_id: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> UpstreamResult:
    url = f"{settings.ORDERS_API_BASE}/orders"
    payload = {
        "customer_id": customer_id,
        "items": [item.model_dump() for item in items],
    }
    headers = _base_headers(correlation_id)
    headers["Authorization"] = f"Bearer {token}"
    return await _send("POST", url, headers, settings.timeout_sec, payload=payload, transport=transport)


async def confirm_order(
    settings: Settings,
    token: str,
    order_id: Any,
    idempotency_key: str,
    correlation_id: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> UpstreamResult:
    url = f"{settings.ORDERS_API_BASE}/orders/{order_id}/confirm"
    headers = _base_headers(correlation_id)
    headers["Authorization"] = f"Bearer {token}"
    headers["X-Idempotency-Key"] = idempotency_key
    return await _send("POST", url, headers, settings.timeout_sec, transport=transport)
