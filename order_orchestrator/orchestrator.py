"""Create-and-confirm order sequence.

Steps run strictly in order and the first failure ends the run with an error
envelope:

    START -> CONFIG_CHECKED -> CUSTOMER_PRECHECKED -> ORDER_CREATED
          -> ORDER_CONFIRMED -> CUSTOMER_REFRESHED -> DONE

The customer refresh after confirmation is best-effort. By then the order
exists and is confirmed upstream, so a failed refresh only drops `customer`
from the response. Do not turn it into a hard failure: a caller retrying with
the same idempotency key would see a failure for an order that succeeded.

Nothing is retried and nothing is rolled back. De-duplication of the confirm
call is left to the order service; the idempotency key is forwarded as-is.
"""
import enum
import logging
from typing import Any, Optional

import httpx

from order_orchestrator import client, ids
from order_orchestrator.config import Settings
from order_orchestrator.credentials import issue_service_token
from order_orchestrator.exceptions import ConfigurationError
from order_orchestrator.models import OrderResult, ResponseEnvelope, UpstreamResult
from order_orchestrator.validation import correlation_id_of, header_safe, parse_body, validate_order_request

logger = logging.getLogger("order_orchestrator.orchestrator")

MISSING_CONFIG = "Missing required env variables"
INVALID_CUSTOMER = "Invalid customer (internal check failed)"
CUSTOMER_UNAVAILABLE = "Customer service unavailable"
CREATE_FAILED = "Failed to create order"
CONFIRM_FAILED = "Failed to confirm order"
MISSING_ORDER_ID = "Order service returned no order id"


class Stage(str, enum.Enum):
    START = "START"
    CONFIG_CHECKED = "CONFIG_CHECKED"
    CUSTOMER_PRECHECKED = "CUSTOMER_PRECHECKED"
    ORDER_CREATED = "ORDER_CREATED"
    ORDER_CONFIRMED = "ORDER_CONFIRMED"
    CUSTOMER_REFRESHED = "CUSTOMER_REFRESHED"
    DONE = "DONE"


def _abort(
    stage: Stage,
    status_code: int,
    correlation_id: str,
    error: str,
    upstream: Optional[UpstreamResult] = None,
    details: Any = None,
) -> ResponseEnvelope:
    logger.warning(f"Aborted at {stage.value} with {status_code}: {error} (correlation_id={correlation_id})")
    if upstream is not None:
        details = upstream.body if upstream.status_code else {"error": upstream.error}
    return ResponseEnvelope(
        status_code=status_code,
        correlation_id=correlation_id,
        success=False,
        error=error,
        upstream_status=upstream.status_code if upstream is not None else None,
        details=details,
    )


def _resolve_correlation_id(supplied: Optional[str], fallback: Optional[str]) -> str:
    # body first, then inbound header; values that cannot travel as a header are skipped
    for candidate in (supplied, fallback):
        if candidate and header_safe(candidate):
            return candidate
    return ids.generate_correlation_id()

async def create_and_confirm_order(
    raw: Any,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    correlation_id: Optional[str] = None,
) -> ResponseEnvelope:
    """Run the whole sequence for one inbound payload.

    `raw` is the request body, either already decoded or as str/bytes.
    `correlation_id` is a fallback (e.g. an inbound header) used only when the
    body carries none. `transport` replaces the network in tests.
    """
    stage = Stage.START
    payload, error = parse_body(raw)
    correlation_id = _resolve_correlation_id(correlation_id_of(payload), correlation_id)
    if error is not None:
        return _abort(stage, 400, correlation_id, error)

    order_req, error = validate_order_request(payload)
    if error is not None:
        return _abort(stage, 400, correlation_id, error)

    # Config check; never touches the network
    missing = settings.missing()
    if missing:
        return _abort(stage, 500, correlation_id, MISSING_CONFIG, details={"missing": missing})
    stage = Stage.CONFIG_CHECKED

    customer = await client.fetch_customer(settings, order_req.customer_id, correlation_id, transport)
    if not customer.success:
        if customer.status_code == 0:
            return _abort(stage, 502, correlation_id, CUSTOMER_UNAVAILABLE, upstream=customer)
        return _abort(stage, 400, correlation_id, INVALID_CUSTOMER, upstream=customer)
    stage = Stage.CUSTOMER_PRECHECKED
    logger.info(f"Customer {order_req.customer_id} validated (correlation_id={correlation_id})")

    try:
        token = issue_service_token(settings.JWT_SECRET)
    except ConfigurationError as e:
        return _abort(stage, 500, correlation_id, MISSING_CONFIG, details={"missing": e.missing})

    created = await client.create_order(
        settings, token, order_req.customer_id, order_req.items, correlation_id, transport
    )
    if not created.success:
        return _abort(stage, 502, correlation_id, CREATE_FAILED, upstream=created)
    order_id = created.body.get("id") if isinstance(created.body, dict) else None
    if order_id is None:
        return _abort(stage, 502, correlation_id, MISSING_ORDER_ID, upstream=created)
    stage = Stage.ORDER_CREATED
    logger.info(f"Order {order_id} created (correlation_id={correlation_id})")

    confirmed = await client.confirm_order(
        settings, token, order_id, order_req.idempotency_key, correlation_id, transport
    )
    if not confirmed.success:
        return _abort(stage, 502, correlation_id, CONFIRM_FAILED, upstream=confirmed)
    stage = Stage.ORDER_CONFIRMED
    logger.info(f"Order {order_id} confirmed (correlation_id={correlation_id})")

    # Best-effort: a failed refresh leaves customer absent, never aborts
    refreshed = await client.fetch_customer(settings, order_req.customer_id, correlation_id, transport)
    if refreshed.success:
        stage = Stage.CUSTOMER_REFRESHED
    else:
        logger.warning(
            f"Customer refresh failed for order {order_id} "
            f"(status={refreshed.status_code}, correlation_id={correlation_id}); omitting customer"
        )

    logger.info(f"Orchestration done after {stage.value} (correlation_id={correlation_id})")
    return ResponseEnvelope(
        status_code=201,
        correlation_id=correlation_id,
        success=True,
        data=OrderResult(
            customer=refreshed.body if refreshed.success else None,
            order=confirmed.body,
        ),
    )
