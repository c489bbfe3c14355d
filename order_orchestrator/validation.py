"""Inbound payload checks.

Pure functions: each returns a (value, error) pair and short-circuits on the
first violated rule.
"""
import json
from typing import Any, Dict, Optional, Tuple

from order_orchestrator.models import LineItem, OrderRequest

INVALID_JSON = "Invalid JSON body"


def parse_body(raw: Any) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return None, INVALID_JSON
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return None, INVALID_JSON
    if not isinstance(raw, dict):
        return None, INVALID_JSON
    return raw, None


def _positive_int(value: Any) -> Optional[int]:
    # JSON true/false must not pass as 1/0
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float) and value.is_integer() and value > 0:
        return int(value)
    return None


def validate_order_request(payload: Dict[str, Any]) -> Tuple[Optional[OrderRequest], Optional[str]]:
    customer_id = _positive_int(payload.get("customer_id"))
    if customer_id is None:
        return None, "customer_id must be a positive integer"

    raw_items = payload.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        return None, "items must be a non-empty array"

    items = []
    for raw_item in raw_items:
        if not isinstance(raw_item, dict):
            return None, "each item must have positive integer product_id and qty"
        product_id = _positive_int(raw_item.get("product_id"))
        qty = _positive_int(raw_item.get("qty"))
        if product_id is None or qty is None:
            return None, "each item must have positive integer product_id and qty"
        items.append(LineItem(product_id=product_id, qty=qty))

    idempotency_key = payload.get("idempotency_key")
    if not isinstance(idempotency_key, str) or not idempotency_key.strip():
        return None, "idempotency_key is required"
    if not header_safe(idempotency_key):
        return None, "idempotency_key must be printable ASCII"

    correlation_id = correlation_id_of(payload)
    if correlation_id is not None and not header_safe(correlation_id):
        return None, "correlation_id must be printable ASCII"

    return OrderRequest(
        customer_id=customer_id,
        items=items,
        idempotency_key=idempotency_key,
        correlation_id=correlation_id,
    ), None


def correlation_id_of(payload: Any) -> Optional[str]:
    """Caller-supplied correlation id, coerced to str; None when absent or empty."""
    if not isinstance(payload, dict):
        return None
    value = payload.get("correlation_id")
    if not value:
        return None
    return str(value)


def header_safe(value: str) -> bool:
    """True when `value` can be sent verbatim as an HTTP header value."""
    return all(" " <= ch <= "~" for ch in value)
