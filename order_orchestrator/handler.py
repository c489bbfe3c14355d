"""API-gateway style entry point.

Accepts events shaped like ``{"body": <str or dict>, "headers": {...}}`` and
returns ``{"statusCode", "headers", "body"}`` with a JSON string body.
"""
import asyncio
import json
from typing import Any, Dict, Mapping, Optional

import httpx

from order_orchestrator.config import Settings, get_settings
from order_orchestrator.orchestrator import create_and_confirm_order


def _header(headers: Optional[Mapping[str, Any]], name: str) -> Optional[str]:
    for key, value in (headers or {}).items():
        if key.lower() == name.lower() and value:
            return str(value)
    return None


async def handle_event(
    event: Optional[Dict[str, Any]],
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, Any]:
    event = event or {}
    if settings is None:
        settings = get_settings()
    envelope = await create_and_confirm_order(
        event.get("body"),
        settings,
        transport=transport,
        correlation_id=_header(event.get("headers"), "X-Correlation-Id"),
    )
    return {
        "statusCode": envelope.status_code,
        "headers": {
            "Content-Type": "application/json",
            "X-Correlation-Id": envelope.correlation_id,
        },
        "body": json.dumps(envelope.to_content()),
    }


def lambda_handler(event: Optional[Dict[str, Any]], context: Any = None) -> Dict[str, Any]:
    return asyncio.run(handle_event(event))
