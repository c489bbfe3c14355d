import json

import pytest

from order_orchestrator.config import Settings
from order_orchestrator.handler import handle_event, lambda_handler


@pytest.mark.asyncio
async def test_string_body_event(settings, upstreams, order_payload):
    result = await handle_event({"body": json.dumps(order_payload)}, settings, transport=upstreams.transport)

    assert result["statusCode"] == 201
    assert result["headers"]["Content-Type"] == "application/json"
    body = json.loads(result["body"])
    assert body["success"] is True
    assert result["headers"]["X-Correlation-Id"] == body["correlationId"]


@pytest.mark.asyncio
async def test_dict_body_and_lowercase_correlation_header(settings, upstreams, order_payload):
    event = {"body": order_payload, "headers": {"x-correlation-id": "gw-1"}}

    result = await handle_event(event, settings, transport=upstreams.transport)

    assert json.loads(result["body"])["correlationId"] == "gw-1"


@pytest.mark.asyncio
async def test_event_without_body(settings, upstreams):
    result = await handle_event({}, settings, transport=upstreams.transport)

    assert result["statusCode"] == 400
    assert json.loads(result["body"])["error"] == "Invalid JSON body"
    assert upstreams.requests == []


def test_lambda_handler_runs_synchronously(settings, monkeypatch):
    monkeypatch.setattr("order_orchestrator.handler.get_settings", lambda: settings)

    result = lambda_handler({"body": '{"customer_id": 42, "items": []}'})

    assert result["statusCode"] == 400
    assert json.loads(result["body"])["error"] == "items must be a non-empty array"


def test_lambda_handler_reports_missing_configuration(monkeypatch, order_payload):
    monkeypatch.setattr("order_orchestrator.handler.get_settings", lambda: Settings())

    result = lambda_handler({"body": json.dumps(order_payload), "headers": {"X-Correlation-Id": "gw-2"}})

    assert result["statusCode"] == 500
    body = json.loads(result["body"])
    assert body["correlationId"] == "gw-2"
    assert body["details"]["missing"] == ["CUSTOMERS_API_BASE", "ORDERS_API_BASE", "SERVICE_TOKEN", "JWT_SECRET"]


def test_lambda_handler_rejects_non_ascii_idempotency_key(settings, monkeypatch, order_payload):
    monkeypatch.setattr("order_orchestrator.handler.get_settings", lambda: settings)
    order_payload["idempotency_key"] = "clé-1"

    result = lambda_handler({"body": json.dumps(order_payload)})

    assert result["statusCode"] == 400
    assert json.loads(result["body"])["error"] == "idempotency_key must be printable ASCII"
