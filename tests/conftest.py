import json
from typing import Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from order_orchestrator.config import Settings

CUSTOMERS_URL = "http://customers.test"
ORDERS_URL = "http://orders.test"
SECRET = "test-secret"

Route = Callable[[httpx.Request], httpx.Response]


class FakeUpstreams:
    """Customer and order services behind one httpx.MockTransport.

    Each route returns a canned response unless overridden; every request is
    recorded so tests can assert what was (or was not) called.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.customer_calls = 0
        self.routes: Dict[Tuple[str, str], Route] = {
            ("GET", "/internal/customers/42"): lambda r: httpx.Response(
                200, json={"id": 42, "name": "ACME", "email": "ops@acme.test"}
            ),
            ("POST", "/orders"): lambda r: httpx.Response(
                201, json={"id": 101, "status": "CREATED", **json.loads(r.content)}
            ),
            ("POST", "/orders/101/confirm"): lambda r: httpx.Response(
                200, json={"id": 101, "status": "confirmed", "customer_id": 42}
            ),
        }
        self.refresh_route: Optional[Route] = None

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key[1].startswith("/internal/customers/"):
            self.customer_calls += 1
            if self.customer_calls == 2 and self.refresh_route is not None:
                return self.refresh_route(request)
        route = self.routes.get(key)
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        return route(request)

    def paths(self) -> List[str]:
        return [f"{r.method} {r.url.path}" for r in self.requests]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def settings():
    return Settings(
        CUSTOMERS_API_BASE=CUSTOMERS_URL,
        ORDERS_API_BASE=ORDERS_URL,
        SERVICE_TOKEN="static-service-token",
        JWT_SECRET=SECRET,
        REQUEST_TIMEOUT_MS=1000,
    )


@pytest.fixture
def upstreams():
    return FakeUpstreams()


@pytest.fixture
def order_payload():
    return {
        "customer_id": 42,
        "items": [{"product_id": 7, "qty": 2}],
        "idempotency_key": "abc-1",
    }
