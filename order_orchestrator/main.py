import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from order_orchestrator import __version__, ids
from order_orchestrator.config import Settings, get_settings
from order_orchestrator.exceptions import ConfigurationError
from order_orchestrator.models import OrderRequest, ResponseEnvelope
from order_orchestrator.orchestrator import create_and_confirm_order

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("order_orchestrator")

ORDER_REQUEST_SCHEMA = OrderRequest.model_json_schema()
INTERNAL_ERROR = "Internal server error"


def check_configuration(settings: Settings) -> None:
    missing = settings.missing()
    if missing:
        logger.error(f"Missing required env variables: {', '.join(missing)}")
        raise ConfigurationError("Missing required env variables", missing=missing)


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    if settings is None:
        settings = get_settings()
    logging.getLogger("order_orchestrator").setLevel(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # refuse to serve traffic with incomplete configuration
        check_configuration(settings)
        logger.info(
            f"Orchestrator configured: customers={settings.CUSTOMERS_API_BASE} "
            f"orders={settings.ORDERS_API_BASE} timeout={settings.REQUEST_TIMEOUT_MS}ms"
        )
        yield

    app = FastAPI(
        title="Order Orchestrator",
        version=__version__,
        docs_url="/docs",
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def add_correlation_id(request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-Id")
        if not correlation_id:
            correlation_id = ids.generate_correlation_id()

        # Store in request state; the route may replace it with the body's id
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers["X-Correlation-Id"] = request.state.correlation_id
        return response

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.post(
        "/orchestrator/create-and-confirm-order",
        status_code=201,
        openapi_extra={
            "requestBody": {
                "required": True,
                "content": {"application/json": {"schema": ORDER_REQUEST_SCHEMA}},
            }
        },
    )
    async def create_and_confirm(request: Request):
        # Raw body, so malformed JSON becomes the 400 envelope instead of a 422
        body = await request.body()
        try:
            envelope = await create_and_confirm_order(
                body,
                settings,
                transport=transport,
                correlation_id=request.state.correlation_id,
            )
        except Exception:
            logger.exception(f"Unhandled orchestration error (correlation_id={request.state.correlation_id})")
            envelope = ResponseEnvelope(
                status_code=500,
                correlation_id=request.state.correlation_id,
                success=False,
                error=INTERNAL_ERROR,
            )
            return JSONResponse(status_code=500, content=envelope.to_content())

        request.state.correlation_id = envelope.correlation_id
        return JSONResponse(status_code=envelope.status_code, content=envelope.to_content())

    return app


app = create_app()


def run() -> None:
    uvicorn.run(app, host="0.0.0.0", port=get_settings().PORT)


if __name__ == "__main__":
    run()
