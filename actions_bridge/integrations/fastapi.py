"""
FastAPI Integration

Mounts a ProtocolAdapter as a POST endpoint. The route reads the raw body
itself so that undecodable payloads still reach the adapter and receive its
400 text response instead of FastAPI's validation error.
"""
from datetime import datetime
from typing import Optional

import structlog
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel

from actions_bridge.adapter.app import ProtocolAdapter
from actions_bridge.adapter.transport import WebhookRequest, WebhookResponse
from actions_bridge.core.config import AdapterSettings
from actions_bridge.core.logging import SERVICE_NAME, configure_logging

logger = structlog.get_logger(__name__)

VERSION = "1.0.0"


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str
    timestamp: str


def to_http_response(response: WebhookResponse) -> Response:
    """Render a WebhookResponse with its status and headers."""
    headers = {k: v for k, v in response.headers.items() if k.lower() != "content-type"}
    if response.is_json:
        return JSONResponse(status_code=response.status, content=response.body, headers=headers)
    return PlainTextResponse(status_code=response.status, content=response.text(), headers=headers)


def create_webhook_router(adapter: ProtocolAdapter, path: str = "/webhook") -> APIRouter:
    """
    Create a router exposing ``adapter`` at ``path``.

    Args:
        adapter: Configured ProtocolAdapter
        path: Route path for fulfillment requests
    """
    router = APIRouter(tags=["Fulfillment"])

    @router.post(path, summary="Handle an Actions on Google fulfillment request")
    async def fulfill(request: Request) -> Response:
        raw = await request.body()
        webhook_request = WebhookRequest.from_raw(raw, dict(request.headers))
        response = await adapter.handle(webhook_request)
        return to_http_response(response)

    return router


def create_app(
    adapter: ProtocolAdapter,
    settings: Optional[AdapterSettings] = None,
    path: str = "/webhook",
) -> FastAPI:
    """
    Create a FastAPI application serving ``adapter``.

    Logging is configured from ``settings`` (the adapter's own settings by
    default).
    """
    settings = settings or adapter.settings
    configure_logging(
        level="DEBUG" if settings.debug else settings.log_level,
        fmt=settings.log_format,
    )

    app = FastAPI(
        title="Actions Bridge",
        description="Actions on Google fulfillment webhook",
        version=VERSION,
    )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            service=SERVICE_NAME,
            version=VERSION,
            timestamp=datetime.utcnow().isoformat(),
        )

    app.include_router(create_webhook_router(adapter, path))
    logger.info("webhook_app_created", path=path, handlers=adapter.describe()["handlers"])
    return app
