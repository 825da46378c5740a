"""Application entrypoints: the Lambda handler and the HTTP server."""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
import uvicorn

from coordinator.api.app import create_app
from coordinator.application.container import get_service_container
from coordinator.config import get_settings
from coordinator.infrastructure.observability.logging import setup_logging
from coordinator.infrastructure.observability.tracing import setup_tracing


logger = structlog.get_logger(__name__)

_bootstrapped = False


def _bootstrap() -> None:
    global _bootstrapped
    if _bootstrapped:
        return
    settings = get_settings()
    setup_logging(settings.observability.log_level, settings.observability.service_name)
    setup_tracing(settings.observability)
    _bootstrapped = True


def handler(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
    """Lambda entry point for EventBridge events.

    ERROR results are surfaced as ``statusCode`` 500 so the invocation is
    visible as a failure; every other outcome is a 200.
    """
    _bootstrap()
    request_id = getattr(context, "aws_request_id", None)
    structlog.contextvars.bind_contextvars(
        event_id=event.get("id") if isinstance(event, dict) else None,
        request_id=request_id,
    )
    try:
        logger.info(
            "event_received",
            source=event.get("source") if isinstance(event, dict) else None,
            detail_type=event.get("detail-type") if isinstance(event, dict) else None,
        )
        container = get_service_container()
        result = asyncio.run(container.router.handle(event))
    finally:
        structlog.contextvars.unbind_contextvars("event_id", "request_id")

    if not result.ok:
        logger.error("event_processing_failed", outcome=result.outcome.value, error=result.error)
        return {"statusCode": 500, "body": result.message, "error": result.error}
    return {"statusCode": 200, "body": result.message}


def main() -> None:
    """Run the HTTP server."""
    _bootstrap()
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.observability.log_level.lower(),
    )


if __name__ == "__main__":
    main()
