"""Inbound event route."""

from __future__ import annotations

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from coordinator.api.dependencies.services import Container
from coordinator.api.schemas.deployment_schemas import EventEnvelope, EventResultResponse


logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=EventResultResponse)
async def receive_event(envelope: EventEnvelope, container: Container) -> JSONResponse:
    """Classify and handle one platform event. ERROR results map to HTTP 500."""
    if envelope.id:
        structlog.contextvars.bind_contextvars(event_id=envelope.id)
    result = await container.router.handle(envelope.to_raw())
    body = EventResultResponse.from_result(result)
    return JSONResponse(
        status_code=200 if result.ok else 500,
        content=body.model_dump(mode="json"),
    )
