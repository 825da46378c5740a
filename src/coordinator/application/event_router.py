"""Classification and dispatch of inbound platform events."""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from coordinator.domain.events.inbound_events import (
    DeploymentCompleted,
    DeploymentFailed,
    ImagePush,
    InboundEvent,
    TaskStateChange,
    Unrecognized,
)
from coordinator.domain.models.base import now_millis
from coordinator.domain.models.results import HandlerResult, Outcome
from coordinator.domain.services.completion_service import CompletionHandler
from coordinator.domain.services.deployment_service import DeploymentOrchestrator
from coordinator.infrastructure.observability.metrics import (
    ADMISSION_DECISIONS,
    EVENT_HANDLING_DURATION,
    EVENTS_TOTAL,
    ROLLBACKS_TOTAL,
)
from coordinator.infrastructure.observability.tracing import get_tracer


logger = structlog.get_logger(__name__)

ECR_SOURCE = "aws.ecr"
ECS_SOURCE = "aws.ecs"
ECR_IMAGE_ACTION = "ECR Image Action"
ECS_DEPLOYMENT_STATE_CHANGE = "ECS Deployment State Change"
ECS_TASK_STATE_CHANGE = "ECS Task State Change"

COMPLETED_EVENT_NAMES = frozenset({"DeploymentCompleted", "SERVICE_DEPLOYMENT_COMPLETED"})
FAILED_EVENT_NAMES = frozenset({"DeploymentFailed", "SERVICE_DEPLOYMENT_FAILED"})
TASK_EVENT_NAMES = frozenset({"TaskStateChange"})

ADMISSION_LABELS: dict[Outcome, str] = {
    Outcome.DEPLOYMENT_STARTED: "admitted",
    Outcome.SKIPPED_COOLDOWN: "cooldown",
    Outcome.SKIPPED_LOCK_HELD: "lock_held",
    Outcome.ERROR: "error",
}


def _first(detail: Mapping[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = detail.get(key)
        if value:
            return str(value)
    return None


def classify(raw: Mapping[str, Any]) -> InboundEvent:
    """Turn an EventBridge-style envelope into exactly one inbound event. Never raises."""
    if not isinstance(raw, Mapping):
        return Unrecognized(reason="event is not an object")

    source = raw.get("source")
    detail_type = raw.get("detail-type") or raw.get("detailType")
    detail = raw.get("detail")
    if not isinstance(detail, Mapping):
        detail = {}

    def unrecognized(reason: str) -> Unrecognized:
        return Unrecognized(
            source=str(source) if source is not None else None,
            detail_type=str(detail_type) if detail_type is not None else None,
            reason=reason,
        )

    try:
        if source == ECR_SOURCE and detail_type in (None, ECR_IMAGE_ACTION):
            if detail.get("action") != "PUSH":
                return unrecognized("ECR action is not a push")
            if detail.get("result") not in (None, "SUCCESS"):
                return unrecognized("ECR push did not succeed")
            repository = _first(detail, "repository-name", "repository")
            tag = _first(detail, "image-tag", "tag")
            if repository is None or tag is None:
                return unrecognized("ECR push without repository or tag")
            return ImagePush(repository=repository, tag=tag)

        if source == ECS_SOURCE:
            event_name = detail.get("eventName")
            if detail_type == ECS_TASK_STATE_CHANGE or event_name in TASK_EVENT_NAMES:
                return TaskStateChange(
                    task_arn=_first(detail, "taskArn"),
                    last_status=_first(detail, "lastStatus"),
                )
            if detail_type in (None, ECS_DEPLOYMENT_STATE_CHANGE):
                deployment_id = _first(detail, "deploymentId")
                if event_name in COMPLETED_EVENT_NAMES:
                    if deployment_id is None:
                        return unrecognized("deployment event without deploymentId")
                    return DeploymentCompleted(deployment_id=deployment_id)
                if event_name in FAILED_EVENT_NAMES:
                    if deployment_id is None:
                        return unrecognized("deployment event without deploymentId")
                    return DeploymentFailed(
                        deployment_id=deployment_id,
                        reason=_first(detail, "reason") or "Unknown failure",
                    )
    except ValidationError as e:
        return unrecognized(f"invalid event detail: {e.error_count()} error(s)")

    return unrecognized("unhandled event type")


class EventRouter:
    """Entry point for every inbound event.

    Each event is classified once and handed to the matching handler. The
    router always returns a HandlerResult; deciding whether an ERROR is
    surfaced, retried or dropped is left to the caller.
    """

    def __init__(
        self,
        orchestrator: DeploymentOrchestrator,
        completion_handler: CompletionHandler,
        watched_repository: str | None = None,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        self._orchestrator = orchestrator
        self._completion_handler = completion_handler
        self._watched_repository = watched_repository
        self._clock = clock
        self._tracer = get_tracer(__name__)

    async def handle(self, raw: Mapping[str, Any], now: int | None = None) -> HandlerResult:
        """Classify and dispatch a raw event envelope."""
        return await self.dispatch(classify(raw), now=now)

    async def dispatch(self, event: InboundEvent, now: int | None = None) -> HandlerResult:
        if now is None:
            now = self._clock()

        started = time.perf_counter()
        with self._tracer.start_as_current_span(f"coordinator.{event.kind}") as span:
            try:
                result = await self._route(event, now)
            except Exception as e:  # noqa: BLE001
                logger.exception("event_handling_failed", kind=event.kind, error=str(e))
                result = HandlerResult.failure("Unexpected error while handling event", e)
            span.set_attribute("coordinator.outcome", result.outcome.value)

        EVENT_HANDLING_DURATION.labels(kind=event.kind).observe(time.perf_counter() - started)
        EVENTS_TOTAL.labels(kind=event.kind, outcome=result.outcome.value).inc()
        if result.rollback is not None:
            ROLLBACKS_TOTAL.labels(outcome=result.rollback.outcome.value).inc()
        return result

    async def _route(self, event: InboundEvent, now: int) -> HandlerResult:
        if isinstance(event, ImagePush):
            if self._watched_repository and event.repository != self._watched_repository:
                logger.info(
                    "image_push_ignored",
                    repository=event.repository,
                    watched_repository=self._watched_repository,
                )
                return HandlerResult(
                    outcome=Outcome.IGNORED,
                    message=f"Repository {event.repository} is not watched",
                )
            result = await self._orchestrator.handle_image_push(event.repository, event.tag, now)
            ADMISSION_DECISIONS.labels(decision=ADMISSION_LABELS[result.outcome]).inc()
            return result

        if isinstance(event, DeploymentCompleted):
            return await self._completion_handler.handle_completed(event.deployment_id, now)

        if isinstance(event, DeploymentFailed):
            return await self._completion_handler.handle_failed(
                event.deployment_id, event.reason, now
            )

        if isinstance(event, TaskStateChange):
            logger.debug(
                "task_state_change_observed",
                task_arn=event.task_arn,
                last_status=event.last_status,
            )
            return HandlerResult(outcome=Outcome.IGNORED, message="Processed task state change")

        logger.info(
            "event_unhandled",
            source=event.source,
            detail_type=event.detail_type,
            reason=event.reason,
        )
        return HandlerResult(outcome=Outcome.IGNORED, message="Unhandled event type")
