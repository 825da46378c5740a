"""Explicit handler results returned instead of swallowing errors."""

from __future__ import annotations

from enum import Enum

from coordinator.domain.models.base import ValueObject


class Outcome(str, Enum):
    """What a handled event did."""

    DEPLOYMENT_STARTED = "deployment_started"
    SKIPPED_COOLDOWN = "skipped_cooldown"
    SKIPPED_LOCK_HELD = "skipped_lock_held"
    DEPLOYMENT_SUCCEEDED = "deployment_succeeded"
    DEPLOYMENT_FAILED = "deployment_failed"
    DUPLICATE = "duplicate"
    NOT_TRACKED = "not_tracked"
    IGNORED = "ignored"
    ERROR = "error"


class RollbackOutcome(str, Enum):
    INITIATED = "initiated"
    NO_TARGET = "no_target"
    DISABLED = "disabled"
    ERROR = "error"


class RollbackResult(ValueObject):
    """Result of a rollback attempt. Never escalated by the caller."""

    outcome: RollbackOutcome
    rollback_id: str | None = None
    target_deployment_id: str | None = None
    task_definition_arn: str | None = None
    error: str = ""


class HandlerResult(ValueObject):
    """Result of handling a single inbound event."""

    outcome: Outcome
    message: str = ""
    deployment_id: str | None = None
    error: str = ""
    rollback: RollbackResult | None = None

    @property
    def ok(self) -> bool:
        """False only when the event could not be processed and should be surfaced."""
        return self.outcome != Outcome.ERROR

    @classmethod
    def failure(
        cls, message: str, error: Exception | str, deployment_id: str | None = None,
    ) -> HandlerResult:
        return cls(
            outcome=Outcome.ERROR,
            message=message,
            deployment_id=deployment_id,
            error=str(error),
        )
