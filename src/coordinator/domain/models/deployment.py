"""Deployment ledger record with its lifecycle state machine."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from coordinator.domain.models.base import MILLIS_PER_SECOND, ValueObject


SECONDS_PER_DAY = 24 * 60 * 60
DEFAULT_RETENTION_DAYS = 90
ROLLBACK_ID_PREFIX = "rollback-"


class DeploymentStatus(str, Enum):
    """Deployment lifecycle states as stored in the ledger."""

    STARTED = "STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    ROLLBACK_INITIATED = "ROLLBACK_INITIATED"


# State machine transitions
VALID_TRANSITIONS: dict[DeploymentStatus, set[DeploymentStatus]] = {
    DeploymentStatus.STARTED: {DeploymentStatus.IN_PROGRESS},
    DeploymentStatus.IN_PROGRESS: {DeploymentStatus.SUCCEEDED, DeploymentStatus.FAILED},
    DeploymentStatus.SUCCEEDED: set(),
    DeploymentStatus.FAILED: {DeploymentStatus.ROLLBACK_INITIATED},
    DeploymentStatus.ROLLBACK_INITIATED: set(),
}

TERMINAL_STATUSES: frozenset[DeploymentStatus] = frozenset({
    DeploymentStatus.SUCCEEDED,
    DeploymentStatus.FAILED,
    DeploymentStatus.ROLLBACK_INITIATED,
})

# Statuses that mean a rollout may still be running on the platform.
OPEN_STATUSES: frozenset[DeploymentStatus] = frozenset({
    DeploymentStatus.STARTED,
    DeploymentStatus.IN_PROGRESS,
})


def make_deployment_id(repository: str, image_tag: str, created_at: int) -> str:
    """Build the ledger id for a push-triggered deployment."""
    return f"{repository}-{image_tag}-{created_at}"


def make_rollback_id(original_id: str) -> str:
    return f"{ROLLBACK_ID_PREFIX}{original_id}"


def retention_expiry_for(timestamp: int, retention_days: int = DEFAULT_RETENTION_DAYS) -> int:
    """TTL (epoch seconds) after which a record may be purged."""
    return timestamp // MILLIS_PER_SECOND + retention_days * SECONDS_PER_DAY


class DeploymentRecord(ValueObject):
    """One lifecycle entry of a deployment in the append-only ledger.

    A logical deployment is the set of records sharing an ``id``; the entry
    with the greatest ``timestamp`` is its current state.
    """

    id: str = Field(min_length=1)
    timestamp: int = Field(ge=0)
    status: DeploymentStatus
    repository: str = ""
    image_tag: str = ""
    environment: str = ""
    started_at: int | None = None
    external_deployment_id: str | None = None
    task_definition_arn: str | None = None
    retention_expiry: int = Field(default=0, alias="ttl")
    reason: str | None = None
    completed_at: int | None = None
    failed_at: int | None = None
    original_deployment_id: str | None = None
    rollback_to_deployment_id: str | None = None
    rollback_to_task_definition: str | None = None

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @classmethod
    def started(
        cls,
        repository: str,
        image_tag: str,
        now: int,
        environment: str = "",
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ) -> DeploymentRecord:
        """First ledger entry written when a push is admitted."""
        return cls(
            id=make_deployment_id(repository, image_tag, now),
            timestamp=now,
            status=DeploymentStatus.STARTED,
            repository=repository,
            image_tag=image_tag,
            environment=environment,
            started_at=now,
            retention_expiry=retention_expiry_for(now, retention_days),
        )

    def advance(
        self,
        status: DeploymentStatus,
        now: int,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        **changes: Any,
    ) -> DeploymentRecord:
        """Return the next lifecycle entry for this deployment.

        Raises InvalidStateTransitionError when ``status`` is not reachable
        from the current status.
        """
        valid = VALID_TRANSITIONS[self.status]
        if status not in valid:
            raise InvalidStateTransitionError(
                f"Cannot transition {self.id} from {self.status.value} to {status.value}. "
                f"Valid transitions: {sorted(s.value for s in valid)}"
            )
        return self.model_copy(update={
            **changes,
            "status": status,
            "timestamp": max(now, self.timestamp + 1),
            "retention_expiry": retention_expiry_for(now, retention_days),
        })

    @property
    def admitted_at(self) -> int:
        """When the deployment was admitted; the entry timestamp if not recorded."""
        return self.started_at if self.started_at is not None else self.timestamp

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_rollback(self) -> bool:
        return self.id.startswith(ROLLBACK_ID_PREFIX)

    def to_item(self) -> dict[str, Any]:
        """Serialize to a ledger item (camelCase attributes, ``ttl`` for retention)."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> DeploymentRecord:
        return cls.model_validate(item)


class InvalidStateTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""
