"""Domain models package."""

from coordinator.domain.models.base import (
    from_millis,
    generate_id,
    now_millis,
    to_millis,
    utc_now,
    ValueObject,
)
from coordinator.domain.models.deployment import (
    DeploymentRecord,
    DeploymentStatus,
    InvalidStateTransitionError,
    make_deployment_id,
    make_rollback_id,
    OPEN_STATUSES,
    TERMINAL_STATUSES,
    VALID_TRANSITIONS,
)
from coordinator.domain.models.lock import LockEntry
from coordinator.domain.models.results import (
    HandlerResult,
    Outcome,
    RollbackOutcome,
    RollbackResult,
)
from coordinator.domain.models.task_definition import (
    DeploymentConfiguration,
    replace_image_tag,
    split_image_reference,
    TaskDefinition,
    TaskDefinitionError,
    TaskDefinitionRegistration,
)


__all__ = [
    "DeploymentConfiguration",
    "DeploymentRecord",
    "DeploymentStatus",
    "HandlerResult",
    "InvalidStateTransitionError",
    "LockEntry",
    "OPEN_STATUSES",
    "Outcome",
    "RollbackOutcome",
    "RollbackResult",
    "TERMINAL_STATUSES",
    "TaskDefinition",
    "TaskDefinitionError",
    "TaskDefinitionRegistration",
    "VALID_TRANSITIONS",
    "ValueObject",
    "from_millis",
    "generate_id",
    "make_deployment_id",
    "make_rollback_id",
    "now_millis",
    "replace_image_tag",
    "split_image_reference",
    "to_millis",
    "utc_now",
]
