"""Domain events package."""

from coordinator.domain.events.inbound_events import (
    DeploymentCompleted,
    DeploymentFailed,
    ImagePush,
    InboundEvent,
    TaskStateChange,
    Unrecognized,
)


__all__ = [
    "DeploymentCompleted",
    "DeploymentFailed",
    "ImagePush",
    "InboundEvent",
    "TaskStateChange",
    "Unrecognized",
]
