"""Inbound events the coordinator reacts to, as a closed tagged variant."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import Field

from coordinator.domain.models.base import ValueObject


class ImagePush(ValueObject):
    """A new image was pushed to the watched registry repository."""

    kind: Literal["image_push"] = "image_push"
    repository: str = Field(min_length=1)
    tag: str = Field(min_length=1)


class DeploymentCompleted(ValueObject):
    """The platform finished rolling out a deployment."""

    kind: Literal["deployment_completed"] = "deployment_completed"
    deployment_id: str = Field(min_length=1)


class DeploymentFailed(ValueObject):
    """The platform gave up on a deployment."""

    kind: Literal["deployment_failed"] = "deployment_failed"
    deployment_id: str = Field(min_length=1)
    reason: str = "Unknown failure"


class TaskStateChange(ValueObject):
    """A task of the service changed state. Observed, not acted upon."""

    kind: Literal["task_state_change"] = "task_state_change"
    task_arn: str | None = None
    last_status: str | None = None


class Unrecognized(ValueObject):
    """Anything the router does not know how to handle."""

    kind: Literal["unrecognized"] = "unrecognized"
    source: str | None = None
    detail_type: str | None = None
    reason: str = ""


InboundEvent = Annotated[
    Union[ImagePush, DeploymentCompleted, DeploymentFailed, TaskStateChange, Unrecognized],
    Field(discriminator="kind"),
]
