"""Task definition value objects and image reference handling."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from coordinator.domain.models.base import ValueObject


def split_image_reference(image: str) -> tuple[str, str | None]:
    """Split ``registry/repo:tag`` into ``(registry/repo, tag)``.

    A digest suffix is discarded. A ``:`` before the last ``/`` belongs to a
    registry port, not a tag.
    """
    name = image.split("@", 1)[0]
    colon = name.rfind(":")
    if colon > name.rfind("/"):
        return name[:colon], name[colon + 1:]
    return name, None


def replace_image_tag(image: str, tag: str) -> str:
    """Point ``image`` at ``tag`` keeping its registry and repository unchanged."""
    if not tag:
        raise TaskDefinitionError("Image tag must not be empty")
    repository, _ = split_image_reference(image)
    return f"{repository}:{tag}"


class TaskDefinition(ValueObject):
    """The platform's versioned description of the service's runnable unit."""

    arn: str
    family: str
    container_definitions: list[dict[str, Any]] = Field(min_length=1)
    task_role_arn: str | None = None
    execution_role_arn: str | None = None
    network_mode: str | None = None
    volumes: list[dict[str, Any]] = Field(default_factory=list)
    placement_constraints: list[dict[str, Any]] = Field(default_factory=list)
    requires_compatibilities: list[str] = Field(default_factory=list)
    cpu: str | None = None
    memory: str | None = None

    @property
    def primary_container(self) -> dict[str, Any]:
        return self.container_definitions[0]

    def with_image_tag(self, tag: str) -> TaskDefinitionRegistration:
        """Registration for the next revision running ``tag`` in the primary container.

        Only the first container's image tag changes; all other containers and
        the role, network, volume, placement, compatibility, cpu and memory
        settings are carried over as-is.
        """
        primary = dict(self.primary_container)
        image = primary.get("image")
        if not image:
            raise TaskDefinitionError(
                f"Primary container of {self.arn} has no image reference"
            )
        primary["image"] = replace_image_tag(image, tag)
        return TaskDefinitionRegistration(
            family=self.family,
            container_definitions=[primary, *self.container_definitions[1:]],
            task_role_arn=self.task_role_arn,
            execution_role_arn=self.execution_role_arn,
            network_mode=self.network_mode,
            volumes=self.volumes,
            placement_constraints=self.placement_constraints,
            requires_compatibilities=self.requires_compatibilities,
            cpu=self.cpu,
            memory=self.memory,
        )


class TaskDefinitionRegistration(ValueObject):
    """Payload for registering a new task definition revision."""

    family: str
    container_definitions: list[dict[str, Any]] = Field(min_length=1)
    task_role_arn: str | None = None
    execution_role_arn: str | None = None
    network_mode: str | None = None
    volumes: list[dict[str, Any]] = Field(default_factory=list)
    placement_constraints: list[dict[str, Any]] = Field(default_factory=list)
    requires_compatibilities: list[str] = Field(default_factory=list)
    cpu: str | None = None
    memory: str | None = None


class DeploymentConfiguration(ValueObject):
    """Rollout bounds and optional platform circuit breaker for update-service."""

    maximum_percent: int = 200
    minimum_healthy_percent: int = 50
    circuit_breaker_enabled: bool = False
    circuit_breaker_rollback: bool = False


class TaskDefinitionError(Exception):
    """Raised when a task definition cannot be turned into a new revision."""
