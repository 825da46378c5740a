"""Unit tests for task definition image handling."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from coordinator.domain.models.task_definition import (
    replace_image_tag,
    split_image_reference,
    TaskDefinition,
    TaskDefinitionError,
)


ECR = "123456789012.dkr.ecr.us-east-1.amazonaws.com"


def _task_definition(containers: list[dict]) -> TaskDefinition:
    return TaskDefinition(
        arn="arn:aws:ecs:us-east-1:123456789012:task-definition/svc:4",
        family="svc",
        container_definitions=containers,
        task_role_arn="arn:aws:iam::123456789012:role/task",
        execution_role_arn="arn:aws:iam::123456789012:role/exec",
        network_mode="awsvpc",
        volumes=[{"name": "data"}],
        placement_constraints=[{"type": "memberOf", "expression": "attribute:ecs.os-type == linux"}],
        requires_compatibilities=["FARGATE"],
        cpu="512",
        memory="1024",
    )


class TestImageReference:
    @pytest.mark.parametrize(
        ("image", "expected"),
        [
            (f"{ECR}/svc:v4", (f"{ECR}/svc", "v4")),
            (f"{ECR}/svc", (f"{ECR}/svc", None)),
            ("registry.local:5000/team/svc:1.2", ("registry.local:5000/team/svc", "1.2")),
            ("registry.local:5000/team/svc", ("registry.local:5000/team/svc", None)),
            (f"{ECR}/svc:v4@sha256:abc", (f"{ECR}/svc", "v4")),
            ("nginx", ("nginx", None)),
        ],
    )
    def test_split(self, image: str, expected: tuple[str, str | None]) -> None:
        assert split_image_reference(image) == expected

    def test_replace_tag_keeps_registry_port(self) -> None:
        assert replace_image_tag("registry.local:5000/svc:old", "new") == "registry.local:5000/svc:new"

    def test_replace_tag_on_untagged_image(self) -> None:
        assert replace_image_tag(f"{ECR}/svc", "v5") == f"{ECR}/svc:v5"

    def test_replace_tag_rejects_empty_tag(self) -> None:
        with pytest.raises(TaskDefinitionError):
            replace_image_tag(f"{ECR}/svc:v4", "")


class TestTaskDefinitionRevision:
    def test_only_primary_container_image_changes(self) -> None:
        a = {"name": "svc", "image": f"{ECR}/svc:v4", "portMappings": [{"containerPort": 8080}]}
        b = {"name": "sidecar", "image": "otel/collector:0.90"}
        c = {"name": "router", "image": "fluent/fluent-bit:2.2"}
        current = _task_definition([a, b, c])

        registration = current.with_image_tag("v5")

        primary, second, third = registration.container_definitions
        assert primary["image"] == f"{ECR}/svc:v5"
        assert primary["portMappings"] == a["portMappings"]
        assert second == b
        assert third == c
        assert a["image"] == f"{ECR}/svc:v4"

    def test_settings_are_carried_over(self) -> None:
        current = _task_definition([{"name": "svc", "image": f"{ECR}/svc:v4"}])
        registration = current.with_image_tag("v5")

        assert registration.family == current.family
        assert registration.task_role_arn == current.task_role_arn
        assert registration.execution_role_arn == current.execution_role_arn
        assert registration.network_mode == current.network_mode
        assert registration.volumes == current.volumes
        assert registration.placement_constraints == current.placement_constraints
        assert registration.requires_compatibilities == current.requires_compatibilities
        assert registration.cpu == current.cpu
        assert registration.memory == current.memory

    def test_primary_without_image(self) -> None:
        current = _task_definition([{"name": "svc"}])
        with pytest.raises(TaskDefinitionError):
            current.with_image_tag("v5")

    def test_requires_a_container(self) -> None:
        with pytest.raises(ValidationError):
            _task_definition([])
