"""Simulated orchestration platform for development and testing."""

from __future__ import annotations

import itertools
from typing import Any

import structlog

from coordinator.domain.errors import OrchestrationError
from coordinator.domain.models.task_definition import (
    DeploymentConfiguration,
    TaskDefinition,
    TaskDefinitionRegistration,
)
from coordinator.domain.ports.services import OrchestrationClient


logger = structlog.get_logger(__name__)

DEFAULT_IMAGE = "123456789012.dkr.ecr.us-east-1.amazonaws.com/web:latest"


class SimulatedOrchestrationClient(OrchestrationClient):
    """Keeps task-definition revisions and service updates in memory.

    Mirrors the platform's behaviour closely enough for the coordinator:
    every registration creates the next revision of the family, every
    service update returns a fresh deployment id. ``fail_on`` makes the
    named operation raise OrchestrationError.
    """

    def __init__(
        self,
        family: str = "web",
        container_definitions: list[dict[str, Any]] | None = None,
        region: str = "us-east-1",
        account_id: str = "123456789012",
    ) -> None:
        self._family = family
        self._arn_prefix = f"arn:aws:ecs:{region}:{account_id}:task-definition/{family}"
        self._revisions: dict[str, TaskDefinition] = {}
        self._revision_counter = itertools.count(1)
        self._deployment_counter = itertools.count(1)
        self.fail_on: set[str] = set()
        self.registrations: list[TaskDefinitionRegistration] = []
        self.service_updates: list[dict[str, Any]] = []

        initial = TaskDefinitionRegistration(
            family=family,
            container_definitions=container_definitions or [
                {"name": family, "image": DEFAULT_IMAGE, "essential": True},
            ],
            network_mode="awsvpc",
            requires_compatibilities=["FARGATE"],
            cpu="256",
            memory="512",
        )
        self._current_arn = self._store(initial)

    def _store(self, registration: TaskDefinitionRegistration) -> str:
        arn = f"{self._arn_prefix}:{next(self._revision_counter)}"
        self._revisions[arn] = TaskDefinition(arn=arn, **registration.model_dump())
        return arn

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise OrchestrationError(f"Simulated {operation} failure")

    @property
    def current_arn(self) -> str:
        return self._current_arn

    async def current_task_definition_arn(self) -> str:
        self._check("describe_service")
        return self._current_arn

    async def describe_task_definition(self, arn: str) -> TaskDefinition:
        self._check("describe_task_definition")
        try:
            return self._revisions[arn]
        except KeyError as e:
            raise OrchestrationError(f"Unknown task definition {arn}") from e

    async def register_task_definition(self, registration: TaskDefinitionRegistration) -> str:
        self._check("register_task_definition")
        self.registrations.append(registration)
        arn = self._store(registration)
        logger.debug("simulated_task_definition_registered", task_definition_arn=arn)
        return arn

    async def update_service(
        self,
        task_definition_arn: str,
        configuration: DeploymentConfiguration | None = None,
        force_new_deployment: bool = False,
    ) -> str:
        self._check("update_service")
        if task_definition_arn not in self._revisions:
            raise OrchestrationError(f"Unknown task definition {task_definition_arn}")
        deployment_id = f"ecs-svc/{next(self._deployment_counter):019d}"
        self.service_updates.append({
            "task_definition_arn": task_definition_arn,
            "configuration": configuration,
            "force_new_deployment": force_new_deployment,
            "deployment_id": deployment_id,
        })
        self._current_arn = task_definition_arn
        return deployment_id
