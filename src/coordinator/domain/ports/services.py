"""Service port interfaces (hexagonal architecture)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from coordinator.domain.models.task_definition import (
    DeploymentConfiguration,
    TaskDefinition,
    TaskDefinitionRegistration,
)


class LockStore(ABC):
    """Port for the remote key/value store holding the deployment lock.

    Implementations raise ``LockStoreError`` when the store is unreachable.
    """

    @abstractmethod
    async def create(self, name: str, value: str) -> bool:
        """Create ``name`` if absent. Returns False if it already exists."""

    @abstractmethod
    async def get(self, name: str) -> str | None:
        """Read the value of ``name``; None if absent."""

    @abstractmethod
    async def overwrite(self, name: str, value: str) -> None:
        """Unconditionally write ``name``."""

    @abstractmethod
    async def delete(self, name: str) -> bool:
        """Delete ``name``. Returns False if it was already absent."""


class OrchestrationClient(ABC):
    """Port for the target platform's service and task-definition API.

    Implementations raise ``OrchestrationError`` on API failures.
    """

    @abstractmethod
    async def current_task_definition_arn(self) -> str:
        """Task definition the target service currently runs."""

    @abstractmethod
    async def describe_task_definition(self, arn: str) -> TaskDefinition:
        """Full definition of a revision."""

    @abstractmethod
    async def register_task_definition(self, registration: TaskDefinitionRegistration) -> str:
        """Register a new revision and return its ARN."""

    @abstractmethod
    async def update_service(
        self,
        task_definition_arn: str,
        configuration: DeploymentConfiguration | None = None,
        force_new_deployment: bool = False,
    ) -> str:
        """Point the service at ``task_definition_arn``; returns the platform deployment id."""
