"""Repository port interfaces (hexagonal architecture)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from coordinator.domain.models.deployment import DeploymentRecord, DeploymentStatus


class DeploymentLedger(ABC):
    """Port for the append-only deployment ledger.

    Implementations raise ``LedgerError`` when the backing store fails.
    """

    @abstractmethod
    async def append(self, record: DeploymentRecord) -> DeploymentRecord:
        """Persist a lifecycle entry."""

    @abstractmethod
    async def latest_by_status(
        self, status: DeploymentStatus, newer_than: int | None = None
    ) -> DeploymentRecord | None:
        """Most recent entry with ``status``, optionally only if ``timestamp > newer_than``."""

    @abstractmethod
    async def list_by_status(
        self,
        status: DeploymentStatus,
        older_than: int | None = None,
        limit: int | None = 50,
    ) -> list[DeploymentRecord]:
        """Entries with ``status``, newest first, optionally only if ``timestamp < older_than``.

        ``limit=None`` returns every matching entry.
        """

    @abstractmethod
    async def find_by_external_id(self, external_deployment_id: str) -> DeploymentRecord | None:
        """Latest entry carrying the platform's deployment id."""

    @abstractmethod
    async def history(self, deployment_id: str) -> list[DeploymentRecord]:
        """All lifecycle entries of one deployment, oldest first."""
