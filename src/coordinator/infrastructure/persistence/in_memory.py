"""In-memory ledger and lock store for development and testing."""

from __future__ import annotations

import asyncio

from coordinator.domain.models.deployment import DeploymentRecord, DeploymentStatus
from coordinator.domain.ports.repositories import DeploymentLedger
from coordinator.domain.ports.services import LockStore


# Module-level shared stores let separately built containers (API, worker)
# see the same state in a single process while keeping one point for test isolation.
_ledger_store: dict[tuple[str, int], DeploymentRecord] = {}
_lock_store: dict[str, str] = {}


class InMemoryDeploymentLedger(DeploymentLedger):
    """In-memory ledger keyed like the DynamoDB table: (id, timestamp)."""

    def __init__(self) -> None:
        self._store = _ledger_store

    async def append(self, record: DeploymentRecord) -> DeploymentRecord:
        self._store[(record.id, record.timestamp)] = record
        return record

    async def latest_by_status(
        self, status: DeploymentStatus, newer_than: int | None = None
    ) -> DeploymentRecord | None:
        items = [
            r for r in self._store.values()
            if r.status == status and (newer_than is None or r.timestamp > newer_than)
        ]
        return max(items, key=lambda r: r.timestamp, default=None)

    async def list_by_status(
        self,
        status: DeploymentStatus,
        older_than: int | None = None,
        limit: int | None = 50,
    ) -> list[DeploymentRecord]:
        items = [
            r for r in self._store.values()
            if r.status == status and (older_than is None or r.timestamp < older_than)
        ]
        return sorted(items, key=lambda r: r.timestamp, reverse=True)[:limit]

    async def find_by_external_id(self, external_deployment_id: str) -> DeploymentRecord | None:
        items = [
            r for r in self._store.values()
            if r.external_deployment_id == external_deployment_id
        ]
        return max(items, key=lambda r: r.timestamp, default=None)

    async def history(self, deployment_id: str) -> list[DeploymentRecord]:
        items = [r for r in self._store.values() if r.id == deployment_id]
        return sorted(items, key=lambda r: r.timestamp)

    @property
    def records(self) -> list[DeploymentRecord]:
        """All entries in insertion order."""
        return list(self._store.values())

    @classmethod
    def clear(cls) -> None:
        """Clear the shared store. Used by test fixtures for isolation."""
        _ledger_store.clear()


class InMemoryLockStore(LockStore):
    """In-memory lock store with atomic create-if-absent.

    The mutex belongs to the running event loop and is rebuilt when the loop
    changes (one ``asyncio.run`` per Lambda invocation).
    """

    def __init__(self) -> None:
        self._store = _lock_store
        self._mutex: asyncio.Lock | None = None
        self._mutex_loop: asyncio.AbstractEventLoop | None = None

    def _lock(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if self._mutex is None or self._mutex_loop is not loop:
            self._mutex = asyncio.Lock()
            self._mutex_loop = loop
        return self._mutex

    async def create(self, name: str, value: str) -> bool:
        async with self._lock():
            if name in self._store:
                return False
            self._store[name] = value
            return True

    async def get(self, name: str) -> str | None:
        return self._store.get(name)

    async def overwrite(self, name: str, value: str) -> None:
        async with self._lock():
            self._store[name] = value

    async def delete(self, name: str) -> bool:
        async with self._lock():
            return self._store.pop(name, None) is not None

    @classmethod
    def clear(cls) -> None:
        """Clear the shared store. Used by test fixtures for isolation."""
        _lock_store.clear()
