"""Unit tests for the cooldown guard."""

from __future__ import annotations

import pytest

from coordinator.domain.errors import LedgerError
from coordinator.domain.models.deployment import DeploymentRecord, DeploymentStatus
from coordinator.domain.services.cooldown import CooldownGuard
from coordinator.infrastructure.persistence.in_memory import InMemoryDeploymentLedger


COOLDOWN_MS = 60_000
T = 1_700_000_000_000


class FailingLedger(InMemoryDeploymentLedger):
    async def latest_by_status(
        self, status: DeploymentStatus, newer_than: int | None = None
    ) -> DeploymentRecord | None:
        raise LedgerError("table unavailable")


def _succeeded(timestamp: int, started_at: int | None = None) -> DeploymentRecord:
    return DeploymentRecord(
        id=f"svc-v1-{timestamp}",
        timestamp=timestamp,
        status=DeploymentStatus.SUCCEEDED,
        repository="svc",
        image_tag="v1",
        started_at=started_at,
    )


class TestCooldownGuard:
    @pytest.mark.asyncio
    async def test_empty_ledger_allows(self, ledger: InMemoryDeploymentLedger) -> None:
        guard = CooldownGuard(ledger, 60)
        assert await guard.can_deploy(T)

    @pytest.mark.asyncio
    async def test_blocks_just_inside_window(self, ledger: InMemoryDeploymentLedger) -> None:
        await ledger.append(_succeeded(T))
        guard = CooldownGuard(ledger, 60)
        assert not await guard.can_deploy(T + COOLDOWN_MS - 1)

    @pytest.mark.asyncio
    async def test_allows_just_outside_window(self, ledger: InMemoryDeploymentLedger) -> None:
        await ledger.append(_succeeded(T))
        guard = CooldownGuard(ledger, 60)
        assert await guard.can_deploy(T + COOLDOWN_MS + 1)

    @pytest.mark.asyncio
    async def test_window_starts_at_admission(self, ledger: InMemoryDeploymentLedger) -> None:
        await ledger.append(_succeeded(T + 45_000, started_at=T))
        guard = CooldownGuard(ledger, 60)
        assert not await guard.can_deploy(T + 50_000)
        assert await guard.can_deploy(T + 65_000)

    @pytest.mark.asyncio
    async def test_other_statuses_do_not_count(self, ledger: InMemoryDeploymentLedger) -> None:
        await ledger.append(DeploymentRecord(
            id="svc-v1-1", timestamp=T, status=DeploymentStatus.FAILED,
        ))
        guard = CooldownGuard(ledger, 60)
        assert await guard.can_deploy(T + 1)

    @pytest.mark.asyncio
    async def test_fails_closed_on_ledger_error(self) -> None:
        guard = CooldownGuard(FailingLedger(), 60)
        assert not await guard.can_deploy(T)

    def test_cooldown_millis(self, ledger: InMemoryDeploymentLedger) -> None:
        assert CooldownGuard(ledger, 60).cooldown_millis == COOLDOWN_MS
