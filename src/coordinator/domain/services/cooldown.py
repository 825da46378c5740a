"""Cooldown admission policy."""

from __future__ import annotations

import structlog

from coordinator.domain.errors import LedgerError
from coordinator.domain.models.base import MILLIS_PER_SECOND
from coordinator.domain.models.deployment import DeploymentStatus
from coordinator.domain.ports.repositories import DeploymentLedger


logger = structlog.get_logger(__name__)


class CooldownGuard:
    """Blocks new deployments shortly after a successful one.

    The window is anchored at the admission time of the last successful
    deployment. Absorbs bursts of pushes (CI retries, several tags for one
    build) into a single rollout. Fails closed: if the ledger cannot be queried the guard
    reports that deploying is not allowed.
    """

    def __init__(self, ledger: DeploymentLedger, cooldown_seconds: int) -> None:
        self._ledger = ledger
        self._cooldown_millis = cooldown_seconds * MILLIS_PER_SECOND

    @property
    def cooldown_millis(self) -> int:
        return self._cooldown_millis

    async def can_deploy(self, now: int) -> bool:
        threshold = now - self._cooldown_millis
        try:
            recent = await self._ledger.latest_by_status(
                DeploymentStatus.SUCCEEDED, newer_than=threshold
            )
        except LedgerError as e:
            logger.error("cooldown_check_failed", error=str(e))
            return False

        if recent is not None and recent.admitted_at > threshold:
            logger.info(
                "cooldown_active",
                last_success_id=recent.id,
                last_success_at=recent.timestamp,
                admitted_at=recent.admitted_at,
                remaining_ms=recent.admitted_at - threshold,
            )
            return False
        return True
