"""Discovery of deployments stuck in a non-terminal state."""

from __future__ import annotations

import structlog

from coordinator.domain.models.base import MILLIS_PER_SECOND
from coordinator.domain.models.deployment import (
    DeploymentRecord,
    OPEN_STATUSES,
    TERMINAL_STATUSES,
)
from coordinator.domain.ports.repositories import DeploymentLedger


logger = structlog.get_logger(__name__)


class StuckDeploymentFinder:
    """Finds deployments whose latest ledger entry is STARTED or IN_PROGRESS
    and older than the threshold.

    These are the operator-visible trace of a lost completion event or of a
    rollout that failed between writing a record and reaching the next step.
    Nothing is changed; cleanup is manual.
    """

    def __init__(self, ledger: DeploymentLedger, threshold_seconds: int) -> None:
        self._ledger = ledger
        self._threshold_millis = threshold_seconds * MILLIS_PER_SECOND

    async def find(self, now: int) -> list[DeploymentRecord]:
        """Latest entries of stuck deployments, oldest first. Raises LedgerError.

        Every open entry older than the cutoff is read, however many newer
        deployments followed it; the ledger's TTL bounds the scan.
        """
        cutoff = now - self._threshold_millis
        candidates: dict[str, DeploymentRecord] = {}
        for status in OPEN_STATUSES:
            for record in await self._ledger.list_by_status(
                status, older_than=cutoff, limit=None
            ):
                candidates.setdefault(record.id, record)

        finished: set[str] = set()
        for status in TERMINAL_STATUSES:
            for record in await self._ledger.list_by_status(status, limit=None):
                finished.add(record.id)

        stuck: list[DeploymentRecord] = []
        for deployment_id in candidates.keys() - finished:
            history = await self._ledger.history(deployment_id)
            latest = history[-1] if history else candidates[deployment_id]
            if latest.status in OPEN_STATUSES and latest.timestamp < cutoff:
                stuck.append(latest)

        stuck.sort(key=lambda r: r.timestamp)
        if stuck:
            logger.warning(
                "stuck_deployments_found",
                count=len(stuck),
                deployment_ids=[r.id for r in stuck],
            )
        return stuck
