"""Periodic detection of deployments that never reached a terminal state."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog

from coordinator.domain.models.base import now_millis
from coordinator.domain.models.deployment import DeploymentRecord
from coordinator.domain.services.audit_service import StuckDeploymentFinder
from coordinator.infrastructure.observability.metrics import STUCK_DEPLOYMENTS_DETECTED
from coordinator.workers.base import PollingWorker


logger = structlog.get_logger(__name__)


class StuckDeploymentMonitor(PollingWorker):
    """Logs a warning for every deployment stuck in STARTED or IN_PROGRESS.

    Detection only: records are left untouched for an operator to clean up.
    """

    def __init__(
        self,
        finder: StuckDeploymentFinder,
        clock: Callable[[], int] = now_millis,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._finder = finder
        self._clock = clock
        self._last_stuck: list[DeploymentRecord] = []

    @property
    def last_stuck(self) -> list[DeploymentRecord]:
        return list(self._last_stuck)

    async def poll(self) -> None:
        now = self._clock()
        stuck = await self._finder.find(now)
        for record in stuck:
            STUCK_DEPLOYMENTS_DETECTED.labels(status=record.status.value).inc()
            logger.warning(
                "stuck_deployment_detected",
                deployment_id=record.id,
                status=record.status.value,
                repository=record.repository,
                image_tag=record.image_tag,
                age_seconds=(now - record.timestamp) // 1000,
            )
        self._last_stuck = stuck

    def get_health(self) -> dict[str, Any]:
        health = super().get_health()
        health["stuck_deployments"] = len(self._last_stuck)
        return health
