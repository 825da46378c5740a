"""Rollback to the last known-good deployment."""

from __future__ import annotations

import structlog

from coordinator.domain.errors import CoordinatorError
from coordinator.domain.models.deployment import (
    DEFAULT_RETENTION_DAYS,
    DeploymentRecord,
    DeploymentStatus,
    make_rollback_id,
)
from coordinator.domain.models.results import RollbackOutcome, RollbackResult
from coordinator.domain.ports.repositories import DeploymentLedger
from coordinator.domain.ports.services import OrchestrationClient


logger = structlog.get_logger(__name__)


class RollbackManager:
    """Re-deploys the most recent successful revision after a failure.

    Errors are logged and returned, never raised: a failed rollback is not
    retried and cannot trigger another rollback.
    """

    def __init__(
        self,
        ledger: DeploymentLedger,
        orchestration: OrchestrationClient,
        enabled: bool = True,
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ) -> None:
        self._ledger = ledger
        self._orchestration = orchestration
        self._enabled = enabled
        self._retention_days = retention_days

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def handle_failure(self, failed: DeploymentRecord, now: int) -> RollbackResult:
        log = logger.bind(failed_deployment_id=failed.id)
        if not self._enabled:
            log.info("rollback_disabled")
            return RollbackResult(outcome=RollbackOutcome.DISABLED)

        log.info("rollback_requested")
        try:
            target = await self._ledger.latest_by_status(DeploymentStatus.SUCCEEDED)
        except CoordinatorError as e:
            log.exception("rollback_failed", error=str(e))
            return RollbackResult(outcome=RollbackOutcome.ERROR, error=str(e))

        if target is None or not target.task_definition_arn:
            log.info(
                "rollback_no_target",
                candidate_id=target.id if target is not None else None,
            )
            return RollbackResult(outcome=RollbackOutcome.NO_TARGET)

        rollback_id = make_rollback_id(failed.id)
        try:
            external_id = await self._orchestration.update_service(
                target.task_definition_arn, force_new_deployment=True
            )
            await self._ledger.append(failed.advance(
                DeploymentStatus.ROLLBACK_INITIATED,
                now,
                retention_days=self._retention_days,
                id=rollback_id,
                external_deployment_id=external_id,
                task_definition_arn=target.task_definition_arn,
                original_deployment_id=failed.id,
                rollback_to_deployment_id=target.id,
                rollback_to_task_definition=target.task_definition_arn,
            ))
        except CoordinatorError as e:
            log.exception(
                "rollback_failed",
                target_deployment_id=target.id,
                error=str(e),
            )
            return RollbackResult(
                outcome=RollbackOutcome.ERROR,
                rollback_id=rollback_id,
                target_deployment_id=target.id,
                task_definition_arn=target.task_definition_arn,
                error=str(e),
            )

        log.info(
            "rollback_initiated",
            rollback_id=rollback_id,
            target_deployment_id=target.id,
            task_definition_arn=target.task_definition_arn,
        )
        return RollbackResult(
            outcome=RollbackOutcome.INITIATED,
            rollback_id=rollback_id,
            target_deployment_id=target.id,
            task_definition_arn=target.task_definition_arn,
        )
