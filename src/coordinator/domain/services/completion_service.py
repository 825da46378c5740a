"""Applies platform deployment state changes to the ledger."""

from __future__ import annotations

import structlog

from coordinator.domain.errors import LedgerError
from coordinator.domain.models.deployment import (
    DEFAULT_RETENTION_DAYS,
    DeploymentRecord,
    DeploymentStatus,
)
from coordinator.domain.models.results import HandlerResult, Outcome
from coordinator.domain.ports.repositories import DeploymentLedger
from coordinator.domain.services.lock_manager import LockManager
from coordinator.domain.services.rollback_service import RollbackManager


logger = structlog.get_logger(__name__)


class CompletionHandler:
    """Records the outcome of a rollout and frees the deployment lock.

    Completion events are matched to ledger records by the platform's
    deployment id. Events for deployments this coordinator did not start are
    ignored. A repeated event finds the deployment already terminal and is a
    no-op; in particular it does not release the lock a second time, which
    could free the lock of a newer rollout.
    """

    def __init__(
        self,
        ledger: DeploymentLedger,
        lock_manager: LockManager,
        rollback_manager: RollbackManager,
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ) -> None:
        self._ledger = ledger
        self._lock_manager = lock_manager
        self._rollback_manager = rollback_manager
        self._retention_days = retention_days

    async def handle_completed(self, external_deployment_id: str, now: int) -> HandlerResult:
        try:
            record = await self._open_record(external_deployment_id)
            if isinstance(record, HandlerResult):
                return record

            succeeded = await self._ledger.append(record.advance(
                DeploymentStatus.SUCCEEDED,
                now,
                retention_days=self._retention_days,
                completed_at=now,
            ))
        except LedgerError as e:
            logger.exception(
                "completion_record_failed",
                external_deployment_id=external_deployment_id,
                error=str(e),
            )
            return HandlerResult.failure("Could not record deployment completion", e)

        await self._lock_manager.release()
        logger.info(
            "deployment_succeeded",
            deployment_id=succeeded.id,
            external_deployment_id=external_deployment_id,
        )
        return HandlerResult(
            outcome=Outcome.DEPLOYMENT_SUCCEEDED,
            message=f"Deployment succeeded: {succeeded.id}",
            deployment_id=succeeded.id,
        )

    async def handle_failed(
        self, external_deployment_id: str, reason: str, now: int
    ) -> HandlerResult:
        try:
            record = await self._open_record(external_deployment_id)
            if isinstance(record, HandlerResult):
                return record

            failed = await self._ledger.append(record.advance(
                DeploymentStatus.FAILED,
                now,
                retention_days=self._retention_days,
                failed_at=now,
                reason=reason,
            ))
        except LedgerError as e:
            logger.exception(
                "failure_record_failed",
                external_deployment_id=external_deployment_id,
                error=str(e),
            )
            return HandlerResult.failure("Could not record deployment failure", e)

        await self._lock_manager.release()
        logger.warning(
            "deployment_failed",
            deployment_id=failed.id,
            external_deployment_id=external_deployment_id,
            reason=reason,
        )

        rollback = await self._rollback_manager.handle_failure(failed, now)
        return HandlerResult(
            outcome=Outcome.DEPLOYMENT_FAILED,
            message=f"Deployment failed: {failed.id} ({reason})",
            deployment_id=failed.id,
            rollback=rollback,
        )

    async def _open_record(self, external_deployment_id: str) -> DeploymentRecord | HandlerResult:
        """The in-flight record for the platform deployment, or the no-op result to return."""
        record = await self._ledger.find_by_external_id(external_deployment_id)
        if record is None:
            logger.info(
                "deployment_not_tracked", external_deployment_id=external_deployment_id,
            )
            return HandlerResult(
                outcome=Outcome.NOT_TRACKED,
                message="No deployment record for this platform deployment",
            )

        if record.status != DeploymentStatus.IN_PROGRESS:
            logger.info(
                "deployment_event_duplicate",
                deployment_id=record.id,
                status=record.status.value,
                external_deployment_id=external_deployment_id,
            )
            return HandlerResult(
                outcome=Outcome.DUPLICATE,
                message=f"Deployment {record.id} already {record.status.value}",
                deployment_id=record.id,
            )
        return record
