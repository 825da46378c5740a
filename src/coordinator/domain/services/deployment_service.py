"""Domain service driving a rollout for an admitted image push."""

from __future__ import annotations

import structlog

from coordinator.domain.errors import CoordinatorError, LockStoreError
from coordinator.domain.models.deployment import (
    DEFAULT_RETENTION_DAYS,
    DeploymentRecord,
    DeploymentStatus,
)
from coordinator.domain.models.results import HandlerResult, Outcome
from coordinator.domain.models.task_definition import (
    DeploymentConfiguration,
    TaskDefinitionError,
)
from coordinator.domain.ports.repositories import DeploymentLedger
from coordinator.domain.ports.services import OrchestrationClient
from coordinator.domain.services.cooldown import CooldownGuard
from coordinator.domain.services.lock_manager import LockManager


logger = structlog.get_logger(__name__)


class DeploymentOrchestrator:
    """Admits image pushes and starts the corresponding service rollout.

    Admission is the cooldown guard followed by the global lock. Once a
    rollout has been handed to the platform the lock stays held; the
    completion handler releases it when the outcome is reported. Any failure
    before that point releases the lock and is returned as an ERROR result.
    Records already written stay in the ledger as the last true state.
    """

    def __init__(
        self,
        ledger: DeploymentLedger,
        orchestration: OrchestrationClient,
        cooldown_guard: CooldownGuard,
        lock_manager: LockManager,
        deployment_configuration: DeploymentConfiguration,
        environment: str = "",
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ) -> None:
        self._ledger = ledger
        self._orchestration = orchestration
        self._cooldown_guard = cooldown_guard
        self._lock_manager = lock_manager
        self._deployment_configuration = deployment_configuration
        self._environment = environment
        self._retention_days = retention_days

    async def handle_image_push(
        self, repository: str, image_tag: str, now: int
    ) -> HandlerResult:
        """Start deploying ``repository:image_tag`` unless admission says otherwise."""
        log = logger.bind(repository=repository, image_tag=image_tag)
        log.info("image_push_received")

        if not await self._cooldown_guard.can_deploy(now):
            log.info("deployment_skipped_cooldown")
            return HandlerResult(
                outcome=Outcome.SKIPPED_COOLDOWN,
                message="In deployment cooldown period",
            )

        try:
            acquired = await self._lock_manager.acquire(now)
        except LockStoreError as e:
            return HandlerResult.failure("Could not reach the deployment lock store", e)

        if not acquired:
            log.info("deployment_skipped_lock_held")
            return HandlerResult(
                outcome=Outcome.SKIPPED_LOCK_HELD,
                message="Another deployment is in progress",
            )

        record = DeploymentRecord.started(
            repository, image_tag, now,
            environment=self._environment,
            retention_days=self._retention_days,
        )
        log = log.bind(deployment_id=record.id)

        try:
            record = await self._ledger.append(record)
            record = await self._roll_out(record, now)
        except (CoordinatorError, TaskDefinitionError) as e:
            log.exception("deployment_start_failed", error=str(e))
            await self._lock_manager.release()
            return HandlerResult.failure(
                f"Error starting deployment: {e}", e, deployment_id=record.id
            )
        except Exception:
            log.exception("deployment_start_crashed")
            await self._lock_manager.release()
            raise

        log.info(
            "deployment_started",
            external_deployment_id=record.external_deployment_id,
            task_definition_arn=record.task_definition_arn,
        )
        return HandlerResult(
            outcome=Outcome.DEPLOYMENT_STARTED,
            message=f"Deployment started: {record.id}",
            deployment_id=record.id,
        )

    async def _roll_out(self, record: DeploymentRecord, now: int) -> DeploymentRecord:
        """Register the new revision, update the service and record IN_PROGRESS."""
        current_arn = await self._orchestration.current_task_definition_arn()
        current = await self._orchestration.describe_task_definition(current_arn)

        registration = current.with_image_tag(record.image_tag)
        new_arn = await self._orchestration.register_task_definition(registration)
        logger.info(
            "task_definition_registered",
            deployment_id=record.id,
            previous_arn=current_arn,
            task_definition_arn=new_arn,
            image=registration.container_definitions[0].get("image"),
        )

        external_id = await self._orchestration.update_service(
            new_arn, self._deployment_configuration
        )

        in_progress = record.advance(
            DeploymentStatus.IN_PROGRESS,
            now,
            retention_days=self._retention_days,
            external_deployment_id=external_id,
            task_definition_arn=new_arn,
        )
        return await self._ledger.append(in_progress)
