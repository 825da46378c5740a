"""End-to-end coordinator flows over the in-memory adapters."""

from __future__ import annotations

import pytest

from coordinator.application.event_router import EventRouter
from coordinator.domain.models.deployment import DeploymentStatus
from coordinator.domain.models.results import Outcome, RollbackOutcome
from coordinator.domain.services.lock_manager import LockManager
from coordinator.infrastructure.orchestration.simulated import SimulatedOrchestrationClient
from coordinator.infrastructure.persistence.in_memory import InMemoryDeploymentLedger
from event_samples import deployment_event, push_event


T0 = 1_700_000_000_000
SECOND = 1_000


class TestPushCompleteCooldown:
    @pytest.mark.asyncio
    async def test_worked_example(
        self,
        router: EventRouter,
        ledger: InMemoryDeploymentLedger,
        orchestration: SimulatedOrchestrationClient,
        lock_manager: LockManager,
    ) -> None:
        # v5 pushed into an empty ledger with the lock free.
        result = await router.handle(push_event("svc", "v5"), now=T0)
        assert result.outcome == Outcome.DEPLOYMENT_STARTED
        v5_id = result.deployment_id
        assert [r.status for r in await ledger.history(v5_id)] == [
            DeploymentStatus.STARTED, DeploymentStatus.IN_PROGRESS,
        ]
        assert orchestration.registrations[-1].container_definitions[0]["image"].endswith("/svc:v5")
        assert len(orchestration.service_updates) == 1

        # Completion at 45 s.
        external_id = orchestration.service_updates[-1]["deployment_id"]
        result = await router.handle(
            deployment_event("DeploymentCompleted", external_id), now=T0 + 45 * SECOND,
        )
        assert result.outcome == Outcome.DEPLOYMENT_SUCCEEDED
        assert (await ledger.history(v5_id))[-1].status == DeploymentStatus.SUCCEEDED
        assert await lock_manager.inspect() is None

        # v6 at 50 s is inside the cooldown.
        records_before = len(ledger.records)
        result = await router.handle(push_event("svc", "v6"), now=T0 + 50 * SECOND)
        assert result.outcome == Outcome.SKIPPED_COOLDOWN
        assert len(ledger.records) == records_before
        assert len(orchestration.service_updates) == 1

        # Retried at 65 s it is admitted.
        result = await router.handle(push_event("svc", "v6"), now=T0 + 65 * SECOND)
        assert result.outcome == Outcome.DEPLOYMENT_STARTED
        assert result.deployment_id == f"svc-v6-{T0 + 65 * SECOND}"
        assert len(orchestration.service_updates) == 2

    @pytest.mark.asyncio
    async def test_duplicate_completion_keeps_latest_success(
        self,
        router: EventRouter,
        ledger: InMemoryDeploymentLedger,
        orchestration: SimulatedOrchestrationClient,
    ) -> None:
        await router.handle(push_event("svc", "v5"), now=T0)
        external_id = orchestration.service_updates[-1]["deployment_id"]
        completed = deployment_event("DeploymentCompleted", external_id)

        first = await router.handle(completed, now=T0 + 45 * SECOND)
        second = await router.handle(completed, now=T0 + 90 * SECOND)

        assert first.outcome == Outcome.DEPLOYMENT_SUCCEEDED
        assert second.outcome == Outcome.DUPLICATE
        latest = await ledger.latest_by_status(DeploymentStatus.SUCCEEDED)
        assert latest is not None
        assert latest.timestamp == T0 + 45 * SECOND


class TestFailureAndRollback:
    @pytest.mark.asyncio
    async def test_failed_rollout_rolls_back_to_last_success(
        self,
        router: EventRouter,
        ledger: InMemoryDeploymentLedger,
        orchestration: SimulatedOrchestrationClient,
        lock_manager: LockManager,
    ) -> None:
        await router.handle(push_event("svc", "v5"), now=T0)
        v5_external = orchestration.service_updates[-1]["deployment_id"]
        await router.handle(deployment_event("DeploymentCompleted", v5_external), now=T0 + 45 * SECOND)
        v5_arn = orchestration.current_arn

        started = await router.handle(push_event("svc", "v6"), now=T0 + 120 * SECOND)
        v6_external = orchestration.service_updates[-1]["deployment_id"]
        result = await router.handle(
            deployment_event("SERVICE_DEPLOYMENT_FAILED", v6_external, reason="tasks failed to start"),
            now=T0 + 300 * SECOND,
        )

        assert result.outcome == Outcome.DEPLOYMENT_FAILED
        assert result.rollback is not None
        assert result.rollback.outcome == RollbackOutcome.INITIATED
        assert orchestration.current_arn == v5_arn
        assert orchestration.service_updates[-1]["force_new_deployment"]
        assert await lock_manager.inspect() is None

        rollback = await ledger.history(f"rollback-{started.deployment_id}")
        assert [r.status for r in rollback] == [DeploymentStatus.ROLLBACK_INITIATED]
        assert rollback[0].rollback_to_task_definition == v5_arn

    @pytest.mark.asyncio
    async def test_first_failure_has_nothing_to_roll_back_to(
        self,
        router: EventRouter,
        orchestration: SimulatedOrchestrationClient,
    ) -> None:
        await router.handle(push_event("svc", "v5"), now=T0)
        external_id = orchestration.service_updates[-1]["deployment_id"]

        result = await router.handle(deployment_event("DeploymentFailed", external_id), now=T0 + SECOND)

        assert result.outcome == Outcome.DEPLOYMENT_FAILED
        assert result.rollback is not None
        assert result.rollback.outcome == RollbackOutcome.NO_TARGET
        assert len(orchestration.service_updates) == 1
