"""Composition root for the coordinator."""

from __future__ import annotations

from coordinator.application.event_router import EventRouter
from coordinator.config import get_settings, Settings
from coordinator.domain.models.task_definition import DeploymentConfiguration
from coordinator.domain.ports.repositories import DeploymentLedger
from coordinator.domain.ports.services import LockStore, OrchestrationClient
from coordinator.domain.services.audit_service import StuckDeploymentFinder
from coordinator.domain.services.completion_service import CompletionHandler
from coordinator.domain.services.cooldown import CooldownGuard
from coordinator.domain.services.deployment_service import DeploymentOrchestrator
from coordinator.domain.services.lock_manager import LockManager
from coordinator.domain.services.rollback_service import RollbackManager
from coordinator.infrastructure.aws.clients import create_client, create_table
from coordinator.infrastructure.aws.dynamodb_ledger import DynamoDbDeploymentLedger
from coordinator.infrastructure.aws.ecs_client import EcsOrchestrationClient
from coordinator.infrastructure.aws.ssm_lock_store import SsmLockStore
from coordinator.infrastructure.orchestration.simulated import SimulatedOrchestrationClient
from coordinator.infrastructure.persistence.in_memory import (
    InMemoryDeploymentLedger,
    InMemoryLockStore,
)


class ServiceContainer:
    """Simple dependency injection container.

    Assembles adapters and services once from Settings. Adapters can be
    passed in explicitly; otherwise ``Settings.uses_aws`` decides between the
    AWS adapters and the in-memory fakes.
    """

    _instance: ServiceContainer | None = None

    def __init__(
        self,
        settings: Settings | None = None,
        ledger: DeploymentLedger | None = None,
        lock_store: LockStore | None = None,
        orchestration: OrchestrationClient | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._ledger = ledger or self._build_ledger()
        self._lock_store = lock_store or self._build_lock_store()
        self._orchestration = orchestration or self._build_orchestration()

        s = self._settings
        self._lock_manager = LockManager(
            self._lock_store, s.lock_parameter_path, s.lock.staleness_seconds,
        )
        self._cooldown_guard = CooldownGuard(self._ledger, s.policy.cooldown_seconds)
        self._orchestrator = DeploymentOrchestrator(
            ledger=self._ledger,
            orchestration=self._orchestration,
            cooldown_guard=self._cooldown_guard,
            lock_manager=self._lock_manager,
            deployment_configuration=DeploymentConfiguration(
                maximum_percent=s.ecs.maximum_percent,
                minimum_healthy_percent=s.ecs.minimum_healthy_percent,
                circuit_breaker_enabled=s.ecs.circuit_breaker_enabled,
                circuit_breaker_rollback=s.policy.rollback_enabled,
            ),
            environment=s.environment.value,
            retention_days=s.ledger.retention_days,
        )
        self._rollback_manager = RollbackManager(
            self._ledger,
            self._orchestration,
            enabled=s.policy.rollback_enabled,
            retention_days=s.ledger.retention_days,
        )
        self._completion_handler = CompletionHandler(
            self._ledger,
            self._lock_manager,
            self._rollback_manager,
            retention_days=s.ledger.retention_days,
        )
        self._router = EventRouter(
            self._orchestrator,
            self._completion_handler,
            watched_repository=s.policy.watched_repository,
        )
        self._stuck_finder = StuckDeploymentFinder(
            self._ledger, s.policy.stuck_threshold_seconds,
        )

    def _build_ledger(self) -> DeploymentLedger:
        s = self._settings
        if s.uses_aws:
            table = create_table(s.ledger.table_name, s.aws)
            return DynamoDbDeploymentLedger(table, s.ledger.status_index)
        return InMemoryDeploymentLedger()

    def _build_lock_store(self) -> LockStore:
        if self._settings.uses_aws:
            return SsmLockStore(create_client("ssm", self._settings.aws))
        return InMemoryLockStore()

    def _build_orchestration(self) -> OrchestrationClient:
        s = self._settings
        if s.uses_aws:
            return EcsOrchestrationClient(
                create_client("ecs", s.aws), s.ecs.cluster, s.ecs.service,
            )
        return SimulatedOrchestrationClient(family=s.ecs.service, region=s.aws.region)

    @classmethod
    def get_instance(cls) -> ServiceContainer:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def ledger(self) -> DeploymentLedger:
        return self._ledger

    @property
    def lock_store(self) -> LockStore:
        return self._lock_store

    @property
    def lock_manager(self) -> LockManager:
        return self._lock_manager

    @property
    def orchestration(self) -> OrchestrationClient:
        return self._orchestration

    @property
    def orchestrator(self) -> DeploymentOrchestrator:
        return self._orchestrator

    @property
    def completion_handler(self) -> CompletionHandler:
        return self._completion_handler

    @property
    def router(self) -> EventRouter:
        return self._router

    @property
    def stuck_finder(self) -> StuckDeploymentFinder:
        return self._stuck_finder


def get_service_container() -> ServiceContainer:
    return ServiceContainer.get_instance()
