"""Shared test fixtures."""

from __future__ import annotations

import pytest

from coordinator.application.container import ServiceContainer
from coordinator.application.event_router import EventRouter
from coordinator.config import Environment, PolicySettings, Settings
from coordinator.domain.models.task_definition import DeploymentConfiguration
from coordinator.domain.services.completion_service import CompletionHandler
from coordinator.domain.services.cooldown import CooldownGuard
from coordinator.domain.services.deployment_service import DeploymentOrchestrator
from coordinator.domain.services.lock_manager import LockManager
from coordinator.domain.services.rollback_service import RollbackManager
from coordinator.infrastructure.orchestration.simulated import SimulatedOrchestrationClient
from coordinator.infrastructure.persistence.in_memory import (
    InMemoryDeploymentLedger,
    InMemoryLockStore,
)


LOCK_NAME = "/bellyfed/testing/deployment/lock"
COOLDOWN_SECONDS = 60
STALENESS_SECONDS = 30 * 60


@pytest.fixture(autouse=True)
def clear_stores() -> None:
    """Clear in-memory stores and the container singleton before each test."""
    InMemoryDeploymentLedger.clear()
    InMemoryLockStore.clear()
    ServiceContainer.reset()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment=Environment.TESTING,
        debug=True,
        policy=PolicySettings(cooldown_seconds=COOLDOWN_SECONDS),
    )


@pytest.fixture
def ledger() -> InMemoryDeploymentLedger:
    return InMemoryDeploymentLedger()


@pytest.fixture
def lock_store() -> InMemoryLockStore:
    return InMemoryLockStore()


@pytest.fixture
def orchestration() -> SimulatedOrchestrationClient:
    return SimulatedOrchestrationClient(
        family="svc",
        container_definitions=[
            {"name": "svc", "image": "123456789012.dkr.ecr.us-east-1.amazonaws.com/svc:v4",
             "essential": True, "portMappings": [{"containerPort": 8080}]},
            {"name": "sidecar", "image": "public.ecr.aws/aws-observability/aws-otel-collector:v0.35",
             "essential": False},
            {"name": "log-router", "image": "public.ecr.aws/aws-observability/aws-for-fluent-bit:2.31",
             "essential": False},
        ],
    )


@pytest.fixture
def lock_manager(lock_store: InMemoryLockStore) -> LockManager:
    return LockManager(lock_store, LOCK_NAME, STALENESS_SECONDS)


@pytest.fixture
def cooldown_guard(ledger: InMemoryDeploymentLedger) -> CooldownGuard:
    return CooldownGuard(ledger, COOLDOWN_SECONDS)


@pytest.fixture
def deployment_configuration() -> DeploymentConfiguration:
    return DeploymentConfiguration(circuit_breaker_enabled=True)


@pytest.fixture
def orchestrator(
    ledger: InMemoryDeploymentLedger,
    orchestration: SimulatedOrchestrationClient,
    cooldown_guard: CooldownGuard,
    lock_manager: LockManager,
    deployment_configuration: DeploymentConfiguration,
) -> DeploymentOrchestrator:
    return DeploymentOrchestrator(
        ledger=ledger,
        orchestration=orchestration,
        cooldown_guard=cooldown_guard,
        lock_manager=lock_manager,
        deployment_configuration=deployment_configuration,
        environment="testing",
    )


@pytest.fixture
def rollback_manager(
    ledger: InMemoryDeploymentLedger, orchestration: SimulatedOrchestrationClient,
) -> RollbackManager:
    return RollbackManager(ledger, orchestration, enabled=True)


@pytest.fixture
def completion_handler(
    ledger: InMemoryDeploymentLedger,
    lock_manager: LockManager,
    rollback_manager: RollbackManager,
) -> CompletionHandler:
    return CompletionHandler(ledger, lock_manager, rollback_manager)


@pytest.fixture
def router(
    orchestrator: DeploymentOrchestrator, completion_handler: CompletionHandler,
) -> EventRouter:
    return EventRouter(orchestrator, completion_handler)
