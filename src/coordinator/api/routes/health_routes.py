"""Health check and metrics routes."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from coordinator.api.dependencies.services import Container
from coordinator.domain.errors import CoordinatorError
from coordinator.domain.models.deployment import DeploymentStatus


router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(container: Container) -> dict[str, Any]:
    """Basic health check with the deployment target this instance drives."""
    settings = container.settings
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": "1.0.0",
        "environment": settings.environment.value,
        "target": f"{settings.ecs.cluster}/{settings.ecs.service}",
    }


@router.get("/health/ready")
async def readiness_check(container: Container) -> dict[str, Any]:
    """Readiness check - verifies the lock store and the ledger are reachable."""
    checks: dict[str, str] = {}
    try:
        await container.ledger.latest_by_status(DeploymentStatus.SUCCEEDED)
        checks["ledger"] = "ok"
    except CoordinatorError as e:
        checks["ledger"] = f"error: {e}"
    try:
        await container.lock_manager.inspect()
        checks["lock_store"] = "ok"
    except CoordinatorError as e:
        checks["lock_store"] = f"error: {e}"

    all_ok = all(v == "ok" for v in checks.values())
    return {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """Liveness check - verifies the service is running."""
    return {"status": "alive"}


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus exposition of the default registry."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
