"""FastAPI application factory."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from coordinator.api.middleware.correlation import CorrelationIdMiddleware
from coordinator.api.routes import deployment_routes, event_routes, health_routes
from coordinator.application.container import get_service_container
from coordinator.config import get_settings, Settings
from coordinator.infrastructure.observability.metrics import APP_INFO
from coordinator.workers.stuck_deployment_monitor import StuckDeploymentMonitor


logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler: runs the stuck-deployment monitor alongside the API."""
    container = get_service_container()
    settings = container.settings
    logger.info(
        "application_starting",
        environment=settings.environment.value,
        uses_aws=settings.uses_aws,
        lock=settings.lock_parameter_path,
    )

    monitor = StuckDeploymentMonitor(
        container.stuck_finder,
        worker_id="stuck-deployment-monitor",
        poll_interval=settings.policy.stuck_check_interval_seconds,
    )
    monitor_task = asyncio.create_task(monitor.start())

    yield

    logger.info("application_shutting_down")
    await monitor.stop()
    await monitor_task
    logger.info("application_shutdown_complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = get_settings()

    APP_INFO.info({
        "version": "1.0.0",
        "service": settings.observability.service_name,
        "environment": settings.environment.value,
    })

    app = FastAPI(
        title="Deployment Coordinator",
        description="Admission, rollout and rollback of container image deployments",
        version="1.0.0",
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(health_routes.router)
    app.include_router(event_routes.router, prefix=settings.api_prefix)
    app.include_router(deployment_routes.router, prefix=settings.api_prefix)

    return app
