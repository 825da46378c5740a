"""Service dependencies for FastAPI dependency injection."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from coordinator.application.container import get_service_container, ServiceContainer


Container = Annotated[ServiceContainer, Depends(get_service_container)]
