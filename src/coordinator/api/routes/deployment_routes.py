"""Operator read endpoints for the ledger and the deployment lock."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from coordinator.api.dependencies.services import Container
from coordinator.api.schemas.deployment_schemas import (
    DeploymentHistoryResponse,
    DeploymentRecordResponse,
    LockResponse,
)
from coordinator.domain.errors import LedgerError, LockStoreError
from coordinator.domain.models.base import MILLIS_PER_SECOND, now_millis
from coordinator.domain.models.deployment import DeploymentStatus


router = APIRouter(tags=["deployments"])


@router.get("/deployments", response_model=list[DeploymentRecordResponse])
async def list_deployments(
    container: Container,
    status: DeploymentStatus = Query(...),
    limit: int = Query(default=50, ge=1, le=500),
) -> list[DeploymentRecordResponse]:
    """Ledger entries with the given status, newest first."""
    try:
        records = await container.ledger.list_by_status(status, limit=limit)
    except LedgerError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    return [DeploymentRecordResponse.from_record(r) for r in records]


@router.get("/deployments/stuck", response_model=list[DeploymentRecordResponse])
async def list_stuck_deployments(container: Container) -> list[DeploymentRecordResponse]:
    """Deployments left in STARTED or IN_PROGRESS past the stuck threshold."""
    try:
        records = await container.stuck_finder.find(now_millis())
    except LedgerError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    return [DeploymentRecordResponse.from_record(r) for r in records]


@router.get("/deployments/{deployment_id}", response_model=DeploymentHistoryResponse)
async def get_deployment_history(
    deployment_id: str, container: Container,
) -> DeploymentHistoryResponse:
    """All ledger entries of one deployment, oldest first."""
    try:
        records = await container.ledger.history(deployment_id)
    except LedgerError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    if not records:
        raise HTTPException(status_code=404, detail=f"Deployment {deployment_id} not found")
    return DeploymentHistoryResponse(
        deployment_id=deployment_id,
        entries=[DeploymentRecordResponse.from_record(r) for r in records],
    )


@router.get("/lock", response_model=LockResponse)
async def get_lock(container: Container) -> LockResponse:
    """Current holder of the deployment lock, if any."""
    lock_manager = container.lock_manager
    try:
        entry = await lock_manager.inspect()
    except LockStoreError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    if entry is None:
        return LockResponse(name=lock_manager.name, held=False)

    now = now_millis()
    age = entry.age(now)
    return LockResponse(
        name=entry.name,
        held=True,
        holder_token=entry.holder_token,
        age_seconds=age / MILLIS_PER_SECOND if age is not None else None,
        stale=entry.is_stale(now, lock_manager.staleness_millis),
    )
