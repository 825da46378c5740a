"""API schemas for coordinator endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from coordinator.domain.models.deployment import DeploymentRecord, DeploymentStatus
from coordinator.domain.models.results import HandlerResult, Outcome, RollbackOutcome


class EventEnvelope(BaseModel):
    """EventBridge-style envelope. Unknown keys are kept for classification."""

    source: str | None = None
    detail_type: str | None = Field(default=None, alias="detail-type")
    detail: Any = Field(default_factory=dict)
    id: str | None = None

    model_config = {"populate_by_name": True, "extra": "allow"}

    def to_raw(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class RollbackResponse(BaseModel):
    outcome: RollbackOutcome
    rollback_id: str | None = None
    target_deployment_id: str | None = None
    task_definition_arn: str | None = None
    error: str = ""


class EventResultResponse(BaseModel):
    outcome: Outcome
    message: str
    deployment_id: str | None = None
    error: str = ""
    rollback: RollbackResponse | None = None

    @classmethod
    def from_result(cls, result: HandlerResult) -> EventResultResponse:
        return cls.model_validate(result.model_dump())


class DeploymentRecordResponse(BaseModel):
    id: str
    timestamp: int
    status: DeploymentStatus
    repository: str
    image_tag: str
    environment: str
    started_at: int | None = None
    external_deployment_id: str | None = None
    task_definition_arn: str | None = None
    reason: str | None = None
    completed_at: int | None = None
    failed_at: int | None = None
    original_deployment_id: str | None = None
    rollback_to_deployment_id: str | None = None
    rollback_to_task_definition: str | None = None

    @classmethod
    def from_record(cls, record: DeploymentRecord) -> DeploymentRecordResponse:
        return cls.model_validate(record.model_dump())


class DeploymentHistoryResponse(BaseModel):
    deployment_id: str
    entries: list[DeploymentRecordResponse]


class LockResponse(BaseModel):
    name: str
    held: bool
    holder_token: int | None = None
    age_seconds: float | None = None
    stale: bool = False
