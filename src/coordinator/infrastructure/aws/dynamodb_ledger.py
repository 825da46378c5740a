"""DynamoDB implementation of the deployment ledger."""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import BotoCoreError, ClientError

from coordinator.domain.errors import LedgerError
from coordinator.domain.models.deployment import DeploymentRecord, DeploymentStatus
from coordinator.domain.ports.repositories import DeploymentLedger


logger = structlog.get_logger(__name__)

DEFAULT_STATUS_INDEX = "status-index"


class DynamoDbDeploymentLedger(DeploymentLedger):
    """Ledger table with partition key ``id``, sort key ``timestamp`` and a
    ``status``/``timestamp`` secondary index. Items expire through the ``ttl``
    attribute.
    """

    def __init__(self, table: Any, status_index: str = DEFAULT_STATUS_INDEX) -> None:
        self._table = table
        self._status_index = status_index

    async def _call(self, operation: str, **kwargs: Any) -> dict[str, Any]:
        method = getattr(self._table, operation)
        try:
            return await asyncio.to_thread(method, **kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error("ledger_call_failed", operation=operation, error=str(e))
            raise LedgerError(f"Ledger {operation} failed: {e}") from e

    async def _paginate(self, operation: str, **kwargs: Any) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        while True:
            response = await self._call(operation, **kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    async def append(self, record: DeploymentRecord) -> DeploymentRecord:
        await self._call("put_item", Item=record.to_item())
        logger.debug(
            "ledger_record_written",
            deployment_id=record.id,
            status=record.status.value,
            timestamp=record.timestamp,
        )
        return record

    async def latest_by_status(
        self, status: DeploymentStatus, newer_than: int | None = None
    ) -> DeploymentRecord | None:
        condition = Key("status").eq(status.value)
        if newer_than is not None:
            condition = condition & Key("timestamp").gt(newer_than)
        response = await self._call(
            "query",
            IndexName=self._status_index,
            KeyConditionExpression=condition,
            ScanIndexForward=False,
            Limit=1,
        )
        items = response.get("Items", [])
        return DeploymentRecord.from_item(items[0]) if items else None

    async def list_by_status(
        self,
        status: DeploymentStatus,
        older_than: int | None = None,
        limit: int | None = 50,
    ) -> list[DeploymentRecord]:
        condition = Key("status").eq(status.value)
        if older_than is not None:
            condition = condition & Key("timestamp").lt(older_than)
        params: dict[str, Any] = {
            "IndexName": self._status_index,
            "KeyConditionExpression": condition,
            "ScanIndexForward": False,
        }
        if limit is None:
            items = await self._paginate("query", **params)
        else:
            response = await self._call("query", Limit=limit, **params)
            items = response.get("Items", [])
        return [DeploymentRecord.from_item(item) for item in items]

    async def find_by_external_id(self, external_deployment_id: str) -> DeploymentRecord | None:
        # No index on the platform id; a full paginated scan keeps late pages from being missed.
        items = await self._paginate(
            "scan",
            FilterExpression=Attr("externalDeploymentId").eq(external_deployment_id),
        )
        if not items:
            return None
        records = [DeploymentRecord.from_item(item) for item in items]
        return max(records, key=lambda r: r.timestamp)

    async def history(self, deployment_id: str) -> list[DeploymentRecord]:
        items = await self._paginate(
            "query",
            KeyConditionExpression=Key("id").eq(deployment_id),
            ScanIndexForward=True,
        )
        return [DeploymentRecord.from_item(item) for item in items]
