"""SSM Parameter Store implementation of the lock store."""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from coordinator.domain.errors import LockStoreError
from coordinator.domain.ports.services import LockStore
from coordinator.infrastructure.observability.metrics import LOCK_OPERATIONS


logger = structlog.get_logger(__name__)


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class SsmLockStore(LockStore):
    """Lock store backed by String parameters.

    ``PutParameter`` with ``Overwrite=False`` gives create-if-absent
    semantics; ``ParameterAlreadyExists`` signals a conflict.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    async def _call(self, operation: str, **kwargs: Any) -> dict[str, Any]:
        method = getattr(self._client, operation)
        return await asyncio.to_thread(method, **kwargs)

    async def create(self, name: str, value: str) -> bool:
        try:
            await self._call(
                "put_parameter", Name=name, Value=value, Type="String", Overwrite=False,
            )
        except ClientError as e:
            if _error_code(e) == "ParameterAlreadyExists":
                LOCK_OPERATIONS.labels(operation="create", result="conflict").inc()
                return False
            LOCK_OPERATIONS.labels(operation="create", result="error").inc()
            raise LockStoreError(f"Could not create lock parameter {name}: {e}") from e
        except BotoCoreError as e:
            LOCK_OPERATIONS.labels(operation="create", result="error").inc()
            raise LockStoreError(f"Could not create lock parameter {name}: {e}") from e

        LOCK_OPERATIONS.labels(operation="create", result="success").inc()
        return True

    async def get(self, name: str) -> str | None:
        try:
            response = await self._call("get_parameter", Name=name)
        except ClientError as e:
            if _error_code(e) == "ParameterNotFound":
                return None
            raise LockStoreError(f"Could not read lock parameter {name}: {e}") from e
        except BotoCoreError as e:
            raise LockStoreError(f"Could not read lock parameter {name}: {e}") from e
        return str(response["Parameter"]["Value"])

    async def overwrite(self, name: str, value: str) -> None:
        try:
            await self._call(
                "put_parameter", Name=name, Value=value, Type="String", Overwrite=True,
            )
        except (ClientError, BotoCoreError) as e:
            LOCK_OPERATIONS.labels(operation="overwrite", result="error").inc()
            raise LockStoreError(f"Could not overwrite lock parameter {name}: {e}") from e
        LOCK_OPERATIONS.labels(operation="overwrite", result="success").inc()

    async def delete(self, name: str) -> bool:
        try:
            await self._call("delete_parameter", Name=name)
        except ClientError as e:
            if _error_code(e) == "ParameterNotFound":
                LOCK_OPERATIONS.labels(operation="delete", result="absent").inc()
                return False
            LOCK_OPERATIONS.labels(operation="delete", result="error").inc()
            raise LockStoreError(f"Could not delete lock parameter {name}: {e}") from e
        except BotoCoreError as e:
            LOCK_OPERATIONS.labels(operation="delete", result="error").inc()
            raise LockStoreError(f"Could not delete lock parameter {name}: {e}") from e

        LOCK_OPERATIONS.labels(operation="delete", result="success").inc()
        return True
