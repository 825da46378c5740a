"""Global deployment lock with stale-lock reclamation."""

from __future__ import annotations

import structlog

from coordinator.domain.errors import LockStoreError
from coordinator.domain.models.base import MILLIS_PER_SECOND
from coordinator.domain.models.lock import LockEntry
from coordinator.domain.ports.services import LockStore


logger = structlog.get_logger(__name__)

DEFAULT_STALENESS_SECONDS = 30 * 60


class LockManager:
    """Acquires and releases the single named deployment mutex.

    The lock value is the acquisition time in epoch milliseconds. An entry
    older than the staleness threshold is presumed abandoned by a crashed
    run (or a completion event that never arrived) and is overwritten.
    """

    def __init__(
        self,
        store: LockStore,
        name: str,
        staleness_seconds: int = DEFAULT_STALENESS_SECONDS,
    ) -> None:
        self._store = store
        self._name = name
        self._staleness_millis = staleness_seconds * MILLIS_PER_SECOND

    @property
    def name(self) -> str:
        return self._name

    @property
    def staleness_millis(self) -> int:
        return self._staleness_millis

    async def acquire(self, now: int) -> bool:
        """Try to take the lock.

        Returns False when a live lock is held elsewhere. Raises
        LockStoreError when the store cannot be reached, so callers never
        mistake an outage for ownership.
        """
        token = str(now)
        try:
            return await self._try_acquire(token, now)
        except LockStoreError:
            logger.exception("lock_acquire_failed", lock=self._name)
            raise

    async def _try_acquire(self, token: str, now: int) -> bool:
        if await self._store.create(self._name, token):
            logger.info("lock_acquired", lock=self._name, holder_token=token)
            return True

        value = await self._store.get(self._name)
        if value is None:
            # Released between our create attempt and the read.
            if await self._store.create(self._name, token):
                logger.info("lock_acquired", lock=self._name, holder_token=token)
                return True
            logger.info("lock_held", lock=self._name)
            return False

        entry = LockEntry.from_value(self._name, value)
        if not entry.is_stale(now, self._staleness_millis):
            logger.info("lock_held", lock=self._name, age_ms=entry.age(now))
            return False

        await self._store.overwrite(self._name, token)
        if await self._store.get(self._name) != token:
            logger.warning("lock_reclaim_lost", lock=self._name)
            return False

        logger.warning(
            "stale_lock_reclaimed",
            lock=self._name,
            previous_token=value,
            age_ms=entry.age(now),
        )
        return True

    async def release(self) -> bool:
        """Delete the lock unconditionally. Best effort: failures are logged, not retried."""
        try:
            existed = await self._store.delete(self._name)
        except LockStoreError as e:
            logger.error("lock_release_failed", lock=self._name, error=str(e))
            return False

        if existed:
            logger.info("lock_released", lock=self._name)
        else:
            logger.info("lock_already_released", lock=self._name)
        return True

    async def inspect(self) -> LockEntry | None:
        """Current lock entry, for operators. Raises LockStoreError on outage."""
        value = await self._store.get(self._name)
        if value is None:
            return None
        return LockEntry.from_value(self._name, value)
