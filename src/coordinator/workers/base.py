"""Base polling worker implementation."""

from __future__ import annotations

import asyncio
import uuid
from abc import ABC, abstractmethod
from typing import Any

import structlog


logger = structlog.get_logger(__name__)


class PollingWorker(ABC):
    """Base class for background workers that run a check on a fixed interval.

    Implements the Template Method pattern: ``start`` owns the loop and
    error handling, subclasses implement ``poll``.
    """

    def __init__(self, worker_id: str | None = None, poll_interval: float = 60.0) -> None:
        self._worker_id = worker_id or f"worker-{uuid.uuid4().hex[:8]}"
        self._poll_interval = poll_interval
        self._running = False
        self._polls = 0
        self._failed_polls = 0
        self._stopped: asyncio.Event | None = None

    @property
    def worker_id(self) -> str:
        return self._worker_id

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Run the polling loop until ``stop`` is called."""
        self._running = True
        stopped = self._stopped = asyncio.Event()
        logger.info("worker_started", worker_id=self._worker_id)

        while self._running:
            await self.run_once()
            try:
                await asyncio.wait_for(stopped.wait(), timeout=self._poll_interval)
            except asyncio.TimeoutError:
                continue

        logger.info("worker_stopped", worker_id=self._worker_id)

    async def stop(self) -> None:
        """Stop after the current poll finishes."""
        self._running = False
        if self._stopped is not None:
            self._stopped.set()
        logger.info("worker_stopping", worker_id=self._worker_id)

    async def run_once(self) -> None:
        """Run a single poll. Errors are logged and counted, never raised."""
        self._polls += 1
        try:
            await self.poll()
        except Exception as e:
            self._failed_polls += 1
            logger.exception("worker_poll_error", worker_id=self._worker_id, error=str(e))

    def get_health(self) -> dict[str, Any]:
        """Return a health snapshot of the worker."""
        return {
            "worker_id": self._worker_id,
            "running": self._running,
            "polls": self._polls,
            "failed_polls": self._failed_polls,
            "poll_interval": self._poll_interval,
        }

    @abstractmethod
    async def poll(self) -> None:
        """Perform one check. Subclasses implement specific logic."""
