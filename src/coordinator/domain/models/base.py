"""Base domain model classes."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel


MILLIS_PER_SECOND = 1000


def generate_id() -> str:
    """Generate a unique identifier."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


def to_millis(moment: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds."""
    return int(moment.timestamp() * MILLIS_PER_SECOND)


def now_millis() -> int:
    """Current time in epoch milliseconds, the clock unit used across the ledger and lock."""
    return to_millis(utc_now())


def from_millis(millis: int) -> datetime:
    return datetime.fromtimestamp(millis / MILLIS_PER_SECOND, tz=timezone.utc)


class ValueObject(BaseModel):
    """Base class for value objects (immutable)."""

    model_config = {"frozen": True}
