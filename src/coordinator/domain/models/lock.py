"""Deployment lock entry."""

from __future__ import annotations

from coordinator.domain.models.base import ValueObject


class LockEntry(ValueObject):
    """The single global deployment mutex as stored in the lock store.

    ``holder_token`` is the acquisition time in epoch milliseconds; ``None``
    means the stored value could not be parsed.
    """

    name: str
    holder_token: int | None

    @classmethod
    def from_value(cls, name: str, value: str) -> LockEntry:
        try:
            token: int | None = int(value)
        except (TypeError, ValueError):
            token = None
        return cls(name=name, holder_token=token)

    def age(self, now: int) -> int | None:
        if self.holder_token is None:
            return None
        return now - self.holder_token

    def is_stale(self, now: int, staleness_millis: int) -> bool:
        """An entry older than the threshold (or unreadable) is presumed abandoned."""
        age = self.age(now)
        return age is None or age > staleness_millis
