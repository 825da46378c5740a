"""Unit tests for the lock entry."""

from __future__ import annotations

from coordinator.domain.models.lock import LockEntry


class TestLockEntry:
    def test_parses_holder_token(self) -> None:
        entry = LockEntry.from_value("/lock", "1700000000000")
        assert entry.holder_token == 1700000000000
        assert entry.age(1700000001000) == 1000

    def test_unparsable_value(self) -> None:
        entry = LockEntry.from_value("/lock", "not-a-number")
        assert entry.holder_token is None
        assert entry.age(5) is None
        assert entry.is_stale(5, 1_000)

    def test_staleness_boundary(self) -> None:
        entry = LockEntry.from_value("/lock", "0")
        assert not entry.is_stale(1_000, 1_000)
        assert entry.is_stale(1_001, 1_000)
