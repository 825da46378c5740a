"""Errors raised across the port boundary."""

from __future__ import annotations


class CoordinatorError(Exception):
    """Base class for infrastructure failures the coordinator reports."""


class LockStoreError(CoordinatorError):
    """Raised when the lock store is unreachable or rejects a request."""


class LedgerError(CoordinatorError):
    """Raised when the deployment ledger cannot be read or written."""


class OrchestrationError(CoordinatorError):
    """Raised when the orchestration platform API call fails."""
