"""Prometheus metrics configuration."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Histogram,
    Info,
)


# Application info
APP_INFO = Info("coordinator", "Deployment Coordinator application info")
APP_INFO.info({
    "version": "1.0.0",
    "service": "deployment-coordinator",
})

# Event metrics
EVENTS_TOTAL = Counter(
    "coordinator_events_total",
    "Total number of inbound events handled",
    ["kind", "outcome"],
)

EVENT_HANDLING_DURATION = Histogram(
    "coordinator_event_handling_duration_seconds",
    "Time taken to handle one inbound event",
    ["kind"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# Deployment metrics
ADMISSION_DECISIONS = Counter(
    "coordinator_admission_decisions_total",
    "Admission decisions for image pushes",
    ["decision"],  # admitted, cooldown, lock_held, error
)

ROLLBACKS_TOTAL = Counter(
    "coordinator_rollbacks_total",
    "Total number of rollback attempts",
    ["outcome"],
)

STUCK_DEPLOYMENTS_DETECTED = Counter(
    "coordinator_stuck_deployments_detected_total",
    "Ledger records found stuck in a non-terminal status",
    ["status"],
)

# Infrastructure metrics
LOCK_OPERATIONS = Counter(
    "coordinator_lock_operations_total",
    "Total deployment lock operations",
    ["operation", "result"],  # create/overwrite/delete; success/conflict/absent/error
)
