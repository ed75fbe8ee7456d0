"""Metrics facade.

Service code should ONLY call the semantic helpers here so the backend can
change freely. Counters live in the default Prometheus registry and are
exposed by ``GET /metrics``.
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger("metrics")

_REMINDER_DISPATCH = Counter(
    "reminder_dispatch_total", "Reminder dispatch attempts by channel and outcome", ["channel", "status"]
)
_REMINDER_SKIPPED = Counter("reminder_skipped_total", "Reminder units skipped before dispatch", ["reason"])
_REMINDER_TENANT_FAILURES = Counter(
    "reminder_tenant_failures_total", "Salons whose reminder processing aborted on an error"
)
_REMINDER_LEDGER_WRITE_FAILURES = Counter(
    "reminder_ledger_write_failures_total", "Reminder log rows that could not be written"
)
_REMINDER_CYCLE_DURATION = Histogram(
    "reminder_cycle_duration_seconds",
    "Wall time of a full reminder cycle",
    buckets=(1, 5, 15, 30, 60, 120, 300, 600, 1200, 1800, 3600),
)


def reminder_dispatched(channel: str, status: str) -> None:
    _REMINDER_DISPATCH.labels(channel=channel, status=status).inc()


def reminder_skipped(reason: str) -> None:
    _REMINDER_SKIPPED.labels(reason=reason).inc()


def reminder_tenant_failed() -> None:
    _REMINDER_TENANT_FAILURES.inc()


def reminder_ledger_write_failed() -> None:
    _REMINDER_LEDGER_WRITE_FAILURES.inc()


def observe_reminder_cycle(seconds: float) -> None:
    _REMINDER_CYCLE_DURATION.observe(seconds)
    logger.debug("reminder cycle took %.2fs", seconds)
