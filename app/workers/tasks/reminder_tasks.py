"""
Occasion Reminder Tasks.

Celery entry point for the daily birthday / anniversary reminder cycle.
"""
from __future__ import annotations

import logging
from typing import Any

from app.core.exceptions import CycleAlreadyRunningError
from app.services.reminders import build_scheduler
from app.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


# No autoretry: re-running a half-finished cycle would re-send to customers
# whose attempt failed to reach the ledger. The next daily run picks up failures.
@celery_app.task(
    name="reminders.run_daily_cycle",
    soft_time_limit=3300,
    time_limit=3600,
)
def run_daily_reminder_cycle() -> dict[str, Any]:
    """Send birthday and anniversary reminders for every active salon."""
    try:
        report = build_scheduler().run_daily_cycle()
    except CycleAlreadyRunningError:
        logger.warning("Reminder cycle already running, skipping this trigger")
        return {"success": False, "status": "already_running"}
    return {"success": report.error is None, "status": "completed", **report.summary()}
