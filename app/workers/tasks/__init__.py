"""
Celery Tasks Module.

All tasks are registered with the Celery app.

Sub-modules:
- reminder_tasks: Daily birthday / anniversary reminders
"""
from __future__ import annotations

from .reminder_tasks import run_daily_reminder_cycle

__all__ = [
    "run_daily_reminder_cycle",
]
