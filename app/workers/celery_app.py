from __future__ import annotations

from celery import Celery
from celery.schedules import crontab

from app.core.config import settings
from app.core.redis_utils import get_ssl_options, prepare_redis_url

DEFAULT_BROKER_URL = "redis://localhost:6379/0"


def _create_celery() -> Celery:
    redis_url = prepare_redis_url(settings.REDIS_URL) or DEFAULT_BROKER_URL
    ssl_options = get_ssl_options()
    celery = Celery(
        "salonpro",
        broker=redis_url,
        backend=redis_url,
        include=["app.workers.tasks"],
    )
    celery.conf.update(
        task_default_queue="default",
        task_serializer="json",
        result_serializer="json",
        accept_content=["json"],
        # Beat fires the reminder cycle at a fixed local time of day.
        timezone=settings.REMINDER_TIMEZONE,
        enable_utc=True,
        task_always_eager=settings.ENV.lower() in {"test"},
    )
    if ssl_options:
        celery.conf.update(
            broker_use_ssl=ssl_options,
            redis_backend_use_ssl=ssl_options,
        )
    # Beat schedule (only active outside test env)
    if settings.ENV.lower() not in {"test"}:
        celery.conf.beat_schedule = {
            "daily-occasion-reminders": {
                "task": "reminders.run_daily_cycle",
                "schedule": crontab(minute=settings.REMINDER_RUN_MINUTE, hour=settings.REMINDER_RUN_HOUR),
            }
        }
    return celery


celery_app = _create_celery()
