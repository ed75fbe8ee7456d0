from __future__ import annotations

from app.core.logger import init_logging
from app.core.monitoring import init_monitoring
from app.workers.celery_app import celery_app


def main() -> None:
    """Launch a Celery worker with the embedded beat scheduler for daily reminders."""
    init_logging()
    init_monitoring()
    celery_app.worker_main(["worker", "--beat", "--loglevel=info"])


if __name__ == "__main__":
    main()
