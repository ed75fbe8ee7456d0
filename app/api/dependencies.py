"""Common API dependencies."""
import secrets
from typing import Annotated, TypeAlias

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.core.audit import log_denied
from app.core.config import settings
from app.db.session import get_db
from app.services.reminders import ReminderScheduler, build_scheduler

DbDep: TypeAlias = Annotated[Session, Depends(get_db)]


def require_admin_key(x_admin_key: Annotated[str | None, Header()] = None) -> str:
    """Verify the ``X-Admin-Key`` header against ``ADMIN_API_KEY``.

    Raises HTTPException 401 when the header is missing or wrong.
    """
    if not x_admin_key or not secrets.compare_digest(x_admin_key, settings.ADMIN_API_KEY):
        log_denied("admin.api_key", reason="missing" if not x_admin_key else "mismatch")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return x_admin_key


AdminKeyDep: TypeAlias = Annotated[str, Depends(require_admin_key)]


def get_reminder_scheduler() -> ReminderScheduler:
    """Overridable in tests via ``app.dependency_overrides``."""
    return build_scheduler()


SchedulerDep: TypeAlias = Annotated[ReminderScheduler, Depends(get_reminder_scheduler)]
