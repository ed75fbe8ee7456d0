import datetime as dt
from typing import Any

from fastapi import APIRouter, Query
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from app.api.dependencies import AdminKeyDep, SchedulerDep
from app.core.audit import log_audit_event

router = APIRouter(prefix="/admin/reminders", tags=["reminders"])


class CycleAck(BaseModel):
    status: str
    as_of: dt.date
    started_at: dt.datetime
    finished_at: dt.datetime | None
    tenants_processed: int
    tenants_failed: int


class ReminderLogOut(BaseModel):
    id: int
    salon_id: int
    customer_id: int
    template_id: int
    type: str
    occasion_date: dt.date
    message: str
    channel: str
    status: str
    error_message: str | None
    provider_message_id: str | None
    sent_at: dt.datetime

    class Config:
        from_attributes = True


@router.post("/run", response_model=CycleAck)
async def trigger_reminder_cycle(_key: AdminKeyDep, scheduler: SchedulerDep) -> Any:
    """Run the daily reminder cycle now.

    Per-customer outcomes are only visible in the reminder log; this returns
    an acknowledgement once the cycle has finished. A cycle already in
    progress yields 409.
    """
    report = await run_in_threadpool(scheduler.run_daily_cycle)
    log_audit_event(
        "admin.reminders.run",
        tenants_processed=report.tenants_processed,
        tenants_failed=report.tenants_failed,
    )
    return CycleAck(
        status="completed" if report.error is None else "failed",
        as_of=report.as_of,
        started_at=report.started_at,
        finished_at=report.finished_at,
        tenants_processed=report.tenants_processed,
        tenants_failed=report.tenants_failed,
    )


@router.get("/logs", response_model=list[ReminderLogOut])
def list_reminder_logs(
    _key: AdminKeyDep,
    scheduler: SchedulerDep,
    salon_id: int | None = None,
    limit: int = Query(100, ge=1, le=500),
) -> Any:
    return scheduler.ledger.list_entries(salon_id=salon_id, limit=limit)
