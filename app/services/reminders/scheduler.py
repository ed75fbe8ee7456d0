"""Daily occasion reminder cycle.

Flow per active salon: find customers with a birthday / anniversary inside
the look-ahead window, load the salon's active template for that occasion,
render it, pick a channel, send through the gateway and append the outcome to
the delivery ledger.

Isolation rules:
- a lookup failure aborts only that salon; the other salons still run
- a gateway failure becomes a ``failed`` ledger row; the next customer still runs
- a ledger failure is logged; the message has already gone out

Both the Celery beat task and the admin endpoint call ``run_daily_cycle``.
"""
from __future__ import annotations

import datetime as dt
import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy.orm import sessionmaker

from app import metrics
from app.core.config import BaseAppSettings, settings as app_settings
from app.core.exceptions import GatewayError
from app.db.session import SessionLocal, session_scope
from app.models import models
from app.services.reminders.channels import ChannelChoice, select_channel
from app.services.reminders.gateway import MessagingGateway, TwilioGateway
from app.services.reminders.guard import RunGuard, default_guard
from app.services.reminders.ledger import DeliveryLedger, LedgerEntry
from app.services.reminders.occasions import OccasionFinder, next_occurrence
from app.services.reminders.rendering import render
from app.services.reminders.templates import TemplateStore

logger = logging.getLogger(__name__)


@dataclass
class TenantReport:
    salon_id: int
    sent: int = 0
    failed: int = 0
    skipped: int = 0
    deduplicated: int = 0
    ledger_errors: int = 0
    error: str | None = None


@dataclass
class CycleReport:
    as_of: dt.date
    started_at: dt.datetime = field(default_factory=models.utcnow)
    finished_at: dt.datetime | None = None
    tenants: list[TenantReport] = field(default_factory=list)
    error: str | None = None

    @property
    def tenants_processed(self) -> int:
        return len(self.tenants)

    @property
    def tenants_failed(self) -> int:
        return sum(1 for t in self.tenants if t.error)

    @property
    def sent(self) -> int:
        return sum(t.sent for t in self.tenants)

    @property
    def failed(self) -> int:
        return sum(t.failed for t in self.tenants)

    def summary(self) -> dict[str, Any]:
        return {
            "as_of": self.as_of.isoformat(),
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "tenants_processed": self.tenants_processed,
            "tenants_failed": self.tenants_failed,
            "sent": self.sent,
            "failed": self.failed,
            "error": self.error,
        }


@dataclass(frozen=True)
class ReminderJob:
    """A rendered reminder for one customer and occasion, ready to dispatch."""
    salon_id: int
    customer_id: int
    template_id: int
    occasion_type: models.OccasionType
    occasion_date: dt.date
    message: str
    route: ChannelChoice


class ReminderScheduler:
    def __init__(
        self,
        session_factory: sessionmaker | None = None,
        gateway: MessagingGateway | None = None,
        ledger: DeliveryLedger | None = None,
        settings: BaseAppSettings | None = None,
        guard: RunGuard | None = None,
    ) -> None:
        self.settings = settings or app_settings
        self.session_factory = session_factory or SessionLocal
        self.gateway = gateway or TwilioGateway.from_settings(self.settings)
        self.ledger = ledger or DeliveryLedger(self.session_factory)
        self.guard = guard or default_guard(self.settings.REMINDER_LOCK_TTL_SECONDS)

    def today(self) -> dt.date:
        return dt.datetime.now(ZoneInfo(self.settings.REMINDER_TIMEZONE)).date()

    def run_daily_cycle(self, as_of: dt.date | None = None) -> CycleReport:
        """Process every active salon once.

        Raises CycleAlreadyRunningError when another cycle holds the guard.
        """
        with self.guard.hold():
            report = CycleReport(as_of=as_of or self.today())
            started = time.monotonic()
            logger.info("Starting reminder cycle as_of=%s", report.as_of)
            try:
                self._run(report)
            finally:
                report.finished_at = models.utcnow()
                metrics.observe_reminder_cycle(time.monotonic() - started)
            logger.info(
                "Reminder cycle complete: salons=%d failed_salons=%d sent=%d failed=%d",
                report.tenants_processed,
                report.tenants_failed,
                report.sent,
                report.failed,
            )
            return report

    def _run(self, report: CycleReport) -> None:
        try:
            salon_ids = self._active_salon_ids()
        except Exception as exc:  # noqa: BLE001 - nothing to fan out over
            logger.exception("Failed to list active salons")
            report.error = str(exc)
            return

        workers = max(1, min(self.settings.REMINDER_TENANT_WORKERS, len(salon_ids) or 1))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="reminders") as executor:
            futures = [executor.submit(self.process_salon, salon_id, report.as_of) for salon_id in salon_ids]
            for future in as_completed(futures):
                report.tenants.append(future.result())
        report.tenants.sort(key=lambda t: t.salon_id)

    def _active_salon_ids(self) -> list[int]:
        with session_scope(self.session_factory) as db:
            rows = (
                db.query(models.Salon.id)
                .filter(models.Salon.is_active.is_(True))
                .order_by(models.Salon.id)
                .all()
            )
        return [row.id for row in rows]

    def process_salon(self, salon_id: int, as_of: dt.date) -> TenantReport:
        report = TenantReport(salon_id=salon_id)
        try:
            jobs = self._plan(salon_id, as_of, report)
            for index, job in enumerate(jobs):
                if index and self.settings.REMINDER_SEND_INTERVAL_SECONDS > 0:
                    time.sleep(self.settings.REMINDER_SEND_INTERVAL_SECONDS)
                self._deliver(job, report)
        except Exception as exc:  # noqa: BLE001 - contained to this salon
            logger.exception("Salon %s: reminder processing aborted", salon_id)
            metrics.reminder_tenant_failed()
            report.error = str(exc)
        return report

    def _plan(self, salon_id: int, as_of: dt.date, report: TenantReport) -> list[ReminderJob]:
        window_days = self.settings.REMINDER_WINDOW_DAYS
        jobs: list[ReminderJob] = []
        with session_scope(self.session_factory) as db:
            salon = db.get(models.Salon, salon_id)
            if salon is None or not salon.is_active:
                return jobs
            finder = OccasionFinder(db)
            templates = TemplateStore(db)
            for occasion in models.OccasionType:
                if not salon.reminders_enabled(occasion):
                    logger.info("Salon %s: %s reminders disabled", salon_id, occasion.value)
                    metrics.reminder_skipped("disabled")
                    continue
                customers = finder.find_upcoming(salon_id, occasion, as_of, window_days)
                if not customers:
                    continue
                template = templates.get_active_template(salon_id, occasion)
                if template is None:
                    report.skipped += len(customers)
                    metrics.reminder_skipped("no_template")
                    continue
                for customer in customers:
                    jobs.append(
                        ReminderJob(
                            salon_id=salon_id,
                            customer_id=customer.id,
                            template_id=template.id,
                            occasion_type=occasion,
                            occasion_date=next_occurrence(customer.occasion_date(occasion), as_of),
                            message=render(template, customer),
                            route=select_channel(customer, prefer_sms=salon.prefers_sms),
                        )
                    )
        return jobs

    def _deliver(self, job: ReminderJob, report: TenantReport) -> None:
        if self.settings.REMINDER_DEDUP_ENABLED and self.ledger.already_sent(
            job.salon_id, job.customer_id, job.occasion_type, job.occasion_date
        ):
            logger.info(
                "Salon %s: %s reminder for customer %s (%s) already sent",
                job.salon_id,
                job.occasion_type.value,
                job.customer_id,
                job.occasion_date,
            )
            report.deduplicated += 1
            metrics.reminder_skipped("already_sent")
            return

        status = models.DeliveryStatus.SENT
        error_message: str | None = None
        provider_message_id: str | None = None
        channel = job.route.channel
        try:
            sender = self.gateway.sender_for(channel)
            result = self.gateway.send(channel, sender, job.route.address, job.message)
            provider_message_id = result.provider_message_id
        except GatewayError as exc:
            status = models.DeliveryStatus.FAILED
            error_message = exc.provider_error
            logger.warning(
                "Salon %s: failed to send %s reminder to customer %s: %s",
                job.salon_id,
                job.occasion_type.value,
                job.customer_id,
                exc.provider_error,
            )
        except Exception as exc:  # noqa: BLE001 - still one ledger row per attempt
            status = models.DeliveryStatus.FAILED
            error_message = str(exc) or type(exc).__name__
            logger.exception(
                "Salon %s: unexpected error sending reminder to customer %s", job.salon_id, job.customer_id
            )
        else:
            if provider_message_id:
                logger.info(
                    "Salon %s: %s reminder sent to customer %s via %s (id=%s)",
                    job.salon_id,
                    job.occasion_type.value,
                    job.customer_id,
                    channel.value,
                    provider_message_id,
                )
            else:
                logger.warning(
                    "Salon %s: %s reminder sent to customer %s via %s but no message id was returned",
                    job.salon_id,
                    job.occasion_type.value,
                    job.customer_id,
                    channel.value,
                )

        if status == models.DeliveryStatus.SENT:
            report.sent += 1
        else:
            report.failed += 1
        metrics.reminder_dispatched(channel.value, status.value)

        logged = self.ledger.record(
            LedgerEntry(
                salon_id=job.salon_id,
                customer_id=job.customer_id,
                template_id=job.template_id,
                occasion_type=job.occasion_type,
                occasion_date=job.occasion_date,
                message=job.message,
                channel=channel,
                status=status,
                error_message=error_message,
                provider_message_id=provider_message_id,
            )
        )
        if logged is None:
            report.ledger_errors += 1


def build_scheduler() -> ReminderScheduler:
    """Scheduler wired with the process-wide settings, database and Twilio gateway."""
    return ReminderScheduler()
