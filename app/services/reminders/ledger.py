"""Append-only delivery ledger for reminder dispatch attempts.

Every attempt gets exactly one ``ReminderLog`` row, written in its own
transaction right after the gateway call. By then the message has already
left the system, so a failed insert is logged and counted but never raised
into the pipeline, and never retried within the cycle.
"""
from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app import metrics
from app.core.exceptions import LedgerWriteError
from app.db.session import SessionLocal, session_scope
from app.models import models

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerEntry:
    salon_id: int
    customer_id: int
    template_id: int
    occasion_type: models.OccasionType
    occasion_date: dt.date
    message: str
    channel: models.ReminderChannel
    status: models.DeliveryStatus
    error_message: str | None = None
    provider_message_id: str | None = None
    sent_at: dt.datetime = field(default_factory=models.utcnow)


class DeliveryLedger:
    def __init__(self, session_factory: sessionmaker | None = None) -> None:
        self._session_factory = session_factory or SessionLocal

    def record(self, entry: LedgerEntry) -> models.ReminderLog | None:
        """Insert one log row. Returns ``None`` when the write failed."""
        try:
            return self._insert(entry)
        except LedgerWriteError as exc:
            metrics.reminder_ledger_write_failed()
            logger.error(
                "Salon %s: %s (customer=%s type=%s status=%s)",
                entry.salon_id,
                exc.message,
                entry.customer_id,
                entry.occasion_type.value,
                entry.status.value,
            )
            return None

    def _insert(self, entry: LedgerEntry) -> models.ReminderLog:
        row = models.ReminderLog(
            salon_id=entry.salon_id,
            customer_id=entry.customer_id,
            template_id=entry.template_id,
            type=entry.occasion_type.value,
            occasion_date=entry.occasion_date,
            message=entry.message,
            channel=entry.channel.value,
            status=entry.status.value,
            error_message=entry.error_message,
            provider_message_id=entry.provider_message_id,
            sent_at=entry.sent_at,
        )
        try:
            with session_scope(self._session_factory) as db:
                db.add(row)
                db.flush()
        except SQLAlchemyError as exc:
            raise LedgerWriteError(str(exc)) from exc
        return row

    def already_sent(
        self,
        salon_id: int,
        customer_id: int,
        occasion_type: models.OccasionType,
        occasion_date: dt.date,
    ) -> bool:
        """True when this occurrence was already delivered successfully.

        Failed attempts do not count, so the next run may try again while the
        occasion is still inside the look-ahead window.
        """
        with session_scope(self._session_factory) as db:
            hit = (
                db.query(models.ReminderLog.id)
                .filter(
                    models.ReminderLog.salon_id == salon_id,
                    models.ReminderLog.customer_id == customer_id,
                    models.ReminderLog.type == occasion_type.value,
                    models.ReminderLog.occasion_date == occasion_date,
                    models.ReminderLog.status == models.DeliveryStatus.SENT.value,
                )
                .first()
            )
        return hit is not None

    def list_entries(self, salon_id: int | None = None, limit: int = 100) -> list[models.ReminderLog]:
        with session_scope(self._session_factory) as db:
            query = db.query(models.ReminderLog)
            if salon_id is not None:
                query = query.filter(models.ReminderLog.salon_id == salon_id)
            return query.order_by(models.ReminderLog.id.desc()).limit(limit).all()
