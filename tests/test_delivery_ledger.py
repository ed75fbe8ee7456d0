from __future__ import annotations

import datetime as dt

from sqlalchemy.exc import OperationalError

from app.db.session import SessionLocal
from app.models import models
from app.services.reminders import DeliveryLedger, LedgerEntry


def _entry(salon, customer, template, status=models.DeliveryStatus.SENT, **fields) -> LedgerEntry:
    params = dict(
        salon_id=salon.id,
        customer_id=customer.id,
        template_id=template.id,
        occasion_type=models.OccasionType.BIRTHDAY,
        occasion_date=dt.date(2025, 6, 13),
        message="Happy birthday Amara!",
        channel=models.ReminderChannel.WHATSAPP,
        status=status,
    )
    params.update(fields)
    return LedgerEntry(**params)


def test_record_inserts_one_row(make_salon, make_customer, make_template, ledger_rows):
    salon = make_salon()
    customer = make_customer(salon)
    template = make_template(salon)

    row = DeliveryLedger(SessionLocal).record(_entry(salon, customer, template, provider_message_id="SM1"))

    assert row is not None
    rows = ledger_rows()
    assert len(rows) == 1
    assert rows[0].status == "sent"
    assert rows[0].channel == "whatsapp"
    assert rows[0].provider_message_id == "SM1"
    assert rows[0].occasion_date == dt.date(2025, 6, 13)


def test_already_sent_only_counts_successful_sends(make_salon, make_customer, make_template):
    salon = make_salon()
    customer = make_customer(salon)
    template = make_template(salon)
    ledger = DeliveryLedger(SessionLocal)

    ledger.record(_entry(salon, customer, template, status=models.DeliveryStatus.FAILED, error_message="boom"))
    assert not ledger.already_sent(salon.id, customer.id, models.OccasionType.BIRTHDAY, dt.date(2025, 6, 13))

    ledger.record(_entry(salon, customer, template))
    assert ledger.already_sent(salon.id, customer.id, models.OccasionType.BIRTHDAY, dt.date(2025, 6, 13))
    # Same customer next year, or a different occasion, is a new occurrence
    assert not ledger.already_sent(salon.id, customer.id, models.OccasionType.BIRTHDAY, dt.date(2026, 6, 13))
    assert not ledger.already_sent(salon.id, customer.id, models.OccasionType.ANNIVERSARY, dt.date(2025, 6, 13))


def test_write_failure_is_swallowed_and_reported(monkeypatch, make_salon, make_customer, make_template, ledger_rows):
    salon = make_salon()
    customer = make_customer(salon)
    template = make_template(salon)

    def broken_flush(self, *args, **kwargs):
        raise OperationalError("INSERT INTO reminderlog", {}, Exception("database is locked"))

    monkeypatch.setattr("sqlalchemy.orm.Session.flush", broken_flush)

    assert DeliveryLedger(SessionLocal).record(_entry(salon, customer, template)) is None

    monkeypatch.undo()
    assert ledger_rows() == []


def test_list_entries_newest_first_and_filtered(make_salon, make_customer, make_template):
    salon = make_salon()
    other = make_salon(name="Other")
    customer = make_customer(salon)
    other_customer = make_customer(other, name="Bo")
    template = make_template(salon)
    other_template = make_template(other)
    ledger = DeliveryLedger(SessionLocal)

    first = ledger.record(_entry(salon, customer, template))
    second = ledger.record(_entry(salon, customer, template, occasion_date=dt.date(2026, 6, 13)))
    ledger.record(_entry(other, other_customer, other_template))

    entries = ledger.list_entries(salon_id=salon.id)

    assert [e.id for e in entries] == [second.id, first.id]
    assert len(ledger.list_entries()) == 3
