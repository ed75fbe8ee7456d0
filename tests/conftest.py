from __future__ import annotations

import datetime as dt
import os
from types import SimpleNamespace

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("SALONPRO_TEST_SQLITE", "1")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.core.exceptions import GatewayError  # noqa: E402
from app.db import session as db_session_module  # noqa: E402
from app.db.base_class import Base  # noqa: E402
from app.db.session import SessionLocal  # noqa: E402
from app.models import models  # noqa: E402
from app.services.reminders import InProcessRunGuard, ReminderScheduler, SendResult  # noqa: E402

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")


test_engine = create_engine(
    TEST_DATABASE_URL,
    future=True,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Ensure application code uses the test engine
settings.DATABASE_URL = TEST_DATABASE_URL  # type: ignore[attr-defined]
settings.ENV = "test"  # type: ignore[attr-defined]
db_session_module.engine = test_engine  # type: ignore[assignment]
SessionLocal.configure(bind=test_engine)


@pytest.fixture(autouse=True)
def _reset_database_state():
    """Ensure each test sees a fresh database schema."""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield


@pytest.fixture
def db_session():
    """Provide a database session for arranging test data."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


class FakeGateway:
    """Records sends instead of calling Twilio.

    Addresses listed in ``fail_for`` get a provider-style rejection.
    """

    def __init__(self, fail_for: tuple[str, ...] = (), message_id: str | None = "SM0000000000000000000000000000test"):
        self.calls: list[SimpleNamespace] = []
        self.fail_for = set(fail_for)
        self.message_id = message_id

    def sender_for(self, channel: models.ReminderChannel) -> str:
        if channel == models.ReminderChannel.WHATSAPP:
            return "whatsapp:+15550000002"
        return "+15550000001"

    def send(self, channel, from_address, to_address, body) -> SendResult:
        self.calls.append(SimpleNamespace(channel=channel, from_address=from_address, to=to_address, body=body))
        if to_address in self.fail_for:
            raise GatewayError("The 'To' number is not a valid phone number.", provider_code=21211, status_code=400)
        return SendResult(provider_message_id=self.message_id)


@pytest.fixture
def make_gateway():
    return FakeGateway


@pytest.fixture
def make_scheduler():
    """Build a scheduler wired to the test database and a fake gateway."""

    def _make(gateway=None, session_factory=None, **overrides) -> ReminderScheduler:
        cfg = settings.model_copy(update=overrides) if overrides else settings
        return ReminderScheduler(
            session_factory=session_factory or SessionLocal,
            gateway=gateway or FakeGateway(),
            settings=cfg,
            guard=InProcessRunGuard(),
        )

    return _make


@pytest.fixture
def file_session_factory(tmp_path):
    """Session factory on a file database, one connection per thread.

    The shared in-memory engine hands every thread the same connection, so
    tests that run salons on several workers use this instead.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'reminders.db'}",
        future=True,
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
    yield factory
    engine.dispose()


@pytest.fixture
def make_salon(db_session):
    def _make(name: str = "Glow Studio", **fields) -> models.Salon:
        salon = models.Salon(name=name, **fields)
        db_session.add(salon)
        db_session.commit()
        return salon

    return _make


@pytest.fixture
def make_customer(db_session):
    def _make(salon: models.Salon, name: str = "Amara", phone: str = "+447700900000", **fields) -> models.Customer:
        customer = models.Customer(salon_id=salon.id, name=name, phone=phone, **fields)
        db_session.add(customer)
        db_session.commit()
        return customer

    return _make


@pytest.fixture
def make_template(db_session):
    def _make(
        salon: models.Salon,
        occasion: models.OccasionType = models.OccasionType.BIRTHDAY,
        message: str = "Happy birthday [CustomerName]! Enjoy 20% off this week.",
        is_active: bool = True,
    ) -> models.ReminderTemplate:
        template = models.ReminderTemplate(
            salon_id=salon.id, type=occasion.value, message=message, is_active=is_active
        )
        db_session.add(template)
        db_session.commit()
        return template

    return _make


@pytest.fixture
def ledger_rows(db_session):
    """Return every reminder log row, freshly read."""

    def _rows() -> list[models.ReminderLog]:
        db_session.expire_all()
        return db_session.query(models.ReminderLog).order_by(models.ReminderLog.id).all()

    return _rows


@pytest.fixture
def today() -> dt.date:
    return dt.date(2025, 6, 10)


# FastAPI TestClient fixture
from fastapi.testclient import TestClient  # noqa: E402
from app.api.main import app  # noqa: E402


@pytest.fixture
def client():  # noqa: D401 - simple factory fixture
    """Provide a FastAPI TestClient bound to the application."""
    return TestClient(app)
