"""Database engine setup.

For test runs (ENV=test) we fall back to a shared in-memory SQLite database
when DATABASE_URL is unset or explicitly requested via SALONPRO_TEST_SQLITE=1,
so logic tests need no PostgreSQL driver. tests/conftest.py rebinds
``SessionLocal`` to its own engine anyway.
"""

import os
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings

raw_url = settings.DATABASE_URL

use_sqlite_memory = (
    settings.ENV.lower() == "test" and (
        os.getenv("SALONPRO_TEST_SQLITE") == "1" or not raw_url or raw_url.startswith("sqlite:///:memory:")
    )
)

if use_sqlite_memory:
    raw_url = "sqlite:///file:test_db?mode=memory&cache=shared&uri=true"
    engine = create_engine(raw_url, future=True)
elif raw_url and raw_url.startswith("postgresql"):
    # Reminder workers run one session per salon in parallel, so the pool must
    # cover REMINDER_TENANT_WORKERS plus the ledger's short write sessions.
    engine = create_engine(
        raw_url,
        future=True,
        pool_size=max(5, settings.REMINDER_TENANT_WORKERS * 2),
        max_overflow=10,
        pool_recycle=3600,
        pool_pre_ping=True,
    )
else:
    if raw_url and raw_url.startswith("sqlite:///./"):
        os.makedirs(os.path.dirname(raw_url.removeprefix("sqlite:///")), exist_ok=True)
    engine = create_engine(raw_url, future=True, connect_args={"check_same_thread": False})
SessionLocal = sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(factory: sessionmaker | None = None) -> Generator[Session, None, None]:
    db = (factory or SessionLocal)()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
