"""Run-in-progress guards that keep reminder cycles from overlapping.

The Redis lock is shared by every worker and API process; the in-process
lock only covers the current interpreter and is used when Redis is not
configured (local development, tests).
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Protocol

import redis

from app.core.exceptions import CycleAlreadyRunningError
from app.db.redis_client import get_redis_client, redis_configured

logger = logging.getLogger(__name__)

LOCK_NAME = "salonpro:reminders:cycle"


class RunGuard(Protocol):
    def hold(self) -> Iterator[None]:  # pragma: no cover - protocol stub
        """Context manager; raises CycleAlreadyRunningError if already held."""
        ...


class InProcessRunGuard:
    def __init__(self) -> None:
        self._lock = threading.Lock()

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def hold(self) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise CycleAlreadyRunningError()
        try:
            yield
        finally:
            self._lock.release()


class RedisRunGuard:
    """Distributed lock with an expiry so a crashed worker cannot wedge the schedule."""

    def __init__(self, client: redis.Redis, ttl_seconds: int, name: str = LOCK_NAME) -> None:
        self._client = client
        self._ttl = ttl_seconds
        self._name = name

    @contextmanager
    def hold(self) -> Iterator[None]:
        lock = self._client.lock(self._name, timeout=self._ttl)
        if not lock.acquire(blocking=False):
            raise CycleAlreadyRunningError()
        try:
            yield
        finally:
            try:
                lock.release()
            except redis.exceptions.LockError:
                logger.warning("Reminder lock expired before the cycle finished (ttl=%ss)", self._ttl)


_LOCAL_GUARD = InProcessRunGuard()


def default_guard(ttl_seconds: int) -> RunGuard:
    if redis_configured():
        return RedisRunGuard(get_redis_client(), ttl_seconds)
    return _LOCAL_GUARD
