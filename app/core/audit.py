"""Audit logging for administrative actions.

Events are emitted as compact JSON lines on the ``audit`` logger and, when
``AUDIT_LOG_FILE`` is set, appended to that file as well.
"""
from __future__ import annotations

import json
import logging
import os
import time
from typing import Any

_AUDIT_LOG_PATH = os.getenv("AUDIT_LOG_FILE")
_logger = logging.getLogger("audit")


def log_audit_event(action: str, status: str = "success", **metadata: Any) -> None:
    """Record an audit event.

    Parameters:
        action: A machine-readable action key (e.g. 'admin.reminders.run').
        status: 'success' | 'failure' | 'denied'.
        **metadata: Additional context fields (ids, counts, etc.).
    """
    event = {"ts": int(time.time()), "action": action, "status": status, **metadata}
    line = json.dumps(event, separators=(",", ":"), default=str)
    if _AUDIT_LOG_PATH:
        try:
            os.makedirs(os.path.dirname(_AUDIT_LOG_PATH) or ".", exist_ok=True)
            with open(_AUDIT_LOG_PATH, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError:
            _logger.warning("Failed to write audit event to %s", _AUDIT_LOG_PATH)
    _logger.info(line)


def log_denied(action: str, reason: str | None = None, **extra: Any) -> None:
    log_audit_event(action, status="denied", reason=reason, **extra)
