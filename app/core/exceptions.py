"""Custom exception hierarchy for SalonPro.

All application errors derive from ``SalonProException`` so the API layer can
render them uniformly and the reminder pipeline can contain them per unit.

Error codes follow pattern: [CATEGORY][NUMBER]
- REM: Reminder pipeline errors (001-099)
- GWY: Messaging gateway errors (001-099)
- LED: Delivery ledger errors (001-099)
"""

from __future__ import annotations

from typing import Any


class SalonProException(Exception):
    """Base exception for all SalonPro application errors."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        """Initialize exception with a readable message and metadata.

        Args:
            message: Human readable error message
            code: Unique error code (e.g., "REM001")
            status_code: HTTP status code when surfaced through the API
            details: Optional additional context
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "details": self.details,
            }
        }


# ============================================================================
# REMINDER PIPELINE ERRORS (REM001-099)
# ============================================================================

class ReminderError(SalonProException):
    """Base class for reminder pipeline errors."""
    pass


class InvalidOccasionTypeError(ReminderError):
    def __init__(self, occasion_type: str):
        super().__init__(
            message=f"Invalid occasion type: {occasion_type}",
            code="REM001",
            status_code=400,
            details={"occasion_type": occasion_type},
        )


class CycleAlreadyRunningError(ReminderError):
    """A reminder cycle is already in progress; overlapping cycles are refused."""

    def __init__(self):
        super().__init__(
            message="A reminder cycle is already running",
            code="REM002",
            status_code=409,
        )


# ============================================================================
# GATEWAY ERRORS (GWY001-099)
# ============================================================================

class GatewayError(SalonProException):
    """The messaging provider rejected or failed a send.

    ``provider_error`` holds the provider's own error text, which is what ends
    up in the ledger's ``error_message`` column.
    """

    def __init__(
        self,
        provider_error: str,
        provider_code: str | int | None = None,
        status_code: int = 502,
        code: str = "GWY001",
    ):
        super().__init__(
            message=f"Message delivery failed: {provider_error}",
            code=code,
            status_code=status_code,
            details={"provider_error": provider_error, "provider_code": provider_code},
        )
        self.provider_error = provider_error
        self.provider_code = provider_code


class GatewayNotConfiguredError(GatewayError):
    def __init__(self, missing: str):
        super().__init__(
            provider_error=f"Messaging gateway not configured: {missing}",
            status_code=503,
            code="GWY002",
        )


class GatewayTimeoutError(GatewayError):
    def __init__(self, timeout: float):
        super().__init__(
            provider_error=f"Gateway request timed out after {timeout:g}s",
            status_code=504,
            code="GWY003",
        )


# ============================================================================
# LEDGER ERRORS (LED001-099)
# ============================================================================

class LedgerWriteError(SalonProException):
    def __init__(self, reason: str):
        super().__init__(
            message=f"Failed to record reminder log: {reason}",
            code="LED001",
            status_code=500,
        )
