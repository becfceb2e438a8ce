"""Exceptions raised by the domain scanner.

Retryable fetch conditions never surface as exceptions; the fetcher reports
them through ``FetchResult`` and only exhausted schemes become a
``TerminalFetchError``. Cancellation is left to ``asyncio.CancelledError``.
"""
from typing import Any, Dict, List, Optional


class StackRadarError(Exception):
    """Base exception for all scanner errors."""

    error_code: str = "STACKRADAR_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Return a structured error dict for reporting."""
        response = {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
        }
        if self.details:
            response["details"] = self.details
        return response


class InvalidDomainError(StackRadarError, ValueError):
    """Blank domain or domain without a dot."""

    error_code = "INVALID_DOMAIN"

    def __init__(self, domain: str, reason: str = "Invalid domain"):
        super().__init__(f"{reason}: {domain!r}", details={"domain": domain, "reason": reason})
        self.domain = domain


class FetchError(StackRadarError):
    """Base for fetch failures."""

    error_code = "FETCH_ERROR"


class TerminalFetchError(FetchError):
    """No usable response: every permitted scheme failed, or the body read failed."""

    error_code = "FETCH_FAILED"

    def __init__(
        self,
        domain: str,
        message: str,
        url: Optional[str] = None,
        kind: Optional[str] = None,
        attempts: int = 0,
        status_code: Optional[int] = None,
        notes: Optional[List[str]] = None,
    ):
        details: Dict[str, Any] = {"domain": domain, "attempts": attempts}
        if notes:
            details["notes"] = list(notes)
        if url:
            details["url"] = url
        if kind:
            details["kind"] = kind
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details=details)
        self.domain = domain
        self.url = url
        self.kind = kind
        self.attempts = attempts
        self.status_code = status_code
        self.notes = list(notes or [])
