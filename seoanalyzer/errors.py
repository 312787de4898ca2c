"""Error kinds raised by the analysis pipeline.

Components raise these and never translate them; the orchestrator is the
only place that turns an ErrorKind into a user-facing message.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_TARGET = "invalid_target"
    FETCH_FAILED = "fetch_failed"
    CONTENT_TOO_SHORT = "content_too_short"
    API_EXHAUSTED = "api_exhausted"
    MALFORMED_RESPONSE = "malformed_response"
    NO_RESULTS = "no_results"
    CANCELLED = "cancelled"


class ErrorCategory(str, Enum):
    RETRYABLE = "retryable"
    INPUT = "input"
    UNEXPECTED = "unexpected"
    CANCELLED = "cancelled"


ERROR_CATEGORIES: dict[ErrorKind, ErrorCategory] = {
    ErrorKind.FETCH_FAILED: ErrorCategory.RETRYABLE,
    ErrorKind.API_EXHAUSTED: ErrorCategory.RETRYABLE,
    ErrorKind.INVALID_TARGET: ErrorCategory.INPUT,
    ErrorKind.CONTENT_TOO_SHORT: ErrorCategory.INPUT,
    ErrorKind.MALFORMED_RESPONSE: ErrorCategory.UNEXPECTED,
    ErrorKind.NO_RESULTS: ErrorCategory.UNEXPECTED,
    ErrorKind.CANCELLED: ErrorCategory.CANCELLED,
}


class AnalysisError(Exception):
    """Base class for every failure the pipeline can surface."""

    kind: ErrorKind = ErrorKind.MALFORMED_RESPONSE

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind.value)
        self.message = message or self.kind.value

    @property
    def category(self) -> ErrorCategory:
        return ERROR_CATEGORIES[self.kind]


class InvalidTarget(AnalysisError):
    kind = ErrorKind.INVALID_TARGET


class FetchFailed(AnalysisError):
    kind = ErrorKind.FETCH_FAILED

    def __init__(self, message: str = "", status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ContentTooShort(AnalysisError):
    kind = ErrorKind.CONTENT_TOO_SHORT

    def __init__(self, message: str = "", length: int = 0):
        super().__init__(message)
        self.length = length


class ApiExhausted(AnalysisError):
    kind = ErrorKind.API_EXHAUSTED

    def __init__(self, message: str = "", attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


class MalformedResponse(AnalysisError):
    kind = ErrorKind.MALFORMED_RESPONSE


class NoResults(AnalysisError):
    kind = ErrorKind.NO_RESULTS


class Cancelled(AnalysisError):
    kind = ErrorKind.CANCELLED


class OrchestrationBusy(RuntimeError):
    """Raised when an analysis is requested while another one is in flight."""


def raise_if_cancelled(cancel, where: str = "") -> None:
    """Cooperative cancellation check used at run/attempt boundaries.

    ``cancel`` is anything with an ``is_set()`` method (usually asyncio.Event).
    """
    if cancel is not None and cancel.is_set():
        raise Cancelled(f"Analysis cancelled{f' before {where}' if where else ''}.")
