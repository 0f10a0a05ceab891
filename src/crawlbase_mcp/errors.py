"""Error causes raised by crawl tasks and their retry classification.

Tasks submitted to the retry queue signal failures by raising a
``TaskError`` tagged with an ``ErrorCause``. Built-in timeout and
connection reset/refused errors raised by plain tasks are also understood.
The queue asks ``classify`` whether a failure is worth another attempt.
"""

from __future__ import annotations

import asyncio
from enum import Enum


class ErrorCause(str, Enum):
    """Why a task attempt failed."""

    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    CONNECTION_RESET = "connection_reset"
    CONNECTION_REFUSED = "connection_refused"
    TIMEOUT = "timeout"
    CONNECTION_FAILED = "connection_failed"
    CLIENT_ERROR = "client_error"
    NOT_CHARGEABLE = "not_chargeable"
    MISSING_TOKEN = "missing_token"
    UNKNOWN = "unknown"


class RetryDecision(str, Enum):
    """What the retry queue should do with a failed attempt."""

    RETRY = "retry"
    FAIL = "fail"


RETRYABLE_CAUSES: frozenset[ErrorCause] = frozenset(
    {
        ErrorCause.RATE_LIMITED,
        ErrorCause.SERVER_ERROR,
        ErrorCause.CONNECTION_RESET,
        ErrorCause.CONNECTION_REFUSED,
        ErrorCause.TIMEOUT,
    }
)

# Untagged exceptions that still mean a transient network failure
BUILTIN_RETRYABLE_ERRORS: tuple[type[BaseException], ...] = (
    TimeoutError,
    asyncio.TimeoutError,
    ConnectionResetError,
    ConnectionRefusedError,
)


def cause_for_status(status: int) -> ErrorCause:
    """Map an HTTP status code to an error cause.

    Args:
        status: HTTP status code of a failed response

    Returns:
        RATE_LIMITED for 429, SERVER_ERROR for 5xx, CLIENT_ERROR for other 4xx,
        UNKNOWN otherwise
    """
    if status == 429:
        return ErrorCause.RATE_LIMITED
    if status >= 500:
        return ErrorCause.SERVER_ERROR
    if status >= 400:
        return ErrorCause.CLIENT_ERROR
    return ErrorCause.UNKNOWN


class TaskError(Exception):
    """Base error for failures produced by a queued task."""

    def __init__(
        self,
        message: str,
        cause: ErrorCause | None = None,
        status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if cause is None:
            cause = cause_for_status(status) if status is not None else ErrorCause.UNKNOWN
        self.cause = cause
        self.status = status

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, cause={self.cause.value}, status={self.status})"


class TransportError(TaskError):
    """Network-level failure before any HTTP response was received."""


class CrawlbaseAPIError(TaskError):
    """The Crawlbase API answered, but not with a usable response."""

    def __init__(
        self,
        message: str,
        cause: ErrorCause | None = None,
        status: int | None = None,
        pc_status: int | None = None,
        original_status: int | None = None,
    ) -> None:
        super().__init__(message, cause=cause, status=status)
        self.pc_status = pc_status
        self.original_status = original_status

    @classmethod
    def from_status(cls, status: int, message: str) -> CrawlbaseAPIError:
        """Build an error for an HTTP error status returned by the API."""
        return cls(message, cause=cause_for_status(status), status=status)


class TokenError(TaskError):
    """No token is configured for the kind of request being made."""

    def __init__(self, message: str) -> None:
        super().__init__(message, cause=ErrorCause.MISSING_TOKEN)


def classify(error: BaseException) -> RetryDecision:
    """Decide whether a failed attempt should be retried.

    ``TaskError`` instances with a transient cause are retried, as are the
    built-in ``TimeoutError`` (``asyncio.TimeoutError`` included),
    ``ConnectionResetError`` and ``ConnectionRefusedError``. Every other
    exception fails the task immediately.
    """
    if isinstance(error, TaskError):
        return RetryDecision.RETRY if error.cause in RETRYABLE_CAUSES else RetryDecision.FAIL
    if isinstance(error, BUILTIN_RETRYABLE_ERRORS):
        return RetryDecision.RETRY
    return RetryDecision.FAIL


def is_retryable(error: BaseException) -> bool:
    """Shorthand for ``classify(error) is RetryDecision.RETRY``."""
    return classify(error) is RetryDecision.RETRY
