"""Classified error hierarchy for eventloader.

Every exception inherits from :class:`EventLoaderError` and carries two
class-level tags:

* ``kind`` -- an :class:`ErrorKind` that the
  :class:`~eventloader.orchestrator.FallbackLoader` branches on.  Errors are
  classified once, where they originate, and never re-classified.
* ``exit_code`` -- a constant from :mod:`eventloader.exit_codes` used by the
  CLI entry point.

Subclass hierarchy::

    EventLoaderError                (exit 1)
    +-- NotRecoverableError         (exit 3, NOT_RECOVERABLE)
    |   +-- SessionExpiredError
    +-- RecoverableError            (exit 5, RECOVERABLE)
    |   +-- UnexpectedStatusError
    |   +-- MalformedPayloadError
    |   +-- EmptyResponseError
    |   +-- ConnectionError_
    |   +-- MappingError
    |   +-- CacheWriteError
    +-- AbsentError                 (exit 4, ABSENT)
    |   +-- CacheMissError
    +-- ConfigError                 (exit 1)
"""

from __future__ import annotations

import enum

from eventloader.exit_codes import (
    EXIT_ABSENT,
    EXIT_GENERIC_FAILURE,
    EXIT_NOT_RECOVERABLE,
    EXIT_RECOVERABLE,
)


class ErrorKind(str, enum.Enum):
    """Classification of a failed load."""

    NOT_RECOVERABLE = "not_recoverable"
    """Session or credentials invalidated. Never falls back to the cache."""

    RECOVERABLE = "recoverable"
    """Any other remote failure. Falls back to the cache."""

    ABSENT = "absent"
    """The cache holds no valid record for the requested id."""

    WRITE_BACK = "write_back"
    """Persisting a fetched entity failed. Assigned by the orchestrator when it
    logs the failure; never surfaced by a load."""


class EventLoaderError(Exception):
    """Base exception for all eventloader errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    kind: ErrorKind = ErrorKind.RECOVERABLE
    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


# --- Not recoverable ---


class NotRecoverableError(EventLoaderError):
    """Raised when no amount of cached data can compensate for the failure.

    The caller is expected to re-authenticate rather than retry.
    """

    kind = ErrorKind.NOT_RECOVERABLE
    exit_code = EXIT_NOT_RECOVERABLE


class SessionExpiredError(NotRecoverableError):
    """Raised when the API returns HTTP 401 (session or credential invalidated)."""


# --- Recoverable ---


class RecoverableError(EventLoaderError):
    """Raised for transient failures that may be served from the cache instead."""

    kind = ErrorKind.RECOVERABLE
    exit_code = EXIT_RECOVERABLE


class UnexpectedStatusError(RecoverableError):
    """Raised for any non-2xx status other than 401.

    Args:
        status_code: The HTTP status code the server answered with.
        message: Optional description; defaults to ``HTTP <status>``.
    """

    def __init__(self, status_code: int, message: str | None = None):
        super().__init__(message or f"HTTP {status_code}")
        self.status_code = status_code


class MalformedPayloadError(RecoverableError):
    """Raised when a response body is not a JSON object or array."""


class EmptyResponseError(RecoverableError):
    """Raised when the API answered with no content where an entity was expected."""


class ConnectionError_(RecoverableError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """


class MappingError(RecoverableError):
    """Raised when a JSON value does not have the shape the entity mapper expects."""


class CacheWriteError(RecoverableError):
    """Raised when the cache store fails to persist a record.

    When the failed write is a write-back, the orchestrator logs it under
    :attr:`ErrorKind.WRITE_BACK` instead of surfacing it.
    """


# --- Absent ---


class AbsentError(EventLoaderError):
    """Raised when nothing usable was cached for the requested id."""

    kind = ErrorKind.ABSENT
    exit_code = EXIT_ABSENT


class CacheMissError(AbsentError):
    """Raised by the cache-backed loader when the cache returns no record.

    Args:
        key: The cache key that was looked up.
    """

    def __init__(self, key: str):
        super().__init__(f"No valid cached record for '{key}'")
        self.key = key


# --- Configuration ---


class ConfigError(EventLoaderError):
    """Raised for configuration problems (missing profiles, invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE
