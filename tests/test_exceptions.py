"""Tests for the classified error hierarchy and exit codes."""

from __future__ import annotations

import pytest

from eventloader.exceptions import (
    AbsentError,
    CacheMissError,
    CacheWriteError,
    ConfigError,
    ConnectionError_,
    EmptyResponseError,
    ErrorKind,
    EventLoaderError,
    MalformedPayloadError,
    MappingError,
    NotRecoverableError,
    RecoverableError,
    SessionExpiredError,
    UnexpectedStatusError,
)
from eventloader.exit_codes import (
    EXIT_ABSENT,
    EXIT_GENERIC_FAILURE,
    EXIT_NOT_RECOVERABLE,
    EXIT_RECOVERABLE,
)


class TestClassification:
    @pytest.mark.parametrize(
        ("error", "kind", "exit_code"),
        [
            (SessionExpiredError("HTTP 401"), ErrorKind.NOT_RECOVERABLE, EXIT_NOT_RECOVERABLE),
            (UnexpectedStatusError(500), ErrorKind.RECOVERABLE, EXIT_RECOVERABLE),
            (MalformedPayloadError("bad"), ErrorKind.RECOVERABLE, EXIT_RECOVERABLE),
            (EmptyResponseError("empty"), ErrorKind.RECOVERABLE, EXIT_RECOVERABLE),
            (ConnectionError_("refused"), ErrorKind.RECOVERABLE, EXIT_RECOVERABLE),
            (MappingError("shape"), ErrorKind.RECOVERABLE, EXIT_RECOVERABLE),
            (CacheWriteError("disk full"), ErrorKind.RECOVERABLE, EXIT_RECOVERABLE),
            (CacheMissError("events:g1"), ErrorKind.ABSENT, EXIT_ABSENT),
            (ConfigError("no profile"), ErrorKind.RECOVERABLE, EXIT_GENERIC_FAILURE),
        ],
    )
    def test_kind_and_exit_code(self, error: EventLoaderError, kind: ErrorKind, exit_code: int) -> None:
        assert error.kind is kind
        assert error.exit_code == exit_code

    def test_families(self) -> None:
        assert issubclass(SessionExpiredError, NotRecoverableError)
        assert issubclass(CacheWriteError, RecoverableError)
        assert issubclass(CacheMissError, AbsentError)
        assert not issubclass(ConnectionError_, ConnectionError)


class TestMessages:
    def test_unexpected_status_default_message(self) -> None:
        error = UnexpectedStatusError(503)
        assert str(error) == "HTTP 503"
        assert error.status_code == 503

    def test_unexpected_status_custom_message(self) -> None:
        assert str(UnexpectedStatusError(404, "HTTP 404: gone")) == "HTTP 404: gone"

    def test_cache_miss_names_key(self) -> None:
        error = CacheMissError("events:g1")
        assert error.key == "events:g1"
        assert "events:g1" in str(error)

    def test_exit_code_override(self) -> None:
        assert EventLoaderError("x", exit_code=42).exit_code == 42
        assert EventLoaderError("x").exit_code == EXIT_GENERIC_FAILURE
