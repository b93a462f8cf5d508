"""Shared test fixtures for eventloader.

Provides sample event payloads, a controllable clock for cache freshness
tests, isolated config directories, and output state management.  These
fixtures are discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from eventloader.client.http import RawResponse
from eventloader.models import Event, Player
from eventloader.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams the
    cached references go stale once the test finishes.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def event_json() -> dict[str, Any]:
    """An event payload as the API sends it."""
    return {
        "id": "g1",
        "title": "Sunday five-a-side",
        "starts_at": "2024-05-05T18:00:00.000000Z",
        "location": "North pitch",
        "players": [
            {
                "id": "p1",
                "name": "Ada",
                "role": "keeper",
                "confirmed": True,
                "confirmed_at": "2024-05-01T09:30:00.250000Z",
            },
            {
                "id": "p2",
                "name": "Grace",
                "role": None,
                "confirmed": False,
                "confirmed_at": None,
            },
        ],
    }


@pytest.fixture
def event() -> Event:
    """The entity matching :func:`event_json`."""
    return Event(
        id="g1",
        title="Sunday five-a-side",
        starts_at=datetime(2024, 5, 5, 18, 0, tzinfo=timezone.utc),
        location="North pitch",
        players=(
            Player(
                id="p1",
                name="Ada",
                role="keeper",
                confirmed=True,
                confirmed_at=datetime(2024, 5, 1, 9, 30, 0, 250000, tzinfo=timezone.utc),
            ),
            Player(id="p2", name="Grace"),
        ),
    )


class FakeClock:
    """A settable stand-in for :func:`time.time`."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class FakeHttp:
    """An :class:`~eventloader.client.http.HttpGet` that replays one outcome.

    *outcome* is either a :class:`RawResponse` or an exception to raise.
    Every call is recorded as ``(url, headers)``.
    """

    def __init__(self, outcome: RawResponse | BaseException) -> None:
        self.outcome = outcome
        self.calls: list[tuple[str, dict[str, str]]] = []

    async def __call__(self, url: str, headers: dict[str, str]) -> RawResponse:
        self.calls.append((url, headers))
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


@pytest.fixture
def make_http():
    """Factory for :class:`FakeHttp` instances.

    ``make_http(200, {...})`` replays a JSON body, ``make_http(204)`` an
    empty one, and ``make_http(exc)`` raises *exc*.
    """

    def _make(status_or_exc: int | BaseException, body: Any = "") -> FakeHttp:
        if isinstance(status_or_exc, BaseException):
            return FakeHttp(status_or_exc)
        text = body if isinstance(body, str) else json.dumps(body)
        return FakeHttp(RawResponse(status_or_exc, text))

    return _make


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME at
    subdirectories of tmp_path, forces XDG path resolution, and clears
    the EVENTLOADER_* environment variables.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("eventloader.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ["EVENTLOADER_PROFILE", "EVENTLOADER_BASE_URL"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the duration of a test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()
