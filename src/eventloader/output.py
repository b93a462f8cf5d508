"""Terminal output for the ``eventloader`` CLI.

Two streams, two jobs (see `clig.dev <https://clig.dev/>`_):

* **stdout** carries the loaded event and nothing else, so it can be
  piped into ``jq`` or another tool.
* **stderr** carries everything said *about* the load: which source
  answered, warnings, errors, and :mod:`logging` records.

The event is rendered as Rich markup on an interactive terminal, as
tab-separated lines when piped, or as JSON with ``--json``.  ``NO_COLOR``,
``TERM=dumb`` and ``--no-color`` all switch colour off.

Commands talk to a process-wide :class:`OutputManager` through the
module-level :func:`info`, :func:`success`, :func:`warning` and
:func:`error` helpers; :func:`~eventloader.app.main_callback` installs it
with :func:`set_output`.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Any, Iterator, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

_PLAYER_COLUMNS = ("id", "name", "role", "confirmed", "confirmed_at")


class OutputFormat(str, Enum):
    """How stdout data is rendered.  ``AUTO`` picks ``RICH`` or ``PLAIN``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Holds the output preferences of one CLI invocation.

    Args:
        format: Rendering for stdout data.  ``AUTO`` becomes ``RICH`` on a
            colour-capable TTY and ``PLAIN`` otherwise.
        no_color: Never emit colour or Rich markup.
        quiet: Drop informational and success messages.  Warnings and
            errors are always shown.
        verbose: Lower the ``eventloader`` log level to DEBUG.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            rich_ok = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # --- stdout ---

    def format_response(self, data: Any) -> None:
        """Write a JSON-compatible value to stdout."""
        match self._format:
            case OutputFormat.JSON:
                self.print_data(_to_json(data))
            case OutputFormat.PLAIN:
                for line in _plain_lines(data):
                    self.print_data(line)
            case _:
                self._stdout.print(Syntax(_to_json(data), "json", theme="monokai", word_wrap=True))

    def print_event(self, event: dict[str, Any]) -> None:
        """Write an event, in the JSON shape of :meth:`EventMapper.to_json`, to stdout.

        Plain mode prints ``key<TAB>value`` for the event fields followed
        by one tab-separated row per player; rich mode prints a heading and
        a players table.
        """
        if self._format == OutputFormat.JSON:
            self.format_response(event)
            return

        rows = [
            [_cell(player.get(column)) for column in _PLAYER_COLUMNS]
            for player in event.get("players") or []
        ]

        if self._format == OutputFormat.PLAIN:
            for key in ("id", "title", "starts_at", "location"):
                self.print_data(f"{key}\t{_cell(event.get(key))}")
            for row in rows:
                self.print_data("\t".join(row))
            return

        self._stdout.print(f"[bold]{event.get('title', '')}[/bold] ({event.get('id', '')})")
        self._stdout.print(f"Starts: {_cell(event.get('starts_at'))}")
        if event.get("location"):
            self._stdout.print(f"Location: {event['location']}")
        table = Table(title="Players", header_style="bold cyan")
        for column in _PLAYER_COLUMNS:
            table.add_column(column)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    # --- stderr ---

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, style="green")

    def warning(self, message: str) -> None:
        self._diagnostic(message, label="Warning:", style="yellow")

    def error(self, message: str) -> None:
        self._diagnostic(message, label="Error:", style="bold red")

    def _diagnostic(self, message: str, label: str = "", style: str = "") -> None:
        if self._no_color:
            print(f"{label} {message}" if label else message, file=sys.stderr, flush=True)
        elif label:
            self._stderr.print(f"[{style}]{label}[/{style}] {message}")
        elif style:
            self._stderr.print(f"[{style}]{message}[/{style}]")
        else:
            self._stderr.print(message)

    def log_handler(self) -> logging.Handler:
        """A handler writing :mod:`logging` records to stderr in this manager's style."""
        if self._no_color:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
            return handler
        return RichHandler(console=self._stderr, show_path=False)


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _plain_lines(data: Any) -> Iterator[str]:
    if isinstance(data, dict):
        for key, value in data.items():
            yield f"{key}\t{value}"
    elif isinstance(data, list):
        yield from (str(item) for item in data)
    else:
        yield str(data)


def _cell(value: Any) -> str:
    """Render a JSON scalar for a table cell; ``null`` becomes an empty cell."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)


def _is_tty() -> bool:
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def _should_disable_color() -> bool:
    """``NO_COLOR`` (any value, even empty) or ``TERM=dumb`` disables colour."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


def configure_logging(output: OutputManager) -> None:
    """Route the ``eventloader`` logger to stderr.

    ``--verbose`` shows DEBUG records, ``--quiet`` only errors, and the
    default is warnings.
    """
    logger = logging.getLogger("eventloader")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.addHandler(output.log_handler())
    if output.is_verbose:
        logger.setLevel(logging.DEBUG)
    elif output.is_quiet:
        logger.setLevel(logging.ERROR)
    else:
        logger.setLevel(logging.WARNING)
    logger.propagate = False


# --- Process-wide instance ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one if needed."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (tests call this between runs)."""
    global _output
    _output = None


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)
