"""Typer application and CLI entry point for eventloader.

Commands:

* ``eventloader load ID`` -- load one event, remote first with cache
  fallback, and print it.
* ``eventloader cache show|clear|forget ID`` -- inspect or reset the
  fallback cache.
* ``eventloader config show`` -- print the effective global config and
  the known profiles.

Failures exit with the code of their classification (see
:mod:`eventloader.exit_codes`), so a wrapper script can tell "sign in
again" (3) apart from "nothing cached" (4) and "try again later" (5).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.
"""

from __future__ import annotations

import asyncio
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from eventloader import __version__
from eventloader.cache import DiskBlobStore, JsonCache
from eventloader.exceptions import EventLoaderError, NotRecoverableError
from eventloader.exit_codes import EXIT_GENERIC_FAILURE, EXIT_RECOVERABLE
from eventloader.mapper import EventMapper
from eventloader.models import CacheConfig, Event, Profile
from eventloader.orchestrator import open_event_loader
from eventloader.output import error, get_output, info, success, warning
from eventloader.result import Loaded, Source


app = typer.Typer(
    name="eventloader",
    help="Load events from a remote API with an offline cache fallback.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)
cache_app = typer.Typer(no_args_is_help=True)
config_app = typer.Typer(no_args_is_help=True)
app.add_typer(cache_app, name="cache", help="Fallback cache management.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"eventloader {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Initialise the global output manager and logging from CLI flags."""
    from eventloader.output import OutputFormat, OutputManager, configure_logging, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    configure_logging(output)


# ------------------------------------------------------------------ #
# load
# ------------------------------------------------------------------ #


async def _load_event(
    profile: Profile,
    cache_config: CacheConfig,
    cache_dir: Path,
    event_id: str,
    timeout: Optional[float],
) -> Loaded[Event]:
    async with open_event_loader(profile, cache_config, cache_dir) as loader:
        return await asyncio.wait_for(loader.load_with_source(event_id), timeout)


@app.command("load")
def load_command(
    event_id: str = typer.Argument(help="Id of the event to load."),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Profile name to use."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Override the profile's base URL."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Give up after this many seconds."
    ),
) -> None:
    """Load one event and print it.

    The API is tried first.  If it fails for any reason other than a
    rejected session, the last cached copy is shown instead.

    Example::

        eventloader load g1 --base-url https://api.example.com
        eventloader --json load g1 -p club
    """
    from eventloader.config import get_cache_dir, resolve_config

    try:
        global_cfg, resolved = resolve_config(cli_profile=profile, cli_base_url=base_url)
        loaded = asyncio.run(
            _load_event(resolved, global_cfg.cache, get_cache_dir(), event_id, timeout)
        )
    except NotRecoverableError as exc:
        error(str(exc))
        info("Your session is no longer valid. Please sign in again.")
        raise typer.Exit(code=exc.exit_code) from None
    except EventLoaderError as exc:
        error(str(exc))
        info("Could not load the event. Try again later.")
        raise typer.Exit(code=exc.exit_code) from None
    except asyncio.TimeoutError:
        error(f"Timed out after {timeout}s loading '{event_id}'")
        raise typer.Exit(code=EXIT_RECOVERABLE) from None

    if loaded.source is Source.CACHE:
        warning("The API could not be reached; showing the cached copy.")
    else:
        info(f"Loaded '{event_id}' from the API.")
    get_output().print_event(EventMapper().to_json(loaded.value))


# ------------------------------------------------------------------ #
# cache
# ------------------------------------------------------------------ #


def _open_cache() -> tuple[JsonCache, CacheConfig]:
    from eventloader.config import get_cache_dir, load_global_config

    config = load_global_config()
    return JsonCache(DiskBlobStore(get_cache_dir()), config.cache), config.cache


@cache_app.command("show")
def cache_show() -> None:
    """Show cache location, size and TTL."""
    from eventloader.config import get_cache_dir

    cache, _ = _open_cache()
    try:
        info(f"Cache directory: {get_cache_dir()}")
        get_output().format_response(cache.stats())
    finally:
        cache.close()


@cache_app.command("clear")
def cache_clear() -> None:
    """Remove every cached record."""
    cache, _ = _open_cache()
    try:
        asyncio.run(cache.clear())
    finally:
        cache.close()
    success("Cache cleared.")


@cache_app.command("forget")
def cache_forget(
    event_id: str = typer.Argument(help="Id of the event to drop from the cache."),
) -> None:
    """Remove the cached record of one event."""
    from eventloader.cache import cache_key

    cache, config = _open_cache()
    key = cache_key(config.namespace, event_id)
    try:
        asyncio.run(cache.invalidate(key))
    finally:
        cache.close()
    success(f"Removed '{key}' from the cache.")


# ------------------------------------------------------------------ #
# config
# ------------------------------------------------------------------ #


@config_app.command("show")
def config_show() -> None:
    """Show the global configuration and the known profiles."""
    from eventloader.config import get_config_dir, list_profiles, load_global_config

    try:
        config = load_global_config()
    except EventLoaderError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(f"Config directory: {get_config_dir()}")
    data: dict[str, Any] = config.model_dump(mode="json")
    data["profiles"] = list_profiles()
    get_output().format_response(data)


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from eventloader.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``eventloader`` console script.

    Unhandled :class:`~eventloader.exceptions.EventLoaderError` instances
    cause a clean exit with the error's ``exit_code``.  All other
    exceptions produce a crash log and a generic failure exit.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except EventLoaderError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
