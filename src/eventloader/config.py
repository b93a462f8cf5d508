"""Where eventloader keeps its files, and how a profile is chosen.

Layout (Linux and the BSDs follow the XDG base directories; macOS and
Windows keep everything under ``~/.eventloader/``)::

    config   $XDG_CONFIG_HOME/eventloader/config.json
             $XDG_CONFIG_HOME/eventloader/profiles/<name>.json
    cache    $XDG_CACHE_HOME/eventloader/          (the fallback cache)
    data     $XDG_DATA_HOME/eventloader/logs/      (crash logs)

``config.json`` holds a :class:`~eventloader.models.GlobalConfig` and
each profile file a :class:`~eventloader.models.Profile`.  Both are
written with :func:`~eventloader._fs.atomic_write`.

:func:`resolve_config` picks the effective profile, and
:func:`resolve_credential` turns a profile's ``token_source`` into a
token.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Optional, TypeVar

from pydantic import BaseModel, ValidationError

from eventloader._fs import atomic_write
from eventloader.exceptions import ConfigError
from eventloader.models import GlobalConfig, Profile

_APP_NAME = "eventloader"

ENV_PROFILE = "EVENTLOADER_PROFILE"
ENV_BASE_URL = "EVENTLOADER_BASE_URL"

M = TypeVar("M", bound=BaseModel)

# kind -> (XDG variable, default under $HOME, sub-directory off the XDG platforms)
_DIRS: dict[str, tuple[str, tuple[str, ...], Optional[str]]] = {
    "config": ("XDG_CONFIG_HOME", (".config",), None),
    "cache": ("XDG_CACHE_HOME", (".cache",), "cache"),
    "data": ("XDG_DATA_HOME", (".local", "share"), None),
}


# --- Directories ---


def _is_xdg_platform() -> bool:
    """True on Linux and the BSDs."""
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(kind: str) -> Path:
    env_var, home_segments, legacy_sub = _DIRS[kind]
    if _is_xdg_platform():
        root = os.environ.get(env_var)
        base = Path(root) if root else Path.home().joinpath(*home_segments)
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
        if legacy_sub:
            path = path / legacy_sub
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Return (and create) the directory holding ``config.json`` and profiles."""
    return _app_dir("config")


def get_cache_dir() -> Path:
    """Return (and create) the fallback cache directory.

    Safe to delete at any time; the next successful fetch refills it.
    """
    return _app_dir("cache")


def get_data_dir() -> Path:
    """Return (and create) the data directory; crash logs go in its ``logs/``."""
    return _app_dir("data")


def get_profiles_dir() -> Path:
    path = get_config_dir() / "profiles"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Model files ---


def _load_model(path: Path, model: type[M], what: str) -> M:
    """Read *path* as JSON and validate it into *model*.

    Raises:
        ConfigError: If the file is unreadable, not JSON, or fails validation.
    """
    try:
        return model.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, ValueError, ValidationError) as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc


def _save_model(path: Path, value: BaseModel) -> None:
    text = json.dumps(value.model_dump(mode="json"), indent=2) + "\n"
    atomic_write(path, text.encode("utf-8"))


def load_global_config() -> GlobalConfig:
    """Load ``config.json``, or return defaults when it does not exist yet.

    Raises:
        ConfigError: If the file exists but is not a valid global config.
    """
    path = get_config_dir() / "config.json"
    if not path.is_file():
        return GlobalConfig()
    return _load_model(path, GlobalConfig, "global config")


def save_global_config(config: GlobalConfig) -> None:
    _save_model(get_config_dir() / "config.json", config)


def list_profiles() -> list[str]:
    """Names of all saved profiles, sorted."""
    return sorted(p.stem for p in get_profiles_dir().glob("*.json") if p.is_file())


def load_profile(name: str) -> Profile:
    """Load the profile called *name*.

    Raises:
        ConfigError: If there is no such profile or its file is invalid.
    """
    path = get_profiles_dir() / f"{name}.json"
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    return _load_model(path, Profile, f"profile '{name}'")


def save_profile(profile: Profile) -> None:
    _save_model(get_profiles_dir() / f"{profile.name}.json", profile)


# --- Resolution ---


def resolve_config(
    cli_profile: Optional[str] = None,
    cli_base_url: Optional[str] = None,
) -> tuple[GlobalConfig, Profile]:
    """Work out the global config and the profile a command should use.

    The profile name comes from ``--profile``, else ``EVENTLOADER_PROFILE``,
    else ``default_profile`` in ``config.json``.  With no name at all an
    ad-hoc profile called ``default`` is used.  Its base URL can then be
    overridden by ``--base-url`` or, failing that, ``EVENTLOADER_BASE_URL``.

    Raises:
        ConfigError: If the named profile cannot be loaded, or no base URL
            is known.
    """
    global_cfg = load_global_config()

    name = cli_profile or os.environ.get(ENV_PROFILE) or global_cfg.default_profile
    profile = load_profile(name) if name else Profile(name="default")

    base_url = cli_base_url or os.environ.get(ENV_BASE_URL)
    if base_url:
        profile.base_url = base_url
    if not profile.base_url:
        raise ConfigError(
            f"No base URL for profile '{profile.name}'. "
            f"Pass --base-url or set {ENV_BASE_URL}."
        )
    return global_cfg, profile


def resolve_credential(source: str) -> str:
    """Return the secret that *source* points at.

    ``env:NAME`` reads an environment variable; ``file:PATH`` reads a file
    and strips surrounding whitespace (``~`` is expanded).

    Raises:
        ConfigError: If the source is malformed or cannot be read.
    """
    scheme, _, ref = source.partition(":")
    match scheme:
        case "env":
            value = os.environ.get(ref)
            if value is None:
                raise ConfigError(f"Environment variable '{ref}' is not set (source: {source})")
            return value
        case "file":
            path = Path(ref).expanduser()
            try:
                return path.read_text(encoding="utf-8").strip()
            except FileNotFoundError:
                raise ConfigError(f"Credential file not found: {path} (source: {source})") from None
            except OSError as exc:
                raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc
        case _:
            raise ConfigError(f"Unknown credential source format: {source}")
