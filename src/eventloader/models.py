"""Canonical Pydantic models shared across all eventloader modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`CacheConfig`, :class:`Profile`, and
    :class:`GlobalConfig`.

**Domain entities** -- produced by the loaders and handed to the caller:
    :class:`Player` and :class:`Event`.  Entities are frozen; the JSON shape
    they travel in is owned by :mod:`eventloader.mapper`, not by Pydantic's
    own serialiser, so the wire format and the cache format share one
    mapping.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator, AwareDatetime, BaseModel, ConfigDict, Field


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP request settings for a :class:`Profile`."""

    timeout: float = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class CacheConfig(BaseModel):
    """Fallback cache settings stored in :class:`GlobalConfig`."""

    enabled: bool = Field(default=True, description="Enable the fallback cache")
    ttl_seconds: int = Field(
        default=7 * 24 * 60 * 60,
        description="Validity window of a cached record in seconds",
    )
    namespace: str = Field(
        default="events", description="Prefix of every cache key"
    )


class Profile(BaseModel):
    """A named API target.

    Example::

        Profile(
            name="club",
            base_url="https://api.example.com",
            token_source="env:CLUB_TOKEN",
        )
    """

    name: str = Field(description="Profile name (file stem in the profiles directory)")
    base_url: Optional[str] = Field(
        default=None, description="Prefix for relative URL templates"
    )
    event_path: str = Field(
        default="/events/:id", description="URL template of the single-event endpoint"
    )
    headers: dict[str, str] = Field(
        default_factory=dict, description="Extra headers sent with every request"
    )
    token_source: Optional[str] = Field(
        default=None,
        description="Bearer token source: env:VAR or file:/path",
    )
    request: RequestConfig = Field(default_factory=RequestConfig)


class GlobalConfig(BaseModel):
    """User-wide settings persisted by :func:`~eventloader.config.save_global_config`."""

    default_profile: Optional[str] = None
    cache: CacheConfig = Field(default_factory=CacheConfig)


# --- Domain entities ---


def _as_utc(value: datetime) -> datetime:
    try:
        return value.astimezone(timezone.utc)
    except OverflowError as exc:
        raise ValueError("timestamp cannot be expressed in UTC") from exc


UtcDatetime = Annotated[AwareDatetime, AfterValidator(_as_utc)]
"""An aware datetime, stored in UTC."""


class Player(BaseModel):
    """A participant of an :class:`Event`."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    role: Optional[str] = None
    confirmed: bool = False
    confirmed_at: Optional[UtcDatetime] = None


class Event(BaseModel):
    """The aggregate loaded by :class:`~eventloader.orchestrator.FallbackLoader`.

    ``players`` keeps the order the API returned them in.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    starts_at: UtcDatetime
    location: Optional[str] = None
    players: tuple[Player, ...] = ()
