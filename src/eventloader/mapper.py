"""Bidirectional mapping between :data:`~eventloader.json_types.JSONValue` and entities.

The remote loader and the cache loader share the same mapper, and the
orchestrator serialises write-backs with it too, so the JSON the API sends
and the JSON kept on disk can never drift apart.

Wire shape of an event::

    {
        "id": "g1",
        "title": "Sunday five-a-side",
        "starts_at": "2024-05-05T18:00:00.000000Z",
        "location": "North pitch",
        "players": [
            {
                "id": "p1",
                "name": "Ada",
                "role": "keeper",
                "confirmed": true,
                "confirmed_at": "2024-05-01T09:30:00.000000Z"
            }
        ]
    }

``location``, ``role`` and ``confirmed_at`` may be ``null`` or missing.
``confirmed`` defaults to ``false`` when missing.  Timestamps always use
:data:`TIMESTAMP_FORMAT` in UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Protocol, TypeVar

from pydantic import ValidationError

from eventloader.exceptions import MappingError
from eventloader.json_types import JSONObject, JSONValue
from eventloader.models import Event, Player

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"
"""Canonical timestamp layout used in both directions."""

E = TypeVar("E")


class EntityMapper(Protocol[E]):
    """Pure, stateless conversion between JSON values and one entity type."""

    def to_entity(self, value: JSONValue) -> E: ...

    def to_json(self, entity: E) -> JSONValue: ...


# --- Timestamps ---


def format_timestamp(value: datetime) -> str:
    """Render an aware datetime in :data:`TIMESTAMP_FORMAT` (UTC).

    The year is zero-padded to four digits.

    Raises:
        MappingError: If *value* is naive or falls outside the UTC range.
    """
    if value.tzinfo is None:
        raise MappingError(f"Timestamp {value!r} has no timezone")
    try:
        utc = value.astimezone(timezone.utc)
    except OverflowError as exc:
        raise MappingError(f"Timestamp {value!r} cannot be expressed in UTC") from exc
    return f"{utc.year:04d}" + utc.strftime(TIMESTAMP_FORMAT.removeprefix("%Y"))


def parse_timestamp(text: str) -> datetime:
    """Parse *text* written in :data:`TIMESTAMP_FORMAT`.

    Raises:
        MappingError: If *text* does not follow the canonical layout.  No
            fallback value is substituted.
    """
    try:
        parsed = datetime.strptime(text, TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise MappingError(f"Invalid timestamp {text!r}: {exc}") from exc
    return parsed.replace(tzinfo=timezone.utc)


def _optional_timestamp(value: JSONValue, field: str) -> Optional[datetime]:
    match value:
        case None:
            return None
        case str(text):
            return parse_timestamp(text)
        case _:
            raise MappingError(f"'{field}' must be a timestamp string or null")


def _optional_text(value: JSONValue, field: str) -> Optional[str]:
    match value:
        case None:
            return None
        case str(text):
            return text
        case _:
            raise MappingError(f"'{field}' must be a string or null")


# --- Event mapper ---


class EventMapper:
    """Maps :class:`~eventloader.models.Event` to and from its JSON shape."""

    def to_entity(self, value: JSONValue) -> Event:
        """Build an :class:`Event` from a decoded JSON value.

        Args:
            value: A JSON object in the shape documented at module level.

        Returns:
            The frozen :class:`Event`.

        Raises:
            MappingError: If a required key is missing, a value has the wrong
                JSON type, or a timestamp is out of format.
        """
        match value:
            case {"id": str(event_id), "title": str(title), "starts_at": str(starts_at)}:
                pass
            case dict():
                raise MappingError(
                    "Event requires string 'id', 'title' and 'starts_at'"
                )
            case _:
                raise MappingError(
                    f"Event must be a JSON object, got {type(value).__name__}"
                )

        match value.get("players"):
            case None:
                raw_players: list[JSONValue] = []
            case list(items):
                raw_players = items
            case _:
                raise MappingError("'players' must be an array or null")

        try:
            return Event(
                id=event_id,
                title=title,
                starts_at=parse_timestamp(starts_at),
                location=_optional_text(value.get("location"), "location"),
                players=tuple(self._player(item) for item in raw_players),
            )
        except ValidationError as exc:
            raise MappingError(f"Invalid event: {exc}") from exc

    def to_json(self, entity: Event) -> JSONValue:
        """Serialise *entity* to the JSON shape :meth:`to_entity` accepts."""
        return {
            "id": entity.id,
            "title": entity.title,
            "starts_at": format_timestamp(entity.starts_at),
            "location": entity.location,
            "players": [self._player_json(player) for player in entity.players],
        }

    def _player(self, value: JSONValue) -> Player:
        match value:
            case {"id": str(player_id), "name": str(name)}:
                pass
            case _:
                raise MappingError("Player must be an object with string 'id' and 'name'")

        match value.get("confirmed", False):
            case bool(confirmed):
                pass
            case None:
                confirmed = False
            case _:
                raise MappingError("'confirmed' must be a boolean")

        return Player(
            id=player_id,
            name=name,
            role=_optional_text(value.get("role"), "role"),
            confirmed=confirmed,
            confirmed_at=_optional_timestamp(value.get("confirmed_at"), "confirmed_at"),
        )

    def _player_json(self, player: Player) -> JSONObject:
        return {
            "id": player.id,
            "name": player.name,
            "role": player.role,
            "confirmed": player.confirmed,
            "confirmed_at": (
                format_timestamp(player.confirmed_at)
                if player.confirmed_at is not None
                else None
            ),
        }
