"""Typed load outcomes.

Loaders expose ``attempt(id)`` next to ``load(id)``: instead of raising, it
returns either a :class:`Loaded` carrying the entity and where it came from,
or a :class:`Failed` carrying the classified
:class:`~eventloader.exceptions.EventLoaderError`.  The fallback orchestrator
branches on these values with ``match`` rather than on exception types.

Only :class:`~eventloader.exceptions.EventLoaderError` is captured.
Cancellation and programming errors propagate untouched.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Awaitable, Generic, TypeVar, Union

from eventloader.exceptions import EventLoaderError

T = TypeVar("T")


class Source(str, enum.Enum):
    """Where a loaded entity came from."""

    REMOTE = "remote"
    CACHE = "cache"


@dataclass(frozen=True)
class Loaded(Generic[T]):
    """A successful load."""

    value: T
    source: Source

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failed:
    """A failed load carrying its classified error."""

    error: EventLoaderError

    def unwrap(self):
        raise self.error


Outcome = Union[Loaded[T], Failed]


async def capture(awaitable: Awaitable[T], source: Source) -> Outcome[T]:
    """Await *awaitable* and wrap its result or classified error.

    Args:
        awaitable: The load coroutine.
        source: Provenance recorded on success.

    Returns:
        :class:`Loaded` on success, :class:`Failed` if an
        :class:`~eventloader.exceptions.EventLoaderError` was raised.
    """
    try:
        value = await awaitable
    except EventLoaderError as exc:
        return Failed(exc)
    return Loaded(value, source)
