"""Remote-first loading with cache fallback and write-back.

:class:`FallbackLoader` is the caller-facing entry point.  One ``load(id)``
call runs this sequence once, with no retries:

1. Fetch from the remote API.
2. On success, write the entity's JSON form back to the cache under the
   key the cache loader reads, then return the entity.  A failed
   write-back is logged and otherwise ignored.
3. On a not-recoverable failure (session rejected), re-raise it.  The
   cache is not touched: stale data must never stand in for a login.
4. On any other failure, read the same id from the cache and return
   that entity, or raise the cache loader's error.

The caller sees exactly one entity or one classified error per call.
:meth:`FallbackLoader.load_with_source` additionally reports whether the
entity came from the API or from the cache.

Cancelling a ``load`` (or wrapping it in :func:`asyncio.wait_for`) while
the remote fetch is in flight leaves the cache untouched, because the
write-back only starts after the fetch returned an entity.

:func:`open_event_loader` wires a ready-to-use loader for a
:class:`~eventloader.models.Profile`.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Generic, Optional, TypeVar

import httpx

from eventloader.cache import DiskBlobStore, JsonCache
from eventloader.client import AsyncClient, HttpGet, HttpxGet
from eventloader.config import resolve_credential
from eventloader.exceptions import ErrorKind, EventLoaderError
from eventloader.loaders import CacheLoader, RemoteLoader
from eventloader.mapper import EntityMapper, EventMapper
from eventloader.models import CacheConfig, Event, Profile
from eventloader.result import Failed, Loaded, Outcome

logger = logging.getLogger(__name__)

E = TypeVar("E")


class FallbackLoader(Generic[E]):
    """Coordinate a remote loader and a cache loader.

    Args:
        remote: Loads from the API.
        local: Loads from the cache; also defines the write-back key.
        cache: Receives write-backs.
        mapper: Serialises fetched entities for the write-back.

    Example::

        loader = FallbackLoader(remote, local, cache, EventMapper())
        event = await loader.load("g1")
    """

    def __init__(
        self,
        remote: RemoteLoader[E],
        local: CacheLoader[E],
        cache: JsonCache,
        mapper: EntityMapper[E],
    ) -> None:
        self._remote = remote
        self._local = local
        self._cache = cache
        self._mapper = mapper

    async def load(self, entity_id: str) -> E:
        """Load the entity with *entity_id*.

        Raises:
            NotRecoverableError: The API rejected the session.  The cache
                was not consulted.
            AbsentError: The API failed and nothing usable was cached.
            EventLoaderError: Any other error raised by the cache loader.
        """
        return (await self.attempt(entity_id)).unwrap()

    async def load_with_source(self, entity_id: str) -> Loaded[E]:
        """Like :meth:`load`, but also report where the entity came from."""
        outcome = await self.attempt(entity_id)
        if isinstance(outcome, Failed):
            raise outcome.error
        return outcome

    async def attempt(self, entity_id: str) -> Outcome[E]:
        """Run the fetch / classify / fall back sequence once and return its outcome."""
        outcome = await self._remote.attempt(entity_id)

        match outcome:
            case Loaded(value=entity):
                await self._write_back(entity_id, entity)
                return outcome
            case Failed(error=error):
                pass

        match error.kind:
            case ErrorKind.NOT_RECOVERABLE:
                logger.info("Remote load of %s not recoverable: %s", entity_id, error)
                return outcome
            case ErrorKind.RECOVERABLE | ErrorKind.ABSENT | ErrorKind.WRITE_BACK:
                logger.info("Remote load of %s failed (%s); falling back to cache", entity_id, error)

        fallback = await self._local.attempt(entity_id)
        if isinstance(fallback, Failed):
            logger.info("Cache fallback for %s failed: %s", entity_id, fallback.error)
        return fallback

    async def _write_back(self, entity_id: str, entity: E) -> None:
        key = self._local.key_for(entity_id)
        try:
            await self._cache.save(key, self._mapper.to_json(entity))
        except EventLoaderError as exc:
            logger.warning(
                "Write-back of %s failed: %s", key, exc, extra={"error_kind": ErrorKind.WRITE_BACK}
            )


# --- Wiring ---


def create_event_loader(
    http: HttpGet,
    cache: JsonCache,
    profile: Profile,
    namespace: str = "events",
) -> FallbackLoader[Event]:
    """Assemble a :class:`FallbackLoader` for events from its collaborators.

    The profile's ``token_source``, when set, is resolved once here and
    sent as ``authorization: Bearer <token>``.

    Raises:
        ConfigError: If the token source cannot be resolved.
    """
    headers = dict(profile.headers)
    if profile.token_source:
        headers["authorization"] = f"Bearer {resolve_credential(profile.token_source)}"

    mapper = EventMapper()
    client = AsyncClient(http, base_url=profile.base_url, headers=headers)
    remote = RemoteLoader(client, mapper, path_template=profile.event_path)
    local = CacheLoader(cache, mapper, namespace=namespace)
    return FallbackLoader(remote, local, cache, mapper)


@asynccontextmanager
async def open_event_loader(
    profile: Profile,
    cache_config: CacheConfig,
    cache_dir: str | Path,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[FallbackLoader[Event]]:
    """Open the HTTP client and the disk cache, and yield a wired loader.

    Both resources are closed when the block exits.

    Example::

        async with open_event_loader(profile, config.cache, get_cache_dir()) as loader:
            event = await loader.load("g1")
    """
    cache = JsonCache(DiskBlobStore(cache_dir), cache_config)
    try:
        async with HttpxGet(profile.request, transport=transport) as http:
            yield create_event_loader(http, cache, profile, namespace=cache_config.namespace)
    finally:
        cache.close()
