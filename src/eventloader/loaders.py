"""Single-source loaders: one backed by the remote API, one by the cache.

Both loaders pair one adapter with an
:class:`~eventloader.mapper.EntityMapper` and offer the same two entry
points:

* ``load(id)`` -- return the entity or raise a classified error.
* ``attempt(id)`` -- the same, returned as a
  :class:`~eventloader.result.Loaded` / :class:`~eventloader.result.Failed`
  value for :class:`~eventloader.orchestrator.FallbackLoader` to branch on.
"""

from __future__ import annotations

from typing import Any, Generic, Mapping, Optional, TypeVar

from eventloader.cache import JsonCache, cache_key
from eventloader.client import AsyncClient
from eventloader.exceptions import CacheMissError, EmptyResponseError
from eventloader.mapper import EntityMapper
from eventloader.result import Outcome, Source, capture

E = TypeVar("E")


class RemoteLoader(Generic[E]):
    """Fetch an entity by id from the API.

    Transport errors propagate unchanged.

    Args:
        client: The transport adapter.
        mapper: Converts the decoded payload into an entity.
        path_template: URL template with an ``:id`` token.
        query_params: Fixed query parameters sent with every fetch.
    """

    def __init__(
        self,
        client: AsyncClient,
        mapper: EntityMapper[E],
        path_template: str = "/events/:id",
        query_params: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._client = client
        self._mapper = mapper
        self._path_template = path_template
        self._query_params = dict(query_params or {})

    async def load(self, entity_id: str) -> E:
        """Fetch and map the entity with *entity_id*.

        Raises:
            EmptyResponseError: If the API answered with no content.
            EventLoaderError: Whatever the transport or the mapper raised.
        """
        payload = await self._client.get(
            self._path_template,
            path_params={"id": entity_id},
            query_params=self._query_params or None,
        )
        if payload is None:
            raise EmptyResponseError(f"Empty response for '{entity_id}'")
        return self._mapper.to_entity(payload)

    async def attempt(self, entity_id: str) -> Outcome[E]:
        return await capture(self.load(entity_id), Source.REMOTE)


class CacheLoader(Generic[E]):
    """Read an entity by id from the cache.

    Cache-internal failures are already reported as "no value" by
    :meth:`JsonCache.get`; this loader only raises to say nothing usable
    was cached.

    Args:
        cache: The cache adapter.
        mapper: Converts the cached JSON into an entity.
        namespace: Cache key prefix.
    """

    def __init__(self, cache: JsonCache, mapper: EntityMapper[E], namespace: str = "events") -> None:
        self._cache = cache
        self._mapper = mapper
        self._namespace = namespace

    def key_for(self, entity_id: str) -> str:
        """The cache key this loader reads for *entity_id*."""
        return cache_key(self._namespace, entity_id)

    async def load(self, entity_id: str) -> E:
        """Read and map the cached entity with *entity_id*.

        Raises:
            CacheMissError: If the cache has no valid record.
            MappingError: If the cached JSON does not match the entity shape.
        """
        key = self.key_for(entity_id)
        value = await self._cache.get(key)
        if value is None:
            raise CacheMissError(key)
        return self._mapper.to_entity(value)

    async def attempt(self, entity_id: str) -> Outcome[E]:
        return await capture(self.load(entity_id), Source.CACHE)
