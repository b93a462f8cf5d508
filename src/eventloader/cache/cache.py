"""JSON cache adapter with a time-to-live check.

:class:`JsonCache` wraps a :class:`~eventloader.cache.store.BlobStore` and
exposes exactly two operations to the loading layer:

* :meth:`JsonCache.get` -- the decoded JSON value for a key, or ``None``.
  Reads are fail-open: a missing, expired, unreadable or corrupt record
  is reported as ``None``, never as an exception, so a broken cache cannot
  block a fresh fetch.
* :meth:`JsonCache.save` -- persist a JSON value for a key.  Writes are
  loud: a store failure raises
  :class:`~eventloader.exceptions.CacheWriteError`.

An expired record is treated exactly like a missing one; there is no
soft refresh.

Cache keys come from :func:`cache_key` only, so the key the orchestrator
writes back is always the key the cache loader reads.

See Also:
    :class:`~eventloader.models.CacheConfig` -- the Pydantic model that
    controls ``enabled``, ``ttl_seconds`` and ``namespace``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

from eventloader.cache.store import BlobStore
from eventloader.exceptions import CacheWriteError
from eventloader.json_types import JSONValue
from eventloader.models import CacheConfig

logger = logging.getLogger(__name__)

CONTENT_KIND = "json"
"""Content-kind marker recorded with every blob written by :class:`JsonCache`."""


def cache_key(namespace: str, entity_id: str) -> str:
    """Return the cache key ``"<namespace>:<entity_id>"``."""
    return f"{namespace}:{entity_id}"


def encode_json(value: JSONValue) -> bytes:
    """Serialise *value* to canonical JSON bytes (sorted keys, compact, UTF-8)."""
    text = json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return text.encode("utf-8")


class JsonCache:
    """Fail-open reads, loud writes, over a blob store.

    Blocking store calls run in a worker thread via :func:`asyncio.to_thread`.
    Freshness is judged by the store's own :meth:`~BlobStore.now`, the same
    clock that stamped ``valid_until`` on write.

    Args:
        store: The underlying blob store.
        config: ``enabled`` flag and default ``ttl_seconds``.

    Example::

        cache = JsonCache(DiskBlobStore(tmp_dir), CacheConfig(ttl_seconds=3600))
        await cache.save("events:g1", {"id": "g1"})
        await cache.get("events:g1")
    """

    def __init__(
        self,
        store: BlobStore,
        config: Optional[CacheConfig] = None,
    ) -> None:
        self._store = store
        self._config = config or CacheConfig()

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    async def get(self, key: str) -> Optional[JSONValue]:
        """Return the cached JSON value for *key*, or ``None``.

        ``None`` covers every failure mode: caching disabled, no metadata,
        an elapsed validity window, a missing blob, an I/O error, and
        text that does not decode as JSON.
        """
        if not self._config.enabled:
            return None
        return await asyncio.to_thread(self._read, key)

    async def save(self, key: str, value: JSONValue, max_age: Optional[float] = None) -> None:
        """Persist *value* under *key*, replacing any previous record.

        Args:
            key: Cache key, normally from :func:`cache_key`.
            value: The JSON value to store.
            max_age: Validity window in seconds; defaults to
                :attr:`~eventloader.models.CacheConfig.ttl_seconds`.

        Raises:
            CacheWriteError: If *value* cannot be encoded as JSON or the store
                fails to persist the record.
        """
        if not self._config.enabled:
            return
        ttl = self._config.ttl_seconds if max_age is None else max_age
        try:
            data = encode_json(value)
            await asyncio.to_thread(self._store.write, key, data, CONTENT_KIND, ttl)
        except Exception as exc:
            raise CacheWriteError(f"Could not write cache record '{key}': {exc}") from exc

    async def invalidate(self, key: str) -> None:
        """Remove the record for *key*, if any."""
        await asyncio.to_thread(self._store.remove, key)

    async def clear(self) -> None:
        """Remove all records."""
        await asyncio.to_thread(self._store.clear)

    def stats(self) -> dict[str, Any]:
        """Return cache statistics.

        Returns:
            A ``dict`` with ``enabled`` (bool), and when enabled: ``size``
            (number of records), ``namespace`` (str), and ``ttl_seconds``
            (int).
        """
        if not self._config.enabled:
            return {"enabled": False}
        return {
            "enabled": True,
            "size": self._store.count(),
            "namespace": self._config.namespace,
            "ttl_seconds": self._config.ttl_seconds,
        }

    def close(self) -> None:
        """Close the underlying store."""
        self._store.close()

    def _read(self, key: str) -> Optional[JSONValue]:
        try:
            meta = self._store.metadata(key)
        except Exception as exc:
            logger.debug("Cache metadata lookup failed for %s: %s", key, exc)
            return None
        if meta is None:
            logger.debug("Cache miss: %s", key)
            return None
        if meta.valid_until <= self._store.now():
            logger.debug("Cache record expired: %s", key)
            return None

        try:
            if not self._store.exists(key):
                logger.debug("Cache blob missing: %s", key)
                return None
            text = self._store.read_text(key)
        except Exception as exc:
            logger.debug("Cache blob unreadable for %s: %s", key, exc)
            return None

        try:
            return json.loads(text)
        except ValueError:
            logger.debug("Cache blob is not valid JSON: %s", key)
            return None
