"""Disk-backed fallback cache for eventloader.

This package provides :class:`JsonCache`, the cache adapter that the
loading layer reads from when the remote API fails and writes to after
every successful fetch, and :class:`DiskBlobStore`, the
:mod:`diskcache`-backed store it sits on.  Records are keyed by
:func:`cache_key` and expire after a configurable TTL.
"""

from eventloader.cache.cache import CONTENT_KIND, JsonCache, cache_key, encode_json
from eventloader.cache.store import BlobMetadata, BlobStore, DiskBlobStore

__all__ = [
    "CONTENT_KIND",
    "BlobMetadata",
    "BlobStore",
    "DiskBlobStore",
    "JsonCache",
    "cache_key",
    "encode_json",
]
