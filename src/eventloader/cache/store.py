"""Keyed blob store with validity metadata.

The store is the byte-level primitive underneath
:class:`~eventloader.cache.JsonCache`.  It answers "what time is it", "is
there metadata for this key", "does the blob exist", "what is the blob's
text", and "write these bytes with this max-age", and nothing more.
Interpreting failures is the adapter's job.

:class:`DiskBlobStore` keeps metadata in a :class:`diskcache.Cache` and
each blob as a file under ``<directory>/blobs/``, named by the SHA-256 of
its key.  Blob files are replaced atomically (temp file then
``os.replace``), so a reader sees either the old record or the new one.
"""

from __future__ import annotations

import hashlib
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, Optional, Protocol

import diskcache

from eventloader._fs import atomic_write


@dataclass(frozen=True)
class BlobMetadata:
    """Bookkeeping for one stored blob.

    Attributes:
        kind: Content-kind marker, e.g. ``"json"``.
        valid_until: Epoch seconds after which the record counts as absent.
        blob: File name of the blob inside the store's blob directory.
    """

    kind: str
    valid_until: float
    blob: str


class BlobStore(Protocol):
    """The blocking primitive wrapped by :class:`~eventloader.cache.JsonCache`."""

    def now(self) -> float: ...

    def metadata(self, key: str) -> Optional[BlobMetadata]: ...

    def exists(self, key: str) -> bool: ...

    def read_text(self, key: str) -> str: ...

    def write(self, key: str, data: bytes, kind: str, max_age: float) -> None: ...

    def remove(self, key: str) -> None: ...

    def clear(self) -> None: ...

    def count(self) -> int: ...

    def close(self) -> None: ...


class DiskBlobStore:
    """:class:`BlobStore` on the local filesystem.

    Args:
        directory: Root directory.  ``meta/`` (diskcache) and ``blobs/``
            are created inside it.
        clock: Returns the current time in epoch seconds.  It stamps
            ``valid_until`` on write and is what :meth:`now` reports.

    Example::

        store = DiskBlobStore("/tmp/events-cache")
        store.write("events:g1", b'{"id":"g1"}', kind="json", max_age=3600)
        store.read_text("events:g1")
    """

    def __init__(
        self,
        directory: str | Path,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._directory = Path(directory)
        self._blobs = self._directory / "blobs"
        self._blobs.mkdir(parents=True, exist_ok=True)
        self._meta = diskcache.Cache(str(self._directory / "meta"))
        self._clock = clock

    @property
    def directory(self) -> Path:
        """Root directory of the store."""
        return self._directory

    def now(self) -> float:
        return self._clock()

    def metadata(self, key: str) -> Optional[BlobMetadata]:
        record = self._meta.get(key)
        if record is None:
            return None
        return BlobMetadata(**record)

    def exists(self, key: str) -> bool:
        return self._blob_path(key).is_file()

    def read_text(self, key: str) -> str:
        return self._blob_path(key).read_text(encoding="utf-8")

    def write(self, key: str, data: bytes, kind: str, max_age: float) -> None:
        """Replace the blob for *key* and record its validity window.

        The blob is written before the metadata so that metadata never
        points at a half-written file.

        Raises:
            OSError: If the blob cannot be written.
        """
        path = self._blob_path(key)
        atomic_write(path, data)
        meta = BlobMetadata(kind=kind, valid_until=self.now() + max_age, blob=path.name)
        self._meta.set(key, asdict(meta))

    def remove(self, key: str) -> None:
        self._meta.delete(key)
        self._blob_path(key).unlink(missing_ok=True)

    def clear(self) -> None:
        self._meta.clear()
        for path in self._blobs.glob("*.json"):
            path.unlink(missing_ok=True)

    def count(self) -> int:
        return len(self._meta)

    def close(self) -> None:
        """Close the metadata database and release resources."""
        self._meta.close()

    def _blob_path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode()).hexdigest()
        return self._blobs / f"{digest}.json"
