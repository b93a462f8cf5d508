"""Filesystem helpers shared by the config layer and the disk blob store."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


def atomic_write(path: Path, data: bytes) -> None:
    """Replace *path* with *data* so readers never see a partial file.

    The bytes go to a sibling temp file, are fsynced, then renamed over
    *path* with :func:`os.replace`.  Missing parent directories are
    created.  On failure the temp file is removed and the error re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = tempfile.NamedTemporaryFile(
        mode="wb",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    try:
        with tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp.name, path)
    except BaseException:
        Path(tmp.name).unlink(missing_ok=True)
        raise
