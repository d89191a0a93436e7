"""Local filesystem key-value store.

Stores each key as one file under a data root with optional namespace
prefix::

    {data_root}/{prefix}/kv/{quoted key}

When prefix is None, the path collapses to::

    {data_root}/kv/{quoted key}

Keys are percent-encoded (``urllib.parse.quote`` with no safe characters) so
``boardshelf:board:board-1`` becomes a single flat file name.

Uses ``anyio.to_thread.run_sync`` for non-blocking file I/O.  Writes are
atomic: data is written to a temporary file in the same directory, then
renamed over the target, so a crash mid-write never leaves a torn value.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from functools import partial
from pathlib import Path
from urllib.parse import quote

from anyio import to_thread

from boardshelf.runtime.store.base import ReadyGate


class LocalKeyValueStore:
    """Local filesystem implementation of the KeyValueStore protocol."""

    def __init__(self, data_root: str | Path, prefix: str | None = None) -> None:
        base = Path(data_root)
        if prefix:
            base = base / prefix
        self._base = base / "kv"
        self._gate = ReadyGate()

    @property
    def base(self) -> Path:
        return self._base

    def _path(self, key: str) -> Path:
        return self._base / quote(key, safe="")

    async def ensure_ready(self) -> None:
        await self._gate.open(partial(to_thread.run_sync, partial(self._base.mkdir, parents=True, exist_ok=True)))

    # -- Read ------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        await self.ensure_ready()
        return await to_thread.run_sync(partial(_read_file, self._path(key)))

    # -- Write -----------------------------------------------------------------

    async def set(self, key: str, value: str) -> None:
        await self.ensure_ready()
        await to_thread.run_sync(partial(_atomic_write, self._path(key), value))

    async def delete(self, key: str) -> None:
        await self.ensure_ready()
        await to_thread.run_sync(partial(_unlink, self._path(key)))


# -- Sync helpers (run in thread pool) -----------------------------------------


def _atomic_write(path: Path, data: str) -> None:
    """Write data atomically: temp file + rename.

    The temp file is created in the same directory so ``os.replace`` is
    atomic on POSIX.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise


def _read_file(path: Path) -> str | None:
    """Read file contents, ``None`` if missing."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None


def _unlink(path: Path) -> None:
    """Remove a file.  No-op if it doesn't exist."""
    path.unlink(missing_ok=True)
