"""Key-value store interface for workspace persistence.

Everything the runtime persists is a string under a string key: one record
for the workspace tree and one opaque payload per board.  The interface is
async to support both local (filesystem, memory) and remote (Redis, S3)
backends.

Backends may be used before their initialization has finished: every call
goes through ``ensure_ready()``, which is idempotent and retried by the next
call if it failed.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


class StoreNotReadyError(RuntimeError):
    """Raised when a backend could not be initialised."""


@runtime_checkable
class KeyValueStore(Protocol):
    """Async protocol for string values addressed by string keys."""

    async def ensure_ready(self) -> None:
        """Initialise the backend.  Safe to call repeatedly."""
        ...

    async def get(self, key: str) -> str | None:
        """Return the stored value, or ``None`` if the key is absent."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    async def delete(self, key: str) -> None:
        """Remove ``key``.  No-op if not found."""
        ...


class ReadyGate:
    """Runs an initializer once, serialising concurrent callers.

    A failed initialization leaves the gate closed so the next caller retries.
    """

    def __init__(self) -> None:
        self._ready = False
        self._lock = asyncio.Lock()

    @property
    def is_ready(self) -> bool:
        return self._ready

    async def open(self, initializer: Callable[[], Awaitable[None]]) -> None:
        if self._ready:
            return
        async with self._lock:
            if self._ready:
                return
            try:
                await initializer()
            except Exception as exc:
                msg = f"Key-value store initialisation failed: {exc}"
                raise StoreNotReadyError(msg) from exc
            self._ready = True

    def reset(self) -> None:
        self._ready = False
