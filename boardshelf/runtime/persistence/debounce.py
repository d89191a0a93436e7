"""Trailing-edge debounced writer for one storage key.

Drawing canvases report changes many times per second; writing every change
is wasteful.  A ``DebouncedWriter`` keeps only the latest payload and writes
it once the stream of notifications has been quiet for ``wait`` seconds.

Writes for one key are serialised: while a write is in flight, newer
notifications replace the pending payload instead of queueing another copy.

Callers switching context (another board becomes active, shutdown) must call
``aclose()`` -- flush until nothing is pending, then stop the timer -- so the
most recent edit is not dropped.
Write failures are logged and swallowed; the caller's in-memory state stays
the source of truth.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


class DebouncedWriter:
    """Collapses rapid payload notifications into a single write."""

    def __init__(self, write: Callable[[str], Awaitable[None]], wait: float, *, key: str) -> None:
        self.key = key
        self._write = write
        self._wait = wait
        self._pending: str | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._timer_task: asyncio.Task[bool] | None = None
        self._lock = asyncio.Lock()

    @property
    def wait(self) -> float:
        return self._wait

    @property
    def pending(self) -> str | None:
        """Latest payload not yet written, if any."""
        return self._pending

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    # -- Notification ----------------------------------------------------------

    def notify(self, payload: str) -> None:
        """Record ``payload`` as the latest value and restart the quiet timer.

        Must be called from inside the running event loop.
        """
        self._pending = payload
        self._cancel_timer()
        self._timer = asyncio.get_running_loop().call_later(self._wait, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        self._timer_task = asyncio.get_running_loop().create_task(self.flush())

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    # -- Control ---------------------------------------------------------------

    async def flush(self) -> bool:
        """Write the pending payload now.

        Returns ``True`` if a payload was written, ``False`` when nothing was
        pending or the write failed.
        """
        self._cancel_timer()
        async with self._lock:
            payload = self._pending
            if payload is None:
                return False
            self._pending = None
            try:
                await self._write(payload)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Debounced write to {} failed: {!r}", self.key, exc)
                return False
            logger.debug("Debounced write to {} ({} chars)", self.key, len(payload))
            return True

    def cancel(self) -> None:
        """Drop the pending payload and stop the timer without writing."""
        self._cancel_timer()
        self._pending = None

    async def discard(self) -> None:
        """Cancel, then wait for any in-flight write to finish.

        Used before deleting the key so a late write cannot recreate it.
        """
        self.cancel()
        async with self._lock:
            pass

    async def aclose(self) -> None:
        """Flush the latest payload, then cancel the writer.

        Payloads notified while a flush is in flight are flushed too; the
        writer only stops once nothing is pending.
        """
        task = self._timer_task
        if task is not None and not task.done():
            await task
        while self._pending is not None:
            await self.flush()
        self._cancel_timer()
