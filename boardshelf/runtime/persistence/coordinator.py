"""Persistence coordinator -- durable storage for workspace metadata and board payloads.

Two kinds of records live in the key-value store:

- **Workspace metadata**: the whole tree as one JSON record under a fixed key,
  rewritten (undebounced) after every mutation.
- **Board payloads**: one opaque document per board under
  ``{board_key_prefix}{board_id}``, written through a ``DebouncedWriter``.

The coordinator is the error boundary of the persistence layer.  Backend
failures (unreachable server, full disk, serialization errors) are logged and
reported as ``False`` / ``None``; they never propagate into the mutation
engine or the HTTP layer.  There is no transaction across the two record
kinds: a crash between a metadata write and a payload write can leave them
out of step, and the next load's sanitization pass deals with it.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from typing import TYPE_CHECKING

from loguru import logger

from boardshelf.runtime.persistence.debounce import DebouncedWriter
from boardshelf.runtime.workspace.model import create_default_workspace
from boardshelf.runtime.workspace.sanitize import decode_workspace

if TYPE_CHECKING:
    from collections.abc import Coroutine, Iterable
    from typing import Any

    from boardshelf.runtime.models.workspace import Workspace
    from boardshelf.runtime.settings import BoardshelfSettings
    from boardshelf.runtime.store.base import KeyValueStore

DEFAULT_WORKSPACE_KEY = "boardshelf:workspace"
DEFAULT_BOARD_KEY_PREFIX = "boardshelf:board:"
DEFAULT_LEGACY_PAYLOAD_KEY = "boardshelf:drawing"
DEFAULT_SAVE_DEBOUNCE = 0.3


def is_valid_payload(raw: str | None) -> bool:
    """A payload is usable when it decodes to a JSON object."""
    if raw is None:
        return False
    try:
        return isinstance(json.loads(raw), Mapping)
    except ValueError:
        return False


class PersistenceCoordinator:
    """Loads and saves workspace metadata and board payloads.

    Instantiated once per process (CLI command or app lifespan) around a
    single ``KeyValueStore``.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        workspace_key: str = DEFAULT_WORKSPACE_KEY,
        board_key_prefix: str = DEFAULT_BOARD_KEY_PREFIX,
        legacy_payload_key: str = DEFAULT_LEGACY_PAYLOAD_KEY,
        save_debounce: float = DEFAULT_SAVE_DEBOUNCE,
    ) -> None:
        self._store = store
        self.workspace_key = workspace_key
        self.board_key_prefix = board_key_prefix
        self.legacy_payload_key = legacy_payload_key
        self.save_debounce = save_debounce

        self._writers: dict[tuple[str, float], DebouncedWriter] = {}
        self._tasks: set[asyncio.Task[Any]] = set()
        self._workspace_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: BoardshelfSettings, store: KeyValueStore) -> PersistenceCoordinator:
        return cls(
            store,
            workspace_key=settings.workspace_key,
            board_key_prefix=settings.board_key_prefix,
            legacy_payload_key=settings.legacy_payload_key,
            save_debounce=settings.save_debounce,
        )

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def board_key(self, board_id: str) -> str:
        return f"{self.board_key_prefix}{board_id}"

    # -- Raw store access (error boundary) -------------------------------------

    async def _get(self, key: str) -> str | None:
        try:
            return await self._store.get(key)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Persistence: read of {} failed: {!r}", key, exc)
            return None

    async def _set(self, key: str, value: str) -> bool:
        try:
            await self._store.set(key, value)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Persistence: write of {} failed: {!r}", key, exc)
            return False
        return True

    async def _delete(self, key: str) -> bool:
        try:
            await self._store.delete(key)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Persistence: delete of {} failed: {!r}", key, exc)
            return False
        return True

    # -- Workspace metadata ----------------------------------------------------

    async def load_workspace(self) -> Workspace:
        """Read, sanitize and return the stored workspace.

        Absent or undecodable metadata yields a fresh default workspace, for
        which the legacy single-document payload is migrated forward.
        """
        raw = await self._get(self.workspace_key)
        workspace = decode_workspace(raw)
        if workspace is not None:
            logger.debug("Persistence: loaded workspace ({} items)", len(workspace.items_by_id))
            return workspace

        workspace = create_default_workspace()
        logger.info("Persistence: no usable workspace record, created default (board={})", workspace.active_board_id)
        await self.migrate_legacy_payload(workspace)
        return workspace

    async def save_workspace(self, workspace: Workspace) -> bool:
        """Write the full workspace record.  Writes are applied in call order."""
        try:
            data = workspace.to_json()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Persistence: workspace could not be serialized: {!r}", exc)
            return False
        async with self._workspace_lock:
            return await self._set(self.workspace_key, data)

    def dispatch_save_workspace(self, workspace: Workspace) -> asyncio.Task[bool]:
        """Fire-and-forget ``save_workspace``; awaited by ``flush()``."""
        return self._dispatch(self.save_workspace(workspace))

    # -- Board payloads --------------------------------------------------------

    async def load_payload(self, board_id: str) -> str | None:
        """Return the board's payload, or ``None`` when absent or malformed."""
        key = self.board_key(board_id)
        raw = await self._get(key)
        if raw is None:
            return None
        if not is_valid_payload(raw):
            logger.warning("Persistence: payload {} is malformed, ignoring it", key)
            return None
        return raw

    async def save_payload(self, board_id: str, payload: str) -> bool:
        """Write a payload immediately, bypassing the debounce window."""
        return await self._set(self.board_key(board_id), payload)

    def writer(self, board_id: str, wait: float | None = None) -> DebouncedWriter:
        """Return the debounced writer for ``board_id`` (one per key and window)."""
        key = self.board_key(board_id)
        wait = self.save_debounce if wait is None else wait
        writer = self._writers.get((key, wait))
        if writer is None:
            writer = DebouncedWriter(lambda payload: self._store.set(key, payload), wait, key=key)
            self._writers[(key, wait)] = writer
        return writer

    def _writers_for(self, board_id: str) -> list[DebouncedWriter]:
        key = self.board_key(board_id)
        return [writer for (writer_key, _), writer in self._writers.items() if writer_key == key]

    def pending_payload(self, board_id: str) -> str | None:
        """Latest unwritten payload for the board, if a writer holds one."""
        for writer in self._writers_for(board_id):
            if writer.pending is not None:
                return writer.pending
        return None

    def notify_payload_change(self, board_id: str, payload: str) -> None:
        """Schedule a debounced save of the board's latest payload."""
        self.writer(board_id).notify(payload)

    async def close_writer(self, board_id: str) -> None:
        """Flush-then-cancel the board's writers (context switch)."""
        key = self.board_key(board_id)
        for writer in self._writers_for(board_id):
            await writer.aclose()
            self._writers.pop((key, writer.wait), None)

    async def remove_payloads(self, board_ids: Iterable[str]) -> None:
        """Delete payloads of deleted boards.  Idempotent, best-effort.

        Pending debounced writes for those boards are discarded, not flushed,
        so a late write cannot recreate a removed payload.
        """
        for board_id in board_ids:
            key = self.board_key(board_id)
            for writer in self._writers_for(board_id):
                await writer.discard()
                self._writers.pop((key, writer.wait), None)
            if await self._delete(key):
                logger.debug("Persistence: removed payload {}", key)

    def dispatch_close_writer(self, board_id: str) -> asyncio.Task[None]:
        """Fire-and-forget ``close_writer``; awaited by ``flush()``."""
        return self._dispatch(self.close_writer(board_id))

    def dispatch_remove_payloads(self, board_ids: Iterable[str]) -> asyncio.Task[None]:
        """Fire-and-forget ``remove_payloads``; awaited by ``flush()``."""
        return self._dispatch(self.remove_payloads(list(board_ids)))

    # -- Legacy migration ------------------------------------------------------

    async def migrate_legacy_payload(self, workspace: Workspace) -> bool:
        """Copy the legacy single-document payload to the active board.

        Skipped when the board already has a payload, so running it twice is
        harmless.  Returns ``True`` when a payload was copied.
        """
        target_key = self.board_key(workspace.active_board_id)
        try:
            if await self._store.get(target_key) is not None:
                return False
        except Exception as exc:  # noqa: BLE001
            logger.warning("Persistence: legacy migration skipped, {} unreadable: {!r}", target_key, exc)
            return False

        legacy = await self._get(self.legacy_payload_key)
        if not is_valid_payload(legacy):
            return False

        copied = await self._set(target_key, legacy)  # type: ignore[arg-type]
        if copied:
            logger.info("Persistence: migrated legacy payload {} -> {}", self.legacy_payload_key, target_key)
        return copied

    # -- Task dispatch & lifecycle ---------------------------------------------

    def _dispatch(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    async def flush(self) -> None:
        """Wait for dispatched work and write every pending payload now."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        for writer in list(self._writers.values()):
            await writer.flush()

    async def aclose(self) -> None:
        """Flush everything, then cancel all writers."""
        await self.flush()
        for writer in list(self._writers.values()):
            await writer.aclose()
        self._writers.clear()
        logger.debug("Persistence: coordinator closed")
