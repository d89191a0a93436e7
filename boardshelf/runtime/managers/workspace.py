"""Workspace controller -- owns the current workspace and forwards it to persistence.

The controller is the single owner of the in-memory ``Workspace``.  Each
intent from the tree widget maps 1:1 onto a pure mutation; the resulting
workspace replaces the current one immediately and is handed to the
persistence coordinator as fire-and-forget background work.  Nothing here
waits for durability: the in-memory state is the source of truth.

Until ``hydrate()`` has loaded the stored workspace every intent is a no-op,
so a request racing startup cannot overwrite the persisted tree with the
placeholder default.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger

from boardshelf.runtime.models.enums import ItemKind
from boardshelf.runtime.models.workspace import Board
from boardshelf.runtime.workspace import mutations
from boardshelf.runtime.workspace.model import create_default_workspace, new_id

if TYPE_CHECKING:
    from collections.abc import Iterable

    from boardshelf.runtime.models.workspace import Workspace
    from boardshelf.runtime.persistence.coordinator import PersistenceCoordinator


class UnknownBoardError(LookupError):
    """Raised when a payload operation names an id that is not a board."""


class WorkspaceController:
    """Applies intents to the current workspace and schedules persistence."""

    def __init__(self, coordinator: PersistenceCoordinator) -> None:
        self._coordinator = coordinator
        self._workspace = create_default_workspace()
        self._ready = False

    # -- State -----------------------------------------------------------------

    @property
    def workspace(self) -> Workspace:
        return self._workspace

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def active_board(self) -> Board:
        return self._workspace.active_board

    @property
    def coordinator(self) -> PersistenceCoordinator:
        return self._coordinator

    async def hydrate(self) -> Workspace:
        """Load the stored workspace once; later calls return the current one."""
        if self._ready:
            return self._workspace
        self._workspace = await self._coordinator.load_workspace()
        self._ready = True
        logger.info(
            "Workspace hydrated ({} items, active board {})",
            len(self._workspace.items_by_id),
            self._workspace.active_board_id,
        )
        return self._workspace

    def _commit(self, next_workspace: Workspace) -> Workspace:
        previous = self._workspace
        if next_workspace == previous:
            return previous

        self._workspace = next_workspace
        self._coordinator.dispatch_save_workspace(next_workspace)

        # Leaving a board: persist its last edit.  Deleted boards are handled
        # by payload cleanup instead.
        previous_active = previous.active_board_id
        if next_workspace.active_board_id != previous_active and previous_active in next_workspace.items_by_id:
            self._coordinator.dispatch_close_writer(previous_active)
        return next_workspace

    # -- Intents ---------------------------------------------------------------

    def create_board(self, parent_id: Any = None) -> str | None:
        """Create a board under ``parent_id`` (root if invalid) and open it."""
        if not self._ready:
            return None
        result = mutations.create_board(self._workspace, parent_id, board_id=new_id(ItemKind.BOARD))
        self._commit(result.workspace)
        return result.created_id

    def create_folder(self, parent_id: Any = None) -> str | None:
        if not self._ready:
            return None
        result = mutations.create_folder(self._workspace, parent_id, folder_id=new_id(ItemKind.FOLDER))
        self._commit(result.workspace)
        return result.created_id

    def rename(self, item_id: str, name: Any) -> Workspace:
        if not self._ready:
            return self._workspace
        return self._commit(mutations.rename_item(self._workspace, item_id, name))

    def delete(self, item_id: str) -> tuple[str, ...]:
        """Delete an item recursively and schedule payload cleanup.

        Returns the ids of the deleted boards.
        """
        if not self._ready:
            return ()
        result = mutations.delete_item(self._workspace, item_id)
        self._commit(result.workspace)
        if result.deleted_board_ids:
            self._coordinator.dispatch_remove_payloads(result.deleted_board_ids)
        return result.deleted_board_ids

    def reorder_children(self, folder_id: str, child_ids: Iterable[Any]) -> Workspace:
        if not self._ready:
            return self._workspace
        return self._commit(mutations.reorder_children(self._workspace, folder_id, child_ids))

    def move_items(self, item_ids: Iterable[Any], target_folder_id: str, index: int | None = None) -> Workspace:
        if not self._ready:
            return self._workspace
        return self._commit(mutations.move_items(self._workspace, item_ids, target_folder_id, index))

    def set_active(self, board_id: str) -> Workspace:
        if not self._ready:
            return self._workspace
        return self._commit(mutations.set_active_board(self._workspace, board_id))

    def set_expanded(self, folder_ids: Iterable[Any]) -> Workspace:
        if not self._ready:
            return self._workspace
        return self._commit(mutations.set_expanded_folders(self._workspace, folder_ids))

    # -- Payloads --------------------------------------------------------------

    def _require_board(self, board_id: str) -> None:
        if not isinstance(self._workspace.items_by_id.get(board_id), Board):
            raise UnknownBoardError(board_id)

    async def get_payload(self, board_id: str) -> str | None:
        """Latest payload of a board: unwritten edits first, then the store.

        Raises ``UnknownBoardError`` if ``board_id`` is not a board.
        """
        self._require_board(board_id)
        pending = self._coordinator.pending_payload(board_id)
        if pending is not None:
            return pending
        return await self._coordinator.load_payload(board_id)

    def update_payload(self, board_id: str, payload: str) -> None:
        """Record a payload change; written after the debounce window."""
        self._require_board(board_id)
        self._coordinator.notify_payload_change(board_id, payload)

    async def flush_payload(self, board_id: str) -> None:
        self._require_board(board_id)
        await self._coordinator.close_writer(board_id)

    # -- Lifecycle -------------------------------------------------------------

    async def flush(self) -> None:
        """Wait for all scheduled persistence work and pending payload writes."""
        await self._coordinator.flush()

    async def aclose(self) -> None:
        await self._coordinator.aclose()
