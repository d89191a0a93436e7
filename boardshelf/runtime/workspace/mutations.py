"""Workspace mutation engine.

Every operation is a pure function ``(Workspace, args) -> Workspace`` (or a
small result object when the caller needs the created / deleted ids).  Invalid
requests -- unknown ids, empty names, non-folder targets -- are not errors:
they return the input workspace unchanged, so callers can forward tree-widget
intents without pre-validating them.

Single-parenting is enforced here rather than trusted from callers: an item
placed into one folder is detached from any other, and a folder can never be
moved below itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from boardshelf.runtime.models.enums import ItemKind
from boardshelf.runtime.models.workspace import (
    DEFAULT_BOARD_NAME,
    DEFAULT_FOLDER_NAME,
    Board,
    Folder,
    Workspace,
)
from boardshelf.runtime.workspace.model import (
    ancestors,
    board_ids,
    collect_descendants,
    is_board,
    new_id,
    next_available_name,
    normalize_children,
    normalize_expanded,
    resolve_parent,
)

if TYPE_CHECKING:
    from collections.abc import Iterable


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CreateResult:
    """Outcome of a create operation."""

    workspace: Workspace
    created_id: str


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of a delete; ``deleted_board_ids`` drives payload cleanup."""

    workspace: Workspace
    deleted_board_ids: tuple[str, ...] = field(default_factory=tuple)


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


def _insert_item(ws: Workspace, parent_folder_id: Any, item: Board | Folder) -> Workspace:
    parent_id = resolve_parent(ws.items_by_id, ws.root_id, parent_folder_id)
    parent: Folder = ws.items_by_id[parent_id]  # type: ignore[assignment]

    items = dict(ws.items_by_id)
    items[item.id] = item
    items[parent_id] = parent.model_copy(update={"children_ids": (*parent.children_ids, item.id)})

    update: dict[str, Any] = {"items_by_id": items}
    if isinstance(item, Board):
        update["active_board_id"] = item.id
    return ws.model_copy(update=update)


def create_board(ws: Workspace, parent_folder_id: Any = None, *, board_id: str | None = None) -> CreateResult:
    """Add an ``Untitled`` board under the parent folder and make it active."""
    board_id = board_id or new_id(ItemKind.BOARD)
    board = Board(id=board_id, name=next_available_name(ws.items_by_id, DEFAULT_BOARD_NAME))
    return CreateResult(_insert_item(ws, parent_folder_id, board), board_id)


def create_folder(ws: Workspace, parent_folder_id: Any = None, *, folder_id: str | None = None) -> CreateResult:
    """Add an empty ``Folder`` under the parent folder."""
    folder_id = folder_id or new_id(ItemKind.FOLDER)
    folder = Folder(id=folder_id, name=next_available_name(ws.items_by_id, DEFAULT_FOLDER_NAME))
    return CreateResult(_insert_item(ws, parent_folder_id, folder), folder_id)


# ---------------------------------------------------------------------------
# Rename
# ---------------------------------------------------------------------------


def rename_item(ws: Workspace, item_id: str, raw_name: Any) -> Workspace:
    """Rename a board or folder; whitespace-only names are ignored."""
    if not isinstance(raw_name, str) or item_id == ws.root_id:
        return ws
    name = raw_name.strip()
    item = ws.items_by_id.get(item_id)
    if not name or item is None or item.name == name:
        return ws

    items = dict(ws.items_by_id)
    items[item_id] = item.model_copy(update={"name": name})
    return ws.model_copy(update={"items_by_id": items})


# ---------------------------------------------------------------------------
# Reorder / move
# ---------------------------------------------------------------------------


def reorder_children(ws: Workspace, folder_id: str, candidate_child_ids: Iterable[Any]) -> Workspace:
    """Replace a folder's children with a normalized version of the candidates.

    Accepted children are detached from any other folder.  The folder itself
    and its ancestors are rejected.  Children dropped from the list are
    re-attached under root so they never become orphans.
    """
    target = ws.items_by_id.get(folder_id)
    if not isinstance(target, Folder):
        return ws

    forbidden = {folder_id, *ancestors(ws.items_by_id, folder_id)}
    children = [
        child_id
        for child_id in normalize_children(candidate_child_ids, ws.items_by_id, ws.root_id)
        if child_id not in forbidden
    ]
    accepted = set(children)
    dropped = [child_id for child_id in target.children_ids if child_id not in accepted]

    if folder_id == ws.root_id:
        children.extend(dropped)
        dropped = []

    items = dict(ws.items_by_id)
    for other_id, other in ws.items_by_id.items():
        if other_id == folder_id or not isinstance(other, Folder):
            continue
        kept = tuple(child_id for child_id in other.children_ids if child_id not in accepted)
        if other_id == ws.root_id and dropped:
            kept = (*kept, *dropped)
        if kept != other.children_ids:
            items[other_id] = other.model_copy(update={"children_ids": kept})

    items[folder_id] = target.model_copy(update={"children_ids": tuple(children)})
    next_ws = ws.model_copy(update={"items_by_id": items})
    return ws if next_ws == ws else next_ws


def move_items(ws: Workspace, item_ids: Iterable[Any], target_folder_id: str, index: int | None = None) -> Workspace:
    """Move items under ``target_folder_id``, at ``index`` or at the end."""
    target = ws.items_by_id.get(target_folder_id)
    if not isinstance(target, Folder):
        return ws

    moving = normalize_children(item_ids, ws.items_by_id, ws.root_id)
    remaining = [child_id for child_id in target.children_ids if child_id not in moving]
    position = len(remaining) if index is None else max(0, min(index, len(remaining)))
    return reorder_children(ws, target_folder_id, [*remaining[:position], *moving, *remaining[position:]])


# ---------------------------------------------------------------------------
# Active board / expansion
# ---------------------------------------------------------------------------


def set_active_board(ws: Workspace, board_id: str) -> Workspace:
    """Switch the active board; no-op for unknown ids, folders and the current board."""
    if ws.active_board_id == board_id or not is_board(ws.items_by_id.get(board_id)):
        return ws
    return ws.model_copy(update={"active_board_id": board_id})


def set_expanded_folders(ws: Workspace, candidate_ids: Iterable[Any]) -> Workspace:
    """Replace the expanded-folder set with its existing-folder subset."""
    expanded = normalize_expanded(ws.items_by_id, candidate_ids)
    if expanded == ws.expanded_folder_ids:
        return ws
    return ws.model_copy(update={"expanded_folder_ids": expanded})


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------


def delete_item(ws: Workspace, item_id: str) -> DeleteResult:
    """Delete an item and, for folders, everything below it.

    If the active board disappears the first remaining board becomes active;
    if no board remains a fresh ``Untitled`` board is created under root.
    """
    if item_id == ws.root_id or item_id not in ws.items_by_id:
        return DeleteResult(ws)

    doomed = (item_id, *collect_descendants(ws.items_by_id, item_id))
    to_delete = set(doomed)
    deleted_board_ids = tuple(deleted_id for deleted_id in doomed if is_board(ws.items_by_id.get(deleted_id)))

    items: dict[str, Board | Folder] = {}
    for other_id, other in ws.items_by_id.items():
        if other_id in to_delete:
            continue
        if isinstance(other, Folder) and any(child_id in to_delete for child_id in other.children_ids):
            other = other.model_copy(
                update={"children_ids": tuple(c for c in other.children_ids if c not in to_delete)}
            )
        items[other_id] = other

    active_board_id = ws.active_board_id
    if not is_board(items.get(active_board_id)):
        remaining = board_ids(items)
        if remaining:
            active_board_id = remaining[0]
        else:
            active_board_id = new_id(ItemKind.BOARD)
            items[active_board_id] = Board(id=active_board_id, name=next_available_name(items, DEFAULT_BOARD_NAME))
            root: Folder = items[ws.root_id]  # type: ignore[assignment]
            items[ws.root_id] = root.model_copy(update={"children_ids": (*root.children_ids, active_board_id)})

    next_ws = ws.model_copy(
        update={
            "items_by_id": items,
            "active_board_id": active_board_id,
            "expanded_folder_ids": normalize_expanded(items, ws.expanded_folder_ids),
        }
    )
    return DeleteResult(next_ws, deleted_board_ids)
