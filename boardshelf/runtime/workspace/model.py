"""Pure helpers over the workspace item arena.

Everything here is side-effect free and never raises on malformed ids: the
helpers are shared by the mutation engine and by the sanitization pass, which
both have to cope with ids that do not exist or point at the wrong kind of
item.
"""

from __future__ import annotations

import random
import time
import uuid
from collections import deque
from typing import TYPE_CHECKING, Any

from boardshelf.runtime.models.enums import ItemKind
from boardshelf.runtime.models.workspace import (
    DEFAULT_BOARD_NAME,
    ROOT_FOLDER_ID,
    ROOT_FOLDER_NAME,
    Board,
    Folder,
    Workspace,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from boardshelf.runtime.models.workspace import WorkspaceItem


# -- Ids & names ---------------------------------------------------------------


def _random_suffix() -> str:
    try:
        return str(uuid.uuid4())
    except NotImplementedError:
        # No OS random source available.
        return f"{time.time_ns()}-{random.getrandbits(64):x}"  # noqa: S311


def new_id(kind: ItemKind | str) -> str:
    """Return a globally unique item id namespaced by kind (``board-...``)."""
    return f"{ItemKind(kind)}-{_random_suffix()}"


def next_available_name(items_by_id: Mapping[str, WorkspaceItem], base_name: str) -> str:
    """Return ``base_name`` or the first free ``"{base_name} {n}"`` (n >= 2).

    Names are compared case-insensitively after trimming.
    """
    base_name = base_name.strip()
    taken = {item.name.strip().lower() for item in items_by_id.values()}
    if base_name.lower() not in taken:
        return base_name

    suffix = 2
    while f"{base_name} {suffix}".lower() in taken:
        suffix += 1
    return f"{base_name} {suffix}"


# -- Type guards ---------------------------------------------------------------


def is_board(item: object) -> bool:
    return isinstance(item, Board)


def is_folder(item: object) -> bool:
    return isinstance(item, Folder)


def board_ids(items_by_id: Mapping[str, WorkspaceItem]) -> list[str]:
    """All board ids in map order."""
    return [item_id for item_id, item in items_by_id.items() if isinstance(item, Board)]


# -- Tree helpers --------------------------------------------------------------


def resolve_parent(items_by_id: Mapping[str, WorkspaceItem], root_id: str, requested_parent_id: Any) -> str:
    """Return the requested parent when it names a folder, otherwise root."""
    if isinstance(requested_parent_id, str) and isinstance(items_by_id.get(requested_parent_id), Folder):
        return requested_parent_id
    return root_id


def normalize_children(
    candidate_ids: Iterable[Any],
    items_by_id: Mapping[str, WorkspaceItem],
    root_id: str,
) -> list[str]:
    """Filter a proposed children list.

    Drops unknown ids, the root id and non-string entries, and removes
    duplicates keeping the first occurrence.
    """
    seen: set[str] = set()
    children: list[str] = []
    for child_id in candidate_ids:
        if not isinstance(child_id, str) or child_id == root_id or child_id in seen:
            continue
        if child_id not in items_by_id:
            continue
        seen.add(child_id)
        children.append(child_id)
    return children


def collect_descendants(items_by_id: Mapping[str, WorkspaceItem], folder_id: str) -> list[str]:
    """Breadth-first list of every id below ``folder_id`` (exclusive).

    Tracks visited ids so corrupt, cyclic input still terminates.
    """
    descendants: list[str] = []
    visited = {folder_id}
    queue = deque([folder_id])

    while queue:
        item = items_by_id.get(queue.popleft())
        if not isinstance(item, Folder):
            continue
        for child_id in item.children_ids:
            if child_id in visited:
                continue
            visited.add(child_id)
            descendants.append(child_id)
            queue.append(child_id)

    return descendants


def find_parent(items_by_id: Mapping[str, WorkspaceItem], item_id: str) -> str | None:
    """Return the id of the first folder listing ``item_id`` as a child."""
    for folder_id, item in items_by_id.items():
        if isinstance(item, Folder) and item_id in item.children_ids:
            return folder_id
    return None


def ancestors(items_by_id: Mapping[str, WorkspaceItem], item_id: str) -> list[str]:
    """Parent chain of ``item_id``, nearest first.  Stops on cycles."""
    chain: list[str] = []
    seen = {item_id}
    parent_id = find_parent(items_by_id, item_id)
    while parent_id is not None and parent_id not in seen:
        chain.append(parent_id)
        seen.add(parent_id)
        parent_id = find_parent(items_by_id, parent_id)
    return chain


def normalize_expanded(items_by_id: Mapping[str, WorkspaceItem], candidate_ids: Iterable[Any]) -> tuple[str, ...]:
    """Keep existing folder ids only, de-duplicated, first occurrence wins."""
    seen: set[str] = set()
    expanded: list[str] = []
    for folder_id in candidate_ids:
        if not isinstance(folder_id, str) or folder_id in seen:
            continue
        if not isinstance(items_by_id.get(folder_id), Folder):
            continue
        seen.add(folder_id)
        expanded.append(folder_id)
    return tuple(expanded)


# -- Construction --------------------------------------------------------------


def create_default_workspace(board_id: str | None = None) -> Workspace:
    """Brand-new workspace: the root folder holding a single board."""
    board_id = board_id or new_id(ItemKind.BOARD)
    return Workspace(
        root_id=ROOT_FOLDER_ID,
        items_by_id={
            ROOT_FOLDER_ID: Folder(id=ROOT_FOLDER_ID, name=ROOT_FOLDER_NAME, children_ids=(board_id,)),
            board_id: Board(id=board_id, name=DEFAULT_BOARD_NAME),
        },
        active_board_id=board_id,
        expanded_folder_ids=(ROOT_FOLDER_ID,),
    )


# -- Invariant checking --------------------------------------------------------


def workspace_violations(ws: Workspace) -> list[str]:  # noqa: C901
    """Describe every broken tree invariant; empty for a valid workspace."""
    problems: list[str] = []
    items = ws.items_by_id

    for item_id, item in items.items():
        if item.id != item_id:
            problems.append(f"item stored under {item_id!r} declares id {item.id!r}")

    root = items.get(ws.root_id)
    if not isinstance(root, Folder):
        problems.append(f"root {ws.root_id!r} is missing or not a folder")

    parents: dict[str, list[str]] = {}
    for folder_id, item in items.items():
        if not isinstance(item, Folder):
            continue
        if len(set(item.children_ids)) != len(item.children_ids):
            problems.append(f"folder {folder_id!r} lists a child more than once")
        for child_id in item.children_ids:
            if child_id == ws.root_id:
                problems.append(f"root listed as a child of {folder_id!r}")
            elif child_id not in items:
                problems.append(f"folder {folder_id!r} references missing item {child_id!r}")
            else:
                parents.setdefault(child_id, []).append(folder_id)

    for item_id in items:
        if item_id == ws.root_id:
            continue
        owners = parents.get(item_id, [])
        if not owners:
            problems.append(f"item {item_id!r} has no parent")
        elif len(owners) > 1:
            problems.append(f"item {item_id!r} has several parents: {owners}")

    if isinstance(root, Folder):
        reachable = set(collect_descendants(items, ws.root_id))
        unreachable = [item_id for item_id in items if item_id != ws.root_id and item_id not in reachable]
        if unreachable:
            problems.append(f"items not reachable from root: {unreachable}")

    if not board_ids(items):
        problems.append("workspace has no board")
    if not isinstance(items.get(ws.active_board_id), Board):
        problems.append(f"active board {ws.active_board_id!r} is not an existing board")

    for folder_id in ws.expanded_folder_ids:
        if not isinstance(items.get(folder_id), Folder):
            problems.append(f"expanded id {folder_id!r} is not an existing folder")
    if len(set(ws.expanded_folder_ids)) != len(ws.expanded_folder_ids):
        problems.append("expanded folder ids contain duplicates")

    return problems
