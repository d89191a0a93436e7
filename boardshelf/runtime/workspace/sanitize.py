"""Sanitization / reconciliation of persisted workspace records.

``sanitize_workspace`` turns arbitrary decoded JSON -- absent, truncated,
hand-edited or written by an older release -- into a workspace that satisfies
every tree invariant.  It is total: malformed input degrades to defaults, it
never raises and it terminates on cyclic folder references.

Reconciliation order:

1. keep well-formed board / folder entries (names default when missing);
2. make sure the root folder exists;
3. claim children breadth-first from root so each item has one parent
   (the first claim wins);
4. attach whatever is still unclaimed -- orphans and members of cycles that
   are unreachable from root -- to root, then claim their subtrees;
5. guarantee at least one board;
6. pick a valid active board;
7. normalize the expanded-folder set.
"""

from __future__ import annotations

import json
from collections import deque
from collections.abc import Mapping
from typing import Any

from loguru import logger

from boardshelf.runtime.models.enums import ItemKind
from boardshelf.runtime.models.workspace import (
    DEFAULT_BOARD_NAME,
    DEFAULT_FOLDER_NAME,
    ROOT_FOLDER_ID,
    ROOT_FOLDER_NAME,
    Board,
    Folder,
    Workspace,
)
from boardshelf.runtime.workspace.model import (
    board_ids,
    new_id,
    next_available_name,
    normalize_children,
    normalize_expanded,
)


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _coerce_name(value: Any, default: str) -> str:
    return value.strip() if _is_non_empty_str(value) else default


def _filter_items(raw_items: Any) -> tuple[dict[str, dict[str, Any]], dict[str, list[Any]]]:
    """Step 1: keep recognised items; returns (items, raw children per folder)."""
    items: dict[str, dict[str, Any]] = {}
    raw_children: dict[str, list[Any]] = {}
    if not isinstance(raw_items, Mapping):
        return items, raw_children

    for item_id, raw in raw_items.items():
        if not _is_non_empty_str(item_id) or not isinstance(raw, Mapping):
            continue
        kind = raw.get("type")
        if kind == ItemKind.BOARD:
            items[item_id] = {"type": ItemKind.BOARD, "name": _coerce_name(raw.get("name"), DEFAULT_BOARD_NAME)}
        elif kind == ItemKind.FOLDER:
            items[item_id] = {"type": ItemKind.FOLDER, "name": _coerce_name(raw.get("name"), DEFAULT_FOLDER_NAME)}
            children = raw.get("childrenIds")
            raw_children[item_id] = list(children) if isinstance(children, list) else []
    return items, raw_children


def _claim_subtree(
    start_id: str,
    items: dict[str, dict[str, Any]],
    raw_children: dict[str, list[Any]],
    children: dict[str, list[str]],
    attached: set[str],
    root_id: str,
) -> None:
    """Walk breadth-first from ``start_id``, giving each folder the unclaimed children it lists."""
    queue = deque([start_id])
    while queue:
        folder_id = queue.popleft()
        if items[folder_id]["type"] != ItemKind.FOLDER:
            continue
        claimed: list[str] = []
        for child_id in normalize_children(raw_children.get(folder_id, []), items, root_id):
            if child_id in attached:
                continue
            attached.add(child_id)
            claimed.append(child_id)
            queue.append(child_id)
        children[folder_id].extend(claimed)


def _reconcile(raw: Any) -> Workspace:
    raw_ws = raw if isinstance(raw, Mapping) else {}
    items, raw_children = _filter_items(raw_ws.get("itemsById"))

    # Step 2: root.  A custom root id survives only if it names a folder.
    root_id = raw_ws.get("rootId")
    if not _is_non_empty_str(root_id) or items.get(root_id, {}).get("type") != ItemKind.FOLDER:
        root_id = ROOT_FOLDER_ID
    if items.get(root_id, {}).get("type") != ItemKind.FOLDER:
        items[root_id] = {"type": ItemKind.FOLDER, "name": ROOT_FOLDER_NAME}
        raw_children[root_id] = []

    # Steps 3 & 4: single-parent claiming, then orphans / cycles go to root.
    children: dict[str, list[str]] = {
        item_id: [] for item_id, item in items.items() if item["type"] == ItemKind.FOLDER
    }
    attached = {root_id}
    _claim_subtree(root_id, items, raw_children, children, attached, root_id)
    for item_id in list(items):
        if item_id in attached:
            continue
        attached.add(item_id)
        children[root_id].append(item_id)
        _claim_subtree(item_id, items, raw_children, children, attached, root_id)

    built: dict[str, Board | Folder] = {}
    for item_id, item in items.items():
        if item["type"] == ItemKind.FOLDER:
            built[item_id] = Folder(id=item_id, name=item["name"], children_ids=tuple(children[item_id]))
        else:
            built[item_id] = Board(id=item_id, name=item["name"])

    # Step 5: at least one board.
    boards = board_ids(built)
    if not boards:
        fallback_id = new_id(ItemKind.BOARD)
        built[fallback_id] = Board(id=fallback_id, name=next_available_name(built, DEFAULT_BOARD_NAME))
        root = built[root_id]
        built[root_id] = root.model_copy(update={"children_ids": (*root.children_ids, fallback_id)})  # type: ignore[union-attr]
        boards = [fallback_id]

    # Step 6: active board.
    active_board_id = raw_ws.get("activeBoardId")
    if not isinstance(active_board_id, str) or active_board_id not in boards:
        active_board_id = boards[0]

    # Step 7: expansion.
    raw_expanded = raw_ws.get("expandedFolderIds")
    expanded = normalize_expanded(built, raw_expanded if isinstance(raw_expanded, list) else [])

    return Workspace(
        root_id=root_id,
        items_by_id=built,
        active_board_id=active_board_id,
        expanded_folder_ids=expanded,
    )


def sanitize_workspace(raw: Any) -> Workspace:
    """Convert arbitrary decoded data into a valid workspace.  Never raises."""
    try:
        return _reconcile(raw)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Workspace record could not be reconciled, starting empty: {!r}", exc)
        return _reconcile(None)


def decode_workspace(raw: str | bytes | None) -> Workspace | None:
    """Decode and sanitize a persisted record.

    Returns ``None`` when there is nothing usable to start from (absent or
    undecodable), so the caller can create and migrate a fresh workspace.
    """
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except (ValueError, TypeError) as exc:
        logger.warning("Workspace record is not valid JSON, ignoring it: {}", exc)
        return None
    if not isinstance(data, Mapping):
        logger.warning("Workspace record is not a JSON object (got {}), ignoring it", type(data).__name__)
        return None
    return sanitize_workspace(data)


