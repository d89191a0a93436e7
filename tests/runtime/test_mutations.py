"""Unit tests for the workspace mutation engine."""

from __future__ import annotations

import random

import pytest

from boardshelf.runtime.models.workspace import Board, Folder, Workspace
from boardshelf.runtime.workspace import mutations
from boardshelf.runtime.workspace.model import create_default_workspace, workspace_violations


def _ws(*items: Board | Folder, active: str, expanded: tuple[str, ...] = ("root",)) -> Workspace:
    return Workspace(
        items_by_id={item.id: item for item in items},
        active_board_id=active,
        expanded_folder_ids=expanded,
    )


@pytest.fixture
def tree() -> Workspace:
    """root -> [A -> [B -> [C], D], E]; C active."""
    return _ws(
        Folder(id="root", name="Boards", children_ids=("A", "E")),
        Folder(id="A", name="A", children_ids=("B", "D")),
        Folder(id="B", name="B", children_ids=("C",)),
        Board(id="C", name="C"),
        Board(id="D", name="D"),
        Board(id="E", name="E"),
        active="C",
        expanded=("root", "A", "B"),
    )


# -- Create --------------------------------------------------------------------


def test_create_board_under_root_becomes_active() -> None:
    ws = create_default_workspace("b1")
    result = mutations.create_board(ws, None, board_id="b2")

    assert result.created_id == "b2"
    assert result.workspace.root.children_ids == ("b1", "b2")
    assert result.workspace.active_board_id == "b2"
    assert result.workspace.items_by_id["b2"].name == "Untitled 2"
    assert workspace_violations(result.workspace) == []
    # Input untouched.
    assert ws.root.children_ids == ("b1",)


def test_create_board_with_generated_id() -> None:
    result = mutations.create_board(create_default_workspace())
    assert result.created_id.startswith("board-")
    assert result.workspace.active_board_id == result.created_id


def test_create_board_name_skips_taken_suffixes() -> None:
    ws = _ws(
        Folder(id="root", name="Boards", children_ids=("a", "b")),
        Board(id="a", name="Untitled"),
        Board(id="b", name="Untitled 2"),
        active="a",
    )
    result = mutations.create_board(ws, "root", board_id="c")
    assert result.workspace.items_by_id["c"].name == "Untitled 3"


def test_create_under_board_or_unknown_parent_falls_back_to_root(tree: Workspace) -> None:
    for parent in ("C", "ghost", 12):
        result = mutations.create_folder(tree, parent, folder_id="F")
        assert result.workspace.root.children_ids == ("A", "E", "F")


def test_create_folder_does_not_change_active(tree: Workspace) -> None:
    result = mutations.create_folder(tree, "B", folder_id="F")
    ws = result.workspace
    assert ws.items_by_id["B"].children_ids == ("C", "F")
    assert ws.items_by_id["F"] == Folder(id="F", name="Folder")
    assert ws.active_board_id == "C"
    assert workspace_violations(ws) == []


# -- Rename --------------------------------------------------------------------


def test_rename_trims_name(tree: Workspace) -> None:
    ws = mutations.rename_item(tree, "D", "  Sketch  ")
    assert ws.items_by_id["D"].name == "Sketch"


@pytest.mark.parametrize("name", ["", "   ", None, 5])
def test_rename_invalid_name_is_noop(tree: Workspace, name: object) -> None:
    assert mutations.rename_item(tree, "D", name) is tree


def test_rename_unknown_and_root_are_noops(tree: Workspace) -> None:
    assert mutations.rename_item(tree, "ghost", "x") is tree
    assert mutations.rename_item(tree, "root", "My boards") is tree


def test_rename_is_idempotent(tree: Workspace) -> None:
    once = mutations.rename_item(tree, "A", "Projects")
    assert mutations.rename_item(once, "A", "Projects") is once


# -- Delete --------------------------------------------------------------------


def test_delete_folder_cascades(tree: Workspace) -> None:
    result = mutations.delete_item(tree, "A")
    ws = result.workspace

    assert set(ws.items_by_id) == {"root", "E"}
    assert ws.root.children_ids == ("E",)
    assert set(result.deleted_board_ids) == {"C", "D"}
    assert ws.active_board_id == "E"
    assert ws.expanded_folder_ids == ("root",)
    assert workspace_violations(ws) == []


def test_delete_reports_only_boards() -> None:
    """root -> A -> [B, C -> [D]]: deleting A removes all four, reports B and D."""
    ws = _ws(
        Folder(id="root", name="Boards", children_ids=("A", "keep")),
        Folder(id="A", name="A", children_ids=("B", "C")),
        Board(id="B", name="B"),
        Folder(id="C", name="C", children_ids=("D",)),
        Board(id="D", name="D"),
        Board(id="keep", name="keep"),
        active="keep",
    )
    result = mutations.delete_item(ws, "A")
    assert set(result.workspace.items_by_id) == {"root", "keep"}
    assert result.deleted_board_ids == ("B", "D")


def test_delete_inactive_board_keeps_active(tree: Workspace) -> None:
    result = mutations.delete_item(tree, "D")
    assert result.deleted_board_ids == ("D",)
    assert result.workspace.active_board_id == "C"
    assert result.workspace.items_by_id["A"].children_ids == ("B",)


def test_delete_last_board_creates_fallback() -> None:
    ws = create_default_workspace("only")
    result = mutations.delete_item(ws, "only")
    next_ws = result.workspace

    assert result.deleted_board_ids == ("only",)
    assert "only" not in next_ws.items_by_id
    fallback = next_ws.active_board
    assert fallback.id != "only"
    assert fallback.name == "Untitled"
    assert next_ws.root.children_ids == (fallback.id,)
    assert workspace_violations(next_ws) == []


def test_delete_root_unknown_and_twice_are_noops(tree: Workspace) -> None:
    assert mutations.delete_item(tree, "root").workspace is tree
    assert mutations.delete_item(tree, "ghost").workspace is tree

    once = mutations.delete_item(tree, "D").workspace
    twice = mutations.delete_item(once, "D")
    assert twice.workspace is once
    assert twice.deleted_board_ids == ()


# -- Reorder / move ------------------------------------------------------------


def test_reorder_normalizes_candidates() -> None:
    ws = _ws(
        Folder(id="root", name="Boards", children_ids=("f", "x")),
        Folder(id="f", name="f"),
        Board(id="x", name="x"),
        active="x",
    )
    next_ws = mutations.reorder_children(ws, "f", ["x", "x", "root", "ghost-id"])

    assert next_ws.items_by_id["f"].children_ids == ("x",)
    assert next_ws.root.children_ids == ("f",)
    assert workspace_violations(next_ws) == []


def test_reorder_same_order_returns_input(tree: Workspace) -> None:
    assert mutations.reorder_children(tree, "A", ["B", "D"]) is tree


def test_reorder_root_keeps_dropped_children(tree: Workspace) -> None:
    next_ws = mutations.reorder_children(tree, "root", ["E"])
    assert next_ws.root.children_ids == ("E", "A")


def test_reorder_reattaches_dropped_children_to_root(tree: Workspace) -> None:
    next_ws = mutations.reorder_children(tree, "A", ["D"])
    assert next_ws.items_by_id["A"].children_ids == ("D",)
    assert next_ws.root.children_ids == ("A", "E", "B")
    assert workspace_violations(next_ws) == []


def test_reorder_rejects_self_and_ancestors(tree: Workspace) -> None:
    # Dropping A (an ancestor) or B itself into B would create a cycle.
    next_ws = mutations.reorder_children(tree, "B", ["C", "A", "B", "root"])
    assert next_ws is tree


def test_reorder_non_folder_is_noop(tree: Workspace) -> None:
    assert mutations.reorder_children(tree, "C", ["D"]) is tree
    assert mutations.reorder_children(tree, "ghost", ["D"]) is tree


def test_move_items_to_index(tree: Workspace) -> None:
    next_ws = mutations.move_items(tree, ["E", "C"], "A", index=1)
    assert next_ws.items_by_id["A"].children_ids == ("B", "E", "C", "D")
    assert next_ws.items_by_id["B"].children_ids == ()
    assert next_ws.root.children_ids == ("A",)
    assert workspace_violations(next_ws) == []


def test_move_items_appends_by_default(tree: Workspace) -> None:
    next_ws = mutations.move_items(tree, ["D"], "root")
    assert next_ws.root.children_ids == ("A", "E", "D")
    assert next_ws.items_by_id["A"].children_ids == ("B",)


def test_move_folder_into_own_descendant_is_noop(tree: Workspace) -> None:
    assert mutations.move_items(tree, ["A"], "B") is tree


# -- Active / expanded ---------------------------------------------------------


def test_set_active_board(tree: Workspace) -> None:
    assert mutations.set_active_board(tree, "E").active_board_id == "E"
    assert mutations.set_active_board(tree, "A") is tree
    assert mutations.set_active_board(tree, "ghost") is tree
    assert mutations.set_active_board(tree, "C") is tree


def test_set_expanded_folders(tree: Workspace) -> None:
    next_ws = mutations.set_expanded_folders(tree, ["B", "C", "ghost", "B"])
    assert next_ws.expanded_folder_ids == ("B",)
    assert mutations.set_expanded_folders(tree, ["root", "A", "B"]) is tree


# -- Randomised invariant check ------------------------------------------------


def test_random_operation_sequences_preserve_invariants() -> None:
    rng = random.Random(1234)
    ws = create_default_workspace()

    for step in range(600):
        ids = list(ws.items_by_id)
        pick = rng.choice(ids)
        op = rng.randrange(8)
        if op == 0:
            ws = mutations.create_board(ws, pick).workspace
        elif op == 1:
            ws = mutations.create_folder(ws, pick).workspace
        elif op == 2:
            ws = mutations.rename_item(ws, pick, rng.choice(["", " x ", "Untitled", "y"]))
        elif op == 3 and rng.random() < 0.5:
            ws = mutations.delete_item(ws, pick).workspace
        elif op == 4:
            ws = mutations.reorder_children(ws, pick, rng.sample([*ids, "ghost", "root"], k=min(4, len(ids))))
        elif op == 5:
            ws = mutations.move_items(ws, rng.sample(ids, k=min(2, len(ids))), pick, rng.randrange(4))
        elif op == 6:
            ws = mutations.set_active_board(ws, pick)
        else:
            ws = mutations.set_expanded_folders(ws, rng.sample(ids, k=min(3, len(ids))))

        assert workspace_violations(ws) == [], f"step {step}, op {op}"
