"""Workspace data model.

A workspace is a tree of folders and boards stored as a flat arena: items are
kept in ``items_by_id`` and parent links are derived from each folder's
``children_ids``.  Models are frozen; mutations build new values (see
``boardshelf.runtime.workspace.mutations``).

The JSON wire format uses camelCase keys::

    {"rootId": "root", "itemsById": {...}, "activeBoardId": "...", "expandedFolderIds": [...]}
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ROOT_FOLDER_ID = "root"
ROOT_FOLDER_NAME = "Boards"
DEFAULT_BOARD_NAME = "Untitled"
DEFAULT_FOLDER_NAME = "Folder"


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Board(_WireModel):
    """Leaf item; owns exactly one document payload keyed by its id."""

    id: str
    name: str
    type: Literal["board"] = "board"


class Folder(_WireModel):
    """Internal item with an ordered, duplicate-free list of child ids."""

    id: str
    name: str
    type: Literal["folder"] = "folder"
    children_ids: tuple[str, ...] = ()


WorkspaceItem = Annotated[Board | Folder, Field(discriminator="type")]


class Workspace(_WireModel):
    """Aggregate root: the item arena plus active-board and expansion state."""

    root_id: str = ROOT_FOLDER_ID
    items_by_id: dict[str, WorkspaceItem]
    active_board_id: str
    expanded_folder_ids: tuple[str, ...] = ()

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    @property
    def root(self) -> Folder:
        return self.items_by_id[self.root_id]  # type: ignore[return-value]

    @property
    def active_board(self) -> Board:
        return self.items_by_id[self.active_board_id]  # type: ignore[return-value]
