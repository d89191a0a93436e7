"""API request / response schemas for the workspace intent endpoints.

Each request schema carries the arguments of one tree-widget intent; the
router forwards them unchanged to ``WorkspaceController``.  Field names are
camelCase on the wire to match the persisted workspace record.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from boardshelf.runtime.models.workspace import Workspace


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateItemRequest(_ApiModel):
    """Create a board or folder.  Unknown / non-folder parents fall back to root."""

    parent_id: str | None = None


class RenameItemRequest(_ApiModel):
    name: str


class ReorderChildrenRequest(_ApiModel):
    children_ids: list[str] = Field(default_factory=list)


class MoveItemsRequest(_ApiModel):
    item_ids: list[str] = Field(default_factory=list)
    target_folder_id: str
    index: int | None = Field(default=None, ge=0, description="Insert position; appended when omitted.")


class SetActiveBoardRequest(_ApiModel):
    board_id: str


class SetExpandedFoldersRequest(_ApiModel):
    folder_ids: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class CreateItemResponse(_ApiModel):
    created_id: str
    workspace: Workspace


class DeleteItemResponse(_ApiModel):
    deleted_board_ids: list[str] = Field(default_factory=list)
    workspace: Workspace
