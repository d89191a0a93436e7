"""Data models for the workspace runtime."""

from boardshelf.runtime.models.api import (
    CreateItemRequest,
    CreateItemResponse,
    DeleteItemResponse,
    MoveItemsRequest,
    RenameItemRequest,
    ReorderChildrenRequest,
    SetActiveBoardRequest,
    SetExpandedFoldersRequest,
)
from boardshelf.runtime.models.enums import ItemKind
from boardshelf.runtime.models.workspace import (
    DEFAULT_BOARD_NAME,
    DEFAULT_FOLDER_NAME,
    ROOT_FOLDER_ID,
    ROOT_FOLDER_NAME,
    Board,
    Folder,
    Workspace,
    WorkspaceItem,
)

__all__ = [
    "DEFAULT_BOARD_NAME",
    "DEFAULT_FOLDER_NAME",
    "ROOT_FOLDER_ID",
    "ROOT_FOLDER_NAME",
    "Board",
    # API schemas
    "CreateItemRequest",
    "CreateItemResponse",
    "DeleteItemResponse",
    "Folder",
    # Enums
    "ItemKind",
    "MoveItemsRequest",
    "RenameItemRequest",
    "ReorderChildrenRequest",
    "SetActiveBoardRequest",
    "SetExpandedFoldersRequest",
    "Workspace",
    "WorkspaceItem",
]
