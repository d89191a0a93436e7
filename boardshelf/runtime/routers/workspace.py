"""Workspace intent endpoints (RPC-style).

All write operations use POST; reads use GET.  Each endpoint maps 1:1 onto a
``WorkspaceController`` intent.  Invalid intents (unknown ids, blank names,
non-folder targets) are not errors: the unchanged workspace is returned.
"""

from __future__ import annotations

from fastapi import APIRouter, status

from boardshelf.runtime.deps import Controller
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
from boardshelf.runtime.models.workspace import Workspace

router = APIRouter(prefix="/workspace", tags=["workspace"])


@router.get("/get", response_model=Workspace)
async def get_workspace(controller: Controller) -> Workspace:
    """Return the full tree, active board and expansion state."""
    return controller.workspace


@router.post("/boards/create", response_model=CreateItemResponse, status_code=status.HTTP_201_CREATED)
async def create_board(body: CreateItemRequest, controller: Controller) -> CreateItemResponse:
    """Create a board and make it active."""
    created_id = controller.create_board(body.parent_id)
    return CreateItemResponse(created_id=created_id or "", workspace=controller.workspace)


@router.post("/folders/create", response_model=CreateItemResponse, status_code=status.HTTP_201_CREATED)
async def create_folder(body: CreateItemRequest, controller: Controller) -> CreateItemResponse:
    created_id = controller.create_folder(body.parent_id)
    return CreateItemResponse(created_id=created_id or "", workspace=controller.workspace)


@router.post("/items/{item_id}/rename", response_model=Workspace)
async def rename_item(item_id: str, body: RenameItemRequest, controller: Controller) -> Workspace:
    return controller.rename(item_id, body.name)


@router.post("/items/{item_id}/delete", response_model=DeleteItemResponse)
async def delete_item(item_id: str, controller: Controller) -> DeleteItemResponse:
    """Delete an item and everything below it."""
    deleted = controller.delete(item_id)
    return DeleteItemResponse(deleted_board_ids=list(deleted), workspace=controller.workspace)


@router.post("/folders/{folder_id}/reorder", response_model=Workspace)
async def reorder_children(folder_id: str, body: ReorderChildrenRequest, controller: Controller) -> Workspace:
    return controller.reorder_children(folder_id, body.children_ids)


@router.post("/items/move", response_model=Workspace)
async def move_items(body: MoveItemsRequest, controller: Controller) -> Workspace:
    return controller.move_items(body.item_ids, body.target_folder_id, body.index)


@router.post("/active", response_model=Workspace)
async def set_active_board(body: SetActiveBoardRequest, controller: Controller) -> Workspace:
    return controller.set_active(body.board_id)


@router.post("/expanded", response_model=Workspace)
async def set_expanded_folders(body: SetExpandedFoldersRequest, controller: Controller) -> Workspace:
    return controller.set_expanded(body.folder_ids)
