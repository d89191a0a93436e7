"""FastAPI dependency injection for the workspace controller.

Usage in route handlers::

    @router.post("/things")
    async def rename(controller: Controller, body: RenameItemRequest) -> Workspace:
        ...

The dependency raises HTTP 503 until the lifespan has created and hydrated
the controller.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from boardshelf.runtime.managers.workspace import WorkspaceController


async def get_controller(request: Request) -> WorkspaceController:
    """Return the process-wide workspace controller."""
    controller: WorkspaceController | None = getattr(request.app.state, "controller", None)
    if controller is None or not controller.is_ready:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Workspace not loaded yet.",
        )
    return controller


# -- Annotated type aliases for concise route signatures ---------------------

Controller = Annotated[WorkspaceController, Depends(get_controller)]
"""Annotated dependency: the hydrated workspace controller."""
