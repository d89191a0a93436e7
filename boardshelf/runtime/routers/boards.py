"""Board payload endpoints.

Payloads are opaque JSON documents owned by the drawing canvas; they are
passed through untouched.  Saves are debounced -- ``/flush`` forces the
pending write, e.g. before the client switches boards.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, Response, status

from boardshelf.runtime.deps import Controller
from boardshelf.runtime.managers.workspace import UnknownBoardError
from boardshelf.runtime.persistence.coordinator import is_valid_payload

router = APIRouter(prefix="/boards", tags=["boards"])


def _board_not_found(board_id: str) -> HTTPException:
    return HTTPException(status.HTTP_404_NOT_FOUND, detail=f"Board '{board_id}' not found.")


@router.get("/{board_id}/payload")
async def get_payload(board_id: str, controller: Controller) -> Response:
    """Return the board's latest payload verbatim."""
    try:
        payload = await controller.get_payload(board_id)
    except UnknownBoardError:
        raise _board_not_found(board_id) from None
    if payload is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"Board '{board_id}' has no payload.")
    return Response(content=payload, media_type="application/json")


@router.post("/{board_id}/payload", status_code=status.HTTP_202_ACCEPTED)
async def update_payload(board_id: str, request: Request, controller: Controller) -> None:
    """Accept a new payload verbatim; it is written after the debounce window.

    The body must be a JSON object (422 otherwise); it is stored byte for byte.
    """
    try:
        payload: str | None = (await request.body()).decode("utf-8")
    except UnicodeDecodeError:
        payload = None
    if not is_valid_payload(payload):
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Payload must be a JSON object.")
    try:
        controller.update_payload(board_id, payload)  # type: ignore[arg-type]
    except UnknownBoardError:
        raise _board_not_found(board_id) from None


@router.post("/{board_id}/flush", status_code=status.HTTP_204_NO_CONTENT)
async def flush_payload(board_id: str, controller: Controller) -> None:
    """Write the board's pending payload now."""
    try:
        await controller.flush_payload(board_id)
    except UnknownBoardError:
        raise _board_not_found(board_id) from None
