"""Shared enumerations used across the runtime."""

from __future__ import annotations

from enum import StrEnum


class ItemKind(StrEnum):
    """Discriminator of a workspace item; also the id namespace prefix."""

    BOARD = "board"
    FOLDER = "folder"

