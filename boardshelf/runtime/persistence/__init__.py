"""Persistence of workspace metadata and board payloads."""

from boardshelf.runtime.persistence.coordinator import PersistenceCoordinator
from boardshelf.runtime.persistence.debounce import DebouncedWriter

__all__ = ["DebouncedWriter", "PersistenceCoordinator"]
