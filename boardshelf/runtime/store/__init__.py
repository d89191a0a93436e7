"""Key-value store implementations for workspace persistence."""

from boardshelf.runtime.store.base import KeyValueStore, StoreNotReadyError
from boardshelf.runtime.store.factory import create_store
from boardshelf.runtime.store.local import LocalKeyValueStore
from boardshelf.runtime.store.memory import MemoryKeyValueStore

__all__ = ["KeyValueStore", "LocalKeyValueStore", "MemoryKeyValueStore", "StoreNotReadyError", "create_store"]
