"""In-process key-value store.

Nothing survives a restart; used for tests and ``BOARDSHELF_KV_STORE=memory``.
"""

from __future__ import annotations


class MemoryKeyValueStore:
    """Dict-backed implementation of the KeyValueStore protocol."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def ensure_ready(self) -> None:
        return None

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Copy of the current contents (test helper)."""
        return dict(self._data)
