"""Redis key-value store.

Values are stored as plain Redis strings under an optional namespace
prefix::

    {prefix}:{key}

Uses ``redis.asyncio``; the first call pings the server so a missing or
unreachable instance surfaces as ``StoreNotReadyError`` (and is retried on the
next call) instead of failing deep inside a command.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import redis.asyncio as aioredis

from boardshelf.runtime.store.base import ReadyGate

if TYPE_CHECKING:
    from redis.asyncio import Redis


class RedisKeyValueStore:
    """Redis implementation of the KeyValueStore protocol."""

    def __init__(self, client: Redis, prefix: str | None = None) -> None:
        self._client = client
        self._key_prefix = f"{prefix}:" if prefix else ""
        self._gate = ReadyGate()

    @classmethod
    def from_url(cls, url: str, prefix: str | None = None) -> RedisKeyValueStore:
        client = aioredis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=5,
            retry_on_timeout=True,
        )
        return cls(client, prefix=prefix)

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    async def ensure_ready(self) -> None:
        await self._gate.open(self._client.ping)

    async def get(self, key: str) -> str | None:
        await self.ensure_ready()
        value = await self._client.get(self._key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        await self.ensure_ready()
        await self._client.set(self._key(key), value)

    async def delete(self, key: str) -> None:
        await self.ensure_ready()
        # DEL on a missing key returns 0, not an error.
        await self._client.delete(self._key(key))

    async def aclose(self) -> None:
        await self._client.aclose()
