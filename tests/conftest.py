"""Shared test fixtures: a Redis testcontainer and settings isolation.

Integration tests use a real Redis container managed by
testcontainers-python.  The container is session-scoped (started once per
test run); each test function gets a flushed client.

Requires Docker to be available.  Tests needing the container should be
marked with ``@pytest.mark.integration``.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, Iterator

import pytest
import redis.asyncio as aioredis
from testcontainers.redis import RedisContainer

from boardshelf.runtime.settings import _get_settings_cached


def _set_env(key: str, value: str) -> None:
    """Set an env var and invalidate the settings cache."""
    os.environ[key] = value
    _get_settings_cached.cache_clear()


# ---------------------------------------------------------------------------
# Session-scoped: container (started once, shared across all tests)
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def redis_container() -> Iterator[RedisContainer]:
    """Start a Redis 7 container for the test session."""
    with RedisContainer(image="redis:7") as r:
        yield r


@pytest.fixture(scope="session")
def redis_url(redis_container: RedisContainer) -> str:
    """Redis connection URL."""
    host = redis_container.get_container_host_ip()
    port = redis_container.get_exposed_port(6379)
    url = f"redis://{host}:{port}/0"
    _set_env("BOARDSHELF_REDIS_URL", url)
    return url


# ---------------------------------------------------------------------------
# Function-scoped: Redis client with flush
# ---------------------------------------------------------------------------


@pytest.fixture
async def redis_client(redis_url: str) -> AsyncIterator[aioredis.Redis]:
    """Async Redis client; database flushed after each test."""
    client = aioredis.from_url(redis_url, decode_responses=True)
    yield client
    await client.flushdb()
    await client.aclose()


# ---------------------------------------------------------------------------
# Settings isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def settings_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[pytest.MonkeyPatch]:
    """Point settings at a temporary data root; cache cleared before and after."""
    monkeypatch.setenv("BOARDSHELF_KV_STORE", "local")
    monkeypatch.setenv("BOARDSHELF_DATA_ROOT", str(tmp_path))
    _get_settings_cached.cache_clear()
    yield monkeypatch
    _get_settings_cached.cache_clear()
