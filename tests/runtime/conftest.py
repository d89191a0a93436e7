"""Shared fixtures for workspace runtime tests."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient

from boardshelf.runtime.app import app
from boardshelf.runtime.managers.workspace import WorkspaceController
from boardshelf.runtime.persistence.coordinator import PersistenceCoordinator
from boardshelf.runtime.store.memory import MemoryKeyValueStore


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def coordinator(memory_store: MemoryKeyValueStore) -> PersistenceCoordinator:
    """Coordinator over an in-memory store with a short debounce window."""
    return PersistenceCoordinator(memory_store, save_debounce=0.05)


@pytest.fixture
async def controller(coordinator: PersistenceCoordinator) -> AsyncIterator[WorkspaceController]:
    """Hydrated controller; flushed and closed after the test."""
    ctrl = WorkspaceController(coordinator)
    await ctrl.hydrate()
    yield ctrl
    await ctrl.aclose()


@pytest.fixture
async def client(controller: WorkspaceController, memory_store: MemoryKeyValueStore) -> AsyncIterator[AsyncClient]:
    """Async HTTP client wired to the app with a hydrated in-memory controller.

    The app lifespan does NOT run under ``ASGITransport``, so state fields
    are pre-set here.
    """
    app.state.store = memory_store
    app.state.controller = controller

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.state.controller = None
    app.state.store = None
