from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.routing import APIRouter
from loguru import logger

from boardshelf.runtime.log import setup_logging
from boardshelf.runtime.managers.workspace import WorkspaceController
from boardshelf.runtime.persistence.coordinator import PersistenceCoordinator
from boardshelf.runtime.settings import get_settings
from boardshelf.runtime.store.factory import create_store


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # -- Startup ---------------------------------------------------------------
    settings = get_settings()
    setup_logging(settings.log_level)

    logger.info("Boardshelf starting (host={}, port={})", settings.host, settings.port)
    prefix_info = f", prefix={settings.data_prefix}" if settings.data_prefix else ""
    logger.info("Key-value store: {}{} (debounce={}ms)", settings.kv_store, prefix_info, settings.save_debounce_ms)

    store = create_store(settings)
    coordinator = PersistenceCoordinator.from_settings(settings, store)
    controller = WorkspaceController(coordinator)
    _app.state.store = store
    _app.state.controller = controller

    await controller.hydrate()

    yield

    # -- Shutdown --------------------------------------------------------------
    logger.info("Boardshelf shutting down (pending tasks={})", coordinator.pending_tasks)

    # Flush-then-cancel so the latest edits reach the store.
    await controller.aclose()

    aclose = getattr(store, "aclose", None)
    if aclose is not None:
        await aclose()
        logger.info("Key-value store: closed")


app = FastAPI(title="Boardshelf", lifespan=lifespan)

# ---------------------------------------------------------------------------
# API router -- all backend endpoints live under /api
# ---------------------------------------------------------------------------
api = APIRouter(prefix="/api")


@api.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


from boardshelf.runtime.routers.boards import router as boards_router  # noqa: E402
from boardshelf.runtime.routers.workspace import router as workspace_router  # noqa: E402

api.include_router(workspace_router)
api.include_router(boards_router)

app.include_router(api)
