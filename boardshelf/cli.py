import asyncio
import json

import click


@click.group()
def main() -> None:
    """Boardshelf - folders and boards over a key-value store."""


@main.command()
@click.option("--host", default=None, help="Bind host (default: from BOARDSHELF_HOST or 0.0.0.0).")
@click.option("--port", default=None, type=int, help="Bind port (default: from BOARDSHELF_PORT or 8000).")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload for development.")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the workspace API server."""
    import uvicorn

    from boardshelf.runtime.settings import BoardshelfSettings

    settings = BoardshelfSettings()

    uvicorn.run(
        "boardshelf.runtime.app:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level="warning",  # uvicorn's own logging is intercepted by loguru
    )


# ---------------------------------------------------------------------------
# Offline workspace inspection
# ---------------------------------------------------------------------------


def _coordinator():
    """Build a coordinator over the configured store, with logging set up."""
    from boardshelf.runtime.log import setup_logging
    from boardshelf.runtime.persistence.coordinator import PersistenceCoordinator
    from boardshelf.runtime.settings import get_settings
    from boardshelf.runtime.store.factory import create_store

    settings = get_settings()
    setup_logging(settings.log_level)
    return PersistenceCoordinator.from_settings(settings, create_store(settings))


def _render_tree(workspace, item_id: str, depth: int, lines: list[str]) -> None:
    from boardshelf.runtime.models.workspace import Folder

    item = workspace.items_by_id[item_id]
    marker = " *" if item_id == workspace.active_board_id else ""
    icon = "+" if isinstance(item, Folder) else "-"
    lines.append(f"{'  ' * depth}{icon} {item.name}{marker}  [{item_id}]")
    if isinstance(item, Folder):
        for child_id in item.children_ids:
            _render_tree(workspace, child_id, depth + 1, lines)


@main.command()
def tree() -> None:
    """Print the stored workspace as an indented tree (* marks the active board)."""
    workspace = asyncio.run(_coordinator().load_workspace())
    lines: list[str] = []
    _render_tree(workspace, workspace.root_id, 0, lines)
    click.echo("\n".join(lines))


async def _check() -> list[str]:
    from pydantic import ValidationError

    from boardshelf.runtime.models.workspace import Workspace
    from boardshelf.runtime.workspace.model import workspace_violations

    coordinator = _coordinator()
    raw = await coordinator.store.get(coordinator.workspace_key)
    if raw is None:
        return ["no workspace record stored"]
    try:
        workspace = Workspace.model_validate_json(raw)
    except ValidationError as exc:
        return [f"record does not parse: {error['loc']}: {error['msg']}" for error in exc.errors()]
    return workspace_violations(workspace)


@main.command()
def check() -> None:
    """Report invariant violations in the stored workspace record."""
    problems = asyncio.run(_check())
    if not problems:
        click.echo("Workspace record is valid.")
        return
    for problem in problems:
        click.echo(f"- {problem}")
    raise SystemExit(1)


async def _repair() -> tuple[bool, int]:
    coordinator = _coordinator()
    workspace = await coordinator.load_workspace()
    saved = await coordinator.save_workspace(workspace)
    return saved, len(workspace.items_by_id)


@main.command()
def repair() -> None:
    """Sanitize the stored workspace and write it back."""
    saved, item_count = asyncio.run(_repair())
    if not saved:
        click.echo("Could not write the repaired workspace (see log).", err=True)
        raise SystemExit(1)
    click.echo(f"Workspace repaired ({item_count} items).")


@main.command()
@click.argument("board_id")
@click.option("--pretty", is_flag=True, default=False, help="Indent the JSON document.")
def payload(board_id: str, pretty: bool) -> None:
    """Print the stored payload of BOARD_ID."""
    raw = asyncio.run(_coordinator().load_payload(board_id))
    if raw is None:
        click.echo(f"Board '{board_id}' has no payload.", err=True)
        raise SystemExit(1)
    click.echo(json.dumps(json.loads(raw), indent=2) if pretty else raw)


if __name__ == "__main__":
    main()
