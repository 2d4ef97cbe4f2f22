"""CLI for the dbtree command."""

from pathlib import Path
from typing import Optional

import typer

from .config import AppConfig


app = typer.Typer(
    help="Database navigation drawer for the terminal",
    add_completion=False,
)


def _load(config: Optional[Path]) -> AppConfig:
    try:
        return AppConfig.load(config)
    except ValueError as exc:
        typer.echo(f"Invalid config {config}: {exc}", err=True)
        raise typer.Exit(code=2)


@app.command()
def run(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON config file"),
    backend_url: Optional[str] = typer.Option(None, "--backend-url", help="Backend base URL"),
    no_help: bool = typer.Option(False, "--no-help", help="Hide the help section"),
):
    """
    Open the drawer app.

    Examples:
        # Use the defaults (backend on localhost:8766)
        dbtree run

        # Custom config and backend
        dbtree run --config ~/.config/dbtree.json --backend-url http://db-proxy:9000
    """
    from .app import DrawerApp

    app_config = _load(config)
    if backend_url:
        app_config.backend_url = backend_url
    if no_help:
        app_config.drawer.disable_help = True

    DrawerApp(config=app_config).run()


@app.command("mock-backend")
def mock_backend(
    port: int = typer.Option(8766, "--port", "-p", help="Port to run the mock backend on"),
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
):
    """Serve the in-memory mock backend."""
    import uvicorn
    from .backend.mock_server import app as mock_app

    typer.echo("Starting dbtree mock backend")
    typer.echo(f"   Host: {host}")
    typer.echo(f"   Port: {port}")

    uvicorn.run(mock_app, host=host, port=port)


@app.command()
def keys(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON config file"),
):
    """Print the effective key bindings."""
    drawer_config = _load(config).drawer
    for action in sorted(drawer_config.mappings):
        mapping = drawer_config.mappings[action]
        typer.echo(f"{action} = {mapping.key} ({mapping.mode})")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
