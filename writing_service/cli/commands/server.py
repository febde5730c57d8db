"""Server management commands."""

import click
import uvicorn

from writing_service.cli.utils import info, warning
from writing_service.core.settings import get_app_settings

APP_PATH = "writing_service.app.main:app"


@click.group(name="server")
def server() -> None:
    """Server management commands."""


@server.command()
@click.option(
    "--host",
    default=None,
    help="Host to bind (default: from settings)",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Port to bind (default: from settings)",
)
@click.option(
    "--reload/--no-reload",
    default=True,
    help="Enable auto-reload on code changes",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["critical", "error", "warning", "info", "debug", "trace"]),
    help="Uvicorn log level",
)
def dev(host: str | None, port: int | None, reload: bool, log_level: str) -> None:
    """Run development server with auto-reload."""
    settings = get_app_settings()
    host = host or settings.host
    port = port or settings.port

    if settings.is_production:
        warning("Running the development server with APP_ENVIRONMENT=production")

    info(f"Server will run at: http://{host}:{port}")
    info(f"Environment: {settings.environment}")
    info(f"Auto-reload: {'enabled' if reload else 'disabled'}")

    uvicorn.run(APP_PATH, host=host, port=port, reload=reload, log_level=log_level)
