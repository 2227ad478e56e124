"""Serve the HTTP status surface with the scheduler running in the background."""

import typer
import uvicorn
from rich.console import Console

from keysync.cli.output import format_error
from keysync.cli.utils import load_cli_config
from keysync.config import ConfigError
from keysync.server.app import create_app

console = Console()


def serve_command(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8080, "--port", "-p", help="Bind port"),
    config_path: str = typer.Option(None, "--config", "-c", help="YAML config file"),
) -> None:
    """Run the scheduler and expose /health and /sync over HTTP."""
    try:
        config = load_cli_config(config_path)
    except ConfigError as e:
        format_error(console, str(e), hint="Set KEYSYNC_ENV, WEB3SIGNER_API_URL and ETH2_CLIENT_API_URL")
        raise typer.Exit(code=2)

    uvicorn.run(create_app(config), host=host, port=port, log_level="info")
