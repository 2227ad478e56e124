"""Run the reconciliation loop in the foreground."""

import asyncio
import logging

import typer
from rich.console import Console

from keysync.cli.output import format_error
from keysync.cli.utils import load_cli_config
from keysync.config import ConfigError
from keysync.sync.builder import cycle_factory
from keysync.sync.scheduler import SyncScheduler

console = Console()
logger = logging.getLogger(__name__)


def run_command(
    config_path: str = typer.Option(None, "--config", "-c", help="YAML config file"),
) -> None:
    """Reconcile on a fixed interval until interrupted."""
    try:
        config = load_cli_config(config_path)
    except ConfigError as e:
        format_error(console, str(e), hint="Set KEYSYNC_ENV, WEB3SIGNER_API_URL and ETH2_CLIENT_API_URL")
        raise typer.Exit(code=2)

    root = logging.getLogger()
    if root.level > logging.INFO:
        root.setLevel(logging.INFO)
    if config.dry_run:
        logger.info("Running in development mode: deltas are logged, never applied")
    scheduler = SyncScheduler(cycle_factory(config), interval=config.interval_seconds)
    asyncio.run(scheduler.run_forever())
