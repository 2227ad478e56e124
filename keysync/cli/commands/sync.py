"""Run a single reconciliation cycle."""

import asyncio

import typer
from rich.console import Console

from keysync.cli.output import format_error, format_report, json_output
from keysync.cli.utils import load_cli_config
from keysync.config import ConfigError, SyncConfig
from keysync.sync.builder import open_cycle
from keysync.sync.cycle import CycleReport
from keysync.sync.types import CycleState

console = Console()


async def _run_once(config: SyncConfig, dry_run: bool) -> CycleReport:
    """Open a cycle and run it to completion."""
    async with open_cycle(config, dry_run=True if dry_run else None) as cycle:
        return await cycle.run()


def sync_command(
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Reconcile without mutating"),
    config_path: str = typer.Option(None, "--config", "-c", help="YAML config file"),
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Fetch both inventories, reconcile and apply the delta once."""
    try:
        config = load_cli_config(config_path)
    except ConfigError as e:
        format_error(console, str(e), hint="Set KEYSYNC_ENV, WEB3SIGNER_API_URL and ETH2_CLIENT_API_URL")
        raise typer.Exit(code=2)

    try:
        report = asyncio.run(_run_once(config, dry_run))
    except Exception as e:
        format_error(console, f"Cycle failed: {e}")
        raise typer.Exit(code=1)

    if json_flag:
        json_output(console, report.summary())
    else:
        format_report(console, report)

    if report.state == CycleState.ABORTED:
        raise typer.Exit(code=3)
    if report.failed:
        raise typer.Exit(code=4)
