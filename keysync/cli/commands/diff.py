"""Show the pending add/remove delta without changing anything."""

import asyncio

import typer
from rich.console import Console

from keysync.cli.output import format_error, format_success, format_table, format_warning, json_output
from keysync.cli.utils import load_cli_config
from keysync.client.exceptions import FetchError
from keysync.config import ConfigError, SyncConfig
from keysync.sync.builder import open_cycle
from keysync.sync.inventory import KeyInventory
from keysync.sync.reconciler import ReconciliationDelta

console = Console()


async def _diff(config: SyncConfig) -> tuple[KeyInventory, KeyInventory, ReconciliationDelta]:
    """Fetch both inventories and reconcile them."""
    async with open_cycle(config, dry_run=True) as cycle:
        custodian, client = await asyncio.gather(cycle.fetch_custodian(), cycle.fetch_client())
        return custodian, client, cycle.reconcile(custodian, client)


def diff_command(
    config_path: str = typer.Option(None, "--config", "-c", help="YAML config file"),
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show which keys a cycle would add to and remove from the client."""
    try:
        config = load_cli_config(config_path)
    except ConfigError as e:
        format_error(console, str(e), hint="Set KEYSYNC_ENV, WEB3SIGNER_API_URL and ETH2_CLIENT_API_URL")
        raise typer.Exit(code=2)

    try:
        custodian, client, delta = asyncio.run(_diff(config))
    except FetchError as e:
        format_error(console, str(e))
        raise typer.Exit(code=3)

    if json_flag:
        json_output(console, {
            "fetched": {"custodian": len(custodian), "client": len(client)},
            "to_add": delta.to_add,
            "to_remove": delta.to_remove,
        })
        return

    console.print(f"[cyan]Custodian keys:[/cyan] {len(custodian)}")
    console.print(f"[cyan]Client keys:[/cyan]    {len(client)}")
    if delta.is_empty:
        format_success(console, "Client is in sync with the custodian")
        return
    if not custodian and client:
        format_warning(console, "Custodian lists no keys; a cycle would remove every client key")
    rows = [("add", k) for k in sorted(delta.to_add)] + [("remove", k) for k in sorted(delta.to_remove)]
    format_table(console, "Pending changes", ["Action", "Pubkey"], rows)
