"""List the keys held by one side."""

import asyncio
from enum import Enum

import typer
from rich.console import Console

from keysync.cli.output import format_error, format_table, json_output
from keysync.cli.utils import load_cli_config
from keysync.client.exceptions import FetchError
from keysync.config import ConfigError, SyncConfig
from keysync.sync.builder import open_cycle
from keysync.sync.inventory import KeyInventory

console = Console()


class Side(str, Enum):
    CUSTODIAN = "custodian"
    CLIENT = "client"


async def _fetch(config: SyncConfig, side: Side) -> KeyInventory:
    async with open_cycle(config, dry_run=True) as cycle:
        if side == Side.CUSTODIAN:
            return await cycle.fetch_custodian()
        return await cycle.fetch_client()


def keys_command(
    side: Side = typer.Option(Side.CLIENT, "--side", "-s", help="Inventory to list"),
    config_path: str = typer.Option(None, "--config", "-c", help="YAML config file"),
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List the keys currently known to the custodian or the client."""
    try:
        config = load_cli_config(config_path)
    except ConfigError as e:
        format_error(console, str(e), hint="Set KEYSYNC_ENV, WEB3SIGNER_API_URL and ETH2_CLIENT_API_URL")
        raise typer.Exit(code=2)

    try:
        inventory = asyncio.run(_fetch(config, side))
    except FetchError as e:
        format_error(console, str(e))
        raise typer.Exit(code=3)

    records = inventory.records()
    if json_flag:
        json_output(console, {
            "side": side.value,
            "count": len(records),
            "keys": [{"pubkey": r.identifier, "url": r.source_url, "readonly": r.readonly} for r in records],
        })
        return

    if not records:
        console.print(f"[dim]No keys on {side.value}[/dim]")
        return
    format_table(
        console,
        f"{side.value.capitalize()} keys ({len(records)})",
        ["Pubkey", "URL", "Readonly"],
        [(r.identifier, r.source_url or "", "Yes" if r.readonly else "No") for r in records],
    )
