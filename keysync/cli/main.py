"""Main CLI entry point for keysync."""

import logging

import typer
from rich.console import Console

from keysync.cli.commands.diff import diff_command
from keysync.cli.commands.keys import Side, keys_command
from keysync.cli.commands.run import run_command
from keysync.cli.commands.serve import serve_command
from keysync.cli.commands.sync import sync_command

app = typer.Typer(
    name="keysync",
    help="keysync - keep validator client remote keys in sync with a remote signer",
    no_args_is_help=True,
    add_completion=False,
)
console = Console()


@app.callback()
def configure(
    verbose: int = typer.Option(0, "-v", "--verbose", count=True, help="Log more (-v info, -vv debug)"),
) -> None:
    """Configure logging for every command."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(name)s %(levelname)s %(message)s")


@app.command("sync")
def sync(
    dry_run: bool = typer.Option(False, "-n", "--dry-run", help="Reconcile without mutating"),
    config_path: str = typer.Option(None, "-c", "--config", help="YAML config file"),
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Run one reconciliation cycle and report the outcome."""
    sync_command(dry_run, config_path, json_flag)


@app.command("diff")
def diff(
    config_path: str = typer.Option(None, "-c", "--config", help="YAML config file"),
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show keys a cycle would add and remove."""
    diff_command(config_path, json_flag)


@app.command("keys")
def keys(
    side: Side = typer.Option(Side.CLIENT, "-s", "--side", help="Inventory to list"),
    config_path: str = typer.Option(None, "-c", "--config", help="YAML config file"),
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List keys held by the custodian or the client."""
    keys_command(side, config_path, json_flag)


@app.command("run")
def run(
    config_path: str = typer.Option(None, "-c", "--config", help="YAML config file"),
) -> None:
    """Reconcile on a fixed interval until interrupted."""
    run_command(config_path)


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8080, "-p", "--port", help="Bind port"),
    config_path: str = typer.Option(None, "-c", "--config", help="YAML config file"),
) -> None:
    """Run the scheduler behind an HTTP status surface."""
    serve_command(host, port, config_path)


def main() -> None:
    """Entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped[/yellow]")
        raise typer.Exit(130)
