"""Rich terminal output formatters."""

from typing import Any, Sequence

from rich.console import Console
from rich.table import Table

from keysync.sync.cycle import CycleReport
from keysync.sync.types import CycleState


def format_success(console: Console, message: str) -> None:
    """Display success message in green."""
    console.print(f"[green]{message}[/green]")


def format_error(console: Console, message: str, hint: str | None = None) -> None:
    """Display error message in red with optional hint."""
    console.print(f"[red]Error:[/red] {message}")
    if hint:
        console.print(f"[yellow]Hint:[/yellow] {hint}")


def format_warning(console: Console, message: str) -> None:
    """Display warning message in yellow."""
    console.print(f"[yellow]Warning:[/yellow] {message}")


def format_table(
    console: Console,
    title: str,
    columns: Sequence[str],
    rows: Sequence[Sequence[str]],
) -> None:
    """Display data as a formatted table."""
    table = Table(title=title)
    for col in columns:
        table.add_column(col)
    for row in rows:
        table.add_row(*row)
    console.print(table)


def format_key_value(console: Console, data: dict[str, Any]) -> None:
    """Display key-value pairs."""
    max_key_len = max(len(k) for k in data.keys()) if data else 0
    for key, value in data.items():
        console.print(f"[cyan]{key.ljust(max_key_len)}[/cyan]: {value}")


def format_report(console: Console, report: CycleReport) -> None:
    """Display a cycle report: counts, errors, then per-key outcomes."""
    if report.state == CycleState.ABORTED:
        format_error(console, f"Cycle aborted, nothing changed: {report.fetch_error}")
        return
    title = "Dry run" if report.dry_run else "Cycle complete"
    console.print(f"[bold]{title}[/bold] ({report.duration_seconds:.2f}s)")
    format_key_value(console, {
        "Custodian keys": report.custodian_count,
        "Client keys": report.client_count,
        "To add": len(report.delta.to_add),
        "To remove": len(report.delta.to_remove),
        "Added": report.added,
        "Removed": report.removed,
        "Failed": report.failed,
    })
    if report.wipe_blocked:
        format_warning(console, "Custodian listed no keys; removal of all client keys was blocked")
    for label, error in (("Additions", report.addition_error), ("Removals", report.removal_error)):
        if error:
            format_error(console, f"{label} batch failed: {error}")
    if report.dry_run:
        rows = [("add", k) for k in sorted(report.delta.to_add)] + [("remove", k) for k in sorted(report.delta.to_remove)]
        if rows:
            format_table(console, "Pending changes", ["Action", "Pubkey"], rows)
        return
    outcomes = [("import", o) for o in report.additions] + [("delete", o) for o in report.removals]
    if outcomes:
        format_table(
            console,
            "Key outcomes",
            ["Operation", "Pubkey", "Status", "Message"],
            [(op, o.identifier, o.status if o.succeeded else f"[red]{o.status}[/red]", o.message) for op, o in outcomes],
        )
