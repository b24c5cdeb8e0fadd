"""Log command: print version changes, most recent first."""

import json

import click
from rich.console import Console
from rich.table import Table

from permazip.cli.output import machine_output, user_output
from permazip.core.context import PermazipContext
from permazip.services.archive_service import ArchiveService


@click.command("log")
@click.option("-n", "--limit", type=int, default=None, help="Show at most N entries")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (text or json)",
)
@click.pass_obj
def log_cmd(ctx: PermazipContext, limit: int | None, output_format: str) -> None:
    """Show the update log."""
    entries = ArchiveService(ctx).read_log()
    if limit is not None:
        entries = entries[:limit]

    if output_format == "json":
        machine_output(json.dumps([entry.to_dict() for entry in entries], indent=2))
        return

    if not entries:
        user_output("No updates recorded yet.")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("time (UTC)", no_wrap=True)
    table.add_column("type", style="cyan", no_wrap=True)
    table.add_column("name")
    table.add_column("from", no_wrap=True)
    table.add_column("to", no_wrap=True)
    for entry in entries:
        table.add_row(entry.timestamp, entry.type, entry.name, entry.old_version, entry.new_version)

    console = Console(stderr=True, width=200)
    console.print(table)
