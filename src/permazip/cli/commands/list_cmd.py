"""List command: show installed assets and their permanent URLs."""

import json
from dataclasses import asdict

import click
from rich.console import Console
from rich.table import Table

from permazip.cli.output import machine_output, user_output
from permazip.core.context import PermazipContext
from permazip.services.archive_service import ArchiveService, ListingItem


def _add_rows(table: Table, kind: str, items: list[ListingItem]) -> None:
    for item in items:
        zip_cell = "[green]yes[/green]" if item.zip_exists else "[red]no[/red]"
        version_cell = item.version or "[dim]-[/dim]"
        table.add_row(kind, item.name, item.slug, version_cell, zip_cell, item.url)


@click.command("list")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (text or json)",
)
@click.pass_obj
def list_cmd(ctx: PermazipContext, output_format: str) -> None:
    """List plugins and themes, building archives that are missing or stale."""
    listing = ArchiveService(ctx).list_items()

    if output_format == "json":
        machine_output(
            json.dumps(
                {
                    "plugins": [asdict(item) for item in listing.plugins],
                    "themes": [asdict(item) for item in listing.themes],
                },
                indent=2,
            )
        )
        return

    if not listing.plugins and not listing.themes:
        user_output("No plugins or themes found.")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("type", style="cyan", no_wrap=True)
    table.add_column("name")
    table.add_column("slug", no_wrap=True)
    table.add_column("version", no_wrap=True)
    table.add_column("zip", no_wrap=True)
    table.add_column("url", overflow="fold")
    _add_rows(table, "plugin", listing.plugins)
    _add_rows(table, "theme", listing.themes)

    # Output table to stderr (consistent with user_output convention)
    console = Console(stderr=True, width=200)
    console.print(table)
