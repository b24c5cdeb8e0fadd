"""Regenerate command."""

import click

from permazip.cli.output import user_output
from permazip.core.context import PermazipContext
from permazip.services.archive_service import ArchiveService


@click.command("regenerate")
@click.pass_obj
def regenerate_cmd(ctx: PermazipContext) -> None:
    """Rebuild every archive."""
    summary = ArchiveService(ctx).regenerate_all()

    for result in summary.built:
        user_output(f"Built {result.filename}")
    for failure in summary.failed:
        user_output(
            click.style("Failed ", fg="red")
            + f"{failure.kind.value} {failure.slug}: {failure.reason.value} ({failure.message})"
        )

    user_output(
        click.style(f"{len(summary.built)} built", fg="green")
        + f", {len(summary.failed)} failed"
    )
