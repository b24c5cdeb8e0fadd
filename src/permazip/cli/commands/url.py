import click

from permazip.cli.ensure import Ensure
from permazip.cli.output import machine_output
from permazip.core.context import PermazipContext
from permazip.core.naming import ARCHIVE_EXTENSION


@click.command("url")
@click.argument("filename")
@click.pass_obj
def url_cmd(ctx: PermazipContext, filename: str) -> None:
    """Print the permanent download URL for FILENAME."""
    Ensure.invariant(
        filename.endswith(ARCHIVE_EXTENSION) and "/" not in filename and "\\" not in filename,
        f"Expected an archive filename like plugin-demo{ARCHIVE_EXTENSION}, got {filename!r}",
    )
    machine_output(ctx.signer.issue_url(filename))
