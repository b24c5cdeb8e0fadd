import click

from permazip.cli.output import user_output
from permazip.core.context import PermazipContext
from permazip.services.archive_service import ArchiveService


@click.command("cleanup")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def cleanup_cmd(ctx: PermazipContext, yes: bool) -> None:
    """Delete every archive in the download directory."""
    if not yes:
        click.confirm(f"Delete all archives in {ctx.config.download_dir}?", abort=True, err=True)
    removed = ArchiveService(ctx).cleanup()
    user_output(f"Removed {removed} archive(s)")
