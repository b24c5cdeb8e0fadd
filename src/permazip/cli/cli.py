import logging
from pathlib import Path

import click

from permazip.cli.commands.cleanup import cleanup_cmd
from permazip.cli.commands.event import event_cmd
from permazip.cli.commands.init import init_cmd
from permazip.cli.commands.list_cmd import list_cmd
from permazip.cli.commands.log import log_cmd
from permazip.cli.commands.regenerate import regenerate_cmd
from permazip.cli.commands.serve import serve_cmd
from permazip.cli.commands.url import url_cmd
from permazip.cli.constants import CONFIG_PATH_META
from permazip.cli.ensure import Ensure
from permazip.core.config_store import FilesystemConfigStore
from permazip.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

# Commands that run before a config file exists
_NO_CONTEXT_COMMANDS = {"init"}


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="permazip")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: $PERMAZIP_CONFIG or ~/.permazip/config.toml)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """Keep downloadable ZIP archives of installed plugins and themes."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")

    ctx.meta[CONFIG_PATH_META] = config_path

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is not None or ctx.invoked_subcommand in _NO_CONTEXT_COMMANDS:
        return

    store = FilesystemConfigStore(config_path)
    Ensure.invariant(
        store.exists(),
        f"No config at {store.path()}. Run 'permazip init --content-dir PATH' first.",
    )
    try:
        ctx.obj = create_context(store)
    except ValueError as e:
        Ensure.invariant(False, str(e))


cli.add_command(init_cmd)
cli.add_command(list_cmd)
cli.add_command(regenerate_cmd)
cli.add_command(log_cmd)
cli.add_command(url_cmd)
cli.add_command(event_cmd)
cli.add_command(cleanup_cmd)
cli.add_command(serve_cmd)


def main() -> None:
    """CLI entry point used by the `permazip` console script."""
    cli()
