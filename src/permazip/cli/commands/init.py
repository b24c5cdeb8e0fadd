"""Init command: write the permazip config file."""

from pathlib import Path

import click

from permazip.cli.constants import CONFIG_PATH_META
from permazip.cli.ensure import Ensure
from permazip.cli.output import user_output
from permazip.core.config_store import (
    DEFAULT_SITE_URL,
    ConfigStore,
    FilesystemConfigStore,
    PermazipConfig,
    default_state_dir,
)
from permazip.core.context import PermazipContext


def _resolve_store(click_ctx: click.Context) -> ConfigStore:
    if isinstance(click_ctx.obj, PermazipContext):
        return click_ctx.obj.config_store
    return FilesystemConfigStore(click_ctx.meta.get(CONFIG_PATH_META))


@click.command("init")
@click.option(
    "--content-dir",
    type=click.Path(file_okay=False, path_type=Path),
    required=True,
    help="Directory holding plugins/ and themes/",
)
@click.option(
    "--download-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Where archives are written (default: CONTENT_DIR/permazip-downloads)",
)
@click.option(
    "--state-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Where options.json is kept (default: ~/.permazip)",
)
@click.option("--site-url", default=DEFAULT_SITE_URL, show_default=True)
@click.option("--webhook-url", default=None, help="POST a notification here after updates")
@click.option("--admin-token", default=None, help="Bearer token for the admin endpoints")
@click.option(
    "--untokenized-downloads/--no-untokenized-downloads",
    default=True,
    show_default=True,
    help="Serve /download?type&slug without a token",
)
@click.option("-f", "--force", is_flag=True, help="Overwrite an existing config")
@click.pass_context
def init_cmd(
    click_ctx: click.Context,
    content_dir: Path,
    download_dir: Path | None,
    state_dir: Path | None,
    site_url: str,
    webhook_url: str | None,
    admin_token: str | None,
    untokenized_downloads: bool,
    force: bool,
) -> None:
    """Create the config file."""
    store = _resolve_store(click_ctx)
    Ensure.invariant(
        force or not store.exists(),
        f"Config already exists at {store.path()} (use --force to overwrite)",
    )

    content_dir = content_dir.expanduser().resolve()
    Ensure.directory_exists(content_dir)

    config = PermazipConfig(
        content_dir=content_dir,
        download_dir=(
            download_dir.expanduser().resolve()
            if download_dir is not None
            else content_dir / "permazip-downloads"
        ),
        state_dir=(
            state_dir.expanduser().resolve() if state_dir is not None else default_state_dir()
        ),
        site_url=site_url.rstrip("/"),
        webhook_url=webhook_url or None,
        admin_token=admin_token or None,
        allow_untokenized_downloads=untokenized_downloads,
    )
    store.save(config)
    user_output(f"Wrote config to {store.path()}")
