"""Event command: dispatch a lifecycle event to the archive pipeline.

Hosts call this from their own hooks, e.g. after an upgrade completes:

    permazip event updated akismet hello-dolly --type plugin
"""

import click

from permazip.cli.ensure import Ensure
from permazip.cli.output import user_output
from permazip.core.archive import ArchiveResult
from permazip.core.context import PermazipContext
from permazip.core.events import AssetEvent, EventKind
from permazip.core.types import AssetKind
from permazip.services.archive_service import ArchiveService


def _build_event(kind: EventKind, slugs: tuple[str, ...], asset_type: str | None) -> AssetEvent:
    if kind in (EventKind.ACTIVATED, EventKind.DEACTIVATED):
        Ensure.invariant(not slugs, f"'{kind.value}' takes no slugs")
        return AssetEvent(kind=kind)

    Ensure.invariant(bool(slugs), f"'{kind.value}' needs at least one slug")

    if kind in (EventKind.PLUGIN_ACTIVATED, EventKind.PLUGIN_DEACTIVATED):
        Ensure.invariant(
            asset_type in (None, AssetKind.PLUGIN.value),
            f"'{kind.value}' only applies to plugins",
        )
        return AssetEvent(kind=kind, asset_kind=AssetKind.PLUGIN, slugs=slugs)

    asset_kind = AssetKind(Ensure.not_none(asset_type, "'updated' requires --type plugin|theme"))
    return AssetEvent.updated(asset_kind, list(slugs))


@click.command("event")
@click.argument("kind", type=click.Choice([kind.value for kind in EventKind]))
@click.argument("slugs", nargs=-1)
@click.option(
    "--type",
    "asset_type",
    type=click.Choice([kind.value for kind in AssetKind]),
    default=None,
    help="Asset type for 'updated' events",
)
@click.pass_obj
def event_cmd(
    ctx: PermazipContext, kind: str, slugs: tuple[str, ...], asset_type: str | None
) -> None:
    """Dispatch lifecycle event KIND for SLUGS."""
    event = _build_event(EventKind(kind), slugs, asset_type)
    results = ArchiveService(ctx).handle_event(event)

    for result in results:
        if isinstance(result, ArchiveResult):
            user_output(f"Built {result.filename}")
        else:
            user_output(
                click.style("Failed ", fg="red")
                + f"{result.kind.value} {result.slug}: {result.reason.value}"
            )
    if event.kind == EventKind.DEACTIVATED:
        user_output("Removed all archives")
