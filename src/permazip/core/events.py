"""Lifecycle events that drive archive rebuilds."""

from dataclasses import dataclass
from enum import Enum

from permazip.core.types import AssetKind


class EventKind(str, Enum):
    """Host lifecycle events consumed by the archive pipeline."""

    ACTIVATED = "activated"
    DEACTIVATED = "deactivated"
    PLUGIN_ACTIVATED = "plugin_activated"
    PLUGIN_DEACTIVATED = "plugin_deactivated"
    UPDATED = "updated"


@dataclass(frozen=True)
class AssetEvent:
    """A single lifecycle event.

    `activated` and `deactivated` refer to this system itself and carry no
    slugs. The plugin events carry exactly the affected plugin slugs; `updated`
    carries the slugs of `asset_kind` that were updated.
    """

    kind: EventKind
    asset_kind: AssetKind | None = None
    slugs: tuple[str, ...] = ()

    @staticmethod
    def activated() -> "AssetEvent":
        return AssetEvent(kind=EventKind.ACTIVATED)

    @staticmethod
    def deactivated() -> "AssetEvent":
        return AssetEvent(kind=EventKind.DEACTIVATED)

    @staticmethod
    def plugin_activated(slug: str) -> "AssetEvent":
        return AssetEvent(
            kind=EventKind.PLUGIN_ACTIVATED, asset_kind=AssetKind.PLUGIN, slugs=(slug,)
        )

    @staticmethod
    def plugin_deactivated(slug: str) -> "AssetEvent":
        return AssetEvent(
            kind=EventKind.PLUGIN_DEACTIVATED, asset_kind=AssetKind.PLUGIN, slugs=(slug,)
        )

    @staticmethod
    def updated(asset_kind: AssetKind, slugs: list[str]) -> "AssetEvent":
        return AssetEvent(kind=EventKind.UPDATED, asset_kind=asset_kind, slugs=tuple(slugs))
