"""Business logic for keeping archives in sync with installed assets."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from permazip.core.archive import ArchiveBuilder, ArchiveResult, BuildFailure
from permazip.core.config_store import PermazipConfig
from permazip.core.context import PermazipContext
from permazip.core.delivery import NotFoundError, resolve_download
from permazip.core.events import AssetEvent, EventKind
from permazip.core.fileio import KeyedLocks
from permazip.core.naming import ARCHIVE_EXTENSION, archive_filename, sanitize_slug
from permazip.core.types import AssetKind, InstalledAsset
from permazip.core.update_log import LogEntry, UpdateLog
from permazip.core.versions import VersionTracker

logger = logging.getLogger(__name__)

LISTING_MARKER = "index.html"


class InvalidRequestError(Exception):
    """Raised when a download request names an unknown kind or an empty slug."""


@dataclass(frozen=True)
class ListingItem:
    """One row of the download listing."""

    name: str
    slug: str
    version: str
    url: str
    zip_exists: bool


@dataclass(frozen=True)
class ItemListing:
    plugins: list[ListingItem]
    themes: list[ListingItem]


@dataclass(frozen=True)
class RegenerateSummary:
    """Per-item outcome of a full regeneration pass."""

    results: list[ArchiveResult | BuildFailure] = field(default_factory=list)

    @property
    def built(self) -> list[ArchiveResult]:
        return [result for result in self.results if isinstance(result, ArchiveResult)]

    @property
    def failed(self) -> list[BuildFailure]:
        return [result for result in self.results if isinstance(result, BuildFailure)]


class ArchiveService:
    """Orchestrates version tracking, the update log and archive builds.

    One instance should be shared per process: it owns the per-asset locks
    that serialize concurrent rebuilds of the same archive.
    """

    def __init__(self, ctx: PermazipContext) -> None:
        """Create ArchiveService with application context.

        Args:
            ctx: Application context with injected dependencies
        """
        self._ctx = ctx
        self._locks = KeyedLocks()
        self._builder = ArchiveBuilder(
            ctx.config.download_dir, ctx.signer.issue_url, locks=self._locks
        )
        self._versions = VersionTracker(ctx.options)
        self._log = UpdateLog(ctx.config.update_log_path)

    @property
    def config(self) -> PermazipConfig:
        return self._ctx.config

    @property
    def builder(self) -> ArchiveBuilder:
        return self._builder

    @property
    def update_log(self) -> UpdateLog:
        return self._log

    def ensure_download_dir(self) -> Path:
        """Create the download directory and its listing-denial marker."""
        download_dir = self._ctx.config.download_dir
        download_dir.mkdir(parents=True, exist_ok=True)
        marker = download_dir / LISTING_MARKER
        if not marker.exists():
            marker.write_text("", encoding="utf-8")
        return download_dir

    def process_asset(
        self, asset: InstalledAsset, *, notify: bool = False
    ) -> ArchiveResult | BuildFailure:
        """Record the asset's version, log a change, and rebuild its archive.

        The version diff runs before the build so the log sees the previous
        version even when the build then replaces the archive.

        Args:
            asset: Installed asset to process
            notify: Send a webhook notification after a successful build

        Returns:
            The build outcome
        """
        with self._locks.get((asset.kind, sanitize_slug(asset.slug))):
            diff = self._versions.record_and_diff(asset.kind, asset.slug, asset.version)
            if diff.is_change and diff.previous_version is not None:
                self._log.append(
                    LogEntry.create(
                        type=asset.kind.value,
                        slug=asset.slug,
                        name=asset.name,
                        old_version=diff.previous_version,
                        new_version=asset.version,
                        at=self._ctx.time.now(),
                    )
                )
            result = self._builder.build(asset.kind, asset.slug, asset.source_path)

        if notify and isinstance(result, ArchiveResult):
            self._notify(asset, result)
        return result

    def _notify(self, asset: InstalledAsset, result: ArchiveResult) -> None:
        self._ctx.notifier.notify(
            {
                "site": self._ctx.config.site_url,
                "type": asset.kind.value,
                "slug": asset.slug,
                "status": "updated",
                "zipfile": result.filename,
                "time": self._ctx.time.now().strftime("%Y-%m-%d %H:%M:%S"),
            }
        )

    def _listing_item(self, asset: InstalledAsset) -> ListingItem:
        path = self._builder.archive_path(asset.kind, asset.slug)
        stored_version = self._versions.previous_version(asset.kind, asset.slug)
        if path.is_file() and stored_version == asset.version:
            zip_exists = True
        else:
            zip_exists = isinstance(self.process_asset(asset), ArchiveResult)

        return ListingItem(
            name=asset.name,
            slug=asset.slug,
            version=asset.version,
            url=self._ctx.signer.issue_url(archive_filename(asset.kind, asset.slug)),
            zip_exists=zip_exists,
        )

    def list_items(self) -> ItemListing:
        """List installed assets, building archives that are missing or stale."""
        self.ensure_download_dir()
        return ItemListing(
            plugins=[self._listing_item(asset) for asset in self._ctx.assets.list_plugins()],
            themes=[self._listing_item(asset) for asset in self._ctx.assets.list_themes()],
        )

    def regenerate_all(self) -> RegenerateSummary:
        """Rebuild every archive. Always completes; failures are per item."""
        self.ensure_download_dir()
        summary = RegenerateSummary(
            results=[self.process_asset(asset) for asset in self._ctx.assets.list_all()]
        )
        logger.info(
            "Regenerated %d archives (%d failed)", len(summary.built), len(summary.failed)
        )
        return summary

    def handle_event(self, event: AssetEvent) -> list[ArchiveResult | BuildFailure]:
        """Dispatch a lifecycle event to the archive pipeline.

        Returns:
            Build outcomes for every processed asset (empty for deactivation)
        """
        logger.debug("Handling event %s %s", event.kind.value, event.slugs)

        if event.kind == EventKind.ACTIVATED:
            return self.regenerate_all().results

        if event.kind == EventKind.DEACTIVATED:
            self.cleanup()
            return []

        if event.asset_kind is None:
            raise ValueError(f"Event {event.kind.value} requires an asset kind")

        notify = event.kind == EventKind.UPDATED
        results: list[ArchiveResult | BuildFailure] = []
        for slug in event.slugs:
            asset = self._ctx.assets.get(event.asset_kind, slug)
            if asset is None:
                logger.warning("Ignoring event for unknown %s %s", event.asset_kind.value, slug)
                continue
            results.append(self.process_asset(asset, notify=notify))
        return results

    def cleanup(self) -> int:
        """Delete every archive in the download directory.

        Returns:
            Number of archives removed
        """
        download_dir = self._ctx.config.download_dir
        if not download_dir.is_dir():
            return 0
        removed = 0
        for path in sorted(download_dir.glob(f"*{ARCHIVE_EXTENSION}")):
            path.unlink(missing_ok=True)
            removed += 1
        logger.info("Removed %d archives from %s", removed, download_dir)
        return removed

    def read_log(self) -> list[LogEntry]:
        return self._log.list()

    def resolve_download(self, filename: str, token: str) -> Path:
        """Resolve a tokenized download request.

        Raises:
            ForbiddenError: Bad token, traversal attempt, or wrong extension
            NotFoundError: The archive does not exist
        """
        return resolve_download(self._ctx.config.download_dir, filename, token, self._ctx.signer)

    def resolve_slug_download(self, asset_type: str, slug: str) -> Path:
        """Resolve an untokenized `(type, slug)` download request.

        This path performs no authentication.

        Raises:
            InvalidRequestError: Unknown type or empty slug
            NotFoundError: Disabled by config, or the archive does not exist
        """
        if not self._ctx.config.allow_untokenized_downloads:
            raise NotFoundError("Untokenized downloads are disabled")
        try:
            kind = AssetKind(asset_type.strip().lower())
        except ValueError as e:
            raise InvalidRequestError(f"Invalid type: {asset_type!r}") from e
        if not slug.strip():
            raise InvalidRequestError("Missing slug")

        path = self._builder.archive_path(kind, slug)
        if not path.is_file():
            raise NotFoundError(f"Archive not found: {path.name}")
        return path
