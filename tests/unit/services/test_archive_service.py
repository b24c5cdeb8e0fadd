"""Tests for ArchiveService business logic."""

import threading
import zipfile
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

import pytest

from permazip.core.archive import ArchiveResult, BuildFailure, BuildFailureReason
from permazip.core.assets.fake import FakeAssetSource
from permazip.core.config_store import PermazipConfig
from permazip.core.context import PermazipContext
from permazip.core.delivery import ForbiddenError, NotFoundError
from permazip.core.events import AssetEvent
from permazip.core.notifier.fake import FakeNotifier
from permazip.core.options.fake import FakeOptionStore
from permazip.core.types import AssetKind, InstalledAsset
from permazip.services.archive_service import (
    LISTING_MARKER,
    ArchiveService,
    InvalidRequestError,
)


class TestEndToEnd:
    def test_version_change_lifecycle(
        self, service: ArchiveService, make_plugin: Callable[..., Path], context: PermazipContext
    ) -> None:
        """Build 1.0, upgrade to 1.1, rebuild 1.1: exactly one log entry."""
        make_plugin("demo", name="Demo", version="1.0")
        first = service.handle_event(AssetEvent.plugin_activated("demo"))
        assert [result.filename for result in first if isinstance(result, ArchiveResult)] == [
            "plugin-demo.zip"
        ]
        assert service.read_log() == []

        make_plugin("demo", name="Demo", version="1.1")
        service.handle_event(AssetEvent.updated(AssetKind.PLUGIN, ["demo"]))
        service.handle_event(AssetEvent.updated(AssetKind.PLUGIN, ["demo"]))

        [entry] = service.read_log()
        assert (entry.type, entry.slug, entry.name) == ("plugin", "demo", "Demo")
        assert (entry.old_version, entry.new_version) == ("1.0", "1.1")
        assert context.config.download_dir.joinpath("plugin-demo.zip").is_file()

    def test_log_is_newest_first(
        self, service: ArchiveService, make_plugin: Callable[..., Path]
    ) -> None:
        make_plugin("demo", version="1.0")
        service.regenerate_all()
        for version in ("1.1", "1.2", "2.0"):
            make_plugin("demo", version=version)
            service.regenerate_all()

        entries = service.read_log()
        assert [entry.new_version for entry in entries] == ["2.0", "1.2", "1.1"]
        assert entries[0].unix_timestamp > entries[-1].unix_timestamp


class TestListItems:
    def test_builds_missing_archives(
        self,
        service: ArchiveService,
        make_plugin: Callable[..., Path],
        make_theme: Callable[..., Path],
        context: PermazipContext,
    ) -> None:
        make_plugin("demo", name="Demo", version="1.0")
        make_theme("twenty", name="Twenty", version="2.0")

        listing = service.list_items()

        [plugin] = listing.plugins
        [theme] = listing.themes
        assert (plugin.name, plugin.slug, plugin.version, plugin.zip_exists) == (
            "Demo",
            "demo",
            "1.0",
            True,
        )
        assert plugin.url == context.signer.issue_url("plugin-demo.zip")
        assert theme.zip_exists is True
        assert (context.config.download_dir / "theme-twenty.zip").is_file()
        assert (context.config.download_dir / LISTING_MARKER).is_file()

    def test_rebuilds_stale_archive_and_logs(
        self, service: ArchiveService, make_plugin: Callable[..., Path]
    ) -> None:
        plugin_dir = make_plugin("demo", version="1.0")
        service.list_items()

        make_plugin("demo", version="1.1", files={"new.php": "<?php\n"})
        service.list_items()

        [entry] = service.read_log()
        assert (entry.old_version, entry.new_version) == ("1.0", "1.1")
        with zipfile.ZipFile(service.builder.archive_path(AssetKind.PLUGIN, "demo")) as zf:
            assert "demo/new.php" in zf.namelist()
        assert plugin_dir.is_dir()

    def test_up_to_date_archive_is_not_rebuilt(
        self, service: ArchiveService, make_plugin: Callable[..., Path]
    ) -> None:
        make_plugin("demo")
        service.list_items()
        archive = service.builder.archive_path(AssetKind.PLUGIN, "demo")
        before = archive.stat().st_mtime_ns

        service.list_items()

        assert archive.stat().st_mtime_ns == before

    def test_failed_build_reports_zip_missing(self, config: PermazipConfig) -> None:
        ghost = InstalledAsset(
            kind=AssetKind.PLUGIN,
            slug="ghost",
            name="Ghost",
            version="1.0",
            source_path=config.plugins_dir / "ghost",
        )
        ctx = PermazipContext.for_test(config=config, assets=FakeAssetSource(plugins=[ghost]))

        [item] = ArchiveService(ctx).list_items().plugins

        assert item.zip_exists is False
        assert item.url


class TestRegenerate:
    def test_no_version_changes_means_no_log_entries(
        self,
        service: ArchiveService,
        make_plugin: Callable[..., Path],
        make_theme: Callable[..., Path],
    ) -> None:
        make_plugin("a")
        make_plugin("b")
        make_theme("t")
        service.regenerate_all()

        summary = service.regenerate_all()

        assert len(summary.built) == 3
        assert summary.failed == []
        assert service.read_log() == []
        assert all(item.zip_exists for item in service.list_items().plugins)

    def test_failures_do_not_stop_the_batch(self, config: PermazipConfig, tmp_path: Path) -> None:
        real_dir = tmp_path / "real"
        real_dir.mkdir()
        (real_dir / "main.php").write_text("<?php\n", encoding="utf-8")
        assets = FakeAssetSource(
            plugins=[
                InstalledAsset(AssetKind.PLUGIN, "a-missing", "Missing", "1", tmp_path / "nope"),
                InstalledAsset(AssetKind.PLUGIN, "b-real", "Real", "1", real_dir),
            ]
        )
        ctx = PermazipContext.for_test(config=config, assets=assets)

        summary = ArchiveService(ctx).regenerate_all()

        assert [result.filename for result in summary.built] == ["plugin-b-real.zip"]
        [failure] = summary.failed
        assert isinstance(failure, BuildFailure)
        assert failure.reason == BuildFailureReason.SOURCE_MISSING


class TestEvents:
    def test_activated_regenerates_everything(
        self,
        service: ArchiveService,
        make_plugin: Callable[..., Path],
        make_theme: Callable[..., Path],
        context: PermazipContext,
    ) -> None:
        make_plugin("demo")
        make_theme("twenty")

        results = service.handle_event(AssetEvent.activated())

        assert len(results) == 2
        assert sorted(p.name for p in context.config.download_dir.glob("*.zip")) == [
            "plugin-demo.zip",
            "theme-twenty.zip",
        ]

    def test_deactivated_removes_archives_but_keeps_state(
        self,
        service: ArchiveService,
        make_plugin: Callable[..., Path],
        context: PermazipContext,
        fake_options: FakeOptionStore,
    ) -> None:
        make_plugin("demo", version="1.0")
        service.regenerate_all()
        make_plugin("demo", version="2.0")
        service.regenerate_all()

        assert service.handle_event(AssetEvent.deactivated()) == []

        download_dir = context.config.download_dir
        assert list(download_dir.glob("*.zip")) == []
        assert (download_dir / "update-log.json").is_file()
        assert len(service.read_log()) == 1
        assert fake_options.get("plugin_version_demo") == "2.0"

    def test_plugin_deactivated_processes_that_plugin(
        self, service: ArchiveService, make_plugin: Callable[..., Path]
    ) -> None:
        make_plugin("demo")
        make_plugin("other")

        results = service.handle_event(AssetEvent.plugin_deactivated("demo"))

        assert [result.filename for result in results if isinstance(result, ArchiveResult)] == [
            "plugin-demo.zip"
        ]

    def test_updated_notifies_after_build(
        self,
        service: ArchiveService,
        make_theme: Callable[..., Path],
        fake_notifier: FakeNotifier,
        config: PermazipConfig,
    ) -> None:
        make_theme("twenty")

        service.handle_event(AssetEvent.updated(AssetKind.THEME, ["twenty"]))

        [payload] = fake_notifier.payloads
        assert payload["site"] == config.site_url
        assert payload["type"] == "theme"
        assert payload["slug"] == "twenty"
        assert payload["status"] == "updated"
        assert payload["zipfile"] == "theme-twenty.zip"
        assert payload["time"] == "2024-01-01 12:00:00"

    def test_activation_does_not_notify(
        self,
        service: ArchiveService,
        make_plugin: Callable[..., Path],
        fake_notifier: FakeNotifier,
    ) -> None:
        make_plugin("demo")

        service.handle_event(AssetEvent.plugin_activated("demo"))
        service.handle_event(AssetEvent.activated())

        assert fake_notifier.payloads == []

    def test_unknown_slug_is_ignored(
        self, service: ArchiveService, caplog: pytest.LogCaptureFixture
    ) -> None:
        results = service.handle_event(AssetEvent.updated(AssetKind.PLUGIN, ["ghost"]))

        assert results == []
        assert "Ignoring event for unknown plugin ghost" in caplog.text


class TestCleanup:
    def test_removes_only_archives(
        self,
        service: ArchiveService,
        make_plugin: Callable[..., Path],
        context: PermazipContext,
    ) -> None:
        make_plugin("a", version="1")
        make_plugin("b", version="1")
        service.regenerate_all()
        make_plugin("a", version="2")
        service.regenerate_all()
        download_dir = context.config.download_dir
        (download_dir / "notes.txt").write_text("keep", encoding="utf-8")

        removed = service.cleanup()

        assert removed == 2
        assert sorted(p.name for p in download_dir.iterdir()) == [
            LISTING_MARKER,
            "notes.txt",
            "update-log.json",
        ]

    def test_missing_download_dir(self, service: ArchiveService) -> None:
        assert service.cleanup() == 0


class TestDownloads:
    def test_tokenized_download(
        self, service: ArchiveService, make_plugin: Callable[..., Path], context: PermazipContext
    ) -> None:
        make_plugin("demo")
        [item] = service.list_items().plugins
        token = context.signer.issue_token("plugin-demo.zip")

        path = service.resolve_download("plugin-demo.zip", token)

        assert path.name == "plugin-demo.zip"
        assert item.url.endswith(f"token={token}")

    def test_tokenized_download_rejects_bad_token(self, service: ArchiveService) -> None:
        with pytest.raises(ForbiddenError):
            service.resolve_download("plugin-demo.zip", "bogus")

    def test_slug_download(
        self, service: ArchiveService, make_theme: Callable[..., Path]
    ) -> None:
        make_theme("twenty")
        service.regenerate_all()

        assert service.resolve_slug_download("theme", "twenty").name == "theme-twenty.zip"
        assert service.resolve_slug_download(" THEME ", "twenty").name == "theme-twenty.zip"

    @pytest.mark.parametrize(("asset_type", "slug"), [("widget", "demo"), ("plugin", "  ")])
    def test_slug_download_invalid_params(
        self, service: ArchiveService, asset_type: str, slug: str
    ) -> None:
        with pytest.raises(InvalidRequestError):
            service.resolve_slug_download(asset_type, slug)

    def test_slug_download_missing(self, service: ArchiveService) -> None:
        with pytest.raises(NotFoundError):
            service.resolve_slug_download("plugin", "nope")

    def test_slug_download_disabled(
        self,
        service: ArchiveService,
        make_plugin: Callable[..., Path],
        context: PermazipContext,
    ) -> None:
        make_plugin("demo")
        service.regenerate_all()
        locked_down = replace(
            context, config=replace(context.config, allow_untokenized_downloads=False)
        )

        with pytest.raises(NotFoundError):
            ArchiveService(locked_down).resolve_slug_download("plugin", "demo")


class TestLocking:
    def test_process_asset_waits_for_builder_lock(
        self, service: ArchiveService, make_plugin: Callable[..., Path], context: PermazipContext
    ) -> None:
        """A holder of the builder's lock blocks the whole diff-log-build step."""
        make_plugin("demo", version="1.0")
        asset = context.assets.get(AssetKind.PLUGIN, "demo")
        assert asset is not None
        service.ensure_download_dir()
        archive = service.builder.archive_path(AssetKind.PLUGIN, "demo")
        done = threading.Event()

        def _process() -> None:
            service.process_asset(asset)
            done.set()

        lock = service.builder.locks.get((AssetKind.PLUGIN, "demo"))
        with lock:
            worker = threading.Thread(target=_process)
            worker.start()
            assert not done.wait(timeout=0.2)
            assert not archive.is_file()

        worker.join(timeout=5)
        assert done.is_set()
        assert archive.is_file()
