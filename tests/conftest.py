"""Pytest configuration and fixtures."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from permazip.core.assets.real import FilesystemAssetSource
from permazip.core.config_store import PermazipConfig
from permazip.core.context import PermazipContext
from permazip.core.notifier.fake import FakeNotifier
from permazip.core.options.fake import FakeOptionStore
from permazip.core.time.fake import FakeTime
from permazip.services.archive_service import ArchiveService

SITE_URL = "https://example.test"


def plugin_header(name: str, version: str) -> str:
    return f"<?php\n/**\n * Plugin Name: {name}\n * Version: {version}\n */\n"


def theme_header(name: str, version: str) -> str:
    return f"/*\nTheme Name: {name}\nVersion: {version}\n*/\n"


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Create an empty content tree with plugins/ and themes/."""
    root = tmp_path / "content"
    (root / "plugins").mkdir(parents=True)
    (root / "themes").mkdir()
    return root


@pytest.fixture
def make_plugin(content_dir: Path) -> Callable[..., Path]:
    """Return a factory that writes (or rewrites) a plugin directory."""

    def _make(
        slug: str,
        *,
        name: str | None = None,
        version: str = "1.0",
        files: dict[str, str] | None = None,
    ) -> Path:
        plugin_dir = content_dir / "plugins" / slug
        plugin_dir.mkdir(parents=True, exist_ok=True)
        (plugin_dir / f"{slug}.php").write_text(
            plugin_header(name or slug.title(), version), encoding="utf-8"
        )
        for rel, text in (files or {}).items():
            path = plugin_dir / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return plugin_dir

    return _make


@pytest.fixture
def make_theme(content_dir: Path) -> Callable[..., Path]:
    """Return a factory that writes (or rewrites) a theme directory."""

    def _make(slug: str, *, name: str | None = None, version: str = "1.0") -> Path:
        theme_dir = content_dir / "themes" / slug
        theme_dir.mkdir(parents=True, exist_ok=True)
        (theme_dir / "style.css").write_text(
            theme_header(name or slug.title(), version), encoding="utf-8"
        )
        (theme_dir / "index.php").write_text("<?php\n", encoding="utf-8")
        return theme_dir

    return _make


@pytest.fixture
def config(content_dir: Path, tmp_path: Path) -> PermazipConfig:
    return PermazipConfig(
        content_dir=content_dir,
        download_dir=content_dir / "permazip-downloads",
        state_dir=tmp_path / "state",
        site_url=SITE_URL,
        webhook_url=None,
        admin_token=None,
        allow_untokenized_downloads=True,
    )


@pytest.fixture
def fake_options() -> FakeOptionStore:
    return FakeOptionStore()


@pytest.fixture
def fake_notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def fake_time() -> FakeTime:
    """Clock that advances one minute per call so log entries order deterministically."""
    return FakeTime(start=datetime(2024, 1, 1, 12, 0, tzinfo=UTC), step=timedelta(minutes=1))


@pytest.fixture
def context(
    config: PermazipConfig,
    fake_options: FakeOptionStore,
    fake_notifier: FakeNotifier,
    fake_time: FakeTime,
) -> PermazipContext:
    """Context over a real content tree with fake options, notifier and clock."""
    return PermazipContext.for_test(
        config=config,
        options=fake_options,
        assets=FilesystemAssetSource(config.plugins_dir, config.themes_dir),
        notifier=fake_notifier,
        time=fake_time,
    )


@pytest.fixture
def service(context: PermazipContext) -> ArchiveService:
    return ArchiveService(context)
