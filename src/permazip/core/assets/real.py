"""Filesystem asset source scanning plugins/ and themes/ directories."""

import logging
import re
from collections import defaultdict
from pathlib import Path

from permazip.core.assets.abc import AssetSource
from permazip.core.naming import sanitize_slug
from permazip.core.types import AssetKind, InstalledAsset

logger = logging.getLogger(__name__)

# Headers live in the leading comment block of the file
_HEADER_READ_BYTES = 8192


def read_header(path: Path, field: str) -> str | None:
    """Return the value of a `Field: value` header line, or None if absent."""
    try:
        with path.open("r", encoding="utf-8", errors="ignore") as handle:
            text = handle.read(_HEADER_READ_BYTES)
    except OSError as e:
        logger.debug("Cannot read header from %s: %s", path, e)
        return None
    match = re.search(rf"(?mi)^[ \t/*#@]*{re.escape(field)}:(.*)$", text)
    if match is None:
        return None
    value = re.sub(r"\s*(?:\*/|\?>).*$", "", match.group(1)).strip()
    return value or None


def _warn_on_slug_collisions(assets: list[InstalledAsset]) -> None:
    """Log assets whose slugs sanitize to the same archive name."""
    by_name: dict[str, list[str]] = defaultdict(list)
    for asset in assets:
        by_name[sanitize_slug(asset.slug)].append(asset.slug)
    for name, slugs in by_name.items():
        if len(slugs) > 1:
            logger.warning(
                "%s slugs %s share archive name %s",
                assets[0].kind.value.capitalize(),
                ", ".join(repr(slug) for slug in slugs),
                name,
            )


def _plugin_from_file(main_file: Path, slug: str, source: Path) -> InstalledAsset | None:
    name = read_header(main_file, "Plugin Name")
    if name is None:
        return None
    return InstalledAsset(
        kind=AssetKind.PLUGIN,
        slug=slug,
        name=name,
        version=read_header(main_file, "Version") or "",
        source_path=source,
    )


class FilesystemAssetSource(AssetSource):
    """Production implementation reading plugin and theme headers from disk."""

    def __init__(self, plugins_dir: Path, themes_dir: Path) -> None:
        self._plugins_dir = plugins_dir
        self._themes_dir = themes_dir

    def list_plugins(self) -> list[InstalledAsset]:
        if not self._plugins_dir.is_dir():
            return []

        plugins: list[InstalledAsset] = []
        for entry in sorted(self._plugins_dir.iterdir()):
            if entry.name.startswith("."):
                continue
            if entry.is_dir():
                for candidate in sorted(entry.glob("*.php")):
                    plugin = _plugin_from_file(candidate, entry.name, entry)
                    if plugin is not None:
                        plugins.append(plugin)
                        break
            elif entry.suffix == ".php":
                plugin = _plugin_from_file(entry, entry.stem, entry)
                if plugin is not None:
                    plugins.append(plugin)

        plugins.sort(key=lambda asset: asset.slug)
        _warn_on_slug_collisions(plugins)
        return plugins

    def list_themes(self) -> list[InstalledAsset]:
        if not self._themes_dir.is_dir():
            return []

        themes: list[InstalledAsset] = []
        for entry in sorted(self._themes_dir.iterdir()):
            stylesheet = entry / "style.css"
            if not entry.is_dir() or not stylesheet.is_file():
                continue
            name = read_header(stylesheet, "Theme Name")
            if name is None:
                continue
            themes.append(
                InstalledAsset(
                    kind=AssetKind.THEME,
                    slug=entry.name,
                    name=name,
                    version=read_header(stylesheet, "Version") or "",
                    source_path=entry,
                )
            )
        _warn_on_slug_collisions(themes)
        return themes
