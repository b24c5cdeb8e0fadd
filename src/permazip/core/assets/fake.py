"""In-memory asset source for testing."""

from permazip.core.assets.abc import AssetSource
from permazip.core.types import InstalledAsset


class FakeAssetSource(AssetSource):
    """Fake implementation returning the assets given to the constructor."""

    def __init__(
        self,
        plugins: list[InstalledAsset] | None = None,
        themes: list[InstalledAsset] | None = None,
    ) -> None:
        self._plugins = sorted(plugins or [], key=lambda asset: asset.slug)
        self._themes = sorted(themes or [], key=lambda asset: asset.slug)

    def list_plugins(self) -> list[InstalledAsset]:
        return list(self._plugins)

    def list_themes(self) -> list[InstalledAsset]:
        return list(self._themes)
