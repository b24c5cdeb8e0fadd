"""Abstract interface for enumerating installed assets."""

from abc import ABC, abstractmethod

from permazip.core.types import AssetKind, InstalledAsset


class AssetSource(ABC):
    """Abstract interface over the installed plugins and themes.

    Implementations include:
    - FakeAssetSource: In-memory for testing
    - FilesystemAssetSource: Scans a content directory
    """

    @abstractmethod
    def list_plugins(self) -> list[InstalledAsset]:
        """List installed plugins, sorted by slug."""
        ...

    @abstractmethod
    def list_themes(self) -> list[InstalledAsset]:
        """List installed themes, sorted by slug."""
        ...

    def list_all(self) -> list[InstalledAsset]:
        """List plugins followed by themes."""
        return self.list_plugins() + self.list_themes()

    def get(self, kind: AssetKind, slug: str) -> InstalledAsset | None:
        """Find a single installed asset.

        Args:
            kind: Asset kind
            slug: Asset slug

        Returns:
            The InstalledAsset if installed, None otherwise
        """
        assets = self.list_plugins() if kind == AssetKind.PLUGIN else self.list_themes()
        return next((asset for asset in assets if asset.slug == slug), None)
