"""Discovery of installed plugins and themes."""

from permazip.core.assets.abc import AssetSource
from permazip.core.assets.fake import FakeAssetSource
from permazip.core.assets.real import FilesystemAssetSource

__all__ = ["AssetSource", "FakeAssetSource", "FilesystemAssetSource"]
