"""Shared value types for installed assets."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class AssetKind(str, Enum):
    """Category of an archived asset."""

    PLUGIN = "plugin"
    THEME = "theme"


@dataclass(frozen=True)
class InstalledAsset:
    """A plugin or theme present in the content tree.

    source_path is either a directory or, for lone-file plugins, a single file.
    """

    kind: AssetKind
    slug: str
    name: str
    version: str
    source_path: Path
