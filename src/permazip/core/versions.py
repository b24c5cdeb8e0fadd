"""Last-seen version tracking per asset."""

from dataclasses import dataclass

from permazip.core.naming import version_option_key
from permazip.core.options.abc import OptionStore
from permazip.core.types import AssetKind


@dataclass(frozen=True)
class VersionDiff:
    """Outcome of comparing a current version against the stored one."""

    is_change: bool
    previous_version: str | None


class VersionTracker:
    """Records the last-seen version of each `(kind, slug)` in an option store."""

    def __init__(self, options: OptionStore) -> None:
        self._options = options

    def previous_version(self, kind: AssetKind, slug: str) -> str | None:
        return self._options.get(version_option_key(kind, slug))

    def record_and_diff(self, kind: AssetKind, slug: str, current_version: str) -> VersionDiff:
        """Store current_version and report whether it differs from the stored one.

        The first observation of an asset is never a change. The stored value is
        overwritten in every case.

        Args:
            kind: Asset kind
            slug: Asset slug
            current_version: Version string currently installed

        Returns:
            VersionDiff with the previously stored version (None if absent)
        """
        key = version_option_key(kind, slug)
        previous = self._options.get(key)
        self._options.set(key, current_version)
        is_change = previous is not None and previous != current_version
        return VersionDiff(is_change=is_change, previous_version=previous)
