"""Build one ZIP archive per installed plugin or theme.

The archive for `(kind, slug)` always lives at
`{download_dir}/{kind}-{sanitized_slug}.zip`. A build writes a temporary file
next to the target and renames it into place, so the previous archive stays
readable until the new one is complete.
"""

import logging
import os
import shutil
import tempfile
import zipfile
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from permazip.core.fileio import KeyedLocks
from permazip.core.naming import archive_filename, sanitize_slug
from permazip.core.types import AssetKind

logger = logging.getLogger(__name__)


class BuildFailureReason(str, Enum):
    """Why an archive could not be produced."""

    SOURCE_MISSING = "source_missing"
    SOURCE_UNREADABLE = "source_unreadable"
    DESTINATION_UNWRITABLE = "destination_unwritable"
    ZIP_UNAVAILABLE = "zip_unavailable"


@dataclass(frozen=True)
class ArchiveResult:
    """A successfully written archive."""

    path: Path
    filename: str
    url: str


@dataclass(frozen=True)
class BuildFailure:
    """A build that did not produce an archive.

    Failures are returned rather than raised: callers mark the item as
    unavailable and carry on with the rest of the batch.
    """

    kind: AssetKind
    slug: str
    reason: BuildFailureReason
    message: str


class _SourceReadError(Exception):
    pass


def _raise_walk_error(error: OSError) -> None:
    raise _SourceReadError(str(error)) from error


class ArchiveBuilder:
    """Writes archives into a single download directory."""

    def __init__(
        self,
        download_dir: Path,
        url_for: Callable[[str], str],
        locks: KeyedLocks | None = None,
    ) -> None:
        """Create an ArchiveBuilder.

        Args:
            download_dir: Directory that holds every archive
            url_for: Maps an archive filename to its public download URL
            locks: Per-`(kind, slug)` lock registry. Pass the caller's registry
                when it already serializes work on the same keys; the locks
                are re-entrant, so the builder can take them again.
        """
        self._download_dir = download_dir
        self._url_for = url_for
        self._locks = locks if locks is not None else KeyedLocks()

    @property
    def download_dir(self) -> Path:
        return self._download_dir

    @property
    def locks(self) -> KeyedLocks:
        return self._locks

    def archive_path(self, kind: AssetKind, slug: str) -> Path:
        """Return the path where the archive for `(kind, slug)` lives."""
        return self._download_dir / archive_filename(kind, slug)

    def build(self, kind: AssetKind, slug: str, source: Path) -> ArchiveResult | BuildFailure:
        """Archive source, replacing any existing archive for `(kind, slug)`.

        Builds for the same `(kind, slug)` are serialized on the shared lock
        registry, so they also wait for callers holding that key.

        Args:
            kind: Asset kind
            slug: Asset slug (sanitized for the filename)
            source: Directory tree or lone file to archive

        Returns:
            ArchiveResult on success, BuildFailure otherwise
        """
        if not source.exists():
            return self._failure(
                kind, slug, BuildFailureReason.SOURCE_MISSING, f"Source not found: {source}"
            )
        if not os.access(source, os.R_OK):
            return self._failure(
                kind, slug, BuildFailureReason.SOURCE_UNREADABLE, f"Source not readable: {source}"
            )

        with self._locks.get((kind, sanitize_slug(slug))):
            return self._build_locked(kind, slug, source)

    def _build_locked(
        self, kind: AssetKind, slug: str, source: Path
    ) -> ArchiveResult | BuildFailure:
        target = self.archive_path(kind, slug)
        try:
            self._download_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.name}.", suffix=".tmp", dir=self._download_dir
            )
        except OSError as e:
            return self._failure(kind, slug, BuildFailureReason.DESTINATION_UNWRITABLE, str(e))
        os.close(fd)
        tmp_path = Path(tmp_name)

        try:
            _write_archive(source, tmp_path)
            os.replace(tmp_path, target)
        except RuntimeError as e:
            # zipfile raises RuntimeError when zlib is not available
            tmp_path.unlink(missing_ok=True)
            return self._failure(kind, slug, BuildFailureReason.ZIP_UNAVAILABLE, str(e))
        except _SourceReadError as e:
            tmp_path.unlink(missing_ok=True)
            return self._failure(kind, slug, BuildFailureReason.SOURCE_UNREADABLE, str(e))
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            return self._failure(kind, slug, BuildFailureReason.DESTINATION_UNWRITABLE, str(e))

        logger.info("Built archive %s from %s", target.name, source)
        return ArchiveResult(path=target, filename=target.name, url=self._url_for(target.name))

    def _failure(
        self, kind: AssetKind, slug: str, reason: BuildFailureReason, message: str
    ) -> BuildFailure:
        logger.warning(
            "Archive build failed for %s %s (%s): %s", kind.value, slug, reason.value, message
        )
        return BuildFailure(kind=kind, slug=slug, reason=reason, message=message)


def _write_archive(source: Path, destination: Path) -> None:
    with zipfile.ZipFile(destination, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        if source.is_file():
            _add_file(zf, source, source.name)
            return

        root_name = source.name
        for dirpath, dirnames, filenames in os.walk(source, onerror=_raise_walk_error):
            dirnames.sort()
            current = Path(dirpath)
            rel = current.relative_to(source)
            prefix = root_name if rel == Path(".") else f"{root_name}/{rel.as_posix()}"

            if not dirnames and not filenames:
                info = zipfile.ZipInfo.from_file(current, f"{prefix}/", strict_timestamps=False)
                zf.mkdir(info)
                continue

            for name in sorted(filenames):
                _add_file(zf, current / name, f"{prefix}/{name}")


def _add_file(zf: zipfile.ZipFile, path: Path, arcname: str) -> None:
    try:
        info = zipfile.ZipInfo.from_file(path, arcname, strict_timestamps=False)
        src = path.open("rb")
    except OSError as e:
        raise _SourceReadError(f"Cannot read {path}: {e}") from e
    info.compress_type = zipfile.ZIP_DEFLATED
    with src, zf.open(info, "w") as dst:
        shutil.copyfileobj(src, dst, 1024 * 1024)
