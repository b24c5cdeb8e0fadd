"""Append-only log of asset version changes.

The log is a single JSON array stored on disk. Appends rewrite the whole
document; reads sort by unix timestamp, newest first.
"""

import json
import logging
import threading
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from permazip.core.fileio import atomic_write_text

logger = logging.getLogger(__name__)

_ENTRY_FIELDS = (
    "type",
    "slug",
    "name",
    "old_version",
    "new_version",
    "timestamp",
    "unix_timestamp",
)


@dataclass(frozen=True)
class LogEntry:
    """A single recorded version change."""

    type: str
    slug: str
    name: str
    old_version: str
    new_version: str
    timestamp: str
    unix_timestamp: int

    @staticmethod
    def create(
        *, type: str, slug: str, name: str, old_version: str, new_version: str, at: datetime
    ) -> "LogEntry":
        """Build an entry stamped with `at` (converted to UTC)."""
        utc = at.astimezone(UTC)
        return LogEntry(
            type=type,
            slug=slug,
            name=name,
            old_version=old_version,
            new_version=new_version,
            timestamp=utc.strftime("%Y-%m-%d %H:%M:%S"),
            unix_timestamp=int(utc.timestamp()),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _entry_from_dict(data: Any) -> LogEntry | None:
    if not isinstance(data, dict) or any(field not in data for field in _ENTRY_FIELDS):
        return None
    try:
        unix_timestamp = int(data["unix_timestamp"])
    except (TypeError, ValueError):
        return None
    return LogEntry(
        type=str(data["type"]),
        slug=str(data["slug"]),
        name=str(data["name"]),
        old_version=str(data["old_version"]),
        new_version=str(data["new_version"]),
        timestamp=str(data["timestamp"]),
        unix_timestamp=unix_timestamp,
    )


class UpdateLog:
    """File-backed update log."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_entries(self) -> list[LogEntry]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Update log %s is unreadable, treating as empty: %s", self._path, e)
            return []
        if not isinstance(data, list):
            logger.warning("Update log %s is not a JSON array, treating as empty", self._path)
            return []
        entries = [_entry_from_dict(item) for item in data]
        return [entry for entry in entries if entry is not None]

    def append(self, entry: LogEntry) -> None:
        """Append entry, rewriting the whole document atomically."""
        with self._lock:
            entries = self._read_entries()
            entries.append(entry)
            payload = [item.to_dict() for item in entries]
            atomic_write_text(self._path, json.dumps(payload, indent=2) + "\n")
        logger.info(
            "Logged %s %s update %s -> %s",
            entry.type,
            entry.slug,
            entry.old_version,
            entry.new_version,
        )

    def list(self) -> list[LogEntry]:
        """Return all entries, most recent first.

        Entries sharing a timestamp are returned latest-appended first.
        """
        with self._lock:
            entries = self._read_entries()
        indexed = list(enumerate(entries))
        indexed.sort(key=lambda pair: (pair[1].unix_timestamp, pair[0]), reverse=True)
        return [entry for _, entry in indexed]
