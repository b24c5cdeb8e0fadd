"""JSON-file backed option store."""

import json
import logging
import threading
from pathlib import Path

from permazip.core.fileio import atomic_write_text
from permazip.core.options.abc import OptionStore

logger = logging.getLogger(__name__)


class JsonFileOptionStore(OptionStore):
    """Production option store persisting a single JSON object.

    Every write rewrites the whole document atomically. A missing or corrupt
    document reads as empty.
    """

    def __init__(self, path: Path) -> None:
        """Create JsonFileOptionStore.

        Args:
            path: Location of the JSON document (created on first write)
        """
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable option store %s: %s", self._path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring option store %s: expected a JSON object", self._path)
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def _write(self, values: dict[str, str]) -> None:
        atomic_write_text(self._path, json.dumps(values, indent=2, sort_keys=True) + "\n")

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            values = self._read()
            values[key] = value
            self._write(values)

    def delete(self, key: str) -> bool:
        with self._lock:
            values = self._read()
            if key not in values:
                return False
            del values[key]
            self._write(values)
            return True

    def keys(self, prefix: str = "") -> list[str]:
        with self._lock:
            return sorted(key for key in self._read() if key.startswith(prefix))
