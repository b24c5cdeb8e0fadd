"""In-memory option store for testing."""

from permazip.core.options.abc import OptionStore


class FakeOptionStore(OptionStore):
    """In-memory fake implementation.

    Initial state is provided via constructor; mutations are visible through
    the `values` property for test assertions.
    """

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(values or {})

    @property
    def values(self) -> dict[str, str]:
        """Get a copy of the stored options for test assertions."""
        return self._values.copy()

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> bool:
        if key not in self._values:
            return False
        del self._values[key]
        return True

    def keys(self, prefix: str = "") -> list[str]:
        return sorted(key for key in self._values if key.startswith(prefix))
