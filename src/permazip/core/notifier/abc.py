"""Abstract interface for rebuild notifications."""

from abc import ABC, abstractmethod
from typing import Any


class Notifier(ABC):
    """Sends a notification after an update event rebuilt an archive."""

    @abstractmethod
    def notify(self, payload: dict[str, Any]) -> None:
        """Deliver payload. Implementations must not raise on delivery failure."""
        ...


class NullNotifier(Notifier):
    """Used when no webhook is configured."""

    def notify(self, payload: dict[str, Any]) -> None:
        return None
