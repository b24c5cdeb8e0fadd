"""Fake notifier that records payloads."""

from typing import Any

from permazip.core.notifier.abc import Notifier


class FakeNotifier(Notifier):
    """Captures every payload for test assertions."""

    def __init__(self) -> None:
        self._payloads: list[dict[str, Any]] = []

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return list(self._payloads)

    def notify(self, payload: dict[str, Any]) -> None:
        self._payloads.append(payload)
