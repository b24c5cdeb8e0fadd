"""Fake Time implementation for testing.

FakeTime returns scripted timestamps and records how often it was asked.
"""

from datetime import UTC, datetime, timedelta

from permazip.core.time.abc import Time


class FakeTime(Time):
    """Deterministic clock.

    This class has NO public setup methods. All state is provided via constructor
    or captured during execution.
    """

    def __init__(
        self,
        start: datetime | None = None,
        step: timedelta | None = None,
    ) -> None:
        """Create FakeTime.

        Args:
            start: First value returned by now() (defaults to 2024-01-01 UTC)
            step: Amount the clock advances after each now() call (defaults to zero)
        """
        self._current = start or datetime(2024, 1, 1, tzinfo=UTC)
        self._step = step or timedelta(0)
        self._now_calls = 0

    @property
    def now_calls(self) -> int:
        """Number of now() calls, for test assertions."""
        return self._now_calls

    def now(self) -> datetime:
        self._now_calls += 1
        value = self._current
        self._current = value + self._step
        return value
