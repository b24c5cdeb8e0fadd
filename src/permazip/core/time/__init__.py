"""Clock abstraction for testing."""

from permazip.core.time.abc import Time
from permazip.core.time.fake import FakeTime
from permazip.core.time.real import RealTime

__all__ = ["FakeTime", "RealTime", "Time"]
