"""Webhook notifications after archive rebuilds."""

from permazip.core.notifier.abc import Notifier, NullNotifier
from permazip.core.notifier.fake import FakeNotifier
from permazip.core.notifier.real import HttpNotifier

__all__ = ["FakeNotifier", "HttpNotifier", "Notifier", "NullNotifier"]
