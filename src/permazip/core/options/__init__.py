"""Key/value option storage."""

from permazip.core.options.abc import OptionStore, get_or_create_secret
from permazip.core.options.fake import FakeOptionStore
from permazip.core.options.real import JsonFileOptionStore

__all__ = ["OptionStore", "FakeOptionStore", "JsonFileOptionStore", "get_or_create_secret"]
