"""Permanent download archives for installed plugins and themes."""

__version__ = "0.1.0"
