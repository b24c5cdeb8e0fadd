"""CLI error handling utilities with styled output.

All errors use a red "Error:" prefix and exit with code 1.
"""

from pathlib import Path
from typing import NoReturn, TypeVar

import click

from permazip.cli.output import user_output

T = TypeVar("T")


def _fail(error_message: str) -> NoReturn:
    user_output(click.style("Error: ", fg="red") + error_message)
    raise SystemExit(1)


class Ensure:
    """Helper class for asserting invariants with consistent error handling."""

    @staticmethod
    def invariant(condition: bool, error_message: str) -> None:
        """Ensure condition is true, otherwise output styled error and exit.

        Raises:
            SystemExit: If condition is false (with exit code 1)
        """
        if not condition:
            _fail(error_message)

    @staticmethod
    def not_none(value: T | None, error_message: str) -> T:
        """Ensure value is not None, otherwise output styled error and exit.

        Returns:
            The value unchanged if not None (with narrowed type T)
        """
        if value is None:
            _fail(error_message)
        return value

    @staticmethod
    def directory_exists(path: Path, error_message: str | None = None) -> None:
        """Ensure path is an existing directory."""
        if not path.is_dir():
            _fail(error_message or f"Directory not found: {path}")
