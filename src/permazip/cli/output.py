"""Output helpers with clear intent.

user_output goes to stderr for humans; machine_output goes to stdout so it
can be piped or captured.
"""

from typing import Any

import click


def user_output(message: Any = "", nl: bool = True) -> None:
    """Write a message for the user (stderr)."""
    click.echo(message, nl=nl, err=True)


def machine_output(message: Any = "", nl: bool = True) -> None:
    """Write a result meant for other programs (stdout)."""
    click.echo(message, nl=nl)
