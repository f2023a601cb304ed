"""Output utilities for CLI commands with clear intent.

user_output goes to stderr so that machine_output (stdout) stays parseable.
"""

import click


def user_output(message: str = "") -> None:
    """Write a human-facing message to stderr."""
    click.echo(message, err=True)


def machine_output(message: str = "") -> None:
    """Write machine-readable output to stdout."""
    click.echo(message)
