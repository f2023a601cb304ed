"""CLI error handling utilities with styled output.

All errors use a red "Error:" prefix and exit with status 1. Commands call
these at the CLI boundary; core code raises LpckError subclasses instead.
"""

from typing import NoReturn, TypeVar

import click

from lpck.cli.output import user_output

T = TypeVar("T")


def fail(error_message: str) -> NoReturn:
    """Output a styled error and exit with status 1.

    Raises:
        SystemExit: Always (with exit code 1)
    """
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
            fail(error_message)

    @staticmethod
    def not_none(value: T | None, error_message: str) -> T:
        """Ensure value is not None, otherwise output styled error and exit.

        Narrows `T | None` to `T` for the type checker.

        Example:
            >>> preset = Ensure.not_none(rc.find_preset(name), f"Preset {name} not found")
        """
        if value is None:
            fail(error_message)
        return value
