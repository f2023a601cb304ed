"""User-facing progress output with mode awareness."""

from abc import ABC, abstractmethod

import click

from lpck.cli.output import user_output


class UserFeedback(ABC):
    """Provides user-facing progress output that's mode-aware.

    Pipeline code calls these methods instead of printing, so the same code
    runs quietly under tests and fully verbose from the CLI.

    Mode behavior:
        Interactive:
            - info() → stderr
            - detail() → stderr, dimmed
            - success() → stderr, green
            - warning() → stderr, yellow
            - error() → stderr, red

        Suppressed (--quiet):
            - info(), detail(), success() → suppressed
            - warning(), error() → still shown
    """

    @abstractmethod
    def info(self, message: str) -> None:
        """Show informational message."""

    @abstractmethod
    def detail(self, message: str) -> None:
        """Show secondary detail such as the command being run."""

    @abstractmethod
    def success(self, message: str) -> None:
        """Show success message."""

    @abstractmethod
    def warning(self, message: str) -> None:
        """Show warning message (always shown)."""

    @abstractmethod
    def error(self, message: str) -> None:
        """Show error message (always shown)."""


class InteractiveFeedback(UserFeedback):
    """Feedback shown in interactive mode (all messages)."""

    def info(self, message: str) -> None:
        user_output(message)

    def detail(self, message: str) -> None:
        user_output(click.style(message, dim=True))

    def success(self, message: str) -> None:
        user_output(click.style(message, fg="green"))

    def warning(self, message: str) -> None:
        user_output(click.style(message, fg="yellow"))

    def error(self, message: str) -> None:
        user_output(click.style(message, fg="red"))


class SuppressedFeedback(UserFeedback):
    """Feedback for --quiet runs: only warnings and errors are shown."""

    def info(self, message: str) -> None:
        pass

    def detail(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        user_output(click.style(message, fg="yellow"))

    def error(self, message: str) -> None:
        user_output(click.style(message, fg="red"))
