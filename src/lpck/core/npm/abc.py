"""Package manager operations interface.

This module defines the invocation contract lpck needs from the external
package manager, following the ops pattern: an ABC here, a subprocess-backed
implementation in real.py, an in-memory fake in tests.

Every operation returns the tool's exit status; deciding whether a non-zero
status is fatal belongs to the pipeline, not to the adapter.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path


class PackageManager(ABC):
    """Abstract interface for pack, install and script invocations."""

    @abstractmethod
    def pack_workspaces(self, source_dir: Path, destination_dir: Path) -> int:
        """Pack every workspace member of source_dir into destination_dir.

        Produces one `<sanitized-name>-<version>.tgz` per member.

        Args:
            source_dir: Workspace root directory
            destination_dir: Existing directory to write archives into

        Returns:
            Exit status of the pack command
        """
        ...

    @abstractmethod
    def install(self, target_dir: Path, archive_paths: Sequence[Path]) -> int:
        """Install archives into target_dir without saving them to its manifest.

        Args:
            target_dir: Consumer project directory
            archive_paths: Archive files to install

        Returns:
            Exit status of the install command
        """
        ...

    @abstractmethod
    def run_script(self, command_line: str, cwd: Path) -> int:
        """Run an opaque shell-style command line, e.g. a prepack build.

        Args:
            command_line: Command and arguments as one string
            cwd: Directory to run the command in

        Returns:
            Exit status of the command
        """
        ...

    @abstractmethod
    def format_pack_command(self, source_dir: Path, destination_dir: Path) -> list[str]:
        """Command line pack_workspaces runs, for display."""
        ...

    @abstractmethod
    def format_install_command(self, archive_paths: Sequence[Path]) -> list[str]:
        """Command line install runs, for display."""
        ...
