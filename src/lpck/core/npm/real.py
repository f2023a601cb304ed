"""Production PackageManager that shells out to the npm CLI."""

import shlex
import subprocess
from collections.abc import Sequence
from pathlib import Path

from lpck.core.errors import ConfigError
from lpck.core.npm.abc import PackageManager
from lpck.core.subprocess import run_subprocess_with_context


class RealNpm(PackageManager):
    """npm operations via subprocess.

    Pack and prepack stdout is discarded (npm pack lists every file it
    archives); stderr is inherited so failures stay visible. Install
    inherits both streams.

    Example:
        npm = RealNpm()
        status = npm.pack_workspaces(Path("~/code/lib").expanduser(), packs_dir)
    """

    def __init__(self, executable: str = "npm") -> None:
        self._executable = executable

    def format_pack_command(self, source_dir: Path, destination_dir: Path) -> list[str]:
        return [
            self._executable,
            "pack",
            "--pack-destination",
            str(destination_dir),
            "--workspaces",
        ]

    def format_install_command(self, archive_paths: Sequence[Path]) -> list[str]:
        return [self._executable, "install", *(str(p) for p in archive_paths), "--no-save"]

    def pack_workspaces(self, source_dir: Path, destination_dir: Path) -> int:
        return run_subprocess_with_context(
            self.format_pack_command(source_dir, destination_dir),
            operation_context="pack workspace packages",
            cwd=source_dir,
            stdout=subprocess.DEVNULL,
        )

    def install(self, target_dir: Path, archive_paths: Sequence[Path]) -> int:
        return run_subprocess_with_context(
            self.format_install_command(archive_paths),
            operation_context="install local archives",
            cwd=target_dir,
        )

    def run_script(self, command_line: str, cwd: Path) -> int:
        cmd = shlex.split(command_line)
        if not cmd:
            raise ConfigError("Prepack command line is empty")
        return run_subprocess_with_context(
            cmd,
            operation_context="run prepack script",
            cwd=cwd,
            stdout=subprocess.DEVNULL,
        )
