"""Locations lpck reads and writes outside the workspaces it operates on."""

from dataclasses import dataclass
from pathlib import Path

HOME_ENV_VAR = "LPCK_HOME"


@dataclass(frozen=True)
class LpckPaths:
    """Base directory for packed archives and the preset file.

    A single base path replaces separate project-local and user-global
    layouts: pass `<project>/.lpck` for the former, `~/.lpck` (the default)
    for the latter.
    """

    home: Path

    @property
    def packs_dir(self) -> Path:
        return self.home / "packs"

    @property
    def rc_path(self) -> Path:
        return self.home / ".lpckrc"

    @staticmethod
    def default() -> "LpckPaths":
        return LpckPaths(home=Path.home() / ".lpck")

    @staticmethod
    def from_option(home: Path | None) -> "LpckPaths":
        """Use an explicit base directory if given, else the default."""
        if home is None:
            return LpckPaths.default()
        return LpckPaths(home=home.expanduser().resolve())
