"""Preset configuration: data model and storage.

Presets are named shortcuts for an origin workspace, optionally with a build
command to run before packing. They live in a JSON file:

    {
      "presets": [
        {"name": "ui", "path": "~/code/ui-kit", "prepack": "npm run build"}
      ]
    }
"""

import json
import os
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from lpck.core.errors import ConfigError


class Preset(BaseModel):
    """A named origin workspace."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    prepack: str | None = None

    @field_validator("name", "path")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            msg = "must not be empty"
            raise ValueError(msg)
        return v

    @property
    def origin_dir(self) -> Path:
        return Path(self.path).expanduser()

    @property
    def prepack_command(self) -> str | None:
        """Prepack command line, or None when unset or blank."""
        if self.prepack is None or not self.prepack.strip():
            return None
        return self.prepack


class LpckRc(BaseModel):
    """Complete preset file structure."""

    model_config = ConfigDict(frozen=True)

    presets: list[Preset] = Field(default_factory=list)

    def find_preset(self, name: str) -> Preset | None:
        for preset in self.presets:
            if preset.name == name:
                return preset
        return None

    @staticmethod
    def empty() -> "LpckRc":
        return LpckRc(presets=[])

    @staticmethod
    def template() -> "LpckRc":
        """Placeholder content written by `lpck --init`."""
        return LpckRc(
            presets=[
                Preset(name="<preset-name>", path="<preset-path>", prepack="<prepack-script>"),
            ]
        )

    def to_json(self) -> str:
        return json.dumps(self.model_dump(mode="json"), indent=2) + "\n"


class ConfigStore(ABC):
    """Abstract interface for preset file access."""

    @abstractmethod
    def exists(self) -> bool:
        """Check if the preset file exists."""
        ...

    @abstractmethod
    def load(self) -> LpckRc:
        """Load presets; an absent file loads as no presets.

        Raises:
            ConfigError: If the file is not valid preset JSON
        """
        ...

    @abstractmethod
    def save(self, rc: LpckRc) -> None:
        """Write presets, creating parent directories as needed."""
        ...

    @abstractmethod
    def path(self) -> Path:
        """Path of the preset file (for messages)."""
        ...


class RealConfigStore(ConfigStore):
    """Reads and writes the preset file on disk."""

    def __init__(self, rc_path: Path) -> None:
        self._rc_path = rc_path

    def exists(self) -> bool:
        return self._rc_path.exists()

    def load(self) -> LpckRc:
        if not self._rc_path.exists():
            return LpckRc.empty()

        json_str = self._rc_path.read_text(encoding="utf-8")
        try:
            return LpckRc.model_validate_json(json_str)
        except ValidationError as e:
            raise ConfigError(f"Invalid preset file {self._rc_path}:\n{e}") from e

    def save(self, rc: LpckRc) -> None:
        parent = self._rc_path.parent

        if parent.exists() and not os.access(parent, os.W_OK):
            raise ConfigError(f"Cannot write to directory: {parent}")

        parent.mkdir(parents=True, exist_ok=True)
        temp_path = self._rc_path.with_name(self._rc_path.name + ".tmp")
        temp_path.write_text(rc.to_json(), encoding="utf-8")
        temp_path.replace(self._rc_path)

    def path(self) -> Path:
        return self._rc_path


class InMemoryConfigStore(ConfigStore):
    """Test implementation that keeps presets in memory."""

    def __init__(self, rc: LpckRc | None = None) -> None:
        """Initialize in-memory store.

        Args:
            rc: Initial presets (None = preset file doesn't exist)
        """
        self._rc = rc

    def exists(self) -> bool:
        return self._rc is not None

    def load(self) -> LpckRc:
        if self._rc is None:
            return LpckRc.empty()
        return self._rc

    def save(self, rc: LpckRc) -> None:
        self._rc = rc

    def path(self) -> Path:
        return Path("/fake/lpck/.lpckrc")
