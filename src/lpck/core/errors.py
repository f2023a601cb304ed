"""Error taxonomy for the pack-and-install pipeline.

Every error raised on purpose by lpck derives from LpckError so the CLI has a
single boundary to catch. Errors carrying an external exit status keep it as
an attribute for callers that want to propagate it.
"""

from dataclasses import dataclass
from pathlib import Path


class LpckError(Exception):
    """Base class for all lpck errors."""


class ResolutionError(LpckError):
    """Workspace root is missing a readable manifest or declares bad members."""


class ManifestLoadError(LpckError):
    """A member manifest could not be parsed into a usable Manifest."""

    def __init__(self, manifest_path: Path, reason: str) -> None:
        self.manifest_path = manifest_path
        self.reason = reason
        super().__init__(f"Invalid manifest {manifest_path}: {reason}")


class ConfigError(LpckError):
    """Preset configuration is malformed or does not contain what was asked for."""


class ToolNotFoundError(LpckError):
    """External executable (npm, prepack command) is not installed."""


class ExternalCommandError(LpckError):
    """An external command finished with a non-zero exit status."""

    operation = "run external command"

    def __init__(self, exit_status: int) -> None:
        self.exit_status = exit_status
        super().__init__(f"Failed to {self.operation} (exit status {exit_status})")


class PrepackError(ExternalCommandError):
    operation = "run prepack script"


class PackagingError(ExternalCommandError):
    operation = "pack workspace packages"


class InstallError(ExternalCommandError):
    operation = "install local archives"


@dataclass(frozen=True)
class RestoreFailure:
    """A manifest that could not be written back to its original dependencies."""

    package_name: str
    manifest_path: Path
    error: OSError


class RestoreError(LpckError):
    """Original dependencies could not be written back to one or more manifests.

    The origin workspace is left mutated when this is raised. Callers must
    always report it, even when another error is already propagating.
    """

    def __init__(self, failures: list[RestoreFailure]) -> None:
        self.failures = failures
        lines = ["Failed to restore original dependencies in:"]
        for failure in failures:
            lines.append(f"  {failure.package_name} ({failure.manifest_path}): {failure.error}")
        lines.append("Revert these manifests manually (e.g. `git checkout -- <path>`).")
        super().__init__("\n".join(lines))
