"""Package manifest model and storage interface.

Architecture:
- Manifest: parsed package.json content plus the formatting it was read with
- ManifestStore: abstract interface for locating, loading and saving manifests
- PackageManifest (models.py): pydantic model validating the fields lpck reads
- RealManifestStore (real.py): production implementation on package.json files
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from pydantic import ValidationError

from lpck.core.errors import ManifestLoadError
from lpck.core.manifest.models import PackageManifest

MANIFEST_FILENAME = "package.json"

DependencyField = Literal["dependencies", "devDependencies", "peerDependencies"]

DEPENDENCY_FIELDS: tuple[DependencyField, ...] = (
    "dependencies",
    "devDependencies",
    "peerDependencies",
)


@dataclass
class Manifest:
    """A loaded package manifest.

    Not frozen: substitution and restore mutate the dependency fields of
    `content` in place, and the owning registry saves it back through the
    ManifestStore that loaded it.

    Attributes:
        package_dir: Directory containing the manifest
        content: Full parsed JSON document, unrelated keys included
        indent: Indentation detected at load time, reused when saving
        newline: Line ending detected at load time ("\\n" or "\\r\\n")
    """

    package_dir: Path
    content: dict[str, Any]
    indent: str = "  "
    newline: str = "\n"

    @property
    def path(self) -> Path:
        return self.package_dir / MANIFEST_FILENAME

    @property
    def name(self) -> str | None:
        return self.content.get("name")

    @property
    def version(self) -> str | None:
        return self.content.get("version")

    def dependency_field(self, field_name: DependencyField) -> dict[str, str] | None:
        """Return the live mapping for a dependency field, or None if absent."""
        return self.content.get(field_name)

    def set_dependency_field(self, field_name: DependencyField, deps: dict[str, str]) -> None:
        self.content[field_name] = deps


class ManifestStore(ABC):
    """Abstract interface for manifest I/O.

    All implementations (real and fake) must implement this interface.
    The pipeline decides when and what to mutate; the store only reads and
    writes whole manifests.
    """

    @abstractmethod
    def exists(self, package_dir: Path) -> bool:
        """Check whether package_dir contains a manifest."""
        ...

    @abstractmethod
    def load(self, package_dir: Path) -> Manifest:
        """Load and validate the manifest in package_dir.

        Raises:
            ManifestLoadError: If the manifest is missing, unreadable or malformed
        """
        ...

    @abstractmethod
    def save(self, manifest: Manifest) -> None:
        """Write the manifest back to its package directory.

        Raises:
            OSError: If the manifest cannot be written
        """
        ...


def _describe_validation_error(error: ValidationError) -> str:
    """Flatten pydantic errors into "'devDependencies.b': Input should be ..." lines."""
    parts: list[str] = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"])
        parts.append(f"'{location}': {err['msg']}" if location else err["msg"])
    return "; ".join(parts)


def validate_manifest_content(manifest_path: Path, content: Any) -> dict[str, Any]:
    """Check parsed manifest JSON against PackageManifest.

    The parsed dict itself is what the pipeline keeps and writes back, so key
    order and unrelated keys survive untouched; the model only vouches for
    its shape.

    Returns:
        The content unchanged when valid

    Raises:
        ManifestLoadError: On a non-object document, non-string name/version,
            or a dependency field that is not a string-to-string mapping
    """
    try:
        PackageManifest.model_validate(content)
    except ValidationError as e:
        raise ManifestLoadError(manifest_path, _describe_validation_error(e)) from e
    return content
