"""In-memory registry of the packages loaded for one pipeline run.

A WorkspaceRegistry is built once per workspace (origin and target each get
their own) and never gains or loses entries afterwards. Only the dependency
fields of the manifests it holds are mutated, by substitution and restore.
"""

import copy
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from lpck.core.manifest import DependencyField, Manifest, ManifestStore
from lpck.core.naming import archive_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AvailablePackage:
    """A package the origin workspace packs, as seen by the target side."""

    name: str
    archive_name: str


@dataclass(frozen=True)
class RegistryEntry:
    """A loaded manifest together with its pre-mutation dependency snapshots.

    The snapshots are deep copies taken before any substitution and are
    read-only views; an absent field is snapshotted as an empty mapping.
    archive_name is None when the manifest has no version to pack under.
    """

    manifest: Manifest
    archive_name: str | None
    original_dependencies: Mapping[str, str]
    original_dev_dependencies: Mapping[str, str]
    original_peer_dependencies: Mapping[str, str]

    def original(self, field_name: DependencyField) -> Mapping[str, str]:
        """Return the load-time snapshot of a dependency field."""
        if field_name == "dependencies":
            return self.original_dependencies
        if field_name == "devDependencies":
            return self.original_dev_dependencies
        return self.original_peer_dependencies


def _snapshot(manifest: Manifest, field_name: DependencyField) -> Mapping[str, str]:
    deps = manifest.dependency_field(field_name)
    return MappingProxyType(copy.deepcopy(deps) if deps else {})


def create_entry(manifest: Manifest) -> RegistryEntry:
    """Build a RegistryEntry, snapshotting the manifest's current dependencies."""
    name = manifest.name
    version = manifest.version
    return RegistryEntry(
        manifest=manifest,
        archive_name=archive_name(name, version) if name and version else None,
        original_dependencies=_snapshot(manifest, "dependencies"),
        original_dev_dependencies=_snapshot(manifest, "devDependencies"),
        original_peer_dependencies=_snapshot(manifest, "peerDependencies"),
    )


class WorkspaceRegistry:
    """Ordered mapping of package name to RegistryEntry for one workspace."""

    def __init__(self, entries: Mapping[str, RegistryEntry]) -> None:
        self._entries = dict(entries)

    @staticmethod
    def load(members: Mapping[str, Path], store: ManifestStore) -> "WorkspaceRegistry":
        """Load every member manifest and snapshot its dependency fields.

        Args:
            members: Resolver output, package name to package directory
            store: Store to load manifests from

        Raises:
            ManifestLoadError: If any manifest is malformed. No partial
                registry is returned, since substitution must see every
                cross-reference.
        """
        entries: dict[str, RegistryEntry] = {}
        for name, package_dir in members.items():
            entries[name] = create_entry(store.load(package_dir))
        logger.debug("Loaded registry with %d packages", len(entries))
        return WorkspaceRegistry(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def get(self, name: str) -> RegistryEntry | None:
        return self._entries.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._entries)

    def entries(self) -> list[RegistryEntry]:
        return list(self._entries.values())

    def items(self) -> list[tuple[str, RegistryEntry]]:
        return list(self._entries.items())

    def available_packages(self) -> list[AvailablePackage]:
        """Project entries that can be packed into AvailablePackages, in order."""
        return [
            AvailablePackage(name=name, archive_name=entry.archive_name)
            for name, entry in self._entries.items()
            if entry.archive_name is not None
        ]


def declared_dependencies(registry: WorkspaceRegistry) -> dict[str, str] | None:
    """Union of the `dependencies` fields across a (target) registry.

    Returns None when no entry declares a `dependencies` field at all, which
    callers report differently from an empty mapping.
    """
    declared: dict[str, str] | None = None
    for entry in registry.entries():
        deps = entry.manifest.dependency_field("dependencies")
        if deps is None:
            continue
        if declared is None:
            declared = {}
        for dep_name, spec in deps.items():
            declared.setdefault(dep_name, spec)
    return declared

