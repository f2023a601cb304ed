"""Reversible rewrite of workspace cross-references to local archive paths.

Before packing, every dependency on another workspace package is pointed at
the archive that package is about to be packed into, so the packed archives
reference each other instead of registry versions. The rewrite is undone from
the snapshots the registry took at load time.

The pair is exposed as a context manager so the restore runs on every exit
path of the packing step:

    with local_archive_substitution(registry, store, archive_dir) as token:
        pack_all(package_manager, root_dir, archive_dir)
    # manifests are back to their original dependencies here
"""

import copy
import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from lpck.core.errors import RestoreError, RestoreFailure
from lpck.core.manifest import DEPENDENCY_FIELDS, ManifestStore
from lpck.core.workspace.registry import AvailablePackage, WorkspaceRegistry

logger = logging.getLogger(__name__)


def archive_path(archive_dir: Path, archive_name: str) -> Path:
    """Location of a packed archive inside the archive directory."""
    return archive_dir / archive_name


def apply_local_archives(
    registry: WorkspaceRegistry,
    store: ManifestStore,
    archive_dir: Path,
    available: Sequence[AvailablePackage] | None = None,
) -> list[str]:
    """Point dependencies on known packages at their local archive paths.

    A dependency is rewritten when its key matches a known package name,
    whatever its current value. Known packages are the registry's own
    packable entries unless `available` is given, which lets one registry's
    references be rewritten against another, already packed, workspace.

    Args:
        registry: Packages whose manifests are rewritten
        store: Store used to save rewritten manifests
        archive_dir: Directory the archives are (or will be) packed into
        available: Packages to link against instead of the registry's own

    Returns:
        Names of the packages that were linked, unique, in first-seen order

    Raises:
        OSError: If a rewritten manifest cannot be saved
    """
    packages = registry.available_packages() if available is None else list(available)
    by_name = {package.name: package for package in packages}
    linked: list[str] = []

    for name, entry in registry.items():
        manifest = entry.manifest
        changed = False

        for field_name in DEPENDENCY_FIELDS:
            deps = manifest.dependency_field(field_name)
            if not deps:
                continue

            new_deps = dict(deps)
            field_changed = False
            for dep_name in new_deps:
                package = by_name.get(dep_name)
                if package is None:
                    continue
                if dep_name not in linked:
                    linked.append(dep_name)
                local_path = str(archive_path(archive_dir, package.archive_name))
                if new_deps[dep_name] != local_path:
                    new_deps[dep_name] = local_path
                    field_changed = True

            if field_changed:
                manifest.set_dependency_field(field_name, new_deps)
                changed = True

        # Untouched manifests are not rewritten, so their mtimes stay put
        if changed:
            store.save(manifest)
            logger.debug("Linked local archives in %s", name)

    return linked


def restore_original_dependencies(registry: WorkspaceRegistry, store: ManifestStore) -> list[str]:
    """Write every non-empty load-time dependency snapshot back to its manifest.

    Fields that were empty or absent at load time are left as they are;
    substitution only replaces values of existing keys, so there is nothing
    to undo in them. A failed save does not stop the remaining restores.

    Returns:
        Names of the packages whose manifests were written back

    Raises:
        RestoreError: If any manifest could not be saved, listing all of them
    """
    restored: list[str] = []
    failures: list[RestoreFailure] = []

    for name, entry in registry.items():
        manifest = entry.manifest
        changed = False

        for field_name in DEPENDENCY_FIELDS:
            original = entry.original(field_name)
            if not original:
                continue
            if manifest.dependency_field(field_name) != dict(original):
                manifest.set_dependency_field(field_name, copy.deepcopy(dict(original)))
                changed = True

        if not changed:
            continue

        try:
            store.save(manifest)
        except OSError as e:
            logger.error("Could not restore %s: %s", manifest.path, e)
            failures.append(RestoreFailure(package_name=name, manifest_path=manifest.path, error=e))
            continue
        restored.append(name)

    if failures:
        raise RestoreError(failures)
    return restored


@dataclass
class MutationToken:
    """Handle for one substitution: what was linked and whether it was undone.

    The pre-image lives in the registry's snapshots; the token records the
    outcome for the caller.
    """

    registry: WorkspaceRegistry
    archive_dir: Path
    linked: list[str] = field(default_factory=list)
    restored: list[str] = field(default_factory=list)
    is_restored: bool = False


@contextmanager
def local_archive_substitution(
    registry: WorkspaceRegistry,
    store: ManifestStore,
    archive_dir: Path,
    available: Sequence[AvailablePackage] | None = None,
) -> Iterator[MutationToken]:
    """Link local archives for the duration of the block, then restore.

    The restore also runs when the substitution itself fails halfway, so a
    partially rewritten workspace is reverted too. A RestoreError raised here
    replaces (and chains) any exception escaping the block.
    """
    token = MutationToken(registry=registry, archive_dir=archive_dir)
    try:
        token.linked = apply_local_archives(registry, store, archive_dir, available)
        yield token
    finally:
        token.restored = restore_original_dependencies(registry, store)
        token.is_restored = True
