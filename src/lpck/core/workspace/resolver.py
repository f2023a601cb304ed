"""Workspace member discovery.

Expands the `workspaces` globs declared in a root package.json into an ordered
mapping of package name to package directory. Read-only: nothing here writes
to disk.
"""

import logging
from pathlib import Path
from typing import Any

from lpck.core.errors import ManifestLoadError, ResolutionError
from lpck.core.manifest import MANIFEST_FILENAME, ManifestStore

logger = logging.getLogger(__name__)

IGNORED_DIR_NAMES = frozenset({"node_modules", ".git"})


def workspace_patterns(root_manifest_path: Path, declared: Any) -> list[str]:
    """Normalize a root manifest's `workspaces` value into glob patterns.

    npm accepts either an array of globs or an object with a `packages`
    array (the yarn-compatible form). A missing field means no members.

    Raises:
        ResolutionError: If the field has any other shape
    """
    if declared is None:
        return []

    if isinstance(declared, dict):
        declared = declared.get("packages", [])

    if not isinstance(declared, list) or not all(isinstance(p, str) for p in declared):
        raise ResolutionError(
            f"Invalid 'workspaces' in {root_manifest_path}: expected a list of glob patterns"
        )

    return list(declared)


def _normalize_pattern(pattern: str) -> str:
    pattern = pattern.strip()
    while pattern.startswith("./"):
        pattern = pattern[2:]
    return pattern.rstrip("/")


def _expand_pattern(root_dir: Path, pattern: str) -> list[Path]:
    """Return package directories under root_dir matching pattern, sorted."""
    if pattern in ("", "."):
        return []
    if Path(pattern).is_absolute():
        raise ResolutionError(f"Workspace pattern must be relative to the root: {pattern}")

    matches: list[Path] = []
    for candidate in root_dir.glob(pattern):
        if not candidate.is_dir():
            continue
        relative_parts = candidate.relative_to(root_dir).parts
        if any(part in IGNORED_DIR_NAMES for part in relative_parts):
            continue
        if not (candidate / MANIFEST_FILENAME).is_file():
            continue
        matches.append(candidate)
    return sorted(matches)


def find_member_dirs(root_dir: Path, patterns: list[str]) -> list[Path]:
    """Expand include patterns, then drop anything matched by a `!` pattern.

    Order follows the include patterns; a directory matched by several
    patterns is listed once, at its first match.
    """
    included: list[Path] = []
    excluded: set[Path] = set()

    for raw_pattern in patterns:
        negated = raw_pattern.strip().startswith("!")
        pattern = _normalize_pattern(raw_pattern.strip().lstrip("!"))
        matches = _expand_pattern(root_dir, pattern)
        if negated:
            excluded.update(matches)
            continue
        for match in matches:
            if match not in included:
                included.append(match)

    return [d for d in included if d not in excluded and d != root_dir]


def resolve_workspace(
    root_dir: Path, store: ManifestStore, *, include_root: bool
) -> dict[str, Path]:
    """Map workspace member names to their package directories.

    Args:
        root_dir: Directory holding the workspace root package.json
        store: Store used to read the root and member manifests
        include_root: Whether to append the root package itself

    Returns:
        Ordered mapping of package name to directory; members first, in
        pattern order, then the root when include_root is set

    Raises:
        ResolutionError: If the root manifest is missing or unreadable, the
            `workspaces` field is malformed, or two packages share a name
        ManifestLoadError: If a member manifest is malformed
    """
    root_dir = root_dir.resolve()
    if not store.exists(root_dir):
        raise ResolutionError(f"No {MANIFEST_FILENAME} found in {root_dir}")

    try:
        root_manifest = store.load(root_dir)
    except ManifestLoadError as e:
        raise ResolutionError(f"Cannot read workspace root manifest: {e}") from e

    patterns = workspace_patterns(root_manifest.path, root_manifest.content.get("workspaces"))

    members: dict[str, Path] = {}
    for member_dir in find_member_dirs(root_dir, patterns):
        manifest = store.load(member_dir)
        name = manifest.name or member_dir.name
        if name in members:
            raise ResolutionError(
                f"Duplicate workspace package name '{name}': "
                f"{members[name]} and {member_dir}"
            )
        members[name] = member_dir

    logger.debug("Resolved %d workspace members under %s", len(members), root_dir)

    if include_root:
        root_name = root_manifest.name or root_dir.name
        if root_name in members:
            raise ResolutionError(
                f"Workspace root '{root_name}' has the same name as member {members[root_name]}"
            )
        members[root_name] = root_dir

    return members
