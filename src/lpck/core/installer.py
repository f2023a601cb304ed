"""Selecting and installing local archives into the consumer project."""

import logging
import shutil
from collections.abc import Mapping, Sequence
from pathlib import Path

from lpck.core.errors import InstallError
from lpck.core.npm import PackageManager
from lpck.core.substitution import archive_path
from lpck.core.user_feedback import UserFeedback
from lpck.core.workspace import AvailablePackage

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".tgz"


def select_packages(
    declared: Mapping[str, str] | None, available: Sequence[AvailablePackage]
) -> list[AvailablePackage]:
    """Return the available packages the target declares as dependencies.

    Matching is by name only; declared version ranges are ignored. The
    result keeps the order of `available`. A target without a dependencies
    field (None) selects nothing, exactly like an empty one.
    """
    if not declared:
        return []
    return [package for package in available if package.name in declared]


def list_archives(archive_dir: Path) -> list[Path]:
    """Every archive currently in archive_dir, sorted by file name."""
    if not archive_dir.is_dir():
        return []
    return sorted(
        path
        for path in archive_dir.iterdir()
        if path.is_file() and path.name.endswith(ARCHIVE_SUFFIX)
    )


def install_archives(
    package_manager: PackageManager,
    target_dir: Path,
    archive_dir: Path,
    selected: Sequence[AvailablePackage],
    *,
    raw_mode: bool,
    feedback: UserFeedback,
) -> list[Path]:
    """Install archives into target_dir without saving them to its manifest.

    Args:
        package_manager: Package manager to invoke
        target_dir: Consumer project directory
        archive_dir: Directory holding the packed archives
        selected: Packages chosen by select_packages; those whose archive
            is missing (after a failed pack) are skipped with a warning
        raw_mode: Install every archive in archive_dir instead of `selected`,
            for packages the target only needs indirectly
        feedback: Progress output

    Returns:
        Archive paths passed to the install command; empty when there was
        nothing to install, in which case the command is not run

    Raises:
        InstallError: If the install command exits non-zero
    """
    if raw_mode:
        paths = list_archives(archive_dir)
    else:
        paths = []
        for package in selected:
            path = archive_path(archive_dir, package.archive_name)
            # A failed pack can leave some archives unwritten
            if not path.is_file():
                feedback.warning(f"Skipping {package.name}: archive {path.name} was not packed")
                continue
            paths.append(path)

    if not paths:
        feedback.info("No local archives to install")
        return []

    feedback.info("Installing dependencies...")
    feedback.detail(" ".join(package_manager.format_install_command(paths)))
    exit_status = package_manager.install(target_dir, paths)
    if exit_status != 0:
        raise InstallError(exit_status)
    return paths


def clean_up_archives(archive_dir: Path) -> bool:
    """Remove the archive directory and everything in it.

    Returns:
        True if there was a directory to remove
    """
    if not archive_dir.exists():
        return False
    shutil.rmtree(archive_dir)
    logger.debug("Removed %s", archive_dir)
    return True
