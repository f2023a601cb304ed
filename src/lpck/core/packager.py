"""Packing the origin workspace into local archives."""

import logging
from pathlib import Path

from lpck.core.errors import PackagingError, PrepackError
from lpck.core.npm import PackageManager
from lpck.core.user_feedback import UserFeedback

logger = logging.getLogger(__name__)


def run_prepack(
    package_manager: PackageManager, command_line: str, cwd: Path, feedback: UserFeedback
) -> None:
    """Run a preset's build step before anything is loaded or rewritten.

    Raises:
        PrepackError: If the command exits non-zero
    """
    feedback.info("Executing prepack script...")
    feedback.detail(command_line)
    exit_status = package_manager.run_script(command_line, cwd)
    if exit_status != 0:
        raise PrepackError(exit_status)


def pack_all(
    package_manager: PackageManager, root_dir: Path, archive_dir: Path, feedback: UserFeedback
) -> None:
    """Pack every member of the workspace at root_dir into archive_dir.

    Creates archive_dir if needed and invokes the pack tool exactly once.
    The archives themselves are not inspected.

    Raises:
        PackagingError: If the pack command exits non-zero
    """
    archive_dir.mkdir(parents=True, exist_ok=True)
    feedback.info("Packing...")
    feedback.detail(" ".join(package_manager.format_pack_command(root_dir, archive_dir)))
    exit_status = package_manager.pack_workspaces(root_dir, archive_dir)
    if exit_status != 0:
        raise PackagingError(exit_status)
    logger.debug("Packed %s into %s", root_dir, archive_dir)
