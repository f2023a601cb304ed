"""Subprocess execution for external tools whose exit status is the contract.

npm and prepack scripts report success or failure through their exit status,
so unlike a capture-and-check wrapper this returns the status to the caller
and only translates a missing executable into a domain error.
"""

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import IO, Any

from lpck.core.errors import ResolutionError, ToolNotFoundError

logger = logging.getLogger(__name__)


def run_subprocess_with_context(
    cmd: Sequence[str],
    operation_context: str,
    cwd: Path | None = None,
    stdin: int | IO[Any] | None = subprocess.DEVNULL,
    stdout: int | IO[Any] | None = None,
    stderr: int | IO[Any] | None = None,
) -> int:
    """Run an external command to completion and return its exit status.

    Output streams are inherited unless redirected, so the external tool's
    progress and errors reach the terminal directly.

    Args:
        cmd: Command and arguments to execute
        operation_context: Human-readable description of operation
        cwd: Working directory for command execution
        stdin: Stdin handle (default: DEVNULL, the tools never prompt)
        stdout: Stdout handle (default: inherit)
        stderr: Stderr handle (default: inherit)

    Returns:
        Exit status of the command

    Raises:
        ToolNotFoundError: If the command binary is not found
        ResolutionError: If cwd does not exist
    """
    cmd_str = " ".join(str(arg) for arg in cmd)
    logger.debug("Running %s in %s: %s", operation_context, cwd, cmd_str)
    try:
        result = subprocess.run(
            list(cmd),
            cwd=cwd,
            stdin=stdin,
            stdout=stdout,
            stderr=stderr,
            check=False,
        )
    except FileNotFoundError as e:
        if cwd is not None and not cwd.is_dir():
            raise ResolutionError(
                f"Working directory not found while trying to {operation_context}: {cwd}"
            ) from e
        error_msg = f"Command not found while trying to {operation_context}: {cmd[0]}"
        error_msg += f"\nFull command: {cmd_str}"
        raise ToolNotFoundError(error_msg) from e

    logger.debug("%s exited with status %d", cmd[0], result.returncode)
    return result.returncode
