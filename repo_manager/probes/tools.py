"""Subprocess execution utilities."""

import logging
import subprocess
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class SubprocessError(Exception):
    """Raised when a subprocess fails or cannot be started."""

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


def run_command(
    cmd: list[str],
    capture: bool = False,
    check: bool = True,
    cwd: Optional[Path] = None,
) -> subprocess.CompletedProcess[str]:
    """
    Run a subprocess command.

    Args:
        cmd: Command and arguments as list (safe, no shell injection)
        capture: Capture stdout/stderr
        check: Raise exception on non-zero exit
        cwd: Working directory (optional)

    Returns:
        CompletedProcess with results

    Raises:
        SubprocessError: If the command cannot be started, or fails and check=True
    """
    logger.debug(f"Running: {' '.join(cmd)}" + (f" (in {cwd})" if cwd else ""))

    try:
        result = subprocess.run(
            cmd,
            capture_output=capture,
            text=True,
            check=False,
            cwd=cwd,
        )
    except OSError as e:
        # git missing from PATH, or cwd vanished/unreadable
        raise SubprocessError(f"Command could not start: {' '.join(cmd)}: {e}") from e

    if check and result.returncode != 0:
        error_msg = f"Command failed: {' '.join(cmd)}"
        if result.stderr:
            error_msg += f"\n{result.stderr.strip()}"
        logger.debug(error_msg)
        raise SubprocessError(error_msg, returncode=result.returncode, stderr=result.stderr or "")

    logger.debug(f"Exit code: {result.returncode}")
    return result


def run_command_output_cwd(cmd: list[str], cwd: Optional[Path] = None) -> str:
    """
    Run command in specific directory and return stdout.

    Args:
        cmd: Command and arguments as list
        cwd: Working directory (optional)

    Returns:
        stdout as string (stripped)

    Raises:
        SubprocessError: If command fails
    """
    result = run_command(cmd, capture=True, check=True, cwd=cwd)
    return result.stdout.strip()
