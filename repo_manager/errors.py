"""repo-manager exception hierarchy with exit codes."""

from pathlib import Path
from typing import Optional

# Exit code constants
EXIT_ERROR = 1  # Generic error / failure
EXIT_USAGE = 5  # Invalid usage / arguments


class RepoManagerError(Exception):
    """Base exception for all repo-manager errors."""

    def __init__(self, message: str, exit_code: int = EXIT_ERROR):
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


class ConfigError(RepoManagerError):
    """Configuration errors (invalid values, unsupported protocol)."""

    exit_code = EXIT_ERROR

    def __init__(self, message: str = "Configuration error"):
        super().__init__(message, exit_code=self.exit_code)


class UserInputError(RepoManagerError):
    """Invalid CLI usage / arguments."""

    exit_code = EXIT_USAGE

    def __init__(self, message: str = "Invalid arguments"):
        super().__init__(message, exit_code=self.exit_code)


class RepoInspectionError(RepoManagerError):
    """
    Git metadata of a single repository could not be read.

    Distinct from "no remotes" so callers can tell the two apart.
    """

    exit_code = EXIT_ERROR

    def __init__(self, path: Path, reason: str = "cannot inspect repository"):
        super().__init__(f"{reason}: {path}", exit_code=self.exit_code)
        self.path = path
        self.reason = reason


class CloneError(RepoManagerError):
    """git clone failed or the target already exists."""

    exit_code = EXIT_ERROR

    def __init__(self, message: str = "Clone failed", stderr: Optional[str] = None):
        super().__init__(message, exit_code=self.exit_code)
        self.stderr = stderr


class RootAccessError(RepoManagerError):
    """The repository root exists but cannot be read."""

    exit_code = EXIT_ERROR

    def __init__(self, root: Path):
        super().__init__(f"cannot read repo root '{root}'", exit_code=self.exit_code)
        self.root = root
