"""Git SCM backend implementation."""

import logging
from pathlib import Path
from typing import Literal

from repo_manager.errors import CloneError, RepoInspectionError
from repo_manager.probes.tools import SubprocessError, run_command, run_command_output_cwd
from repo_manager.scm.protocol import RemoteSet

logger = logging.getLogger(__name__)


class GitSCM:
    """Git implementation of SCM protocol."""

    kind: Literal["git"] = "git"

    def ensure_repo(self, repo_path: Path) -> None:
        """
        Ensure a Git working copy is rooted exactly at path.

        A plain directory nested inside some other repository would otherwise
        report that repository's remotes and status.

        Args:
            repo_path: Path to Git repository root

        Raises:
            RepoInspectionError: If not a valid Git repository root
        """
        try:
            cmd = ["git", "rev-parse", "--show-toplevel"]
            result = run_command_output_cwd(cmd, cwd=repo_path)
        except SubprocessError as e:
            logger.debug(f"Git repository check failed: {e}")
            raise RepoInspectionError(repo_path, "not a git repository") from e

        if Path(result).resolve() != repo_path.resolve():
            raise RepoInspectionError(repo_path, "not a git repository root")

        logger.debug(f"Git repository verified: {repo_path}")

    def remotes_of(self, repo_path: Path) -> RemoteSet:
        """
        Read remotes from `git remote -v`.

        Args:
            repo_path: Path to Git repository root

        Returns:
            Mapping of remote name to fetch URL
        """
        self.ensure_repo(repo_path)

        try:
            result = run_command_output_cwd(["git", "remote", "-v"], cwd=repo_path)
        except SubprocessError as e:
            logger.debug(f"Failed to list remotes of {repo_path}: {e}")
            raise RepoInspectionError(repo_path, "cannot read remotes") from e

        remotes = parse_remote_output(result)
        logger.debug(f"Remotes of {repo_path}: {sorted(remotes)}")
        return remotes

    def is_dirty(self, repo_path: Path) -> bool:
        """
        Check if Git working tree has uncommitted or untracked changes.

        Args:
            repo_path: Path to Git repository root

        Returns:
            True if dirty, False if clean
        """
        self.ensure_repo(repo_path)

        try:
            cmd = ["git", "status", "--porcelain", "--untracked-files=normal"]
            result = run_command_output_cwd(cmd, cwd=repo_path)
        except SubprocessError as e:
            logger.debug(f"Failed to check Git status of {repo_path}: {e}")
            raise RepoInspectionError(repo_path, "cannot read worktree status") from e

        is_dirty = bool(result.strip())

        if is_dirty:
            logger.debug(f"Git repository is dirty: {repo_path}")
        else:
            logger.debug(f"Git repository is clean: {repo_path}")

        return is_dirty

    def clone(self, url: str, target: Path) -> None:
        """
        Clone a repository with `git clone`.

        Args:
            url: Clone URL
            target: Destination directory
        """
        try:
            result = run_command(["git", "clone", "--quiet", url, str(target)], capture=True)
            logger.debug(f"Cloned {url} into {target}")
            if result.stderr:
                logger.debug(f"Output: {result.stderr.strip()}")
        except SubprocessError as e:
            logger.error(f"Failed to clone {url}: {e}")
            raise CloneError(f"failed to clone '{url}'", stderr=e.stderr) from e


def parse_remote_output(output: str) -> RemoteSet:
    """
    Parse `git remote -v` output into a remote mapping.

    Each remote appears twice, once for fetch and once for push; the fetch
    URL wins.

    Args:
        output: Raw command output

    Returns:
        Mapping of remote name to URL
    """
    remotes: RemoteSet = {}

    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue

        parts = line.split()
        if len(parts) < 2:
            continue

        name, url = parts[0], parts[1]
        kind = parts[2] if len(parts) > 2 else "(fetch)"

        if kind == "(fetch)" or name not in remotes:
            remotes[name] = url

    return remotes
