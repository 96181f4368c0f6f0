"""SCM abstraction layer for repository inspection."""

from pathlib import Path
from typing import Literal, Protocol

# Remote name -> URL. An empty mapping means "no remotes".
RemoteSet = dict[str, str]


class SCM(Protocol):
    """Version control operations the clean, list and clone commands rely on."""

    kind: Literal["git"]

    def remotes_of(self, repo_path: Path) -> RemoteSet:
        """
        Read the named remotes of a repository.

        Args:
            repo_path: Path to repository working copy

        Returns:
            Mapping of remote name to fetch URL (empty if there are none)

        Raises:
            RepoInspectionError: If the repository metadata cannot be read
        """

    def is_dirty(self, repo_path: Path) -> bool:
        """
        Check whether a working tree has uncommitted, staged or untracked changes.

        Args:
            repo_path: Path to repository working copy

        Returns:
            True if dirty, False if clean

        Raises:
            RepoInspectionError: If the repository status cannot be read
        """

    def clone(self, url: str, target: Path) -> None:
        """
        Clone url into target.

        Args:
            url: Clone URL
            target: Destination directory (must not exist)

        Raises:
            CloneError: If the clone fails
        """
