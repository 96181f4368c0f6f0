"""Discovery and age of the clones under a repo root."""

import logging
import os
import time
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Iterator, Optional

from repo_manager.errors import RootAccessError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class RepoRef:
    """A clone at <root>/<owner>/<name>. Ordered by owner/name."""

    owner: str
    name: str
    path: Path

    @property
    def key(self) -> str:
        """Identity key, e.g. "joshmeranda/fan"."""
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.key


def _subdirs(path: Path) -> list[Path]:
    return [child for child in path.iterdir() if child.is_dir()]


def scan_repos(root: Path) -> Iterator[RepoRef]:
    """
    Yield a RepoRef for every <root>/<owner>/<name> directory.

    A missing root yields nothing. Owners are visited in sorted order and
    names within an owner in sorted order; use sorted_repos for the
    owner/name string order.

    Args:
        root: Repository root

    Raises:
        RootAccessError: If root exists but cannot be listed
    """
    if not root.exists():
        logger.debug(f"Repo root does not exist: {root}")
        return

    try:
        owners = sorted(_subdirs(root))
    except OSError as e:
        raise RootAccessError(root) from e

    for owner_dir in owners:
        try:
            names = sorted(_subdirs(owner_dir))
        except OSError as e:
            logger.warning(f"Cannot list owner directory {owner_dir}: {e}")
            continue

        for repo_dir in names:
            yield RepoRef(owner=owner_dir.name, name=repo_dir.name, path=repo_dir)


def sorted_repos(root: Path) -> list[RepoRef]:
    """All repositories under root, sorted by owner/name."""
    repos = sorted(scan_repos(root), key=lambda ref: ref.key)
    logger.debug(f"Found {len(repos)} repositories under {root}")
    return repos


def walk_paths(root: Path) -> Iterator[Path]:
    """
    Yield root and every path beneath it, depth-first.

    Uses an explicit stack rather than recursion. Symlinked directories are
    yielded but not descended into.

    Args:
        root: Directory to walk
    """
    stack = [root]

    while stack:
        current = stack.pop()
        yield current

        if current.is_symlink() or not current.is_dir():
            continue

        for child in current.iterdir():
            stack.append(child)


def last_modified(root: Path) -> float:
    """
    Most recent modification time of root or anything under it.

    Args:
        root: Directory to scan

    Returns:
        mtime as a POSIX timestamp
    """
    newest = 0.0
    for path in walk_paths(root):
        mtime = os.lstat(path).st_mtime
        if mtime > newest:
            newest = mtime
    return newest


def repo_age(ref: RepoRef, now: Optional[float] = None) -> timedelta:
    """
    Time elapsed since anything in the repository was last touched.

    Args:
        ref: Repository
        now: Current POSIX timestamp (defaults to time.time())

    Returns:
        Age as a timedelta (never negative)
    """
    if now is None:
        now = time.time()

    age = timedelta(seconds=max(0.0, now - last_modified(ref.path)))
    logger.debug(f"Age of {ref.key}: {age}")
    return age
