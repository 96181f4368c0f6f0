"""Test fixtures and utilities."""

import os
import subprocess
import time
from pathlib import Path
from typing import Callable, Optional

import click.testing
import pytest

from repo_manager.errors import RepoInspectionError

DAY = 24 * 60 * 60

_CONFIG_ENV = (
    "CONFIG",
    "GITHUB_REGISTRY",
    "SSH_USER",
    "REPO_ROOT",
    "CLEAN_AFTER",
    "DEFAULT_CLONE_PROTO",
    "DO_NOT_CLEAN",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path: Path):
    """Keep the developer's own config and environment out of every test."""
    for key in _CONFIG_ENV:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("CONFIG", str(tmp_path / "no-such-config"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")


@pytest.fixture
def runner() -> click.testing.CliRunner:
    """Click CliRunner for testing CLI commands."""
    return click.testing.CliRunner()


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    """Empty repository root."""
    root = tmp_path / "repos"
    root.mkdir()
    return root


def _git(args: list[str], cwd: Path) -> None:
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True)


@pytest.fixture
def make_git_repo() -> Callable[..., Path]:
    """
    Factory creating a committed git repository.

    Usage: make_git_repo(root, "owner", "name", remotes={"origin": url})
    """

    def _make(
        root: Path,
        owner: str,
        name: str,
        remotes: Optional[dict[str, str]] = None,
    ) -> Path:
        repo_dir = root / owner / name
        repo_dir.mkdir(parents=True)

        _git(["init", "--quiet"], repo_dir)
        (repo_dir / "README.md").write_text(f"# {name}\n")
        _git(["add", "."], repo_dir)
        _git(["commit", "--quiet", "-m", "Initial"], repo_dir)

        for remote_name, url in (remotes or {}).items():
            _git(["remote", "add", remote_name, url], repo_dir)

        return repo_dir

    return _make


@pytest.fixture
def make_old() -> Callable[[Path, int], None]:
    """Set the mtime of path and everything under it to days ago."""

    def _make_old(path: Path, days_old: int) -> None:
        stamp = time.time() - days_old * DAY
        stack = [path]
        while stack:
            current = stack.pop()
            if current.is_dir() and not current.is_symlink():
                stack.extend(current.iterdir())
            os.utime(current, times=(stamp, stamp), follow_symlinks=False)

    return _make_old


class FakeSCM:
    """In-memory SCM: remotes and dirtiness keyed by repository path."""

    kind = "git"

    def __init__(
        self,
        remotes: Optional[dict[Path, dict[str, str]]] = None,
        dirty: Optional[set[Path]] = None,
        broken: Optional[set[Path]] = None,
    ):
        self.remotes = remotes or {}
        self.dirty = dirty or set()
        self.broken = broken or set()
        self.calls: list[tuple[str, Path]] = []
        self.cloned: list[tuple[str, Path]] = []

    def _check(self, repo_path: Path) -> None:
        if repo_path in self.broken:
            raise RepoInspectionError(repo_path, "not a git repository")

    def remotes_of(self, repo_path: Path) -> dict[str, str]:
        self.calls.append(("remotes_of", repo_path))
        self._check(repo_path)
        return dict(self.remotes.get(repo_path, {}))

    def is_dirty(self, repo_path: Path) -> bool:
        self.calls.append(("is_dirty", repo_path))
        self._check(repo_path)
        return repo_path in self.dirty

    def clone(self, url: str, target: Path) -> None:
        self.cloned.append((url, target))
        target.mkdir(parents=True)


@pytest.fixture
def fake_scm_class() -> type:
    """The FakeSCM class, for tests that build their own instance."""
    return FakeSCM


@pytest.fixture
def make_dir_repo() -> Callable[[Path, str, str], Path]:
    """Factory creating a plain <root>/<owner>/<name> directory with one file."""

    def _make(root: Path, owner: str, name: str) -> Path:
        repo_dir = root / owner / name
        repo_dir.mkdir(parents=True)
        (repo_dir / "README.md").write_text(f"# {name}\n")
        return repo_dir

    return _make
