"""Clone repositories into <root>/<owner>/<repo>."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from repo_manager.config import CLONE_PROTOCOLS, Config
from repo_manager.errors import CloneError, ConfigError, UserInputError
from repo_manager.scm.protocol import SCM

logger = logging.getLogger(__name__)

_SSH_URL = re.compile(
    r"^(?:ssh://)?[^@/\s]+@(?P<host>[^:/\s]+)[:/]"
    r"(?P<owner>[^/\s]+)/(?P<repo>[^/\s]+?)(?:\.git)?/?$"
)
_HTTPS_URL = re.compile(
    r"^https?://(?P<host>[^/\s]+)/(?P<owner>[^/\s]+)/(?P<repo>[^/\s]+?)(?:\.git)?/?$"
)


@dataclass(frozen=True)
class CloneTarget:
    """Where and from what a clone is made."""

    owner: str
    repo: str
    url: str

    @property
    def key(self) -> str:
        return f"{self.owner}/{self.repo}"

    def path(self, root: Path) -> Path:
        return root / self.owner / self.repo


def clone_url(owner: str, repo: str, protocol: str, config: Config) -> str:
    """
    Build the clone URL for owner/repo.

    Args:
        owner: Repository owner
        repo: Repository name
        protocol: "ssh" or "https"
        config: Resolved config (registry host, ssh user)

    Returns:
        Clone URL

    Raises:
        ConfigError: If protocol is unsupported
    """
    if protocol == "ssh":
        return f"{config.ssh_user}@{config.github_registry}:{owner}/{repo}.git"
    if protocol == "https":
        return f"https://{config.github_registry}/{owner}/{repo}.git"
    raise ConfigError(f"unsupported DEFAULT_CLONE_PROTO '{protocol}'")


def parse_clone_url(url: str, registry: str) -> tuple[str, str]:
    """
    Detect owner and repo from an ssh or https URL on the registry host.

    Args:
        url: e.g. "git@github.com:joshmeranda/mytools.git"
        registry: Expected host, e.g. "github.com"

    Returns:
        (owner, repo)

    Raises:
        UserInputError: If the URL is not recognized or is for another host
    """
    for pattern in (_SSH_URL, _HTTPS_URL):
        match = pattern.match(url.strip())
        if match and match.group("host") == registry:
            return match.group("owner"), match.group("repo")

    raise UserInputError("could not detect owner and repo from url")


def resolve_target(args: list[str], config: Config, protocol: Optional[str] = None) -> CloneTarget:
    """
    Turn clone arguments into a CloneTarget.

    Args:
        args: [owner, repo] or [url]
        config: Resolved config
        protocol: Protocol flag; None uses DEFAULT_CLONE_PROTO

    Returns:
        CloneTarget
    """
    if not args:
        raise UserInputError("expected args but found none")
    if len(args) > 2:
        raise UserInputError("found more args than expected")

    if len(args) == 1:
        owner, repo = parse_clone_url(args[0], config.github_registry)
        return CloneTarget(owner=owner, repo=repo, url=args[0])

    owner, repo = args
    chosen = protocol or config.default_clone_proto
    if chosen not in CLONE_PROTOCOLS:
        raise ConfigError(f"unsupported DEFAULT_CLONE_PROTO '{chosen}'")

    return CloneTarget(owner=owner, repo=repo, url=clone_url(owner, repo, chosen, config))


def clone(
    args: list[str],
    config: Config,
    scm: SCM,
    protocol: Optional[str] = None,
) -> Path:
    """
    Clone a repository into the repo root.

    Args:
        args: [owner, repo] or [url]
        config: Resolved config
        scm: SCM backend
        protocol: "ssh", "https", or None for the configured default

    Returns:
        Path of the new clone

    Raises:
        UserInputError: Bad arguments
        ConfigError: Unsupported protocol
        CloneError: Target exists or git clone failed
    """
    target = resolve_target(args, config, protocol)
    path = target.path(config.repo_root)

    if path.exists():
        raise CloneError(f"repo '{target.key}' already exists")

    # Directories this call creates, innermost first
    created = [d for d in (path.parent, config.repo_root) if not d.exists()]

    logger.debug(f"Cloning {target.url} into {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        scm.clone(target.url, path)
    except CloneError:
        _remove_empty_dirs(created)
        raise

    return path


def _remove_empty_dirs(dirs: list[Path]) -> None:
    for directory in dirs:
        try:
            directory.rmdir()
        except OSError as e:
            logger.debug(f"Leaving {directory} in place: {e}")
            return
        logger.debug(f"Removed {directory}")
