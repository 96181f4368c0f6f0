"""Configuration loader."""

import configparser
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from repo_manager.errors import ConfigError

DEFAULT_GITHUB_REGISTRY = "github.com"
DEFAULT_SSH_USER = "git"
DEFAULT_REPO_ROOT = "~/workspaces"
DEFAULT_CLEAN_AFTER = 28
DEFAULT_CLONE_PROTO = "ssh"
DEFAULT_CONFIG_PATH = "~/.config/repo-manager/config"

CLONE_PROTOCOLS = ("ssh", "https")

# Order used by `repo-manager config`
CONFIG_KEYS = (
    "GITHUB_REGISTRY",
    "SSH_USER",
    "REPO_ROOT",
    "CLEAN_AFTER",
    "DEFAULT_CLONE_PROTO",
    "DO_NOT_CLEAN",
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CleanupConfig:
    """Resolved inputs of a single clean run."""

    age_threshold_days: int
    do_not_clean: frozenset[str] = field(default_factory=frozenset)
    force_yes: bool = False


@dataclass(frozen=True)
class Config:
    """repo-manager configuration."""

    repo_root: Path
    github_registry: str = DEFAULT_GITHUB_REGISTRY
    ssh_user: str = DEFAULT_SSH_USER
    clean_after: int = DEFAULT_CLEAN_AFTER
    default_clone_proto: str = DEFAULT_CLONE_PROTO
    do_not_clean: tuple[str, ...] = ()
    config_path: Optional[Path] = None

    def cleanup_config(self, after: Optional[int] = None, force_yes: bool = False) -> CleanupConfig:
        """
        Build the clean-run config, letting CLI flags override file/env values.

        Args:
            after: --after value, if given
            force_yes: --yes flag

        Returns:
            CleanupConfig for this run
        """
        threshold = self.clean_after if after is None else after
        if threshold < 1:
            raise ConfigError(f"invalid clean-after threshold '{threshold}'")

        return CleanupConfig(
            age_threshold_days=threshold,
            do_not_clean=frozenset(self.do_not_clean),
            force_yes=force_yes,
        )

    def as_display(self) -> dict[str, str]:
        """Resolved values keyed by their config-file names."""
        return {
            "GITHUB_REGISTRY": self.github_registry,
            "SSH_USER": self.ssh_user,
            "REPO_ROOT": str(self.repo_root),
            "CLEAN_AFTER": str(self.clean_after),
            "DEFAULT_CLONE_PROTO": self.default_clone_proto,
            "DO_NOT_CLEAN": ",".join(self.do_not_clean),
        }


def _parse_config_file(config_path: Path) -> dict[str, str]:
    """
    Parse a KEY=VALUE config file.

    The file has no section headers, so it is read as the DEFAULT section.

    Returns:
        Dict of config values keyed by upper-case name
    """
    if not config_path.is_file():
        logger.debug(f"No config file at {config_path}")
        return {}

    parser = configparser.ConfigParser(interpolation=None, delimiters=("=",))
    try:
        parser.read_string(
            "[DEFAULT]\n" + config_path.read_text(encoding="utf-8"),
            source=str(config_path),
        )
    except (OSError, configparser.Error) as e:
        raise ConfigError(f"cannot read config file '{config_path}': {e}") from e

    return {key.upper(): value.strip() for key, value in parser["DEFAULT"].items()}


def parse_do_not_clean(value: str) -> tuple[str, ...]:
    """
    Parse a comma-separated do-not-clean list.

    Args:
        value: e.g. "joshmeranda/mytools, joshmeranda/fan"

    Returns:
        Entries in configured order, trimmed, empties dropped
    """
    if not value:
        return ()
    return tuple(entry.strip() for entry in value.split(",") if entry.strip())


def _parse_clean_after(value: str) -> int:
    try:
        days = int(value)
    except ValueError:
        raise ConfigError(f"invalid CLEAN_AFTER '{value}'") from None

    if days < 1:
        raise ConfigError(f"invalid CLEAN_AFTER '{value}'")
    return days


def get_config(environ: Optional[dict[str, str]] = None) -> Config:
    """
    Get current configuration.

    Resolves from (later wins):
    1. Built-in defaults
    2. Config file ($CONFIG or ~/.config/repo-manager/config)
    3. Environment variables

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Config object with resolved values

    Raises:
        ConfigError: If a value is invalid
    """
    env = os.environ if environ is None else environ

    config_path = Path(env.get("CONFIG") or DEFAULT_CONFIG_PATH).expanduser()
    file_config = _parse_config_file(config_path)

    def _lookup(key: str, default: str) -> str:
        value = env.get(key)
        if value is not None:
            return value
        return file_config.get(key, default)

    repo_root = Path(_lookup("REPO_ROOT", DEFAULT_REPO_ROOT)).expanduser()
    github_registry = _lookup("GITHUB_REGISTRY", DEFAULT_GITHUB_REGISTRY)
    ssh_user = _lookup("SSH_USER", DEFAULT_SSH_USER)
    clean_after = _parse_clean_after(_lookup("CLEAN_AFTER", str(DEFAULT_CLEAN_AFTER)))
    default_clone_proto = _lookup("DEFAULT_CLONE_PROTO", DEFAULT_CLONE_PROTO)
    do_not_clean = parse_do_not_clean(_lookup("DO_NOT_CLEAN", ""))

    logger.debug(f"Config file: {config_path}")
    logger.debug(f"Repo root: {repo_root}")
    logger.debug(f"Clean after: {clean_after} days")
    logger.debug(f"Default clone protocol: {default_clone_proto}")
    logger.debug(f"Do not clean: {list(do_not_clean)}")

    return Config(
        repo_root=repo_root,
        github_registry=github_registry,
        ssh_user=ssh_user,
        clean_after=clean_after,
        default_clone_proto=default_clone_proto,
        do_not_clean=do_not_clean,
        config_path=config_path,
    )
