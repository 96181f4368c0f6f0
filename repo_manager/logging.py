"""Logging configuration."""

import logging
import sys


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging for repo-manager.

    Logs go to stderr, never mixed with the clean transcript or list table.

    Args:
        verbose: If True, log at DEBUG level; otherwise WARNING.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(name)s: %(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (e.g., "cleanup")

    Returns:
        Logger instance
    """
    if name.startswith("repo_manager"):
        return logging.getLogger(name)
    return logging.getLogger(f"repo_manager.{name}")
