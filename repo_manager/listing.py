"""Collect the remotes of every clone for `repo-manager list`."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from repo_manager.errors import RepoInspectionError
from repo_manager.repos import sorted_repos
from repo_manager.scm.protocol import SCM, RemoteSet

logger = logging.getLogger(__name__)


@dataclass
class ReportRow:
    """One line of the list table."""

    owner_repo: str
    remote_url_by_name: RemoteSet = field(default_factory=dict)
    error: Optional[str] = None


def collect_rows(root: Path, scm: SCM) -> list[ReportRow]:
    """
    Build one row per repository under root, in owner/name order.

    A repository whose remotes cannot be read is kept with no remotes.

    Args:
        root: Repo root
        scm: SCM backend

    Returns:
        List of ReportRow
    """
    rows: list[ReportRow] = []

    for ref in sorted_repos(root):
        try:
            remotes = scm.remotes_of(ref.path)
        except RepoInspectionError as e:
            logger.warning(f"Cannot read remotes of {ref.key}: {e.reason}")
            rows.append(ReportRow(owner_repo=ref.key, error=e.reason))
            continue

        rows.append(ReportRow(owner_repo=ref.key, remote_url_by_name=dict(remotes)))

    return rows


def remote_columns(rows: list[ReportRow]) -> list[str]:
    """Sorted union of remote names across all rows."""
    names: set[str] = set()
    for row in rows:
        names.update(row.remote_url_by_name)
    return sorted(names)
