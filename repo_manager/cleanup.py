"""Cleanup of stale clones under the repo root."""

import logging
import shutil
import time
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional

from repo_manager.config import CleanupConfig
from repo_manager.errors import RepoInspectionError
from repo_manager.repos import RepoRef, repo_age, sorted_repos
from repo_manager.scm.protocol import SCM

logger = logging.getLogger(__name__)

# Writes one line of transcript
Echo = Callable[[str], None]
# Returns the next input line, or None at end of input
ReadLine = Callable[[], Optional[str]]


class SkipReason(str, Enum):
    """Why a candidate is left alone without asking."""

    DO_NOT_CLEAN = "do-not-clean listed"
    UNCLEAN_WORKTREE = "unclean worktree"
    NO_REMOTES = "no remotes"


class Outcome(str, Enum):
    """Final state of a repository after a clean run."""

    INELIGIBLE = "ineligible"
    SKIPPED = "skipped"
    CONFIRMED_DELETE = "confirmed_delete"
    DECLINED_DELETE = "declined_delete"
    FAILED = "failed"


class Answer(str, Enum):
    """Interpretation of one line typed at the delete prompt."""

    DECLINE = "decline"
    DELETE = "delete"
    REPROMPT = "reprompt"


@dataclass
class PlannedRepo:
    """A candidate and what the safety checks found."""

    ref: RepoRef
    age: timedelta
    skip_reason: Optional[SkipReason] = None
    error: Optional[str] = None


@dataclass
class CleanupPlan:
    """Candidates older than the threshold, in owner/name order."""

    candidates: list[PlannedRepo] = field(default_factory=list)
    ineligible: list[RepoRef] = field(default_factory=list)


@dataclass
class CleanDecision:
    """Per-repository result of execute_cleanup."""

    ref: RepoRef
    outcome: Outcome
    reason: Optional[SkipReason] = None
    error: Optional[str] = None


def skip_message(ref: RepoRef, reason: SkipReason) -> str:
    """Transcript line for a skipped candidate."""
    if reason is SkipReason.DO_NOT_CLEAN:
        return f"skipping {ref.key}"
    if reason is SkipReason.UNCLEAN_WORKTREE:
        return f"repo '{ref.key}' has an unclean worktree, skipping"
    return f"repo '{ref.key}' has no remotes, skipping"


def prompt_message(ref: RepoRef) -> str:
    return f"delete '{ref.key}'? [N|y]"


def parse_answer(line: str) -> Answer:
    """
    Interpret an answer to the delete prompt.

    Empty, "n" or "N" declines; "y" or "Y" deletes; anything else asks again.

    Args:
        line: Raw input line

    Returns:
        Answer
    """
    answer = line.strip()
    if answer in ("", "n", "N"):
        return Answer.DECLINE
    if answer in ("y", "Y"):
        return Answer.DELETE
    return Answer.REPROMPT


def is_candidate(age: timedelta, config: CleanupConfig) -> bool:
    """True if age exceeds the clean-after threshold."""
    return age > timedelta(days=config.age_threshold_days)


def check_skip(ref: RepoRef, config: CleanupConfig, scm: SCM) -> Optional[SkipReason]:
    """
    Run the safety checks on a candidate.

    Checks run in order: do-not-clean list, dirty worktree, missing remotes.
    The first that applies wins and later checks are not run.

    Args:
        ref: Candidate repository
        config: Clean-run config
        scm: SCM backend

    Returns:
        SkipReason, or None if the candidate may be deleted

    Raises:
        RepoInspectionError: If git metadata cannot be read
    """
    if ref.key in config.do_not_clean:
        return SkipReason.DO_NOT_CLEAN

    if scm.is_dirty(ref.path):
        return SkipReason.UNCLEAN_WORKTREE

    if not scm.remotes_of(ref.path):
        return SkipReason.NO_REMOTES

    return None


def evaluate_repo(
    ref: RepoRef,
    config: CleanupConfig,
    scm: SCM,
    now: Optional[float] = None,
) -> Optional[PlannedRepo]:
    """
    Age and safety checks for one repository, read from disk right now.

    Args:
        ref: Repository to evaluate
        config: Clean-run config
        scm: SCM backend
        now: Current POSIX timestamp (defaults to time.time())

    Returns:
        PlannedRepo for a candidate, or None if it is not old enough
    """
    try:
        age = repo_age(ref, now=now)
    except OSError as e:
        logger.debug(f"Cannot compute age of {ref.key}: {e}")
        return PlannedRepo(ref=ref, age=timedelta(0), error=str(e))

    if not is_candidate(age, config):
        return None

    planned = PlannedRepo(ref=ref, age=age)
    try:
        planned.skip_reason = check_skip(ref, config, scm)
    except RepoInspectionError as e:
        planned.error = e.reason

    logger.debug(f"Candidate {ref.key}: age={age}, skip={planned.skip_reason}")
    return planned


def plan_cleanup(
    root: Path,
    config: CleanupConfig,
    scm: SCM,
    now: Optional[float] = None,
) -> CleanupPlan:
    """
    Evaluate every repository under root without changing anything.

    Used for previews; a real run evaluates each repository just before
    acting on it (see execute_cleanup).

    Args:
        root: Repo root
        config: Clean-run config
        scm: SCM backend
        now: Current POSIX timestamp (defaults to time.time())

    Returns:
        CleanupPlan
    """
    if now is None:
        now = time.time()

    plan = CleanupPlan()

    for ref in sorted_repos(root):
        planned = evaluate_repo(ref, config, scm, now=now)
        if planned is None:
            plan.ineligible.append(ref)
        else:
            plan.candidates.append(planned)

    logger.debug(
        f"Cleanup plan: {len(plan.candidates)} candidates, {len(plan.ineligible)} ineligible"
    )
    return plan


def confirm(ref: RepoRef, echo: Echo, read_line: ReadLine) -> bool:
    """
    Ask whether to delete a repository until a valid answer is given.

    Args:
        ref: Repository being asked about
        echo: Transcript writer
        read_line: Input reader; None means end of input and declines

    Returns:
        True to delete, False to keep
    """
    while True:
        echo(prompt_message(ref))
        line = read_line()
        if line is None:
            logger.debug(f"End of input while confirming {ref.key}, declining")
            return False

        answer = parse_answer(line)
        logger.debug(f"Answer for {ref.key}: {answer.value}")

        if answer is Answer.DELETE:
            return True
        if answer is Answer.DECLINE:
            return False


def delete_repo(ref: RepoRef) -> None:
    """
    Recursively remove a repository directory.

    Args:
        ref: Repository to remove

    Raises:
        OSError: If removal fails
    """
    logger.debug(f"Deleting {ref.path}")
    shutil.rmtree(ref.path)
    logger.debug(f"Deleted {ref.key}")


def _handle_candidate(
    planned: PlannedRepo,
    config: CleanupConfig,
    echo: Echo,
    read_line: ReadLine,
) -> CleanDecision:
    ref = planned.ref

    if planned.error is not None:
        echo(f"failed to inspect '{ref.key}': {planned.error}")
        return CleanDecision(ref=ref, outcome=Outcome.FAILED, error=planned.error)

    if planned.skip_reason is not None:
        echo(skip_message(ref, planned.skip_reason))
        return CleanDecision(ref=ref, outcome=Outcome.SKIPPED, reason=planned.skip_reason)

    if not config.force_yes and not confirm(ref, echo, read_line):
        return CleanDecision(ref=ref, outcome=Outcome.DECLINED_DELETE)

    try:
        delete_repo(ref)
    except OSError as e:
        logger.error(f"Failed to delete {ref.path}: {e}")
        echo(f"failed to delete '{ref.key}' ({ref.path}): {e.strerror or e}")
        return CleanDecision(ref=ref, outcome=Outcome.FAILED, error=str(e))

    return CleanDecision(ref=ref, outcome=Outcome.CONFIRMED_DELETE)


def execute_cleanup(
    refs: Iterable[RepoRef],
    config: CleanupConfig,
    scm: SCM,
    echo: Echo,
    read_line: ReadLine,
    now: Optional[float] = None,
) -> list[CleanDecision]:
    """
    Walk repositories in order, reporting skips and deleting confirmed ones.

    Each repository is evaluated (age, do-not-clean, worktree, remotes) only
    when its turn comes, then handled completely (skip, prompt, delete)
    before the next one is looked at. A repository that changed while an
    earlier prompt was waiting is judged on its current state. Failures are
    reported and never stop the run.

    Args:
        refs: Repositories in owner/name order
        config: Clean-run config
        scm: SCM backend
        echo: Transcript writer
        read_line: Input reader for the confirmation prompt
        now: Fixed POSIX timestamp for age checks (defaults to the time of
            each evaluation)

    Returns:
        One CleanDecision per repository, ineligible ones included
    """
    decisions = []

    for ref in refs:
        planned = evaluate_repo(ref, config, scm, now=now)
        if planned is None:
            decisions.append(CleanDecision(ref=ref, outcome=Outcome.INELIGIBLE))
            continue

        decisions.append(_handle_candidate(planned, config, echo, read_line))

    return decisions


def clean(
    root: Path,
    config: CleanupConfig,
    scm: SCM,
    echo: Echo,
    read_line: ReadLine,
    now: Optional[float] = None,
) -> list[CleanDecision]:
    """Run a clean over every repository under root."""
    return execute_cleanup(sorted_repos(root), config, scm, echo, read_line, now=now)


def render_cleanup_plan(plan: CleanupPlan) -> list[str]:
    """
    Preview lines for --dry-run.

    Skips are reported with their normal wording; deletable candidates as
    "would delete '<owner/name>'".
    """
    lines = []
    for planned in plan.candidates:
        if planned.error is not None:
            lines.append(f"failed to inspect '{planned.ref.key}': {planned.error}")
        elif planned.skip_reason is not None:
            lines.append(skip_message(planned.ref, planned.skip_reason))
        else:
            lines.append(f"would delete '{planned.ref.key}'")
    return lines
