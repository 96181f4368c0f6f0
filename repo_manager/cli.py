"""repo-manager CLI entrypoint."""

import functools
import sys
from typing import Any, Callable, Optional, TextIO, TypeVar

import click

from repo_manager import __version__
from repo_manager.config import get_config
from repo_manager.errors import RepoManagerError
from repo_manager.logging import get_logger, setup_logging
from repo_manager.scm import GitSCM

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _handle_errors(func: F) -> F:
    """Report domain errors as a plain line and exit with their code."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except RepoManagerError as e:
            logger.debug(f"{type(e).__name__}: {e.message}")
            click.echo(e.message)
            sys.exit(e.exit_code)

    return wrapper  # type: ignore[return-value]


def _line_reader(stream: TextIO) -> Callable[[], Optional[str]]:
    """Read answers one line at a time from stream; None at end of input."""

    def read_line() -> Optional[str]:
        line = stream.readline()
        if line == "":
            return None
        return line

    return read_line


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.version_option(version=__version__, prog_name="repo-manager")
def repo_manager(verbose: bool) -> None:
    """repo-manager - clone, list and clean an owner/repo workspace."""
    setup_logging(verbose=verbose)


@repo_manager.command()
@click.option(
    "--after",
    type=click.IntRange(min=1),
    default=None,
    metavar="DAYS",
    help="Clean repositories untouched for more than DAYS (default: CLEAN_AFTER)",
)
@click.option("-y", "--yes", "force_yes", is_flag=True, help="Delete without asking")
@click.option("--dry-run", is_flag=True, help="Show what would be deleted")
@_handle_errors
def clean(after: Optional[int], force_yes: bool, dry_run: bool) -> None:
    """
    Delete clones that have not been touched recently.

    Repositories on the do-not-clean list, with uncommitted or untracked
    changes, or without any remote are never deleted. Every other candidate
    is confirmed interactively unless --yes is given.

    Examples:
      repo-manager clean                 # Ask about each stale clone
      repo-manager clean --after 7       # Use a 7 day threshold
      repo-manager clean --yes           # Delete stale clones without asking
      repo-manager clean --dry-run       # Preview only
    """
    from repo_manager.cleanup import clean as clean_repos
    from repo_manager.cleanup import plan_cleanup, render_cleanup_plan

    config = get_config()
    cleanup_config = config.cleanup_config(after=after, force_yes=force_yes)
    scm = GitSCM()

    if dry_run:
        plan = plan_cleanup(config.repo_root, cleanup_config, scm)
        for line in render_cleanup_plan(plan):
            click.echo(line)
        return

    read_line = _line_reader(click.get_text_stream("stdin"))
    decisions = clean_repos(
        config.repo_root, cleanup_config, scm, echo=click.echo, read_line=read_line
    )
    logger.debug(f"Clean finished: {[(d.ref.key, d.outcome.value) for d in decisions]}")


@repo_manager.command("list")
@_handle_errors
def list_repos() -> None:
    """List managed clones and their remotes."""
    from repo_manager.listing import collect_rows
    from repo_manager.render.text import render_repo_table

    config = get_config()
    rows = collect_rows(config.repo_root, GitSCM())
    click.echo(render_repo_table(rows), nl=False)


@repo_manager.command()
@click.option("--ssh", "protocol", flag_value="ssh", default=None, help="Clone over ssh")
@click.option("--https", "protocol", flag_value="https", help="Clone over https")
@click.argument("args", nargs=-1)
@_handle_errors
def clone(protocol: Optional[str], args: tuple[str, ...]) -> None:
    """
    Clone a repository into REPO_ROOT/<owner>/<repo>.

    ARGS is either OWNER REPO or a clone URL.

    Examples:
      repo-manager clone joshmeranda mytools
      repo-manager clone --https joshmeranda mytools
      repo-manager clone git@github.com:joshmeranda/mytools.git
    """
    from repo_manager.clone import clone as clone_repo

    config = get_config()
    path = clone_repo(list(args), config, GitSCM(), protocol=protocol)
    logger.debug(f"Cloned into {path}")


@repo_manager.command("config")
@_handle_errors
def show_config() -> None:
    """Show the resolved configuration."""
    from repo_manager.render.text import render_config

    config = get_config()
    click.echo(render_config(config.as_display()), nl=False)


def main() -> None:
    """Console script entrypoint."""
    repo_manager()


if __name__ == "__main__":
    main()
