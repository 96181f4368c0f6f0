"""Subprocess probes."""

from repo_manager.probes.tools import (
    SubprocessError,
    run_command,
    run_command_output_cwd,
)

__all__ = [
    "SubprocessError",
    "run_command",
    "run_command_output_cwd",
]
