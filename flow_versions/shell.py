"""Shell and git utilities.

Provides simple wrappers around subprocess calls for git operations, plus
output formatting helpers.
"""

from __future__ import annotations

import subprocess
from pathlib import Path


def git(*args: str, cwd: Path | None = None, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "status", "--short").
        cwd: Repository directory; defaults to the current directory.
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail (e.g., tag lookup).

    Returns:
        Stripped stdout from the git command.
    """
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=check
    )
    return result.stdout.strip()


def current_branch(cwd: Path | None = None) -> str:
    """Name of the checked-out branch."""
    return git("rev-parse", "--abbrev-ref", "HEAD", cwd=cwd)


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate major phases of a workflow step in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")
