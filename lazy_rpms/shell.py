"""Shell, git, and output helpers.

Provides thin wrappers around subprocess calls for git, plus the
formatting helpers used to report planner progress in CI logs.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

from .errors import HistoryError
from .models import FileChange


def git(*args: str, cwd: Path, check: bool = True) -> str:
    """Run a git command in ``cwd`` and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "log", "-1").
        cwd: Repository directory to run in.
        check: If True (default), raise on non-zero exit.

    Returns:
        Stripped stdout from the git command.
    """
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=check
    )
    return result.stdout.strip()


class GitHistory:
    """Looks up the last commit touching a file in a git work tree."""

    def __init__(self, workspace: Path) -> None:
        self.workspace = workspace

    def last_change(self, path: str) -> FileChange | None:
        """Return the most recent commit touching exactly ``path``.

        Returns None when the file has no history (untracked, or the
        repository has no commits yet).

        Raises:
            HistoryError: If git itself fails, e.g. the workspace is not a
                repository or git is not installed.
        """
        try:
            out = git("log", "-1", "--format=%H %ct", "--", path, cwd=self.workspace)
        except FileNotFoundError as exc:
            raise HistoryError(path, "git executable not found") from exc
        except subprocess.CalledProcessError as exc:
            if self._has_no_commits():
                return None
            raise HistoryError(path, (exc.stderr or "").strip() or str(exc)) from exc
        if not out:
            return None
        revision, _, timestamp = out.partition(" ")
        return FileChange(revision=revision, timestamp=int(timestamp))

    def _has_no_commits(self) -> bool:
        """True for a valid repository whose HEAD has no commit yet."""
        try:
            git("rev-parse", "--git-dir", cwd=self.workspace)
        except subprocess.CalledProcessError:
            return False
        return not git(
            "rev-parse", "--verify", "--quiet", "HEAD", cwd=self.workspace, check=False
        )


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the planner phases in CI output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def debug(msg: str) -> None:
    """Print a verbose line.

    Under GitHub Actions this is a ``::debug::`` workflow command, only
    shown when step debug logging is enabled. Elsewhere it is printed only
    if LAZY_RPMS_DEBUG is set.
    """
    if os.environ.get("GITHUB_ACTIONS") == "true":
        print(f"::debug::{msg}")
    elif os.environ.get("LAZY_RPMS_DEBUG"):
        print(f"  [debug] {msg}")
