"""
Git client implementation for pr_automation.

This module wraps the read-only Git commands the PR workflow needs. Every
subprocess call goes through :meth:`GitClient._run` so that unit tests can
mock a single seam. Failures raise :class:`GitError`; deciding on a
fallback is left to the caller.
"""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


REMOTE_URL_PATTERN = re.compile(r"github\.com[:/](.+?)(?:\.git)?$")


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


@dataclass
class PRInputs:
    """Everything the generator needs about a branch pair."""

    commits: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)
    diff_stat: str = ""


def _non_empty_lines(output: str) -> List[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


class GitClient:
    """Client for reading branch information from a Git repository."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` entry is found or the filesystem
        root is reached.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                return None
            current = current.parent

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If Git cannot be started, or exits with a non-zero status when
            ``check`` is True.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            logger.error("Failed to execute Git: %s", e)
            raise GitError(f"Failed to execute git: {e}") from e

        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    # ------------------------------------------------------------------
    # Repository information
    # ------------------------------------------------------------------
    def get_current_branch(self) -> str:
        """Return the name of the checked out branch.

        Raises
        ------
        GitError
            If the branch cannot be determined (e.g. detached HEAD).
        """
        result = self._run(["branch", "--show-current"])
        branch = result.stdout.strip()
        if not branch:
            raise GitError("Not on a branch (detached HEAD)")
        return branch

    def get_repository_name(self, remote: str = "origin") -> Optional[str]:
        """Return ``owner/repo`` parsed from a GitHub remote URL.

        Both ``https://github.com/owner/repo.git`` and
        ``git@github.com:owner/repo.git`` forms are understood. Returns
        ``None`` when the remote does not point at GitHub.
        """
        result = self._run(["remote", "get-url", remote])
        match = REMOTE_URL_PATTERN.search(result.stdout.strip())
        return match.group(1) if match else None

    # ------------------------------------------------------------------
    # Branch comparison
    # ------------------------------------------------------------------
    def get_commit_messages(self, source: str, target: str) -> List[str]:
        """Return subject lines of commits on ``source`` but not ``target``."""
        result = self._run(["log", f"{target}..{source}", "--pretty=format:%s"])
        return _non_empty_lines(result.stdout)

    def get_changed_files(self, source: str, target: str) -> List[str]:
        """Return paths changed between ``target`` and ``source``."""
        result = self._run(["diff", "--name-only", f"{target}..{source}"])
        return _non_empty_lines(result.stdout)

    def get_diff_stat(self, source: str, target: str) -> str:
        """Return the ``git diff --stat`` summary between the branches."""
        result = self._run(["diff", "--stat", f"{target}..{source}"])
        return result.stdout.strip()

    def fetch_pr_inputs(self, source: str, target: str) -> PRInputs:
        """Collect commits, changed files and diff statistics in one go.

        Raises
        ------
        GitError
            If any of the underlying commands fails.
        """
        return PRInputs(
            commits=self.get_commit_messages(source, target),
            files=self.get_changed_files(source, target),
            diff_stat=self.get_diff_stat(source, target),
        )
