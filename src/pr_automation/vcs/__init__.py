"""
Version control system (VCS) integration.

This package wraps the Git commands needed to collect pull request
inputs: the current branch, the origin repository, and the commit log,
changed files and diff statistics between two branches.
"""

from .git_client import GitClient, GitError, PRInputs  # noqa: F401
