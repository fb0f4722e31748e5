"""
Hosted repository integration.

This package contains the :class:`GitHubClient` used to create, inspect,
review and merge pull requests through the GitHub REST API.
"""

from .github_client import GitHubClient, GitHubError, split_repo  # noqa: F401
