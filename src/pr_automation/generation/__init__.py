"""
Pull request content generation.

Titles come from :mod:`pr_automation.generation.title_generator` and
Markdown descriptions from
:mod:`pr_automation.generation.description_generator`. Both are pure
functions of their arguments.
"""

from __future__ import annotations

from typing import Optional, Sequence

from pr_automation.analysis.models import PRContent

from .description_generator import generate_description  # noqa: F401
from .title_generator import classify_commit, generate_title, most_common_type  # noqa: F401


def generate_pr_content(
    commits: Sequence[str],
    files: Sequence[str],
    diff_stat: str,
    source_branch: str,
    target_branch: str,
    branch: Optional[str] = None,
) -> PRContent:
    """Generate both the title and the description in one call."""
    return PRContent(
        title=generate_title(commits, files, branch=branch),
        description=generate_description(commits, files, diff_stat, source_branch, target_branch),
    )
