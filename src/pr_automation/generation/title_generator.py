"""
Pull request title generation from commit subjects.

A single commit lends its subject verbatim. Several commits are reduced
to their most common Conventional Commit style type, which is mapped to
a fixed phrase and suffixed with the areas of the code base touched.
"""

from __future__ import annotations

import re
from typing import List, Optional, Pattern, Sequence, Tuple

from pr_automation.analysis.file_classifier import classify

DEFAULT_COMMIT_TYPE = "update"

# Tested in order against the start of the subject; first match wins.
COMMIT_TYPE_PATTERNS: List[Tuple[str, Pattern[str]]] = [
    ("feat", re.compile(r"^(feat|feature)", re.IGNORECASE)),
    ("fix", re.compile(r"^(fix|bugfix)", re.IGNORECASE)),
    ("docs", re.compile(r"^(docs|documentation)", re.IGNORECASE)),
    ("style", re.compile(r"^(style|formatting)", re.IGNORECASE)),
    ("refactor", re.compile(r"^(refactor|refactoring)", re.IGNORECASE)),
    ("test", re.compile(r"^(test|tests)", re.IGNORECASE)),
    ("chore", re.compile(r"^(chore|maintenance)", re.IGNORECASE)),
]

TYPE_LABELS = {
    "feat": "Add new features",
    "fix": "Fix bugs and issues",
    "docs": "Update documentation",
    "style": "Improve styling and formatting",
    "refactor": "Refactor code structure",
    "test": "Add and update tests",
    "chore": "Maintenance and cleanup",
    "update": "Update codebase",
}


def classify_commit(message: str) -> str:
    """Return the commit type of a subject line, ``update`` if none matches."""
    for commit_type, pattern in COMMIT_TYPE_PATTERNS:
        if pattern.match(message):
            return commit_type
    return DEFAULT_COMMIT_TYPE


def most_common_type(commit_types: Sequence[str]) -> str:
    """Return the modal commit type.

    The list is reduced left to right and the accumulator is only replaced
    when a later entry occurs strictly more often, so on a tie the type
    seen first in commit order wins.
    """
    if not commit_types:
        return DEFAULT_COMMIT_TYPE
    best = commit_types[0]
    for candidate in commit_types[1:]:
        if commit_types.count(candidate) > commit_types.count(best):
            best = candidate
    return best


def generate_title(
    commits: Sequence[str],
    files: Sequence[str],
    branch: Optional[str] = None,
) -> str:
    """Derive a PR title.

    Parameters
    ----------
    commits : Sequence[str]
        Commit subject lines in the order the VCS returned them.
    files : Sequence[str]
        Changed file paths.
    branch : str, optional
        Current branch name, used only when there are no commits.

    Returns
    -------
    str
        ``Update from <branch>`` without commits, the subject itself for a
        single commit, otherwise a phrase for the modal commit type with
        ``in <categories>`` appended when any category matched.
    """
    if not commits:
        return f"Update from {branch or 'current branch'}"

    if len(commits) == 1:
        return commits[0]

    commit_type = most_common_type([classify_commit(message) for message in commits])
    areas = classify(files)
    area_text = f" in {', '.join(areas)}" if areas else ""
    return f"{TYPE_LABELS[commit_type]}{area_text}"
