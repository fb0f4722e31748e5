"""
Heuristics for categorizing changed files and rating review risk.

The functions here are pure: they only read their arguments, never raise
for any input shape, and return new values. Empty input degrades to
defaults (no categories, zero files, low risk).
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from pr_automation.analysis.categories import ALL_CATEGORIES, CATEGORY_PATTERNS, OTHER
from pr_automation.analysis.models import CodeAnalysis, FileChange, RiskLevel

# A single file changing more lines than this escalates the risk level.
HIGH_RISK_CHANGE_THRESHOLD = 100


def classify(file_paths: Sequence[str]) -> List[str]:
    """Return the categories that at least one path belongs to.

    Each category is tested independently, so a path may count towards
    several categories here (``app.test.js`` is both Frontend and Tests).
    Categories are returned in table order; ``Other`` is never included.
    """
    return [
        category
        for category, pattern in CATEGORY_PATTERNS
        if any(pattern.search(path) for path in file_paths)
    ]


def classify_detailed(file_paths: Iterable[str]) -> Dict[str, List[str]]:
    """Bucket every path into exactly one category.

    Parameters
    ----------
    file_paths : Iterable[str]
        Changed file paths.

    Returns
    -------
    Dict[str, List[str]]
        Mapping of every category name (including ``Other``) to the paths
        that fell into it, in input order. The first matching pattern
        wins; unmatched paths go to ``Other``.
    """
    buckets: Dict[str, List[str]] = {category: [] for category in ALL_CATEGORIES}
    for path in file_paths:
        for category, pattern in CATEGORY_PATTERNS:
            if pattern.search(path):
                buckets[category].append(path)
                break
        else:
            buckets[OTHER].append(path)
    return buckets


def analyze(files: Sequence[FileChange]) -> CodeAnalysis:
    """Compute test/documentation presence and risk for a change set.

    The test and documentation checks are plain case-sensitive substring
    matches on the path and are deliberately looser than the category
    patterns. Change counts are not summed; only the largest single file
    matters.
    """
    has_tests = False
    has_documentation = False
    risk_level = RiskLevel.LOW

    for change in files:
        if "test" in change.path or "spec" in change.path:
            has_tests = True
        if "README" in change.path or "doc" in change.path:
            has_documentation = True
        if (change.changes or 0) > HIGH_RISK_CHANGE_THRESHOLD:
            risk_level = RiskLevel.HIGH

    return CodeAnalysis(
        file_count=len(files),
        has_tests=has_tests,
        has_documentation=has_documentation,
        risk_level=risk_level,
    )
