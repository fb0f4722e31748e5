"""
Data models for change analysis and generated PR content.

All records are snapshots computed per invocation; nothing here is
persisted or mutated after construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RiskLevel(str, Enum):
    """Coarse review risk of a change set.

    Only two tiers exist. A single file above the change threshold makes
    the whole change set ``HIGH``.
    """

    LOW = "low"
    HIGH = "high"


@dataclass(frozen=True)
class FileChange:
    """A changed file and the number of lines touched in it."""

    path: str
    changes: int = 0


@dataclass(frozen=True)
class CodeAnalysis:
    """Result of :func:`pr_automation.analysis.file_classifier.analyze`.

    Attributes
    ----------
    file_count : int
        Number of changed files.
    has_tests : bool
        True if any path contains ``test`` or ``spec``.
    has_documentation : bool
        True if any path contains ``README`` or ``doc``.
    risk_level : RiskLevel
        ``HIGH`` if any single file changed more than the threshold.
    """

    file_count: int
    has_tests: bool
    has_documentation: bool
    risk_level: RiskLevel


@dataclass(frozen=True)
class PRContent:
    """Generated pull request title and Markdown description."""

    title: str
    description: str
