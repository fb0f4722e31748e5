"""
File classification and risk analysis.

This package maps changed file paths to coarse categories and derives a
risk snapshot from per-file change counts. See
:mod:`pr_automation.analysis.file_classifier` for details.
"""

from .file_classifier import analyze, classify, classify_detailed  # noqa: F401
from .models import CodeAnalysis, FileChange, PRContent, RiskLevel  # noqa: F401
