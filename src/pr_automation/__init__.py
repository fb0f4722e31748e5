"""
Top-level package for pr_automation.

This package exposes the main CLI entry point via the
``pr_automation.cli`` module.
"""

__all__ = ["__version__"]

__version__ = "1.0.0"
