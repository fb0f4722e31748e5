"""
Cross-browser checks against a deployed preview.

See :class:`pr_automation.browser.browser_runner.BrowserRunner`.
"""

from .browser_runner import BrowserRunner, BrowserTestError, BrowserTestResults  # noqa: F401
