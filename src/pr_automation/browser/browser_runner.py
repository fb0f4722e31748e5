"""
Smoke, functional and responsive checks driven through Playwright.

Browsers are exercised one after another: each engine is launched, used
and closed before the next one starts. A failure in one engine is
recorded (with a screenshot) and does not stop the remaining engines.
Missing page elements and layout overflow are reported as warnings only.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


COMMON_SELECTORS = (
    "header",
    "nav",
    "main",
    "footer",
    "h1, h2, h3",
    "a[href]",
    "button",
)
FORM_INPUT_SELECTOR = 'input[type="text"], input[type="email"], textarea'
SELECTOR_TIMEOUT_MS = 5000
VIEWPORTS = (
    {"name": "desktop", "width": 1920, "height": 1080},
    {"name": "tablet", "width": 768, "height": 1024},
    {"name": "mobile", "width": 375, "height": 667},
)
# Horizontal overflow tolerated before a viewport is flagged.
OVERFLOW_TOLERANCE_PX = 50
VIEWPORT_SETTLE_MS = 1000


class BrowserTestError(Exception):
    """Raised when a page fails a smoke check."""

    pass


@dataclass
class BrowserTestResults:
    """Outcome of a run across all configured browsers."""

    passed: int = 0
    failed: int = 0
    browsers: Dict[str, str] = field(default_factory=dict)
    screenshots: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def all_passed(self) -> bool:
        return self.failed == 0


class BrowserRunner:
    """Run the page checks in each browser engine in turn.

    Parameters
    ----------
    browsers : Sequence[str]
        Engine names (``chromium``, ``firefox``, ``webkit``).
    timeout_ms : int
        Default timeout for navigation and waits.
    screenshot_dir : Path
        Where failure screenshots are written.
    playwright_factory : callable
        Returns a Playwright context manager; replaceable in tests.
    """

    def __init__(
        self,
        browsers: Sequence[str] = ("chromium", "firefox", "webkit"),
        timeout_ms: int = 30000,
        screenshot_dir: Path = Path("screenshots"),
        playwright_factory: Callable[[], Any] = sync_playwright,
    ) -> None:
        self.browsers = list(browsers)
        self.timeout_ms = timeout_ms
        self.screenshot_dir = screenshot_dir
        self.playwright_factory = playwright_factory

    @staticmethod
    def launch_browser(playwright: Any, browser_name: str) -> Any:
        if browser_name == "firefox":
            return playwright.firefox.launch(headless=True)
        if browser_name == "webkit":
            return playwright.webkit.launch(headless=True)
        return playwright.chromium.launch(headless=True)

    def run(self, url: str) -> BrowserTestResults:
        """Run smoke and functional checks against ``url`` in every browser."""
        results = BrowserTestResults()
        with self.playwright_factory() as playwright:
            for browser_name in self.browsers:
                logger.info("Testing with %s", browser_name)
                browser = self.launch_browser(playwright, browser_name)
                try:
                    page = browser.new_context().new_page()
                    page.set_default_timeout(self.timeout_ms)
                    try:
                        self.run_smoke_tests(page, url, browser_name)
                        self.run_functional_tests(page, url, browser_name, results)
                        results.browsers[browser_name] = "passed"
                        results.passed += 1
                    except (BrowserTestError, PlaywrightError) as exc:
                        logger.error("Tests failed in %s: %s", browser_name, exc)
                        results.browsers[browser_name] = "failed"
                        results.failed += 1
                        screenshot = self._take_failure_screenshot(page, browser_name)
                        if screenshot:
                            results.screenshots.append(screenshot)
                finally:
                    browser.close()
        logger.info("Browser results: %d passed, %d failed", results.passed, results.failed)
        return results

    def _take_failure_screenshot(self, page: Any, browser_name: str) -> str:
        name = f"failure-{browser_name}-{int(time.time() * 1000)}.png"
        self.screenshot_dir.mkdir(parents=True, exist_ok=True)
        try:
            page.screenshot(path=str(self.screenshot_dir / name))
        except PlaywrightError as exc:
            logger.warning("Could not capture screenshot for %s: %s", browser_name, exc)
            return ""
        return name

    # ------------------------------------------------------------------
    # Individual checks
    # ------------------------------------------------------------------
    def run_smoke_tests(self, page: Any, url: str, browser_name: str) -> str:
        """Load the page and require a non-empty title. Returns the title."""
        logger.debug("Running smoke tests in %s", browser_name)
        page.goto(url)
        page.wait_for_load_state("networkidle")
        title = page.title()
        if not title:
            raise BrowserTestError("Page title is empty")
        logger.info("Page loaded successfully in %s: %s", browser_name, title)
        return title

    def run_functional_tests(self, page: Any, url: str, browser_name: str, results: BrowserTestResults) -> None:
        logger.debug("Running functional tests in %s", browser_name)
        page.goto(url)
        results.warnings.extend(f"{browser_name}: {w}" for w in self.check_common_elements(page))
        self.check_forms(page)
        results.warnings.extend(f"{browser_name}: {w}" for w in self.check_responsive(page))

    def check_common_elements(self, page: Any) -> List[str]:
        warnings = []
        for selector in COMMON_SELECTORS:
            try:
                page.wait_for_selector(selector, timeout=SELECTOR_TIMEOUT_MS)
            except PlaywrightTimeoutError:
                logger.warning("Element not found: %s", selector)
                warnings.append(f"Element not found: {selector}")
        return warnings

    def check_forms(self, page: Any) -> int:
        """Fill and clear every text input of every form. Returns the form count."""
        forms = page.query_selector_all("form")
        for index, form in enumerate(forms, start=1):
            for field_handle in form.query_selector_all(FORM_INPUT_SELECTOR):
                field_handle.fill("test data")
                field_handle.fill("")
            logger.debug("Tested form %d", index)
        return len(forms)

    def check_responsive(self, page: Any) -> List[str]:
        warnings = []
        for viewport in VIEWPORTS:
            page.set_viewport_size({"width": viewport["width"], "height": viewport["height"]})
            page.wait_for_timeout(VIEWPORT_SETTLE_MS)
            body_width = page.evaluate("() => document.body.scrollWidth")
            if body_width > viewport["width"] + OVERFLOW_TOLERANCE_PX:
                logger.warning("Potential responsive issue at %s", viewport["name"])
                warnings.append(f"Potential responsive issue at {viewport['name']}")
        return warnings
