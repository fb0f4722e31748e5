"""
Pull request workflow: create, review, merge and browser-test.

:class:`PRAutomation` sequences calls into the GitHub client, the
classifier and the browser runner. It is built from an explicit
:class:`~pr_automation.config.loader.Settings` object; collaborators can
be injected for testing. Collaborator failures propagate as
:class:`AutomationError` (or the collaborator's own error type) so the CLI
can turn them into a single exit status.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pr_automation.analysis.file_classifier import analyze
from pr_automation.analysis.models import CodeAnalysis, FileChange, RiskLevel
from pr_automation.browser.browser_runner import BrowserRunner, BrowserTestResults
from pr_automation.config.loader import Settings
from pr_automation.github.github_client import GitHubClient, GitHubError


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


LARGE_PR_LINE_LIMIT = 1000
MIN_DESCRIPTION_LENGTH = 10
MERGE_METHODS = ("merge", "squash", "rebase")


class AutomationError(Exception):
    """Raised when a workflow step cannot be completed."""

    pass


class ChecksFailedError(AutomationError):
    """Raised when a merge is refused because checks are not green."""

    pass


@dataclass
class CheckSummary:
    """Aggregated check runs for a PR head."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    pending: int = 0

    @property
    def status(self) -> str:
        if self.failed:
            return "failed"
        if self.pending:
            return "pending"
        if self.total:
            return "passed"
        return "no checks"


@dataclass
class ReviewResult:
    pr_url: str
    title: str
    checks: CheckSummary
    analysis: CodeAnalysis
    comments: List[str] = field(default_factory=list)


@dataclass
class CreateResult:
    pr: Dict[str, Any]
    warnings: List[str] = field(default_factory=list)


def build_review_comments(analysis: CodeAnalysis) -> List[str]:
    """Return the review comments to post for an analysis, possibly none."""
    comments = []
    if not analysis.has_tests:
        comments.append("Consider adding tests for your changes to improve code quality.")
    if analysis.risk_level is RiskLevel.HIGH:
        comments.append("This PR contains significant changes. Please ensure thorough testing.")
    return comments


def format_review_body(comments: List[str]) -> str:
    return "Automated Review:\n\n" + "\n".join(f"- {comment}" for comment in comments)


def review_recommendations(analysis: CodeAnalysis) -> List[str]:
    """Human readable advice shown after a review."""
    recommendations = []
    if not analysis.has_tests:
        recommendations.append("⚠️  Consider adding tests for your changes")
    if not analysis.has_documentation:
        recommendations.append("📝 Consider updating documentation")
    if analysis.risk_level is RiskLevel.HIGH:
        recommendations.append("🚨 High risk changes detected - ensure thorough testing")
    if analysis.risk_level is RiskLevel.LOW and analysis.has_tests:
        recommendations.append("✅ Looks good! Low risk with tests included")
    return recommendations


class PRAutomation:
    """Drive the pull request lifecycle against GitHub."""

    def __init__(
        self,
        settings: Settings,
        github: Optional[GitHubClient] = None,
        browser_runner: Optional[BrowserRunner] = None,
    ) -> None:
        self.settings = settings
        self.github = github or GitHubClient(
            token=settings.github_token,
            api_url=settings.api_url,
            request_timeout=settings.request_timeout,
        )
        self.browser_runner = browser_runner or BrowserRunner(
            browsers=settings.browsers,
            timeout_ms=settings.browser_timeout_ms,
        )

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------
    def create_pr(
        self,
        source: str,
        target: str,
        repo: str,
        title: Optional[str] = None,
        body: Optional[str] = None,
    ) -> CreateResult:
        """Open a pull request and run the initial sanity checks on it.

        Raises
        ------
        AutomationError
            If the repository is missing or GitHub rejects the request.
        """
        if not repo:
            raise AutomationError("Repository name is required (format: owner/repo)")

        title = title or f"Automated PR from {source} to {target}"
        body = body or "This PR was created using automated tools."
        logger.info("Creating PR %s -> %s in %s: %s", source, target, repo, title)
        try:
            pr = self.github.create_pull_request(repo, title=title, body=body, head=source, base=target)
        except GitHubError as exc:
            message = str(exc)
            if "A pull request already exists" in message:
                raise AutomationError(
                    f"A pull request already exists for {source} -> {target}. Check existing PRs."
                ) from exc
            if "No commits between" in message:
                raise AutomationError(
                    f"No commits found between {target} and {source}. "
                    "Make sure you have commits to create a PR."
                ) from exc
            raise AutomationError(f"Failed to create PR: {message}") from exc

        logger.info("PR #%s created: %s", pr.get("number"), pr.get("html_url"))
        return CreateResult(pr=pr, warnings=self.run_initial_checks(pr))

    def run_initial_checks(self, pr: Dict[str, Any]) -> List[str]:
        warnings = []
        if (pr.get("additions") or 0) > LARGE_PR_LINE_LIMIT or (pr.get("deletions") or 0) > LARGE_PR_LINE_LIMIT:
            warnings.append("Large PR detected. Consider breaking it down.")
        if len(pr.get("body") or "") < MIN_DESCRIPTION_LENGTH:
            warnings.append("PR description is too short or missing.")
        for warning in warnings:
            logger.warning(warning)
        return warnings

    # ------------------------------------------------------------------
    # Review
    # ------------------------------------------------------------------
    def analyze_code_changes(self, repo: str, number: int) -> CodeAnalysis:
        files = self.github.list_pull_request_files(repo, number)
        return analyze([FileChange(path=f["filename"], changes=f.get("changes") or 0) for f in files])

    def summarize_checks(self, repo: str, number: int) -> CheckSummary:
        summary = CheckSummary()
        for run in self.github.list_check_runs(repo, f"pull/{number}/head"):
            summary.total += 1
            if run.get("status") != "completed":
                summary.pending += 1
            elif run.get("conclusion") in ("success", "neutral", "skipped"):
                summary.passed += 1
            else:
                summary.failed += 1
        return summary

    def review_pr(self, repo: str, number: int) -> ReviewResult:
        """Analyze a PR, summarize its checks and post review comments.

        A review is only posted when there is something to say.
        """
        try:
            pr = self.github.get_pull_request(repo, number)
            logger.info("Reviewing PR #%s: %s", number, pr.get("title"))
            checks = self.summarize_checks(repo, number)
            analysis = self.analyze_code_changes(repo, number)
            comments = build_review_comments(analysis)
            if comments:
                self.github.create_review(repo, number, body=format_review_body(comments), event="COMMENT")
        except GitHubError as exc:
            raise AutomationError(f"Failed to review PR: {exc}") from exc

        return ReviewResult(
            pr_url=pr.get("html_url", ""),
            title=pr.get("title", ""),
            checks=checks,
            analysis=analysis,
            comments=comments,
        )

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------
    def run_pre_merge_checks(self, repo: str, number: int) -> bool:
        """True iff every check run on the PR head concluded ``success``."""
        runs = self.github.list_check_runs(repo, f"pull/{number}/head")
        failing = [run.get("name", "?") for run in runs if run.get("conclusion") != "success"]
        if failing:
            logger.warning("Some checks are failing: %s", ", ".join(failing))
            return False
        logger.info("All pre-merge checks passed")
        return True

    def merge_pr(self, repo: str, number: int, method: str = "merge") -> Dict[str, Any]:
        """Merge a PR after verifying its checks.

        Raises
        ------
        AutomationError
            For an unknown merge method, failing checks, or an API error.
        """
        if method not in MERGE_METHODS:
            raise AutomationError(f"Unknown merge method '{method}'. Choose from: {', '.join(MERGE_METHODS)}")
        try:
            if not self.run_pre_merge_checks(repo, number):
                raise ChecksFailedError("Pre-merge checks failed. Cannot proceed with merge.")
            result = self.github.merge_pull_request(repo, number, merge_method=method)
        except GitHubError as exc:
            raise AutomationError(f"Failed to merge PR: {exc}") from exc

        logger.info("PR #%s merged (%s)", number, result.get("sha"))
        self.run_post_merge_validation(repo, result.get("sha", ""))
        return result

    def run_post_merge_validation(self, repo: str, sha: str) -> None:
        """Log the merged commit. Deployments are tested separately with :meth:`run_tests`."""
        logger.info("Post-merge validation completed for %s@%s", repo, sha)

    # ------------------------------------------------------------------
    # Browser tests
    # ------------------------------------------------------------------
    def run_tests(self, url: Optional[str] = None, env: str = "dev") -> BrowserTestResults:
        target = url or self.settings.app_base_url
        logger.info("Running browser tests against %s (%s)", target, env)
        return self.browser_runner.run(target)
