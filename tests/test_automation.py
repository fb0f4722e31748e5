import unittest
from unittest.mock import MagicMock

from pr_automation.analysis.models import CodeAnalysis, RiskLevel
from pr_automation.automation import (
    AutomationError,
    ChecksFailedError,
    PRAutomation,
    build_review_comments,
    format_review_body,
    review_recommendations,
)
from pr_automation.browser.browser_runner import BrowserTestResults
from pr_automation.config.loader import Settings
from pr_automation.github.github_client import GitHubError


def analysis(has_tests=True, has_documentation=True, risk_level=RiskLevel.LOW, file_count=1):
    return CodeAnalysis(
        file_count=file_count,
        has_tests=has_tests,
        has_documentation=has_documentation,
        risk_level=risk_level,
    )


class TestReviewHelpers(unittest.TestCase):
    def test_no_comments_for_tested_low_risk(self) -> None:
        self.assertEqual(build_review_comments(analysis()), [])

    def test_comments_for_untested_high_risk(self) -> None:
        comments = build_review_comments(analysis(has_tests=False, risk_level=RiskLevel.HIGH))
        self.assertEqual(
            comments,
            [
                "Consider adding tests for your changes to improve code quality.",
                "This PR contains significant changes. Please ensure thorough testing.",
            ],
        )
        self.assertEqual(
            format_review_body(comments),
            "Automated Review:\n\n- " + comments[0] + "\n- " + comments[1],
        )

    def test_recommendations(self) -> None:
        self.assertEqual(review_recommendations(analysis()), ["✅ Looks good! Low risk with tests included"])
        lines = review_recommendations(analysis(has_tests=False, has_documentation=False, risk_level=RiskLevel.HIGH))
        self.assertEqual(len(lines), 3)
        self.assertTrue(lines[2].startswith("🚨"))


class TestPRAutomation(unittest.TestCase):
    def setUp(self) -> None:
        self.github = MagicMock()
        self.browser_runner = MagicMock()
        self.settings = Settings(github_token="t", app_base_url="http://preview")
        self.automation = PRAutomation(self.settings, github=self.github, browser_runner=self.browser_runner)

    def test_default_collaborators_use_settings(self) -> None:
        automation = PRAutomation(Settings(github_token="abc", request_timeout=3.0, browsers=("webkit",)))
        self.assertEqual(automation.github.token, "abc")
        self.assertEqual(automation.github.request_timeout, 3.0)
        self.assertEqual(automation.browser_runner.browsers, ["webkit"])

    # -- create ---------------------------------------------------------
    def test_create_pr_defaults_and_initial_checks(self) -> None:
        self.github.create_pull_request.return_value = {"number": 5, "body": "short", "additions": 2000, "deletions": 0}
        result = self.automation.create_pr("feature", "main", "octo/widgets")
        self.github.create_pull_request.assert_called_once_with(
            "octo/widgets",
            title="Automated PR from feature to main",
            body="This PR was created using automated tools.",
            head="feature",
            base="main",
        )
        self.assertEqual(result.pr["number"], 5)
        self.assertEqual(
            result.warnings,
            ["Large PR detected. Consider breaking it down.", "PR description is too short or missing."],
        )

    def test_create_pr_requires_repo(self) -> None:
        with self.assertRaises(AutomationError):
            self.automation.create_pr("feature", "main", "")

    def test_create_pr_translates_known_errors(self) -> None:
        cases = [
            ("Validation Failed: A pull request already exists for octo:feature.", "already exists for feature -> main"),
            ("Validation Failed: No commits between main and feature", "No commits found between main and feature"),
            ("Not Found", "Failed to create PR: Not Found"),
        ]
        for api_message, expected in cases:
            with self.subTest(api_message=api_message):
                self.github.create_pull_request.side_effect = GitHubError(api_message, status_code=422)
                with self.assertRaises(AutomationError) as ctx:
                    self.automation.create_pr("feature", "main", "octo/widgets", title="t", body="b")
                self.assertIn(expected, str(ctx.exception))

    # -- review ---------------------------------------------------------
    def test_review_posts_comments_when_needed(self) -> None:
        self.github.get_pull_request.return_value = {"title": "Big", "html_url": "https://gh/pr/3"}
        self.github.list_check_runs.return_value = [
            {"status": "completed", "conclusion": "success"},
            {"status": "completed", "conclusion": "failure"},
            {"status": "in_progress", "conclusion": None},
        ]
        self.github.list_pull_request_files.return_value = [
            {"filename": "src/app.py", "changes": 250},
            {"filename": "README.md", "changes": 3},
        ]

        result = self.automation.review_pr("octo/widgets", 3)

        self.assertEqual(result.pr_url, "https://gh/pr/3")
        self.assertEqual(result.analysis, analysis(has_tests=False, risk_level=RiskLevel.HIGH, file_count=2))
        self.assertEqual((result.checks.total, result.checks.passed, result.checks.failed, result.checks.pending), (3, 1, 1, 1))
        self.assertEqual(result.checks.status, "failed")
        self.github.list_check_runs.assert_called_with("octo/widgets", "pull/3/head")
        self.github.create_review.assert_called_once_with(
            "octo/widgets", 3, body=format_review_body(result.comments), event="COMMENT"
        )

    def test_review_without_comments_posts_nothing(self) -> None:
        self.github.get_pull_request.return_value = {"title": "Small", "html_url": "u"}
        self.github.list_check_runs.return_value = []
        self.github.list_pull_request_files.return_value = [{"filename": "tests/test_a.py", "changes": 10}]

        result = self.automation.review_pr("octo/widgets", 4)

        self.assertEqual(result.comments, [])
        self.assertEqual(result.checks.status, "no checks")
        self.github.create_review.assert_not_called()

    def test_review_wraps_api_errors(self) -> None:
        self.github.get_pull_request.side_effect = GitHubError("Not Found", status_code=404)
        with self.assertRaises(AutomationError):
            self.automation.review_pr("octo/widgets", 99)

    # -- merge ----------------------------------------------------------
    def test_pre_merge_checks(self) -> None:
        self.github.list_check_runs.return_value = []
        self.assertTrue(self.automation.run_pre_merge_checks("octo/widgets", 1))
        self.github.list_check_runs.return_value = [{"name": "ci", "conclusion": "success"}]
        self.assertTrue(self.automation.run_pre_merge_checks("octo/widgets", 1))
        self.github.list_check_runs.return_value = [
            {"name": "ci", "conclusion": "success"},
            {"name": "lint", "conclusion": None},
        ]
        self.assertFalse(self.automation.run_pre_merge_checks("octo/widgets", 1))

    def test_merge_refused_when_checks_fail(self) -> None:
        self.github.list_check_runs.return_value = [{"name": "ci", "conclusion": "failure"}]
        with self.assertRaises(ChecksFailedError):
            self.automation.merge_pr("octo/widgets", 1)
        self.github.merge_pull_request.assert_not_called()

    def test_merge_success(self) -> None:
        self.github.list_check_runs.return_value = [{"name": "ci", "conclusion": "success"}]
        self.github.merge_pull_request.return_value = {"sha": "abc", "merged": True, "message": "ok"}
        result = self.automation.merge_pr("octo/widgets", 1, "squash")
        self.assertTrue(result["merged"])
        self.github.merge_pull_request.assert_called_once_with("octo/widgets", 1, merge_method="squash")

    def test_post_merge_validation_logs_merge_commit(self) -> None:
        with self.assertLogs("pr_automation.automation", level="INFO") as logs:
            self.automation.run_post_merge_validation("octo/widgets", "abc")
        self.assertIn("Post-merge validation completed for octo/widgets@abc", logs.output[0])
        self.browser_runner.run.assert_not_called()

    def test_merge_rejects_unknown_method(self) -> None:
        with self.assertRaises(AutomationError):
            self.automation.merge_pr("octo/widgets", 1, "octopus")

    def test_merge_wraps_api_errors(self) -> None:
        self.github.list_check_runs.return_value = []
        self.github.merge_pull_request.side_effect = GitHubError("Pull Request is not mergeable", 405)
        with self.assertRaises(AutomationError) as ctx:
            self.automation.merge_pr("octo/widgets", 1)
        self.assertNotIsInstance(ctx.exception, ChecksFailedError)

    # -- browser tests --------------------------------------------------
    def test_run_tests_defaults_to_app_base_url(self) -> None:
        self.browser_runner.run.return_value = BrowserTestResults(passed=3)
        self.assertEqual(self.automation.run_tests().passed, 3)
        self.browser_runner.run.assert_called_once_with("http://preview")

    def test_run_tests_with_url(self) -> None:
        self.automation.run_tests(url="http://other", env="staging")
        self.browser_runner.run.assert_called_once_with("http://other")


if __name__ == "__main__":
    unittest.main()
