"""
Command line interface for the pr_automation tool.

This module defines the ``main`` click group used as the entry point of
the ``prauto`` command. Each subcommand gathers its inputs (branch and
repository detection, configuration, Git history), hands them to
:class:`~pr_automation.automation.PRAutomation` or the content
generators, and reports the outcome. Failures of any collaborator end
the command with one of the exit codes below.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import click

from pr_automation import __version__
from pr_automation.automation import AutomationError, ChecksFailedError, PRAutomation, review_recommendations
from pr_automation.config.loader import ConfigError, Settings, load_config
from pr_automation.generation import generate_pr_content
from pr_automation.github.github_client import GitHubError
from pr_automation.vcs.git_client import GitClient, GitError, PRInputs

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_INVALID_USAGE = 2
EXIT_NO_REPO = 3
EXIT_CONFIG_ERROR = 5
EXIT_VCS_FAILURE = 6
EXIT_API_FAILURE = 7
EXIT_CHECKS_FAILED = 8
EXIT_TESTS_FAILED = 9

DEFAULT_TARGET_BRANCH = "main"

# Shown by ``preview --sample`` when Git history is unavailable.
SAMPLE_COMMITS = [
    "feat: enhance PR automation with intelligent title generation",
    "fix: improve error handling in PR creation",
    "docs: add comprehensive documentation and examples",
    "test: add browser compatibility tests",
]
SAMPLE_FILES = [
    "scripts/create-pr.js",
    "src/pr-automation.js",
    "package.json",
    "AUTO-PR-DEMO.md",
    "tests/ai-driven-title.spec.js",
    "tests/test.spec.js",
]
SAMPLE_DIFF_STAT = "16 files changed, 1083 insertions(+), 8 deletions(-)"


# ---------------------------------------------------------------------------
# Progress and status display utilities
# ---------------------------------------------------------------------------

class ProgressIndicator:
    """Simple progress indicator for user feedback."""

    def __init__(self, message: str):
        self.message = message
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        click.echo(f"⠋ {self.message}...", nl=False)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.time() - self.start_time
        if exc_type is None:
            click.echo(f"\r✓ {self.message} (took {elapsed:.1f}s)")
        else:
            click.echo(f"\r✗ {self.message} (failed after {elapsed:.1f}s)")
        return False


def print_step(step_num: int, total_steps: int, message: str):
    """Print a step indicator."""
    click.echo(f"\n{'='*60}")
    click.echo(f"Step {step_num}/{total_steps}: {message}")
    click.echo(f"{'='*60}")


def print_info(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}")


def print_success(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}")


def print_warning(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}")


def print_error(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


@contextmanager
def handle_errors(action: str) -> Iterator[None]:
    """Translate collaborator failures into exit codes."""
    try:
        yield
    except click.exceptions.Exit:
        raise
    except ConfigError as exc:
        print_error(f"Configuration error: {exc}")
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
    except GitError as exc:
        print_error(f"Git error while trying to {action}: {exc}")
        raise click.exceptions.Exit(EXIT_VCS_FAILURE)
    except ChecksFailedError as exc:
        print_error(str(exc))
        raise click.exceptions.Exit(EXIT_CHECKS_FAILED)
    except (AutomationError, GitHubError) as exc:
        print_error(f"Error trying to {action}: {exc}")
        raise click.exceptions.Exit(EXIT_API_FAILURE)
    except Exception as exc:
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)


# ---------------------------------------------------------------------------
# Input gathering
# ---------------------------------------------------------------------------

def open_git_client(start_dir: Optional[Path] = None) -> Optional[GitClient]:
    """Return a client for the repository containing ``start_dir``, if any."""
    root = GitClient.find_repo_root(start_dir or Path.cwd())
    return GitClient(root) if root else None


def detect_branch(client: Optional[GitClient]) -> Optional[str]:
    if client is None:
        return None
    try:
        return client.get_current_branch()
    except GitError as exc:
        logger.debug("Could not detect current branch: %s", exc)
        return None


def detect_repository(client: Optional[GitClient]) -> Optional[str]:
    if client is None:
        return None
    try:
        return client.get_repository_name()
    except GitError as exc:
        logger.debug("Could not detect repository from remote: %s", exc)
        return None


def collect_inputs(
    client: Optional[GitClient],
    source: str,
    target: str,
    use_sample: bool = False,
) -> PRInputs:
    """Fetch generator inputs, substituting a fallback for each failed fetch.

    All three inputs are fetched together first. If that fails, each one is
    fetched again on its own and only the failing ones are replaced by
    empty data, or by the fixed sample data when ``use_sample`` is set.
    """
    if client is not None:
        try:
            return client.fetch_pr_inputs(source, target)
        except GitError as exc:
            logger.debug("Fetching PR inputs failed, retrying each input: %s", exc)

    inputs = PRInputs()
    fetches = [
        ("commits", "commit messages", lambda: client.get_commit_messages(source, target), SAMPLE_COMMITS),
        ("files", "changed files", lambda: client.get_changed_files(source, target), SAMPLE_FILES),
        ("diff_stat", "diff statistics", lambda: client.get_diff_stat(source, target), SAMPLE_DIFF_STAT),
    ]
    for attr, label, fetch, sample in fetches:
        try:
            if client is None:
                raise GitError("not inside a Git repository")
            value = fetch()
        except GitError as exc:
            if use_sample:
                print_warning(f"Could not fetch {label} ({exc}); using sample data")
                value = list(sample) if isinstance(sample, list) else sample
            else:
                print_warning(f"Could not fetch {label}: {exc}")
                value = [] if attr != "diff_stat" else ""
        setattr(inputs, attr, value)
    return inputs


def load_settings(require_token: bool = True) -> Settings:
    with ProgressIndicator("Loading configuration"):
        settings = load_config()
    if require_token and not settings.github_token:
        raise ConfigError("GITHUB_TOKEN is not set. Export it, put it in a .env file "
                          "or add 'github_token' to ~/.pr_automation/config.json")
    return settings


def configure_logging(verbose: bool) -> None:
    """Send records from every ``pr_automation`` logger to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )
    # Package loggers start detached behind a NullHandler.
    for name, package_logger in logging.root.manager.loggerDict.items():
        if name.startswith("pr_automation") and isinstance(package_logger, logging.Logger):
            package_logger.propagate = True


def require(value: Optional[str], message: str, exit_code: int = EXIT_INVALID_USAGE) -> str:
    if not value:
        print_error(message)
        raise click.exceptions.Exit(exit_code)
    return value


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@click.group(invoke_without_command=True)
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="prauto")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """🚀 Pull request automation: create, review, merge and test PRs."""
    configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        click.echo("\n" + "="*60)
        click.echo("🤖 PR Automation Tool".center(60))
        click.echo("="*60)
        click.echo(click.style("Available commands:", fg="yellow"))
        click.echo("  create   - Create a new PR with a generated title and description")
        click.echo("  review   - Analyze a PR and post review comments")
        click.echo("  merge    - Merge a PR once all checks pass")
        click.echo("  test     - Run cross-browser checks against a deployment")
        click.echo("  preview  - Show the generated title and description")
        click.echo(click.style("\nUse --help with any command for more options", fg="bright_black"))


@main.command()
@click.option("-s", "--source", help="Source branch (defaults to the current branch).")
@click.option("-t", "--target", default=DEFAULT_TARGET_BRANCH, show_default=True, help="Target branch.")
@click.option("-r", "--repo", help="Repository as owner/repo (defaults to the origin remote).")
@click.option("--title", help="PR title (generated if not provided).")
@click.option("--body", help="PR description (generated if not provided).")
@click.option("--auto/--no-auto", default=True, help="Generate title and description from Git history.")
def create(source: Optional[str], target: str, repo: Optional[str], title: Optional[str],
           body: Optional[str], auto: bool) -> None:
    """Create a pull request with a generated title and description."""
    with handle_errors("create the PR"):
        print_step(1, 3, "Detecting Repository")
        client = open_git_client()
        current_branch = detect_branch(client)
        source = require(source or current_branch,
                         "Source branch is required. Current branch could not be detected.", EXIT_NO_REPO)
        repo = require(repo or detect_repository(client), "Repository name is required (format: owner/repo).")
        print_info(f"Creating PR from {source} to {target} in {repo}")
        settings = load_settings()

        print_step(2, 3, "Generating Content")
        if auto:
            inputs = collect_inputs(client, source, target)
            content = generate_pr_content(inputs.commits, inputs.files, inputs.diff_stat,
                                          source, target, branch=current_branch)
            if not title and inputs.commits:
                title = content.title
                print_success(f'Generated title: "{title}"')
            if not body:
                body = content.description
                print_success("Generated description with commit history and file changes")
        else:
            print_info("Auto-generation disabled")

        print_step(3, 3, "Creating Pull Request")
        automation = PRAutomation(settings)
        with ProgressIndicator("Creating PR on GitHub"):
            result = automation.create_pr(source, target, repo, title=title, body=body)
        for warning in result.warnings:
            print_warning(warning)

        pr = result.pr
        click.echo("\n✅ PR Created Successfully:")
        click.echo(f"- Number: #{pr.get('number')}")
        click.echo(f"- URL: {pr.get('html_url')}")
        click.echo(f"- Title: {pr.get('title')}")
        click.echo(f"- Description: {(pr.get('body') or '')[:100]}...")


@main.command()
@click.option("-p", "--pr", "number", type=int, help="PR number (auto-detected if not provided).")
@click.option("-r", "--repo", help="Repository as owner/repo (defaults to the origin remote).")
@click.option("-b", "--branch", help="Branch to find the PR for (defaults to the current branch).")
def review(number: Optional[int], repo: Optional[str], branch: Optional[str]) -> None:
    """Analyze a pull request and post automated review comments."""
    with handle_errors("review the PR"):
        client = open_git_client()
        repo = require(repo or detect_repository(client),
                       "Repository name is required (format: owner/repo). "
                       "Could not auto-detect repository from git remote.")
        settings = load_settings()
        automation = PRAutomation(settings)

        if number is None:
            branch = require(branch or detect_branch(client),
                             "Could not detect current branch. Please specify the PR number with -p.", EXIT_NO_REPO)
            print_info(f"Looking for open PRs from branch: {branch}")
            with ProgressIndicator("Auto-detecting PR number"):
                number = automation.github.find_latest_pull_request(repo, branch)
            if number is None:
                print_error(f"No open PR found for branch '{branch}' in {repo}")
                print_info("Please specify the PR number with -p, or create a PR first.", indent=1)
                raise click.exceptions.Exit(EXIT_INVALID_USAGE)
            print_success(f"Found PR #{number}")

        with ProgressIndicator(f"Reviewing PR #{number} in {repo}"):
            result = automation.review_pr(repo, number)

        analysis = result.analysis
        click.echo("\n📊 PR Review Results:")
        click.echo("═" * 40)
        click.echo(f"🔗 PR URL: {result.pr_url}")
        click.echo("\n🧪 Checks:")
        click.echo(f"   Status: {result.checks.status}")
        click.echo(f"   Passed: {result.checks.passed}/{result.checks.total}")
        if result.checks.failed:
            click.echo(f"   Failed: {result.checks.failed}")
        if result.checks.pending:
            click.echo(f"   Pending: {result.checks.pending}")
        click.echo("\n📁 Code Analysis:")
        click.echo(f"   Files Changed: {analysis.file_count}")
        click.echo(f"   Risk Level: {analysis.risk_level.value}")
        click.echo(f"   Has Tests: {'✅' if analysis.has_tests else '❌'}")
        click.echo(f"   Has Documentation: {'✅' if analysis.has_documentation else '❌'}")
        click.echo("\n💡 Recommendations:")
        for line in review_recommendations(analysis):
            click.echo(f"   {line}")
        if result.comments:
            print_info(f"Posted review with {len(result.comments)} comment(s)")
        click.echo("═" * 40)


@main.command()
@click.option("-p", "--pr", "number", type=int, required=True, help="PR number to merge.")
@click.option("-r", "--repo", help="Repository as owner/repo (defaults to the origin remote).")
@click.option("-m", "--method", type=click.Choice(["merge", "squash", "rebase"]), default="merge",
              show_default=True, help="Merge method.")
def merge(number: int, repo: Optional[str], method: str) -> None:
    """Merge a pull request once all its checks have passed."""
    with handle_errors("merge the PR"):
        repo = require(repo or detect_repository(open_git_client()), "Repository name is required (format: owner/repo).")
        settings = load_settings()
        automation = PRAutomation(settings)
        with ProgressIndicator(f"Checking and merging PR #{number}"):
            result = automation.merge_pr(repo, number, method)
        click.echo("\n✅ PR Merged Successfully:")
        click.echo(f"- SHA: {result.get('sha')}")
        click.echo(f"- Message: {result.get('message')}")
        click.echo(f"- Merged: {result.get('merged')}")


@main.command(name="test")
@click.option("-u", "--url", help="Application URL to test (defaults to APP_BASE_URL).")
@click.option("-e", "--env", type=click.Choice(["dev", "staging", "prod"]), default="dev", show_default=True,
              help="Environment label for the run.")
def run_tests(url: Optional[str], env: str) -> None:
    """Run cross-browser smoke and functional checks."""
    with handle_errors("run browser tests"):
        settings = load_settings(require_token=False)
        automation = PRAutomation(settings)
        results = automation.run_tests(url=url, env=env)

        for browser, status in results.browsers.items():
            if status == "passed":
                print_success(f"{browser}: passed")
            else:
                print_error(f"{browser}: failed")
        for warning in results.warnings:
            print_warning(warning, indent=1)
        for screenshot in results.screenshots:
            print_info(f"Screenshot saved: {screenshot}", indent=1)
        click.echo(f"\nTest Results: {results.passed} passed, {results.failed} failed")
        if not results.all_passed:
            raise click.exceptions.Exit(EXIT_TESTS_FAILED)


@main.command()
@click.option("-s", "--source", help="Source branch (defaults to the current branch).")
@click.option("-t", "--target", default=DEFAULT_TARGET_BRANCH, show_default=True, help="Target branch.")
@click.option("--sample", is_flag=True, help="Use sample data when Git history is unavailable.")
def preview(source: Optional[str], target: str, sample: bool) -> None:
    """Show the generated title and description without creating a PR."""
    with handle_errors("generate a preview"):
        client = open_git_client()
        current_branch = detect_branch(client)
        source = source or current_branch
        if not source and not sample:
            print_error("Source branch is required. Current branch could not be detected.")
            raise click.exceptions.Exit(EXIT_NO_REPO)
        source = source or "current branch"

        click.echo(f"Analyzing changes from {source} to {target}...\n")
        inputs = collect_inputs(client, source, target, use_sample=sample)

        click.echo("📝 Found Commits:")
        for index, message in enumerate(inputs.commits, 1):
            click.echo(f"  {index}. {message}")
        click.echo("\n📁 Changed Files:")
        for path in inputs.files:
            click.echo(f"  - {path}")

        content = generate_pr_content(inputs.commits, inputs.files, inputs.diff_stat,
                                      source, target, branch=current_branch)
        click.echo("\n🏷️  Generated PR Title:")
        click.echo(f'  "{content.title}"')
        click.echo("\n📄 Generated PR Description:")
        click.echo("-" * 40)
        click.echo(content.description)
        click.echo("-" * 40)
