"""
Markdown description for generated pull requests.

Sections appear in a fixed order and are skipped when their data is
empty. Commit subjects and file paths are inserted verbatim: Markdown
special characters are not escaped, so a path containing a backtick will
break its code span.
"""

from __future__ import annotations

from typing import List, Sequence

from pr_automation.analysis.file_classifier import classify_detailed

MAX_LISTED_COMMITS = 10
MAX_LISTED_FILES_PER_CATEGORY = 5

CHECKLIST_ITEMS = (
    "Tests pass",
    "Code quality checks",
    "Browser compatibility",
    "Performance validation",
)

ATTRIBUTION = "*This PR was automatically generated with enhanced title and description.*"


def _commits_section(commits: Sequence[str]) -> List[str]:
    lines = [f"### 📝 Commits ({len(commits)})", ""]
    lines.extend(f"- {message}" for message in commits[:MAX_LISTED_COMMITS])
    if len(commits) > MAX_LISTED_COMMITS:
        lines.append(f"- ... and {len(commits) - MAX_LISTED_COMMITS} more commits")
    lines.append("")
    return lines


def _files_section(files: Sequence[str]) -> List[str]:
    lines = [f"### 📁 Files Changed ({len(files)})", ""]
    for category, paths in classify_detailed(files).items():
        if not paths:
            continue
        lines.append(f"**{category}:**")
        lines.extend(f"- `{path}`" for path in paths[:MAX_LISTED_FILES_PER_CATEGORY])
        if len(paths) > MAX_LISTED_FILES_PER_CATEGORY:
            lines.append(f"- ... and {len(paths) - MAX_LISTED_FILES_PER_CATEGORY} more files")
        lines.append("")
    return lines


def generate_description(
    commits: Sequence[str],
    files: Sequence[str],
    diff_stat: str,
    source_branch: str,
    target_branch: str,
) -> str:
    """Build the Markdown body for a pull request.

    Parameters
    ----------
    commits : Sequence[str]
        Commit subject lines; at most ten are listed.
    files : Sequence[str]
        Changed file paths, grouped by category with at most five each.
    diff_stat : str
        Raw ``git diff --stat`` output, shown verbatim when non-empty.
    source_branch, target_branch : str
        Branch names for the summary sentence.

    Returns
    -------
    str
        The description, ending with the attribution line.
    """
    lines = [
        "## 🔄 Changes Summary",
        "",
        f"This PR merges changes from `{source_branch}` into `{target_branch}`.",
        "",
    ]

    if commits:
        lines.extend(_commits_section(commits))

    if files:
        lines.extend(_files_section(files))

    if diff_stat:
        lines.extend(["### 📊 Statistics", "", "```", diff_stat, "```", ""])

    lines.extend(["### ✅ Automated Checks", ""])
    lines.extend(f"- [ ] {item}" for item in CHECKLIST_ITEMS)
    lines.append("")

    lines.append("---")
    lines.append(ATTRIBUTION)
    return "\n".join(lines)
