"""
Markdown rendering of a :class:`~lines_changed.grouping.group_model.DiffSummary`.

The rendered body starts with :data:`COMMENT_IDENTIFIER`, an HTML comment
that is invisible on the pull request page. It is how a previous summary
comment is found and updated instead of posting a new one.
"""

from __future__ import annotations

from typing import List, Optional

from lines_changed.grouping.group_model import (
    DiffSummary,
    FileChange,
    GroupedFiles,
    is_file_group,
)

from .diff_links import generate_file_diff_url
from .diff_squares import generate_diff_squares, round_half_up


COMMENT_IDENTIFIER = "<!-- lines-changed-summary -->"
DEFAULT_HEADER = "Lines Changed"
TOOL_NAME = "lines-changed"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def _escape_markdown(text: str) -> str:
    return text.replace("\\", "\\\\").replace("|", "\\|").replace("[", "\\[").replace("]", "\\]")


def _percentage(part: int, total: int) -> int:
    if total == 0:
        return 0
    return round_half_up(part / total * 100)


def _sorted_files(files: List[FileChange]) -> List[FileChange]:
    # sorted() is stable, so equal sizes keep their input order.
    return sorted(files, key=lambda f: -f.changes)


def _file_cell(file: FileChange, owner: str, repo: str, pr_number: int) -> str:
    name = _escape_markdown(file.filename)
    try:
        url = generate_file_diff_url(owner, repo, pr_number, file.filename)
    except (UnicodeError, ValueError):
        return f"`{file.filename}`"
    return f"[{name}]({url})"


def _render_group(
    grouped: GroupedFiles, total_lines: int, owner: str, repo: str, pr_number: int
) -> List[str]:
    group = grouped.group
    share = _percentage(grouped.added_lines + grouped.removed_lines, total_lines)

    title = f"<strong>{group.label}</strong>"
    if not group.count_toward_metric:
        title += " (not counted)"
    summary_line = (
        f"{title} · {_plural(len(grouped.files), 'file')}"
        f" · +{grouped.added_lines} / -{grouped.removed_lines} ({share}%)"
    )

    lines = ["<details>", f"<summary>{summary_line}</summary>", ""]

    if is_file_group(group):
        lines.append("Patterns: " + ", ".join(f"`{p}`" for p in group.patterns))
        lines.append("")

    if grouped.has_whitespace_delta:
        lines.append(
            f"_Excludes whitespace-only changes: +{grouped.whitespace_only_added_lines}"
            f" / -{grouped.whitespace_only_removed_lines}_"
        )
        lines.append("")

    lines.append("| File | + | - |")
    lines.append("| --- | ---: | ---: |")
    for file in _sorted_files(list(grouped.files)):
        cell = _file_cell(file, owner, repo, pr_number)
        lines.append(f"| {cell} | +{file.additions} | -{file.deletions} |")

    lines.extend(["", "</details>", ""])
    return lines


def _attribution(owner: str, repo: str, commit_sha: Optional[str]) -> str:
    if not commit_sha:
        return f"<sub>Generated by {TOOL_NAME}</sub>"
    url = f"https://github.com/{owner}/{repo}/commit/{commit_sha}"
    return f"<sub>Generated by {TOOL_NAME} for commit [`{commit_sha[:7]}`]({url})</sub>"


def generate_comment_body(
    summary: DiffSummary,
    header: Optional[str] = None,
    owner: str = "",
    repo: str = "",
    pr_number: int = 0,
    commit_sha: Optional[str] = None,
) -> str:
    """Render ``summary`` as the Markdown body of a pull request comment.

    Parameters
    ----------
    summary : DiffSummary
        Result of :func:`~lines_changed.grouping.diff_summary.calculate_diff_summary`.
    header : str, optional
        Heading text. Defaults to ``"Lines Changed"``.
    owner, repo, pr_number
        Identify the pull request; used to build file and commit links.
    commit_sha : str, optional
        Commit the summary was computed for, linked in the footer.

    Returns
    -------
    str
        The comment body. Identical inputs always give identical output.
    """
    squares = generate_diff_squares(summary.added_lines, summary.removed_lines)
    lines = [
        COMMENT_IDENTIFIER,
        f"### {header or DEFAULT_HEADER}",
        "",
        f"{squares} **+{summary.added_lines}** / **-{summary.removed_lines}**",
        "",
    ]

    if summary.total_files == 0:
        lines.extend(["No files changed.", ""])
    else:
        lines.extend([f"{_plural(summary.total_files, 'file')} changed.", ""])

    total_lines = summary.total_changed_lines
    for grouped in summary.grouped_files:
        lines.extend(_render_group(grouped, total_lines, owner, repo, pr_number))

    lines.extend(["---", _attribution(owner, repo, commit_sha)])
    return "\n".join(lines) + "\n"
