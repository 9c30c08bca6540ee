"""
Command line interface for the lines_changed tool.

This module defines the ``main`` function which is used as the entry
point when executing the ``lines-changed`` command. It orchestrates
configuration parsing, pattern validation, fetching the pull request's
changed files, optional whitespace-adjusted counts, aggregation, and
posting (or printing) the summary comment. It is designed to run as a
step in a GitHub Actions workflow, so most options can also be read from
the environment.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click

from lines_changed import __version__
from lines_changed.config.loader import ConfigError, parse_file_groups
from lines_changed.config.validation import validate_glob_patterns
from lines_changed.github.github_client import (
    DEFAULT_API_URL,
    GitHubClient,
    GitHubError,
    file_change_from_api,
)
from lines_changed.grouping.diff_summary import calculate_diff_summary
from lines_changed.grouping.group_model import (
    DEFAULT_GROUP_LABEL,
    DiffSummary,
    FileChange,
    FileGroupsConfig,
    LineCounts,
)
from lines_changed.report.comment_body import (
    COMMENT_IDENTIFIER,
    DEFAULT_HEADER,
    generate_comment_body,
)
from lines_changed.vcs.git_client import GitClient

# Create a module-level logger. Attach a null handler and disable
# propagation to avoid logging errors when the root logger's stream is
# closed (such as during unit tests). ``--verbose`` turns propagation back
# on for every lines_changed logger.
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
EXIT_CONFIG_ERROR = 5
EXIT_API_FAILURE = 6


# ---------------------------------------------------------------------------
# Status display utilities
# ---------------------------------------------------------------------------

def print_info(message: str, indent: int = 0):
    """Print an info message."""
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}", err=False)


def print_success(message: str, indent: int = 0):
    """Print a success message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}", err=False)


def print_warning(message: str, indent: int = 0):
    """Print a warning message."""
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}", err=False)


def print_error(message: str, indent: int = 0):
    """Print an error message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


def _enable_package_logging() -> None:
    for name in list(logging.root.manager.loggerDict):
        if name == "lines_changed" or name.startswith("lines_changed."):
            logging.getLogger(name).propagate = True


# ---------------------------------------------------------------------------
# Core functionality
# ---------------------------------------------------------------------------

def load_event_payload() -> Dict[str, Any]:
    """Return the GitHub Actions event payload, or an empty dict.

    The payload is read from the file named by ``GITHUB_EVENT_PATH``.
    """
    event_path = os.environ.get("GITHUB_EVENT_PATH")
    if not event_path:
        return {}
    try:
        data = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not read event payload %s: %s", event_path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def split_repository(repository: Optional[str]) -> Tuple[str, str]:
    """Split ``owner/name`` into its parts.

    Raises
    ------
    click.UsageError
        If ``repository`` is not of the form ``owner/name``.
    """
    owner, _, name = (repository or "").partition("/")
    if not owner or not name or "/" in name:
        raise click.UsageError(
            f"Repository must be given as 'owner/name' (got {repository!r})."
        )
    return owner, name


def load_files_json(path: Path) -> List[FileChange]:
    """Read changed files from a JSON file shaped like the GitHub API response."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError("expected a JSON array of file objects")
    return [file_change_from_api(item) for item in data]


def get_whitespace_counts(
    config: FileGroupsConfig,
    base_sha: Optional[str],
    head_sha: Optional[str],
    start_dir: Path,
) -> Optional[Dict[str, LineCounts]]:
    """Fetch whitespace-adjusted counts when some group asks for them."""
    if not config.any_ignore_whitespace:
        return None
    if not base_sha or not head_sha:
        print_warning(
            "Base or head commit unknown. Whitespace-adjusted counts are unavailable."
        )
        return None

    repo_root = GitClient.find_repo_root(start_dir)
    if repo_root is None:
        print_warning(
            "No git checkout detected. Whitespace-adjusted counts are unavailable. "
            "Add actions/checkout before this step to enable ignore-whitespace."
        )
        return None

    counts = GitClient(repo_root).get_whitespace_line_counts(base_sha, head_sha)
    if counts is None:
        print_warning("Failed to get whitespace-adjusted diff. Falling back to API counts.")
    return counts


def summary_outputs(summary: DiffSummary) -> Dict[str, int]:
    return {
        "added-lines": summary.added_lines,
        "removed-lines": summary.removed_lines,
        "uncounted-added-lines": summary.uncounted_added_lines,
        "uncounted-removed-lines": summary.uncounted_removed_lines,
        "total-files": summary.total_files,
    }


def write_outputs(summary: DiffSummary) -> None:
    """Publish the totals as step outputs (``GITHUB_OUTPUT``) or echo them."""
    outputs = summary_outputs(summary)
    output_path = os.environ.get("GITHUB_OUTPUT")
    if output_path:
        with open(output_path, "a", encoding="utf-8") as handle:
            for name, value in outputs.items():
                handle.write(f"{name}={value}\n")
        return
    for name, value in outputs.items():
        click.echo(f"{name}={value}")


def describe_github_error(exc: GitHubError) -> str:
    """Turn a GitHub failure into a message that suggests a fix."""
    if exc.status_code == 401:
        return (
            "GitHub token is invalid or lacks required permissions. Ensure the token has "
            '"pull-requests: read" and "issues: write" permissions.'
        )
    if exc.status_code == 404:
        return (
            "Repository or PR not found. Ensure the tool is running in the correct "
            "repository context."
        )
    if exc.status_code == 403 and "rate limit" in str(exc).lower():
        return "GitHub API rate limit exceeded. Please wait before retrying."
    return f"GitHub API error: {exc}"


def log_group_membership(summary: DiffSummary) -> None:
    for grouped in summary.grouped_files:
        marker = "✓" if grouped.group.count_toward_metric else "✗"
        for file in grouped.files:
            logger.debug(
                "%s %s: %s (+%d -%d)",
                marker,
                grouped.group.label,
                file.filename,
                file.additions,
                file.deletions,
            )


@click.command()
@click.option("--github-token", envvar="GITHUB_TOKEN", help="Token used for GitHub API calls.")
@click.option("--repository", envvar="GITHUB_REPOSITORY", help="Repository as owner/name.")
@click.option("--pr-number", type=int, help="Pull request number (defaults to the event payload).")
@click.option("--file-groups", envvar="INPUT_FILE_GROUPS", default="", help="YAML list of file groups.")
@click.option(
    "--file-groups-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read the file groups YAML from a file.",
)
@click.option(
    "--default-group-label",
    envvar="INPUT_DEFAULT_GROUP_LABEL",
    default=DEFAULT_GROUP_LABEL,
    show_default=True,
    help="Label for files that match no group.",
)
@click.option(
    "--ignore-whitespace/--no-ignore-whitespace",
    envvar="INPUT_IGNORE_WHITESPACE",
    default=False,
    help="Exclude whitespace-only changes unless a group says otherwise.",
)
@click.option("--comment-header", envvar="INPUT_COMMENT_HEADER", default=DEFAULT_HEADER, show_default=True)
@click.option("--base-sha", help="Base commit (defaults to the event payload).")
@click.option("--head-sha", help="Head commit (defaults to the event payload).")
@click.option("--api-url", envvar="GITHUB_API_URL", default=DEFAULT_API_URL, show_default=True)
@click.option(
    "--files-json",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read changed files from a JSON file instead of the GitHub API.",
)
@click.option("--dry-run", is_flag=True, help="Print the comment instead of posting it.")
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="lines-changed")
def main(
    github_token: Optional[str],
    repository: Optional[str],
    pr_number: Optional[int],
    file_groups: str,
    file_groups_file: Optional[Path],
    default_group_label: str,
    ignore_whitespace: bool,
    comment_header: str,
    base_sha: Optional[str],
    head_sha: Optional[str],
    api_url: str,
    files_json: Optional[Path],
    dry_run: bool,
    verbose: bool,
) -> None:
    """📊 Post a categorized lines-changed summary on a pull request.

    Changed files are sorted into the configured file groups (first
    matching group wins), line counts are totalled per group, and the
    result is posted as a single comment that is updated on later runs.
    """
    # Use force=True to ensure handlers are reconfigured on subsequent
    # invocations (important for tests).
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )
    if verbose:
        _enable_package_logging()

    try:
        # Resolve pull request context
        event = load_event_payload()
        pull_request = event.get("pull_request") or {}
        if pr_number is None:
            pr_number = pull_request.get("number")
        base_sha = base_sha or (pull_request.get("base") or {}).get("sha")
        head_sha = head_sha or (pull_request.get("head") or {}).get("sha")

        offline = files_json is not None and dry_run
        if repository or not offline:
            try:
                owner, repo = split_repository(repository)
            except click.UsageError as exc:
                print_error(exc.format_message())
                raise click.exceptions.Exit(EXIT_INVALID_USAGE)
        else:
            owner, repo = "", ""
        if not offline:
            if not github_token:
                print_error("A GitHub token is required (--github-token or GITHUB_TOKEN).")
                raise click.exceptions.Exit(EXIT_INVALID_USAGE)
            if pr_number is None:
                print_error("This tool can only be run for pull requests (no PR number found).")
                raise click.exceptions.Exit(EXIT_INVALID_USAGE)

        # Parse and validate file groups
        try:
            raw_groups = (
                file_groups_file.read_text(encoding="utf-8") if file_groups_file else file_groups
            )
            config = parse_file_groups(raw_groups, default_group_label, ignore_whitespace)
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

        for group in config.groups:
            for warning in validate_glob_patterns(group.patterns):
                print_warning(f'Invalid pattern in group "{group.label}": {warning}')

        print_info(
            f"File groups: {', '.join(g.label for g in config.groups) or 'none'}"
            f" (default: {config.default_group.label})"
        )

        # Collect changed files
        client: Optional[GitHubClient] = None
        if github_token and owner:
            client = GitHubClient(token=github_token, owner=owner, repo=repo, api_url=api_url)

        if files_json is not None:
            try:
                files = load_files_json(files_json)
            except (OSError, ValueError, KeyError, TypeError) as exc:
                print_error(f"Could not read changed files from {files_json}: {exc}")
                raise click.exceptions.Exit(EXIT_INVALID_USAGE)
        else:
            assert client is not None and pr_number is not None
            print_info(f"Processing PR #{pr_number} in {owner}/{repo}")
            files = client.list_pull_request_files(pr_number)
        print_success(f"Found {len(files)} changed file{'s' if len(files) != 1 else ''}")

        whitespace_counts = get_whitespace_counts(config, base_sha, head_sha, Path.cwd())

        # Aggregate and report
        summary = calculate_diff_summary(files, config, whitespace_counts)
        log_group_membership(summary)
        write_outputs(summary)

        body = generate_comment_body(
            summary,
            header=comment_header,
            owner=owner,
            repo=repo,
            pr_number=pr_number or 0,
            commit_sha=head_sha,
        )

        if dry_run:
            click.echo(body)
        else:
            assert client is not None and pr_number is not None
            action = client.upsert_comment(pr_number, body, COMMENT_IDENTIFIER)
            print_success(f"Lines changed summary {action} successfully")

        raise click.exceptions.Exit(EXIT_SUCCESS)

    except click.exceptions.Exit:
        raise
    except GitHubError as exc:
        print_error(describe_github_error(exc))
        raise click.exceptions.Exit(EXIT_API_FAILURE)
    except Exception as exc:
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)
