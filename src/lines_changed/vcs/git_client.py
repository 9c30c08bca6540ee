"""
Git client used to obtain whitespace-adjusted line counts.

The hosting platform reports raw additions and deletions per file. To
exclude whitespace-only changes we run ``git diff -w --numstat`` between
the pull request's base and head commits in a local checkout. All
subprocess calls go through :meth:`GitClient._run` so that unit tests can
mock them easily.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

from lines_changed.grouping.group_model import LineCounts


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


_BRACE_RENAME = re.compile(r"^(.*)\{.* => (.*)\}(.*)$")


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


def _resolve_rename(path: str) -> str:
    """Return the new name for a numstat rename entry.

    Handles both ``old => new`` and ``src/{old => new}/file.py``.
    """
    if " => " not in path:
        return path
    match = _BRACE_RENAME.match(path)
    if match:
        return match.group(1) + match.group(2) + match.group(3)
    return path.split(" => ", 1)[1]


def parse_numstat(output: str) -> Dict[str, LineCounts]:
    """Parse ``git diff --numstat`` output into per-file line counts.

    Each line has the form ``<added>\\t<removed>\\t<path>``. Binary files
    (``-\\t-\\t<path>``) and malformed lines are skipped. Renamed files are
    keyed by their new name.
    """
    result: Dict[str, LineCounts] = {}

    for line in output.split("\n"):
        trimmed = line.strip()
        if not trimmed:
            continue

        parts = trimmed.split("\t")
        if len(parts) < 3:
            continue

        added_str, removed_str = parts[0], parts[1]
        path = "\t".join(parts[2:])

        if added_str == "-" and removed_str == "-":
            continue
        try:
            additions = int(added_str)
            deletions = int(removed_str)
        except ValueError:
            continue

        result[_resolve_rename(path)] = LineCounts(additions=additions, deletions=deletions)

    return result


class GitClient:
    """Client for reading diffs from a local Git checkout."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` entry is found or the filesystem
        root is reached.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                return None
            current = current.parent

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If Git cannot be started, or if the command exits with a
            non-zero status when ``check`` is True.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            logger.error("Failed to execute Git: %s", e)
            raise GitError(f"Failed to execute Git: {e}") from e

        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    # ------------------------------------------------------------------
    # Whitespace-adjusted diff
    # ------------------------------------------------------------------
    def fetch_commits(self, *shas: str) -> None:
        """Fetch ``shas`` from origin; shallow clones may not contain them.

        Failures are ignored because the commits may already be present.
        """
        result = self._run(["fetch", "origin", *shas, "--depth=1"], check=False)
        if result.returncode != 0:
            logger.debug("git fetch failed (ignored): %s", result.stderr.strip())

    def get_whitespace_line_counts(
        self, base_sha: str, head_sha: str
    ) -> Optional[Dict[str, LineCounts]]:
        """Return per-file line counts that ignore whitespace-only changes.

        Parameters
        ----------
        base_sha : str
            Base commit of the pull request.
        head_sha : str
            Head commit of the pull request.

        Returns
        -------
        Optional[Dict[str, LineCounts]]
            Counts keyed by post-rename filename, or ``None`` if the diff
            could not be produced.
        """
        self.fetch_commits(base_sha, head_sha)
        try:
            result = self._run(["diff", "-w", "--numstat", f"{base_sha}...{head_sha}"])
        except GitError as exc:
            logger.warning(
                "Failed to get whitespace-adjusted diff: %s. Falling back to API counts.", exc
            )
            return None
        counts = parse_numstat(result.stdout)
        logger.debug("Whitespace-adjusted counts for %d file(s)", len(counts))
        return counts
