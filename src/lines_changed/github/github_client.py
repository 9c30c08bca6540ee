"""
Client for the parts of the GitHub REST API used by lines_changed.

It lists the files changed in a pull request and creates or updates
the summary comment. HTTP errors, timeouts and undecodable responses
raise :class:`GitHubError`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from lines_changed.grouping.group_model import FileChange


logger = logging.getLogger(__name__)
# Attach a null handler to avoid errors when the root logger is missing a
# stream. Messages will still propagate to the root logger if configured.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


DEFAULT_API_URL = "https://api.github.com"


class GitHubError(Exception):
    """Raised when a GitHub API request fails."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def file_change_from_api(data: Dict[str, Any]) -> FileChange:
    """Convert one entry of the "list pull request files" response."""
    return FileChange(
        filename=data["filename"],
        additions=int(data.get("additions", 0)),
        deletions=int(data.get("deletions", 0)),
        changes=data.get("changes"),
        status=data.get("status", "modified"),
    )


@dataclass
class GitHubClient:
    """Client for one GitHub repository.

    Parameters
    ----------
    token : str
        Token with ``pull-requests: read`` and ``issues: write`` access.
    owner : str
        Repository owner (user or organisation).
    repo : str
        Repository name.
    api_url : str, optional
        Base URL of the REST API. Defaults to ``https://api.github.com``.
    request_timeout : float, optional
        Timeout in seconds for each HTTP request.
    per_page : int, optional
        Page size used when listing files and comments.
    """

    token: str
    owner: str
    repo: str
    api_url: str = DEFAULT_API_URL
    request_timeout: float = 30.0
    per_page: int = 100

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _url(self, path: str) -> str:
        return f"{self.api_url.rstrip('/')}/repos/{self.owner}/{self.repo}{path}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and return the decoded JSON body."""
        url = self._url(path)
        logger.debug("GitHub %s %s", method.upper(), url)
        sender = getattr(requests, method)
        try:
            response = sender(url, headers=self._headers(), timeout=self.request_timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error("Failed to reach GitHub: %s", exc)
            raise GitHubError(str(exc)) from exc
        if not 200 <= response.status_code < 300:
            logger.error("GitHub returned status %s: %s", response.status_code, response.text)
            raise GitHubError(
                f"GitHub returned status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            logger.error("Failed to parse GitHub response: %s", exc)
            raise GitHubError("Failed to parse GitHub response") from exc

    def _paginate(self, path: str) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        page = 1
        while True:
            batch = self._request("get", path, params={"per_page": self.per_page, "page": page})
            if not isinstance(batch, list):
                raise GitHubError(f"Unexpected response structure from {path}")
            items.extend(batch)
            if len(batch) < self.per_page:
                return items
            page += 1

    # ------------------------------------------------------------------
    # Pull request files
    # ------------------------------------------------------------------
    def list_pull_request_files(self, pr_number: int) -> List[FileChange]:
        """Return every file changed in the pull request, in API order."""
        data = self._paginate(f"/pulls/{pr_number}/files")
        return [file_change_from_api(item) for item in data]

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------
    def list_issue_comments(self, pr_number: int) -> List[Dict[str, Any]]:
        return self._paginate(f"/issues/{pr_number}/comments")

    def find_comment(self, pr_number: int, marker: str) -> Optional[Dict[str, Any]]:
        """Return the first comment whose body contains ``marker``."""
        for comment in self.list_issue_comments(pr_number):
            if marker in (comment.get("body") or ""):
                return comment
        return None

    def upsert_comment(self, pr_number: int, body: str, marker: str) -> str:
        """Update the comment carrying ``marker`` or create a new one.

        Returns
        -------
        str
            ``"updated"`` or ``"created"``.
        """
        existing = self.find_comment(pr_number, marker)
        if existing is not None:
            logger.info("Updating existing comment (ID: %s)", existing["id"])
            self._request("patch", f"/issues/comments/{existing['id']}", json={"body": body})
            return "updated"
        logger.info("Creating new comment")
        self._request("post", f"/issues/{pr_number}/comments", json={"body": body})
        return "created"
