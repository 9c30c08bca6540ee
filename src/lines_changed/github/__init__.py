"""
GitHub integration: listing pull request files and posting the summary.
"""

from .github_client import GitHubClient, GitHubError  # noqa: F401
