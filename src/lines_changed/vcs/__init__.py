"""
Version control system (VCS) integration.

:class:`GitClient` runs ``git diff -w --numstat`` in a local checkout to
obtain whitespace-adjusted line counts.
"""

from .git_client import GitClient, GitError, parse_numstat  # noqa: F401
