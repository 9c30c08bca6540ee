"""
Links to a single file's diff on a pull request's "Files changed" page.
"""

from __future__ import annotations

import hashlib


ANCHOR_HEX_LENGTH = 16


def generate_file_diff_url(owner: str, repo: str, pr_number: int, filename: str) -> str:
    """Return a URL pointing at ``filename`` in the pull request diff view.

    The anchor is derived from an MD5 digest of the filename, so the same
    filename always yields the same URL. If the anchor does not resolve the
    link still opens the pull request's files page.
    """
    digest = hashlib.md5(filename.encode("utf-8")).hexdigest()
    anchor = f"diff-{digest[:ANCHOR_HEX_LENGTH]}"
    return f"https://github.com/{owner}/{repo}/pull/{pr_number}/files#{anchor}"
