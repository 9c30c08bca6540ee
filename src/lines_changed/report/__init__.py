"""
Rendering of the pull request summary comment.
"""

from .comment_body import COMMENT_IDENTIFIER, generate_comment_body  # noqa: F401
from .diff_links import generate_file_diff_url  # noqa: F401
from .diff_squares import generate_diff_squares  # noqa: F401
