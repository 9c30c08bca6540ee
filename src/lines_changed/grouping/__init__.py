"""
File grouping and line-count aggregation.

See :mod:`lines_changed.grouping.group_model` for the data model and
:mod:`lines_changed.grouping.diff_summary` for the classifier.
"""

from .diff_summary import calculate_diff_summary  # noqa: F401
from .group_model import (  # noqa: F401
    DEFAULT_GROUP_LABEL,
    DefaultGroupConfig,
    DiffSummary,
    FileChange,
    FileGroup,
    FileGroupsConfig,
    GroupedFiles,
    LineCounts,
    is_file_group,
)
