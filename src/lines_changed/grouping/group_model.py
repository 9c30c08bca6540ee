"""
Data models for file grouping and line-count aggregation.

A run starts from a list of :class:`FileChange` records and a
:class:`FileGroupsConfig`. Classification produces one
:class:`GroupedFiles` per non-empty group, and the totals are collected
in a :class:`DiffSummary`. All models are immutable once built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple, Union


DEFAULT_GROUP_LABEL = "Changed"


@dataclass(frozen=True)
class FileChange:
    """A single changed file as reported by the hosting platform.

    Attributes
    ----------
    filename : str
        Path of the file relative to the repository root (post-rename).
    additions : int
        Number of added lines.
    deletions : int
        Number of removed lines.
    changes : int, optional
        Total changed lines, used only to order report tables. Computed as
        ``additions + deletions`` when not supplied.
    status : str
        Informational status such as ``added`` or ``modified``.
    """

    filename: str
    additions: int
    deletions: int
    changes: Optional[int] = None
    status: str = "modified"

    def __post_init__(self) -> None:
        if self.changes is None:
            object.__setattr__(self, "changes", self.additions + self.deletions)


@dataclass(frozen=True)
class LineCounts:
    """Alternate line counts for one file (whitespace-only changes excluded)."""

    additions: int
    deletions: int


# Lookup from filename to whitespace-adjusted counts.
WhitespaceLineCounts = Mapping[str, LineCounts]


@dataclass(frozen=True)
class FileGroup:
    """A configured group: an ordered classification rule.

    Attributes
    ----------
    label : str
        Display label. Duplicate labels are allowed.
    patterns : Tuple[str, ...]
        Glob patterns; a file belongs to the group if any pattern matches.
    count_toward_metric : bool
        Whether the group's lines contribute to the headline totals.
    ignore_whitespace : bool
        Whether whitespace-adjusted counts replace the raw counts.
    """

    label: str
    patterns: Tuple[str, ...]
    count_toward_metric: bool = True
    ignore_whitespace: bool = False
    is_default: bool = field(default=False, init=False)


@dataclass(frozen=True)
class DefaultGroupConfig:
    """The implicit catch-all group for files that match no configured group.

    It has no patterns and always counts toward the headline metric.
    """

    label: str = DEFAULT_GROUP_LABEL
    ignore_whitespace: bool = False
    patterns: Tuple[str, ...] = field(default=(), init=False)
    count_toward_metric: bool = field(default=True, init=False)
    is_default: bool = field(default=True, init=False)


Group = Union[FileGroup, DefaultGroupConfig]


def is_file_group(group: Group) -> bool:
    """Return True if ``group`` is a configured group rather than the default."""
    return not group.is_default


@dataclass(frozen=True)
class FileGroupsConfig:
    """Ordered group definitions plus the default group."""

    groups: Tuple[FileGroup, ...] = ()
    default_group: DefaultGroupConfig = field(default_factory=DefaultGroupConfig)

    @property
    def any_ignore_whitespace(self) -> bool:
        """True if at least one group requests whitespace-adjusted counts."""
        return self.default_group.ignore_whitespace or any(
            group.ignore_whitespace for group in self.groups
        )


@dataclass(frozen=True)
class GroupedFiles:
    """Files claimed by one group together with the group's line totals.

    ``whitespace_only_added_lines`` and ``whitespace_only_removed_lines`` are
    ``None`` unless whitespace adjustment removed at least one line.
    """

    group: Group
    files: Tuple[FileChange, ...]
    added_lines: int
    removed_lines: int
    whitespace_only_added_lines: Optional[int] = None
    whitespace_only_removed_lines: Optional[int] = None

    @property
    def has_whitespace_delta(self) -> bool:
        return self.whitespace_only_added_lines is not None


@dataclass(frozen=True)
class DiffSummary:
    """Aggregated result of a run."""

    added_lines: int = 0
    removed_lines: int = 0
    uncounted_added_lines: int = 0
    uncounted_removed_lines: int = 0
    total_files: int = 0
    grouped_files: Tuple[GroupedFiles, ...] = ()

    @property
    def total_changed_lines(self) -> int:
        """Counted plus uncounted additions and deletions."""
        return (
            self.added_lines
            + self.removed_lines
            + self.uncounted_added_lines
            + self.uncounted_removed_lines
        )
