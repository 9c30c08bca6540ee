"""
Classification of changed files into groups and line-count aggregation.

Files are tested against the configured groups in order and the first
group with a matching pattern claims the file. Files no group claims land
in the default group. Each non-empty group then gets its added and removed
line totals, optionally replaced by whitespace-adjusted counts, and the
totals are rolled up into counted and uncounted metrics.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .group_model import (
    DiffSummary,
    FileChange,
    FileGroupsConfig,
    Group,
    GroupedFiles,
    LineCounts,
    WhitespaceLineCounts,
)
from .matcher import matches_any


def classify_files(
    files: Sequence[FileChange], config: FileGroupsConfig
) -> Tuple[List[List[FileChange]], List[FileChange]]:
    """Partition ``files`` among the configured groups.

    Returns
    -------
    Tuple[List[List[FileChange]], List[FileChange]]
        One list per configured group (same order as ``config.groups``)
        and the list of files that fell through to the default group.
        Input order is preserved inside every list.
    """
    buckets: List[List[FileChange]] = [[] for _ in config.groups]
    unmatched: List[FileChange] = []

    for file in files:
        for index, group in enumerate(config.groups):
            if matches_any(file.filename, group.patterns):
                buckets[index].append(file)
                break
        else:
            unmatched.append(file)

    return buckets, unmatched


def _sum_lines(files: Sequence[FileChange]) -> LineCounts:
    return LineCounts(
        additions=sum(f.additions for f in files),
        deletions=sum(f.deletions for f in files),
    )


def _sum_adjusted_lines(
    files: Sequence[FileChange], adjusted: WhitespaceLineCounts
) -> LineCounts:
    added = 0
    removed = 0
    for file in files:
        counts = adjusted.get(file.filename)
        if counts is None:
            added += file.additions
            removed += file.deletions
        else:
            added += counts.additions
            removed += counts.deletions
    return LineCounts(additions=added, deletions=removed)


def summarize_group(
    group: Group,
    files: Sequence[FileChange],
    whitespace_counts: Optional[WhitespaceLineCounts] = None,
) -> GroupedFiles:
    """Compute the reported totals for one group's files.

    When the group ignores whitespace and a lookup is available, each file
    uses its adjusted counts (falling back to its raw counts if the lookup
    has no entry for it). The whitespace-only deltas are attached only when
    at least one of them is positive.
    """
    raw = _sum_lines(files)

    if not group.ignore_whitespace or whitespace_counts is None:
        return GroupedFiles(
            group=group,
            files=tuple(files),
            added_lines=raw.additions,
            removed_lines=raw.deletions,
        )

    adjusted = _sum_adjusted_lines(files, whitespace_counts)
    # Deltas are never negative, even if the lookup reports more lines than the API.
    whitespace_added = max(0, raw.additions - adjusted.additions)
    whitespace_removed = max(0, raw.deletions - adjusted.deletions)

    if whitespace_added == 0 and whitespace_removed == 0:
        return GroupedFiles(
            group=group,
            files=tuple(files),
            added_lines=adjusted.additions,
            removed_lines=adjusted.deletions,
        )
    return GroupedFiles(
        group=group,
        files=tuple(files),
        added_lines=adjusted.additions,
        removed_lines=adjusted.deletions,
        whitespace_only_added_lines=whitespace_added,
        whitespace_only_removed_lines=whitespace_removed,
    )


def calculate_diff_summary(
    files: Sequence[FileChange],
    config: FileGroupsConfig,
    whitespace_counts: Optional[WhitespaceLineCounts] = None,
) -> DiffSummary:
    """Group ``files`` according to ``config`` and aggregate line counts.

    Parameters
    ----------
    files : Sequence[FileChange]
        Changed files in the order reported by the hosting platform.
    config : FileGroupsConfig
        Parsed group configuration.
    whitespace_counts : WhitespaceLineCounts, optional
        Whitespace-adjusted counts keyed by (post-rename) filename. When
        ``None`` every group reports raw counts regardless of its flag.

    Returns
    -------
    DiffSummary
        Totals plus the non-empty groups, default group first and then the
        configured groups in their original order.
    """
    buckets, unmatched = classify_files(files, config)

    candidates: List[Tuple[Group, List[FileChange]]] = [(config.default_group, unmatched)]
    candidates.extend(zip(config.groups, buckets))

    grouped: List[GroupedFiles] = []
    added = removed = uncounted_added = uncounted_removed = 0

    for group, group_files in candidates:
        if not group_files:
            continue
        result = summarize_group(group, group_files, whitespace_counts)
        grouped.append(result)
        if group.count_toward_metric:
            added += result.added_lines
            removed += result.removed_lines
        else:
            uncounted_added += result.added_lines
            uncounted_removed += result.removed_lines

    return DiffSummary(
        added_lines=added,
        removed_lines=removed,
        uncounted_added_lines=uncounted_added,
        uncounted_removed_lines=uncounted_removed,
        total_files=len(files),
        grouped_files=tuple(grouped),
    )
