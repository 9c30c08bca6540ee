"""
File-groups configuration parsing for lines_changed.

Groups are supplied as a YAML list, for example::

    - label: "Generated"
      patterns:
        - "**/generated/**"
        - "**/*.lock"
      count: false
    - label: "Source"
      patterns: ["src/**"]
      ignore-whitespace: true

The parser validates each entry and returns an immutable
:class:`~lines_changed.grouping.group_model.FileGroupsConfig`. Any
structural problem raises a :class:`ConfigError` whose message names the
offending group (1-indexed) so that it can be located and fixed.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

import yaml

from lines_changed.grouping.group_model import (
    DEFAULT_GROUP_LABEL,
    DefaultGroupConfig,
    FileGroup,
    FileGroupsConfig,
)


IGNORE_WHITESPACE_KEY = "ignore-whitespace"

_ARRAY_EXAMPLE = (
    "file-groups must be a YAML array of group definitions. Example:\n"
    '- label: "Source"\n'
    "  patterns:\n"
    '    - "src/**/*.ts"\n'
    "  count: true"
)


class ConfigError(Exception):
    """Raised when the file-groups configuration is malformed."""

    pass


def _optional_bool(raw: Mapping[str, Any], key: str, default: bool, where: str) -> bool:
    if key not in raw:
        return default
    value = raw[key]
    if not isinstance(value, bool):
        raise ConfigError(f"{where}: '{key}' must be a boolean (true or false)")
    return value


def _parse_group(raw: Any, group_num: int, ignore_whitespace: bool) -> FileGroup:
    if not isinstance(raw, Mapping):
        raise ConfigError(
            f"Group {group_num}: 'label' is required and must be a non-empty string"
        )

    label = raw.get("label")
    if not isinstance(label, str) or not label.strip():
        raise ConfigError(
            f"Group {group_num}: 'label' is required and must be a non-empty string"
        )
    where = f'Group {group_num} ("{label}")'

    raw_patterns = raw.get("patterns")
    if not isinstance(raw_patterns, list) or not raw_patterns:
        raise ConfigError(
            f"{where}: 'patterns' is required and must be a non-empty array of glob patterns"
        )

    patterns: List[str] = []
    for index, pattern in enumerate(raw_patterns):
        if not isinstance(pattern, str) or not pattern.strip():
            raise ConfigError(f"{where}: pattern at index {index} must be a non-empty string")
        patterns.append(pattern.strip())

    return FileGroup(
        label=label.strip(),
        patterns=tuple(patterns),
        count_toward_metric=_optional_bool(raw, "count", True, where),
        ignore_whitespace=_optional_bool(raw, IGNORE_WHITESPACE_KEY, ignore_whitespace, where),
    )


def build_file_groups_config(
    parsed: Any,
    default_group_label: Optional[str] = None,
    ignore_whitespace: bool = False,
) -> FileGroupsConfig:
    """Validate an already-decoded group list and build the configuration.

    Parameters
    ----------
    parsed : Any
        Decoded configuration, expected to be a list of mappings. ``None``
        means no groups were configured.
    default_group_label : str, optional
        Label for the catch-all group. Falls back to ``"Changed"`` when empty.
    ignore_whitespace : bool
        Global whitespace flag. It is the default for every group that does
        not set ``ignore-whitespace`` itself, and the value used for the
        default group.

    Raises
    ------
    ConfigError
        If the structure or any group definition is invalid.
    """
    default_group = DefaultGroupConfig(
        label=default_group_label or DEFAULT_GROUP_LABEL,
        ignore_whitespace=ignore_whitespace,
    )
    if parsed is None:
        return FileGroupsConfig(groups=(), default_group=default_group)
    if not isinstance(parsed, list):
        raise ConfigError(_ARRAY_EXAMPLE)

    groups = tuple(
        _parse_group(raw, index + 1, ignore_whitespace) for index, raw in enumerate(parsed)
    )
    return FileGroupsConfig(groups=groups, default_group=default_group)


def parse_file_groups(
    file_groups_yaml: Optional[str],
    default_group_label: Optional[str] = None,
    ignore_whitespace: bool = False,
) -> FileGroupsConfig:
    """Parse the file-groups YAML input into a :class:`FileGroupsConfig`.

    An empty or whitespace-only input yields a configuration holding only
    the default group.

    Raises
    ------
    ConfigError
        If the YAML is invalid or the group definitions are malformed.
    """
    if not file_groups_yaml or not file_groups_yaml.strip():
        return build_file_groups_config(None, default_group_label, ignore_whitespace)

    try:
        parsed = yaml.safe_load(file_groups_yaml)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in file-groups input: {exc}") from exc

    return build_file_groups_config(parsed, default_group_label, ignore_whitespace)
