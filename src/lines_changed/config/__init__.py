"""
Configuration handling for lines_changed.

:mod:`lines_changed.config.loader` parses the file-groups definition and
:mod:`lines_changed.config.validation` checks glob patterns for common
mistakes.
"""

from .loader import ConfigError, build_file_groups_config, parse_file_groups  # noqa: F401
from .validation import validate_glob_patterns  # noqa: F401
