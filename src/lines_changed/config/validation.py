"""
Advisory checks for glob patterns.

The checks catch common authoring mistakes. They never reject a pattern:
classification still uses every pattern as written.
"""

from __future__ import annotations

import sys
from typing import Iterable, List

from lines_changed.grouping.matcher import compile_pattern


def validate_glob_patterns(patterns: Iterable[str]) -> List[str]:
    """Return warning messages for ``patterns``; an empty list means clean.

    A single pattern may produce several warnings.
    """
    errors: List[str] = []

    for pattern in patterns:
        try:
            compile_pattern(pattern)
        except Exception as exc:
            errors.append(f'"{pattern}" is not a valid glob pattern: {str(exc) or type(exc).__name__}')

        if "\\" in pattern and sys.platform != "win32":
            errors.append(
                f'"{pattern}" contains backslashes - use forward slashes for glob patterns'
            )

        if pattern.startswith("/"):
            errors.append(f'"{pattern}" starts with / - glob patterns should be relative')

    return errors
