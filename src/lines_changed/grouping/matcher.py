"""
Glob matching for group patterns.

Patterns use POSIX path semantics regardless of the host platform:
``*`` and ``?`` stay within a path segment, ``**`` spans segments,
brace expansion, bracket classes and extended globs are supported,
and dotfiles are matchable. Matching is case-sensitive.
"""

from __future__ import annotations

from typing import Iterable

from wcmatch import glob


GLOB_FLAGS = (
    glob.GLOBSTAR
    | glob.BRACE
    | glob.EXTGLOB
    | glob.DOTGLOB
    | glob.NEGATE
    | glob.NEGATEALL
    | glob.FORCEUNIX
    | glob.CASE
)


def compile_pattern(pattern: str) -> None:
    """Translate ``pattern`` without matching anything.

    Raises whatever the glob engine raises for a pattern it cannot
    build (for example too many brace expansions).
    """
    glob.translate(pattern, flags=GLOB_FLAGS)


def matches(filename: str, pattern: str) -> bool:
    """Return True if ``filename`` matches ``pattern``.

    A pattern the glob engine cannot build matches nothing.
    """
    try:
        return glob.globmatch(filename, pattern, flags=GLOB_FLAGS)
    except Exception:
        return False


def matches_any(filename: str, patterns: Iterable[str]) -> bool:
    return any(matches(filename, pattern) for pattern in patterns)
