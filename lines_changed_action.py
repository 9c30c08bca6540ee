#!/usr/bin/env python
"""
Thin wrapper script to invoke the lines_changed CLI.

Running ``python lines_changed_action.py`` is equivalent to running the
``lines-changed`` console script installed via ``pyproject.toml``.
"""

from lines_changed.cli import main


if __name__ == "__main__":
    main(prog_name="lines-changed")
