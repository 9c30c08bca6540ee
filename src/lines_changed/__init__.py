"""
Top-level package for lines_changed.

This package exposes the main CLI entry point via the
``lines_changed.cli`` module.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
