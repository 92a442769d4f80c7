"""CLI commands for treemirror.

This package contains all subcommand implementations.
"""

from treemirror.cli.commands import config, tree

__all__ = ["config", "tree"]
