"""Shared Rich display functions for tree snapshots.

Provides reusable renderers for printing a TreeSnapshot as a Rich tree
or as JSON across CLI commands (show, watch, mkdir, touch, clear).
"""

import json

from rich.tree import Tree

from treemirror.tree.models import Directory, TreeSnapshot
from treemirror.utils.formatting import console


def create_snapshot_tree(snapshot: TreeSnapshot, label: str | None = None) -> Tree:
    """Create a Rich tree displaying a snapshot.

    Directories are styled ``tree.directory`` with a trailing slash,
    files ``tree.file``. Children keep snapshot order.

    Args:
        snapshot: Snapshot to render.
        label: Root label. Defaults to the snapshot root name.

    Returns:
        Rich Tree ready for printing.
    """
    tree = Tree(f"[tree.directory]{label or snapshot.name}/[/]", guide_style="border")
    # Explicit worklist so very deep trees do not hit the recursion limit
    stack: list[tuple[Tree, Directory]] = [(tree, snapshot.root)]
    while stack:
        node, directory = stack.pop()
        for child in directory.children:
            if isinstance(child, Directory):
                branch = node.add(f"[tree.directory]{child.name}/[/]")
                stack.append((branch, child))
            else:
                node.add(f"[tree.file]{child.name}[/]")
    return tree


def print_snapshot(snapshot: TreeSnapshot, label: str | None = None) -> None:
    """Print a snapshot tree followed by a one-line summary."""
    console.print(create_snapshot_tree(snapshot, label))
    print_snapshot_summary(snapshot)


def print_snapshot_summary(snapshot: TreeSnapshot) -> None:
    """Print directory and file counts for a snapshot."""
    directories, files = snapshot.count()
    console.print(f"[dim]{directories} directories, {files} files[/dim]")


def print_snapshot_json(snapshot: TreeSnapshot) -> None:
    """Print a snapshot in its plain-dict form as JSON."""
    console.print_json(json.dumps(snapshot.to_dict()))
