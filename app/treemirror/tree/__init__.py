"""Immutable snapshot models for the mirrored storage tree."""

from treemirror.tree.models import (
    ROOT_NAME,
    Directory,
    Entry,
    EntryKind,
    File,
    TreeSnapshot,
    empty_snapshot,
)

__all__ = [
    "ROOT_NAME",
    "Directory",
    "Entry",
    "EntryKind",
    "File",
    "TreeSnapshot",
    "empty_snapshot",
]
