"""Immutable tree snapshot models.

This module defines the value types that describe the storage tree at
one instant: directories, files, and the snapshot that owns the root
directory. All of them are frozen, so a snapshot handed to a consumer
can never change underneath it.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

ROOT_NAME = "root"


class EntryKind(str, Enum):
    """Discriminator for tree entries.

    Attributes:
        DIRECTORY: Directory with ordered children.
        FILE: File leaf (content is never loaded by a walk).
    """

    DIRECTORY = "dir"
    FILE = "file"


@dataclass(frozen=True, slots=True)
class File:
    """File entry discovered during a walk.

    Attributes:
        name: Entry name within its parent directory.
        content: File content. Walks only discover names, so this is
            always the empty string for walked files.
    """

    name: str
    content: str = ""
    kind: Literal[EntryKind.FILE] = field(default=EntryKind.FILE, init=False)

    def to_dict(self) -> dict[str, Any]:
        """Return the plain-dict form of this file."""
        return {"kind": self.kind.value, "name": self.name, "content": self.content}


@dataclass(frozen=True, slots=True)
class Directory:
    """Directory entry with children in backend enumeration order.

    Attributes:
        name: Entry name within its parent directory.
        children: Child entries, in the order the backend yielded them.
    """

    name: str
    children: tuple[Entry, ...] = ()
    kind: Literal[EntryKind.DIRECTORY] = field(default=EntryKind.DIRECTORY, init=False)

    def __post_init__(self) -> None:
        """Freeze children passed as a list."""
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

    def child(self, name: str) -> Entry | None:
        """Return the first child with the given name, or None."""
        for entry in self.children:
            if entry.name == name:
                return entry
        return None

    def to_dict(self) -> dict[str, Any]:
        """Return the plain-dict form of this directory and its subtree."""
        return {
            "kind": self.kind.value,
            "name": self.name,
            "children": [child.to_dict() for child in self.children],
        }


Entry = Directory | File


@dataclass(frozen=True, slots=True)
class TreeSnapshot:
    """The storage tree at one instant.

    A snapshot owns exactly one root directory named ``"root"``. Consumers
    detect change by identity: a new snapshot object is created for every
    successful walk, and the same object is returned until then.

    Attributes:
        root: Root directory of the tree.
        generation: Number of the walk that produced this snapshot
            (0 for the initial empty snapshot).
    """

    root: Directory = field(default_factory=lambda: Directory(ROOT_NAME))
    generation: int = 0

    def __post_init__(self) -> None:
        """Validate the root invariant."""
        if self.root.name != ROOT_NAME:
            msg = f"Snapshot root must be named {ROOT_NAME!r}, got {self.root.name!r}"
            raise ValueError(msg)
        if self.generation < 0:
            msg = f"Generation cannot be negative, got {self.generation}"
            raise ValueError(msg)

    @property
    def kind(self) -> EntryKind:
        return self.root.kind

    @property
    def name(self) -> str:
        return self.root.name

    @property
    def children(self) -> tuple[Entry, ...]:
        return self.root.children

    @property
    def is_empty(self) -> bool:
        """True if the root has no children."""
        return not self.root.children

    def find(self, path: str | Sequence[str]) -> Entry | None:
        """Resolve a path below root to an entry.

        Args:
            path: Either a ``/``-separated string (leading and trailing
                slashes are ignored) or a sequence of names. An empty
                path resolves to the root directory.

        Returns:
            The first matching entry, or None if any component is missing
            or traverses a file.
        """
        parts = [p for p in path.split("/") if p] if isinstance(path, str) else list(path)

        current: Entry = self.root
        for part in parts:
            if not isinstance(current, Directory):
                return None
            found = current.child(part)
            if found is None:
                return None
            current = found
        return current

    def iter_entries(self) -> Iterator[tuple[str, Entry]]:
        """Yield ``(path, entry)`` pairs depth-first in child order.

        Paths are ``/``-separated and relative to root. The root itself
        is not yielded.
        """
        stack: list[tuple[str, Entry]] = [(c.name, c) for c in reversed(self.root.children)]
        while stack:
            path, entry = stack.pop()
            yield path, entry
            if isinstance(entry, Directory):
                stack.extend((f"{path}/{c.name}", c) for c in reversed(entry.children))

    def count(self) -> tuple[int, int]:
        """Count entries below root.

        Returns:
            Tuple of (directory_count, file_count).
        """
        directories = 0
        files = 0
        for _, entry in self.iter_entries():
            if isinstance(entry, Directory):
                directories += 1
            else:
                files += 1
        return directories, files

    def to_dict(self) -> dict[str, Any]:
        """Return the plain-dict form of the root directory."""
        return self.root.to_dict()


def empty_snapshot() -> TreeSnapshot:
    """Create the generation-0 snapshot with an empty root."""
    return TreeSnapshot()
