"""In-process storage backend.

Keeps the whole tree in dictionaries that preserve insertion order, which
makes enumeration order deterministic. Used by tests and demos, and as a
reference implementation of the backend contract.
"""

import asyncio
from collections.abc import AsyncIterator

from treemirror.backend.base import DirectoryHandle, FileHandle, Handle, StorageBackend
from treemirror.core.errors import (
    BackendUnavailableError,
    EntryNotFoundError,
    EntryTypeMismatchError,
)


class _Node:
    """Mutable storage node shared by every handle that refers to it."""

    __slots__ = ("children", "is_dir", "name", "parent")

    def __init__(self, name: str, is_dir: bool, parent: "_Node | None" = None) -> None:
        self.name = name
        self.is_dir = is_dir
        self.parent = parent
        self.children: dict[str, _Node] = {}

    @property
    def attached(self) -> bool:
        """True if the node is still reachable from its root."""
        node = self
        while node.parent is not None:
            if node.parent.children.get(node.name) is not node:
                return False
            node = node.parent
        return True


class MemoryFileHandle(FileHandle):
    """File handle backed by an in-memory node."""

    def __init__(self, node: _Node) -> None:
        self._node = node

    @property
    def name(self) -> str:
        return self._node.name


class MemoryDirectoryHandle(DirectoryHandle):
    """Directory handle backed by an in-memory node.

    Args:
        node: Storage node this handle refers to.
        backend: Owning backend (used for the yield-point delay).
    """

    def __init__(self, node: _Node, backend: "MemoryBackend") -> None:
        self._node = node
        self._backend = backend

    @property
    def name(self) -> str:
        return self._node.name

    def _require_attached(self) -> None:
        if not self._node.attached:
            msg = f"Directory no longer exists: {self._node.name}"
            raise EntryNotFoundError(msg)

    def _wrap(self, node: _Node) -> Handle:
        if node.is_dir:
            return MemoryDirectoryHandle(node, self._backend)
        return MemoryFileHandle(node)

    async def entries(self) -> AsyncIterator[tuple[str, Handle]]:
        await self._backend.pause()
        self._require_attached()
        # Copy so concurrent mutation does not break iteration
        for name, node in list(self._node.children.items()):
            await self._backend.pause()
            yield name, self._wrap(node)

    async def get_or_create_directory(self, name: str) -> DirectoryHandle:
        await self._backend.pause()
        self._require_attached()
        node = self._node.children.get(name)
        if node is None:
            node = _Node(name, is_dir=True, parent=self._node)
            self._node.children[name] = node
        elif not node.is_dir:
            msg = f"A file named {name!r} already exists in {self._node.name}"
            raise EntryTypeMismatchError(msg)
        return MemoryDirectoryHandle(node, self._backend)

    async def get_or_create_file(self, name: str) -> FileHandle:
        await self._backend.pause()
        self._require_attached()
        node = self._node.children.get(name)
        if node is None:
            node = _Node(name, is_dir=False, parent=self._node)
            self._node.children[name] = node
        elif node.is_dir:
            msg = f"A directory named {name!r} already exists in {self._node.name}"
            raise EntryTypeMismatchError(msg)
        return MemoryFileHandle(node)

    async def remove_recursive(self) -> None:
        await self._backend.pause()
        self._require_attached()
        parent = self._node.parent
        if parent is None:
            # The root itself cannot go away; it is emptied instead
            self._node.children.clear()
            return
        del parent.children[self._node.name]


class MemoryBackend(StorageBackend):
    """Storage backend holding its tree in memory.

    Args:
        delay: Seconds to sleep at every backend call. Zero still yields
            to the event loop, so interleavings behave like real I/O.
        available: Initial availability; when False, get_root() raises
            BackendUnavailableError.
    """

    def __init__(self, *, delay: float = 0.0, available: bool = True) -> None:
        self._root = _Node("", is_dir=True)
        self.delay = delay
        self.available = available

    def is_available(self) -> bool:
        return self.available

    async def pause(self) -> None:
        """Yield to the event loop, sleeping for the configured delay."""
        await asyncio.sleep(self.delay)

    async def get_root(self) -> DirectoryHandle:
        await self.pause()
        if not self.available:
            msg = "In-memory storage is unavailable"
            raise BackendUnavailableError(msg)
        return MemoryDirectoryHandle(self._root, self)

    def populate(self, paths: list[str]) -> None:
        """Create entries synchronously, for fixtures.

        Paths ending in ``/`` become directories, everything else becomes
        an empty file. Intermediate directories are created as needed.

        Args:
            paths: ``/``-separated paths relative to root.
        """
        for raw in paths:
            is_dir = raw.endswith("/")
            parts = [p for p in raw.split("/") if p]
            node = self._root
            for index, part in enumerate(parts):
                last = index == len(parts) - 1
                child = node.children.get(part)
                if child is None:
                    child = _Node(part, is_dir=is_dir or not last, parent=node)
                    node.children[part] = child
                node = child

    def discard(self, path: str) -> None:
        """Remove an entry synchronously, simulating an external writer.

        Raises:
            EntryNotFoundError: If the path does not exist.
        """
        parts = [p for p in path.split("/") if p]
        node = self._root
        for part in parts:
            child = node.children.get(part)
            if child is None:
                msg = f"No such entry: {path}"
                raise EntryNotFoundError(msg)
            node = child
        if node.parent is None:
            node.children.clear()
        else:
            del node.parent.children[node.name]
