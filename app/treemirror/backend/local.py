"""Local directory storage backend.

Mirrors a directory on the local filesystem. Blocking ``pathlib`` and
``shutil`` calls run in a worker thread via ``asyncio.to_thread`` so the
event loop keeps serving timers and other coroutines.
"""

import asyncio
import logging
import shutil
from collections.abc import AsyncIterator
from pathlib import Path

from treemirror.backend.base import DirectoryHandle, FileHandle, Handle, StorageBackend
from treemirror.core.errors import (
    BackendUnavailableError,
    EntryNotFoundError,
    EntryTypeMismatchError,
)

logger = logging.getLogger(__name__)


class LocalFileHandle(FileHandle):
    """File handle for a path on disk."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def name(self) -> str:
        return self._path.name

    @property
    def path(self) -> Path:
        return self._path


class LocalDirectoryHandle(DirectoryHandle):
    """Directory handle for a path on disk.

    Args:
        path: Absolute directory path.
        is_root: True for the backend root, which is emptied rather than
            deleted by remove_recursive().
    """

    def __init__(self, path: Path, *, is_root: bool = False) -> None:
        self._path = path
        self._is_root = is_root

    @property
    def name(self) -> str:
        return self._path.name

    @property
    def path(self) -> Path:
        return self._path

    async def entries(self) -> AsyncIterator[tuple[str, Handle]]:
        children = await asyncio.to_thread(self._list_children)
        for child, is_dir in children:
            if is_dir:
                yield child.name, LocalDirectoryHandle(child)
            else:
                yield child.name, LocalFileHandle(child)

    def _list_children(self) -> list[tuple[Path, bool]]:
        """List children sorted by name, classifying each as dir or not.

        Symlinks are reported as files so walks never follow them.

        Raises:
            EntryNotFoundError: If the directory is gone or unreadable.
        """
        try:
            entries = sorted(self._path.iterdir())
        except FileNotFoundError as e:
            msg = f"Directory no longer exists: {self._path}"
            raise EntryNotFoundError(msg) from e
        except NotADirectoryError as e:
            msg = f"Not a directory: {self._path}"
            raise EntryNotFoundError(msg) from e
        except PermissionError as e:
            msg = f"Permission denied listing directory: {self._path}"
            raise EntryNotFoundError(msg) from e

        children: list[tuple[Path, bool]] = []
        for entry in entries:
            try:
                is_dir = entry.is_dir() and not entry.is_symlink()
            except OSError:
                logger.warning("Cannot determine type of: %s", entry)
                continue
            children.append((entry, is_dir))
        return children

    async def get_or_create_directory(self, name: str) -> DirectoryHandle:
        target = self._path / name
        await asyncio.to_thread(self._make_directory, target)
        return LocalDirectoryHandle(target)

    def _make_directory(self, target: Path) -> None:
        if target.exists() and not target.is_dir():
            msg = f"A file named {target.name!r} already exists in {self._path}"
            raise EntryTypeMismatchError(msg)
        try:
            target.mkdir(exist_ok=True)
        except FileNotFoundError as e:
            msg = f"Directory no longer exists: {self._path}"
            raise EntryNotFoundError(msg) from e

    async def get_or_create_file(self, name: str) -> FileHandle:
        target = self._path / name
        await asyncio.to_thread(self._make_file, target)
        return LocalFileHandle(target)

    def _make_file(self, target: Path) -> None:
        if target.is_dir():
            msg = f"A directory named {target.name!r} already exists in {self._path}"
            raise EntryTypeMismatchError(msg)
        try:
            target.touch(exist_ok=True)
        except FileNotFoundError as e:
            msg = f"Directory no longer exists: {self._path}"
            raise EntryNotFoundError(msg) from e

    async def remove_recursive(self) -> None:
        await asyncio.to_thread(self._remove)

    def _remove(self) -> None:
        """Delete the directory, or empty it when this is the root."""
        if not self._path.is_dir():
            msg = f"Directory no longer exists: {self._path}"
            raise EntryNotFoundError(msg)

        if not self._is_root:
            shutil.rmtree(self._path)
            return

        for child in self._path.iterdir():
            # Directories (but not symlinks to directories)
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()


class LocalBackend(StorageBackend):
    """Storage backend rooted at a local directory.

    Enumeration is sorted by name, so walk order is stable for an
    unchanged directory.

    Args:
        root: Directory to mirror. It must exist.
    """

    def __init__(self, root: Path) -> None:
        self._root = root.expanduser()

    def is_available(self) -> bool:
        return self._root.is_dir()

    async def get_root(self) -> DirectoryHandle:
        available = await asyncio.to_thread(self.is_available)
        if not available:
            msg = f"Storage root is not a directory: {self._root}"
            raise BackendUnavailableError(msg)
        return LocalDirectoryHandle(self._root.resolve(), is_root=True)
