"""Abstract storage backend contract.

This module defines the handle interfaces that a storage backend must
implement for the tree mirror to walk and mutate it. All operations are
coroutines; every call is a suspension point for the event loop.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from enum import Enum


class HandleKind(str, Enum):
    """Kind of a backend handle.

    Attributes:
        DIRECTORY: Handle refers to a directory.
        FILE: Handle refers to a file.
    """

    DIRECTORY = "directory"
    FILE = "file"


class Handle(ABC):
    """Common interface of backend handles."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the entry name of this handle."""

    @property
    @abstractmethod
    def kind(self) -> HandleKind:
        """Return whether this handle is a directory or a file."""

    @property
    def is_directory(self) -> bool:
        return self.kind == HandleKind.DIRECTORY


class FileHandle(Handle):
    """Handle to a file in the backend.

    File bytes are outside the mirror's scope, so the interface only
    carries identity.
    """

    @property
    def kind(self) -> HandleKind:
        return HandleKind.FILE


class DirectoryHandle(Handle):
    """Handle to a directory in the backend."""

    @property
    def kind(self) -> HandleKind:
        return HandleKind.DIRECTORY

    @abstractmethod
    def entries(self) -> AsyncIterator[tuple[str, Handle]]:
        """Enumerate the direct children of this directory.

        Order is backend-defined and not guaranteed stable across calls.

        Yields:
            ``(name, handle)`` pairs for each child.

        Raises:
            EntryNotFoundError: If this directory no longer exists.
        """

    @abstractmethod
    async def get_or_create_directory(self, name: str) -> "DirectoryHandle":
        """Return the child directory ``name``, creating it if absent.

        Raises:
            EntryNotFoundError: If this directory no longer exists.
        """

    @abstractmethod
    async def get_or_create_file(self, name: str) -> FileHandle:
        """Return the child file ``name``, creating it empty if absent.

        Raises:
            EntryNotFoundError: If this directory no longer exists.
        """

    @abstractmethod
    async def remove_recursive(self) -> None:
        """Delete this directory and all of its descendants.

        Called on the root handle, this empties the root.

        Raises:
            EntryNotFoundError: If this directory no longer exists.
        """


class StorageBackend(ABC):
    """Abstract base class for hierarchical storage backends.

    Example:
        >>> backend = MemoryBackend()
        >>> if backend.is_available():
        ...     root = await backend.get_root()
        ...     async for name, handle in root.entries():
        ...         print(name, handle.kind.value)
    """

    @abstractmethod
    async def get_root(self) -> DirectoryHandle:
        """Return the root directory handle.

        Raises:
            BackendUnavailableError: If the storage cannot be obtained.
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the storage can currently be used.

        Returns:
            True if get_root() is expected to succeed, False otherwise.
        """
