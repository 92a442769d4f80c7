"""Storage backends.

This module exports the abstract backend contract and the bundled
in-memory and local-directory implementations.
"""

from treemirror.backend.base import (
    DirectoryHandle,
    FileHandle,
    Handle,
    HandleKind,
    StorageBackend,
)
from treemirror.backend.local import LocalBackend
from treemirror.backend.memory import MemoryBackend

__all__ = [
    "DirectoryHandle",
    "FileHandle",
    "Handle",
    "HandleKind",
    "LocalBackend",
    "MemoryBackend",
    "StorageBackend",
]
