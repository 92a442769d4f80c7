"""Tree walker that rebuilds snapshots from a storage backend.

Each walk traverses the backend from its root, one directory at a time,
and builds a brand-new immutable TreeSnapshot. Walks are numbered when
they start; a walk that finishes after a newer walk already installed
its snapshot is discarded, so completion order can never move the cache
back to an older state of the backend.
"""

import logging
import time
from typing import cast

from treemirror.backend.base import DirectoryHandle, StorageBackend
from treemirror.core.errors import (
    BackendUnavailableError,
    TreeMirrorError,
    WalkAbortedError,
)
from treemirror.tree.models import ROOT_NAME, Directory, Entry, File, TreeSnapshot, empty_snapshot

logger = logging.getLogger(__name__)


class TreeWalker:
    """Walks a storage backend and caches the latest snapshot.

    Attributes:
        _backend: Storage backend to walk.
        _snapshot: Latest installed snapshot.
        _started: Generation number handed to the most recently started walk.
    """

    def __init__(self, backend: StorageBackend) -> None:
        """Initialize the walker with an empty generation-0 snapshot.

        Args:
            backend: Storage backend to walk.
        """
        self._backend = backend
        self._snapshot = empty_snapshot()
        self._started = 0

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    @property
    def snapshot(self) -> TreeSnapshot:
        """Latest installed snapshot (same object until the next walk installs one)."""
        return self._snapshot

    async def get_root(self) -> DirectoryHandle:
        """Obtain the backend root handle.

        Raises:
            BackendUnavailableError: If the backend cannot provide its root.
        """
        try:
            return await self._backend.get_root()
        except BackendUnavailableError:
            raise
        except OSError as e:
            msg = f"Storage backend unavailable: {e}"
            raise BackendUnavailableError(msg) from e

    async def walk(self) -> TreeSnapshot:
        """Traverse the whole backend and install a fresh snapshot.

        Returns:
            The snapshot produced by this walk, or the newer snapshot that
            superseded it.

        Raises:
            BackendUnavailableError: If the backend root cannot be obtained.
            WalkAbortedError: If an entry vanished or became inaccessible
                mid-traversal. The cached snapshot is left untouched.
        """
        self._started += 1
        generation = self._started
        started_at = time.monotonic()
        logger.debug("Walk %d started", generation)

        root = await self.get_root()
        try:
            tree = await self._walk_directory(root, ROOT_NAME)
        except (TreeMirrorError, OSError) as e:
            logger.debug("Walk %d aborted: %s", generation, e)
            msg = f"Walk aborted: {e}"
            raise WalkAbortedError(msg) from e

        if generation <= self._snapshot.generation:
            logger.debug(
                "Walk %d superseded by walk %d, discarding result",
                generation,
                self._snapshot.generation,
            )
            return self._snapshot

        self._snapshot = TreeSnapshot(root=tree, generation=generation)
        logger.debug("Walk %d finished in %.3fs", generation, time.monotonic() - started_at)
        return self._snapshot

    async def _walk_directory(self, handle: DirectoryHandle, name: str) -> Directory:
        """Build the Directory for ``handle`` and its whole subtree.

        Children are visited sequentially in enumeration order. File
        content is never read.
        """
        children: list[Entry] = []
        async for child_name, child in handle.entries():
            if child.is_directory:
                subtree = await self._walk_directory(cast(DirectoryHandle, child), child_name)
                children.append(subtree)
            else:
                children.append(File(child_name))
        return Directory(name, tuple(children))
