"""Tree mirror facade.

TreeMirror is the external-store surface handed to UI code: a synchronous
snapshot getter, a subscribe/cancel pair, and the mutation coroutines.
Mutations write to the backend first and then re-derive the snapshot
with a full walk; no optimistic local update is ever applied.
"""

import logging
from types import TracebackType

from treemirror.backend.base import StorageBackend
from treemirror.core.config import MirrorConfig
from treemirror.core.errors import InvalidNameError
from treemirror.core.subscriptions import CancelSubscription, ChangeCallback, SubscriptionHub
from treemirror.core.walker import TreeWalker
from treemirror.tree.models import TreeSnapshot

logger = logging.getLogger(__name__)

_RESERVED_NAMES = frozenset({".", ".."})


def validate_name(name: str) -> str:
    """Check that ``name`` is usable as a single entry name.

    Args:
        name: Candidate entry name.

    Returns:
        The unchanged name.

    Raises:
        InvalidNameError: If the name is empty, reserved, or contains a
            path separator or NUL character.
    """
    if not name:
        msg = "Entry name cannot be empty"
        raise InvalidNameError(msg)
    if name in _RESERVED_NAMES:
        msg = f"Entry name is reserved: {name!r}"
        raise InvalidNameError(msg)
    if "/" in name or "\x00" in name:
        msg = f"Entry name cannot contain '/' or NUL: {name!r}"
        raise InvalidNameError(msg)
    return name


class TreeMirror:
    """Observable in-memory mirror of a storage backend.

    ``get_snapshot()`` returns the same object between walks and a new
    object after every successful walk, so consumers can detect change by
    identity alone.

    Args:
        backend: Storage backend to mirror.
        config: Mirror configuration. Defaults to MirrorConfig().
        interval: Polling period in milliseconds; overrides ``config``.

    Example:
        >>> mirror = TreeMirror(MemoryBackend(), interval=10_000)
        >>> cancel = mirror.subscribe(lambda: render(mirror.get_snapshot()))
        >>> await mirror.create_directory("docs")
        >>> cancel()
    """

    def __init__(
        self,
        backend: StorageBackend,
        config: MirrorConfig | None = None,
        *,
        interval: int | None = None,
    ) -> None:
        config = config or MirrorConfig()
        if interval is not None:
            config = MirrorConfig(interval=interval)
        self._config = config
        self._walker = TreeWalker(backend)
        self._hub = SubscriptionHub(self._walker.walk, interval=config.interval)

    @property
    def config(self) -> MirrorConfig:
        return self._config

    @property
    def interval(self) -> int:
        """Polling period in milliseconds."""
        return self._config.interval

    @property
    def hub(self) -> SubscriptionHub:
        return self._hub

    @property
    def snapshot(self) -> TreeSnapshot:
        return self._walker.snapshot

    def get_snapshot(self) -> TreeSnapshot:
        """Return the current snapshot without side effects."""
        return self._walker.snapshot

    def subscribe(self, on_change: ChangeCallback) -> CancelSubscription:
        """Register a change callback; see SubscriptionHub.subscribe()."""
        return self._hub.subscribe(on_change)

    async def refresh(self) -> TreeSnapshot:
        """Walk the backend now and notify subscribers.

        Returns:
            The snapshot installed after the walk.

        Raises:
            BackendUnavailableError: If the backend root cannot be obtained.
            WalkAbortedError: If the walk failed; the old snapshot is kept.
        """
        snapshot = await self._walker.walk()
        self._hub.notify()
        return snapshot

    async def create_directory(self, name: str) -> None:
        """Create a directory under root if absent, then resync.

        Creating a name that already exists is not an error.

        Raises:
            InvalidNameError: If ``name`` is not a valid entry name.
            BackendUnavailableError: If the backend root cannot be obtained.
            EntryTypeMismatchError: If a file with that name exists.
            WalkAbortedError: If the resync walk failed.
        """
        validate_name(name)
        root = await self._walker.get_root()
        await root.get_or_create_directory(name)
        logger.info("Created directory %s", name)
        await self.refresh()

    async def create_file(self, name: str) -> None:
        """Create an empty file under root if absent, then resync.

        Raises:
            InvalidNameError: If ``name`` is not a valid entry name.
            BackendUnavailableError: If the backend root cannot be obtained.
            EntryTypeMismatchError: If a directory with that name exists.
            WalkAbortedError: If the resync walk failed.
        """
        validate_name(name)
        root = await self._walker.get_root()
        await root.get_or_create_file(name)
        logger.info("Created file %s", name)
        await self.refresh()

    async def remove_all(self) -> None:
        """Recursively delete everything below root, then resync.

        Raises:
            BackendUnavailableError: If the backend root cannot be obtained.
            WalkAbortedError: If the resync walk failed.
        """
        root = await self._walker.get_root()
        await root.remove_recursive()
        logger.info("Removed all entries")
        await self.refresh()

    async def close(self) -> None:
        """Stop the refresh timer and drop all subscribers."""
        await self._hub.stop()

    async def __aenter__(self) -> "TreeMirror":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
