"""Change subscriptions and the periodic refresh timer.

The hub keeps an ordered registry of change callbacks and owns at most
one timer task. The timer is created lazily by the first subscription
and torn down by any cancellation, after which no automatic
notification is delivered until someone subscribes again.
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from treemirror.core.errors import TreeMirrorError

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[], None]
CancelSubscription = Callable[[], None]

# Polling period in milliseconds
DEFAULT_INTERVAL_MS = 15_000


class SubscriptionHub:
    """Registry of change callbacks plus the periodic refresh timer.

    Each timer tick awaits a full refresh and then notifies every
    subscriber exactly once. Ticks never overlap: the next sleep starts
    only after the previous tick finished.

    Args:
        refresh: Coroutine function performing a full walk.
        interval: Polling period in milliseconds.

    Example:
        >>> hub = SubscriptionHub(walker.walk, interval=5_000)
        >>> cancel = hub.subscribe(lambda: print("changed"))
        >>> cancel()
    """

    def __init__(
        self,
        refresh: Callable[[], Awaitable[object]],
        interval: int = DEFAULT_INTERVAL_MS,
    ) -> None:
        if interval <= 0:
            msg = f"Interval must be positive, got {interval}"
            raise ValueError(msg)
        self._refresh = refresh
        self._interval = interval
        self._subscribers: dict[int, ChangeCallback] = {}
        self._next_token = 0
        self._timer: asyncio.Task[None] | None = None

    @property
    def interval(self) -> int:
        """Polling period in milliseconds."""
        return self._interval

    @property
    def running(self) -> bool:
        """True while the periodic timer exists."""
        return self._timer is not None

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: ChangeCallback) -> CancelSubscription:
        """Register a change callback and start the timer if needed.

        Must be called while an event loop is running, because the timer
        is an asyncio task on that loop.

        Args:
            callback: Called with no arguments after every refresh.

        Returns:
            Idempotent function that unregisters ``callback`` and stops
            the shared timer.
        """
        token = self._next_token
        if self._timer is None:
            # Raises RuntimeError outside a running loop; nothing is registered then
            self._start_timer()
        else:
            logger.debug("Timer already running, subscription %d shares it", token)
        self._next_token += 1
        self._subscribers[token] = callback

        cancelled = False

        def cancel() -> None:
            nonlocal cancelled
            if cancelled:
                return
            cancelled = True
            self._subscribers.pop(token, None)
            self._stop_timer()

        return cancel

    def notify(self) -> None:
        """Invoke every registered callback once, in subscription order.

        A callback that raises is logged and does not prevent the others
        from being called. Callbacks unsubscribed during this round are
        skipped.
        """
        for token, callback in list(self._subscribers.items()):
            if token not in self._subscribers:
                continue
            try:
                callback()
            except Exception:
                logger.exception("Change callback %r raised", callback)

    async def stop(self) -> None:
        """Stop the timer, forget all subscribers, and wait for the timer task."""
        timer = self._timer
        self._stop_timer()
        self._subscribers.clear()
        if timer is not None and timer is not asyncio.current_task():
            with contextlib.suppress(asyncio.CancelledError):
                await timer

    def _start_timer(self) -> None:
        loop = asyncio.get_running_loop()
        self._timer = loop.create_task(self._run(), name="treemirror-refresh-timer")
        logger.debug("Refresh timer started (interval %d ms)", self._interval)

    def _stop_timer(self) -> None:
        if self._timer is None:
            return
        self._timer.cancel()
        self._timer = None
        logger.debug("Refresh timer stopped")

    async def _run(self) -> None:
        delay = self._interval / 1000
        while True:
            await asyncio.sleep(delay)
            await self._tick()

    async def _tick(self) -> None:
        """Refresh once and notify, unless the refresh failed.

        Nobody awaits the timer task, so a failed refresh is logged here
        and the previous snapshot stays in place.
        """
        try:
            await self._refresh()
        except (TreeMirrorError, OSError) as e:
            logger.warning("Periodic refresh failed: %s", e)
            return
        except Exception:
            logger.exception("Periodic refresh raised unexpectedly")
            return
        if self._timer is not asyncio.current_task():
            # Cancelled while the refresh was finishing
            return
        self.notify()
