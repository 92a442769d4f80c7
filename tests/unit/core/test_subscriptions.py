"""Unit tests for SubscriptionHub.

Tests timer lifecycle, the single-timer invariant, cancellation, and
notification delivery.
"""

import asyncio
import logging

import pytest
from treemirror.core.errors import WalkAbortedError
from treemirror.core.subscriptions import DEFAULT_INTERVAL_MS, SubscriptionHub

INTERVAL_MS = 10
INTERVAL_S = INTERVAL_MS / 1000


class _CountingRefresh:
    """Refresh coroutine that counts calls and can be told to fail."""

    def __init__(self) -> None:
        self.calls = 0
        self.fail = False
        self.error: Exception | None = None

    async def __call__(self) -> None:
        self.calls += 1
        await asyncio.sleep(0)
        if self.fail:
            raise WalkAbortedError("entry vanished")
        if self.error is not None:
            raise self.error


class TestConstruction:
    """Tests for hub construction."""

    def test_default_interval(self) -> None:
        """The default polling period is 15 seconds."""
        hub = SubscriptionHub(_CountingRefresh())

        assert hub.interval == DEFAULT_INTERVAL_MS == 15_000
        assert hub.running is False
        assert hub.subscriber_count == 0

    @pytest.mark.parametrize("interval", [0, -5])
    def test_non_positive_interval_rejected(self, interval: int) -> None:
        """Interval must be positive."""
        with pytest.raises(ValueError, match="positive"):
            SubscriptionHub(_CountingRefresh(), interval=interval)


class TestTimer:
    """Tests for the periodic timer."""

    def test_subscribe_starts_timer_and_ticks_notify(self) -> None:
        """Each tick refreshes and then notifies the subscriber."""
        refresh = _CountingRefresh()
        hub = SubscriptionHub(refresh, interval=INTERVAL_MS)
        notified: list[int] = []

        async def scenario() -> None:
            cancel = hub.subscribe(lambda: notified.append(refresh.calls))
            assert hub.running is True
            await asyncio.sleep(INTERVAL_S * 6)
            cancel()

        asyncio.run(scenario())

        assert refresh.calls >= 1
        assert len(notified) >= 1
        # Notification happens after the refresh it belongs to
        assert notified == sorted(notified)
        assert notified[0] >= 1

    def test_no_notification_before_first_interval(self) -> None:
        """Subscribing does not notify immediately."""
        hub = SubscriptionHub(_CountingRefresh(), interval=60_000)
        notified: list[None] = []

        async def scenario() -> None:
            cancel = hub.subscribe(lambda: notified.append(None))
            await asyncio.sleep(0.01)
            cancel()

        asyncio.run(scenario())

        assert notified == []

    def test_cancel_stops_automatic_notifications(self) -> None:
        """After cancel no tick notifies for several intervals."""
        refresh = _CountingRefresh()
        hub = SubscriptionHub(refresh, interval=INTERVAL_MS)
        notified: list[None] = []

        async def scenario() -> int:
            cancel = hub.subscribe(lambda: notified.append(None))
            await asyncio.sleep(INTERVAL_S * 4)
            cancel()
            count_at_cancel = len(notified)
            await asyncio.sleep(INTERVAL_S * 5)
            return count_at_cancel

        count_at_cancel = asyncio.run(scenario())

        assert len(notified) == count_at_cancel
        assert hub.running is False

    def test_cancel_is_idempotent(self) -> None:
        """Calling cancel twice is harmless."""
        hub = SubscriptionHub(_CountingRefresh(), interval=INTERVAL_MS)

        async def scenario() -> None:
            cancel = hub.subscribe(lambda: None)
            cancel()
            cancel()

        asyncio.run(scenario())

        assert hub.running is False
        assert hub.subscriber_count == 0

    def test_failed_refresh_is_logged_and_timer_survives(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A failing tick logs a warning, skips notification, and keeps ticking."""
        refresh = _CountingRefresh()
        refresh.fail = True
        hub = SubscriptionHub(refresh, interval=INTERVAL_MS)
        notified: list[None] = []

        async def scenario() -> None:
            cancel = hub.subscribe(lambda: notified.append(None))
            await asyncio.sleep(INTERVAL_S * 6)
            assert hub.running is True
            cancel()

        with caplog.at_level(logging.WARNING, logger="treemirror.core.subscriptions"):
            asyncio.run(scenario())

        assert refresh.calls >= 2
        assert notified == []
        assert "Periodic refresh failed" in caplog.text

    def test_unexpected_refresh_error_keeps_timer_alive(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A refresh raising a non-backend error is logged and ticking continues."""
        refresh = _CountingRefresh()
        refresh.error = RuntimeError("backend bug")
        hub = SubscriptionHub(refresh, interval=INTERVAL_MS)
        notified: list[None] = []

        async def scenario() -> None:
            cancel = hub.subscribe(lambda: notified.append(None))
            timer = hub._timer
            await asyncio.sleep(INTERVAL_S * 10)
            assert timer is not None
            assert not timer.done()
            assert hub.running is True
            cancel()

        with caplog.at_level(logging.ERROR, logger="treemirror.core.subscriptions"):
            asyncio.run(scenario())

        assert refresh.calls >= 2
        assert notified == []
        assert "backend bug" in caplog.text

    def test_subscribe_outside_event_loop_raises(self) -> None:
        """The timer needs a running event loop; a failed subscribe registers nothing."""
        hub = SubscriptionHub(_CountingRefresh(), interval=INTERVAL_MS)
        calls: list[None] = []

        with pytest.raises(RuntimeError):
            hub.subscribe(lambda: calls.append(None))

        assert hub.subscriber_count == 0
        assert hub.running is False
        hub.notify()
        assert calls == []


class TestSingleTimer:
    """Tests for the one-timer-per-hub invariant."""

    def test_second_subscribe_shares_timer(self) -> None:
        """A second subscription reuses the running timer task."""
        hub = SubscriptionHub(_CountingRefresh(), interval=INTERVAL_MS)

        async def scenario() -> None:
            first_cancel = hub.subscribe(lambda: None)
            timer = hub._timer
            second_cancel = hub.subscribe(lambda: None)
            assert hub._timer is timer
            assert hub.subscriber_count == 2
            first_cancel()
            second_cancel()

        asyncio.run(scenario())

    def test_cancelling_either_stops_all_automatic_notification(self) -> None:
        """Either cancel function tears down the shared timer."""
        hub = SubscriptionHub(_CountingRefresh(), interval=INTERVAL_MS)
        first: list[None] = []
        second: list[None] = []

        async def scenario() -> None:
            hub.subscribe(lambda: first.append(None))
            cancel_second = hub.subscribe(lambda: second.append(None))
            cancel_second()
            assert hub.running is False
            await asyncio.sleep(INTERVAL_S * 5)

        asyncio.run(scenario())

        assert first == []
        assert second == []

    def test_both_subscribers_notified(self) -> None:
        """A second subscription does not replace the first callback."""
        hub = SubscriptionHub(_CountingRefresh(), interval=INTERVAL_MS)
        first: list[None] = []
        second: list[None] = []

        async def scenario() -> None:
            cancel = hub.subscribe(lambda: first.append(None))
            hub.subscribe(lambda: second.append(None))
            await asyncio.sleep(INTERVAL_S * 6)
            cancel()

        asyncio.run(scenario())

        assert len(first) >= 1
        assert len(first) == len(second)

    def test_resubscribe_after_cancel_restarts_timer(self) -> None:
        """A new subscription after cancel starts a fresh timer."""
        hub = SubscriptionHub(_CountingRefresh(), interval=INTERVAL_MS)
        notified: list[None] = []

        async def scenario() -> None:
            hub.subscribe(lambda: None)()
            cancel = hub.subscribe(lambda: notified.append(None))
            assert hub.running is True
            await asyncio.sleep(INTERVAL_S * 6)
            cancel()

        asyncio.run(scenario())

        assert len(notified) >= 1


class TestNotify:
    """Tests for notify() and stop()."""

    def test_notify_calls_each_subscriber_once(self) -> None:
        """notify() invokes every callback exactly once, in order."""
        hub = SubscriptionHub(_CountingRefresh(), interval=60_000)
        calls: list[str] = []

        async def scenario() -> None:
            hub.subscribe(lambda: calls.append("first"))
            hub.subscribe(lambda: calls.append("second"))
            hub.notify()
            await hub.stop()

        asyncio.run(scenario())

        assert calls == ["first", "second"]

    def test_raising_callback_does_not_block_others(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A raising callback is logged and later callbacks still run."""
        hub = SubscriptionHub(_CountingRefresh(), interval=60_000)
        calls: list[str] = []

        def broken() -> None:
            raise RuntimeError("render failed")

        async def scenario() -> None:
            hub.subscribe(broken)
            hub.subscribe(lambda: calls.append("ok"))
            hub.notify()
            await hub.stop()

        with caplog.at_level(logging.ERROR, logger="treemirror.core.subscriptions"):
            asyncio.run(scenario())

        assert calls == ["ok"]
        assert "Change callback" in caplog.text

    def test_cancelled_subscriber_not_notified(self) -> None:
        """A callback whose subscription was cancelled is not called."""
        hub = SubscriptionHub(_CountingRefresh(), interval=60_000)
        calls: list[str] = []

        async def scenario() -> None:
            cancel = hub.subscribe(lambda: calls.append("gone"))
            hub.subscribe(lambda: calls.append("kept"))
            cancel()
            hub.notify()
            await hub.stop()

        asyncio.run(scenario())

        assert calls == ["kept"]

    def test_stop_clears_everything(self) -> None:
        """stop() ends the timer task and forgets subscribers."""
        hub = SubscriptionHub(_CountingRefresh(), interval=INTERVAL_MS)

        async def scenario() -> asyncio.Task[None] | None:
            hub.subscribe(lambda: None)
            timer = hub._timer
            await hub.stop()
            return timer

        timer = asyncio.run(scenario())

        assert timer is not None
        assert timer.done()
        assert hub.running is False
        assert hub.subscriber_count == 0
