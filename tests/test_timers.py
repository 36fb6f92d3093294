"""
Tests for the timer queue and frame loop timing.
"""

import pytest

from flappyroo.roo_core.config_loader import load_config
from flappyroo.roo_core.loop import FrameLoop
from flappyroo.roo_core.scheduler import TimerQueue


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def timers():
    return TimerQueue()


class TestTimerQueue:
    """Test one-shot and repeating timers."""

    def test_runs_in_due_order(self, timers):
        """Earlier due times first, ties in scheduling order."""
        calls = []
        timers.call_later(100, lambda: calls.append("a"))
        timers.call_later(50, lambda: calls.append("b"))
        timers.call_later(100, lambda: calls.append("c"))

        ran = timers.advance(100)

        assert calls == ["b", "a", "c"]
        assert ran == 3

    def test_not_due_yet(self, timers):
        calls = []
        timers.call_later(100, lambda: calls.append(1))

        timers.advance(99)

        assert calls == []
        assert timers.pending == 1

    def test_now_during_callback_is_due_time(self, timers):
        seen = []
        timers.call_later(40, lambda: seen.append(timers.now))

        timers.advance(1000)

        assert seen == [40]
        assert timers.now == 1000

    def test_cancel(self, timers):
        calls = []
        handle = timers.call_later(10, lambda: calls.append(1))

        handle.cancel()
        handle.cancel()
        TimerQueue.cancel(handle)
        TimerQueue.cancel(None)
        timers.advance(100)

        assert calls == []
        assert not handle.active

    def test_repeating_fires_each_interval(self, timers):
        calls = []
        handle = timers.call_every(100, lambda: calls.append(timers.now))

        for now in (50, 100, 150, 200, 250, 300, 350):
            timers.advance(now)

        assert calls == [100, 200, 300]
        assert handle.fired == 3
        assert handle.active

    def test_long_advance_fires_once(self, timers):
        """A repeating timer left far behind skips the missed intervals."""
        calls = []
        handle = timers.call_every(100, lambda: calls.append(timers.now))

        timers.advance(1000)

        assert calls == [100]
        assert handle.due_ms == 1100

        timers.advance(1099)
        assert calls == [100]
        timers.advance(1100)
        assert calls == [100, 1100]

    def test_repeating_cancel_from_callback(self, timers):
        calls = []

        def tick():
            calls.append(timers.now)
            if len(calls) == 2:
                handle.cancel()

        handle = timers.call_every(100, tick)
        for now in range(100, 1001, 100):
            timers.advance(now)

        assert calls == [100, 200]

    def test_rejects_non_positive_interval(self, timers):
        with pytest.raises(ValueError):
            timers.call_every(0, lambda: None)

    def test_time_never_goes_backwards(self, timers):
        timers.advance(500)
        timers.advance(100)

        assert timers.now == 500

    def test_delay_is_relative_to_now(self, timers):
        calls = []
        timers.advance(1000)
        timers.call_later(100, lambda: calls.append(timers.now))

        timers.advance(1099)
        assert calls == []
        timers.advance(1100)
        assert calls == [1100]

    def test_callback_error_propagates(self, timers):
        """A raising callback stops the drain; later timers stay queued."""
        calls = []

        def boom():
            raise RuntimeError("boom")

        timers.call_later(10, boom)
        timers.call_later(20, lambda: calls.append(1))

        with pytest.raises(RuntimeError):
            timers.advance(30)
        assert calls == []

        timers.advance(30)
        assert calls == [1]

    def test_raising_repeating_timer_is_cancelled(self, timers):
        calls = []

        def boom():
            calls.append(timers.now)
            raise RuntimeError("boom")

        handle = timers.call_every(10, boom)

        with pytest.raises(RuntimeError):
            timers.advance(10)
        timers.advance(100)

        assert calls == [10]
        assert not handle.active
        assert timers.pending == 0

    def test_clear(self, timers):
        calls = []
        timers.call_later(10, lambda: calls.append(1))
        timers.call_every(10, lambda: calls.append(2))

        timers.clear()
        timers.advance(100)

        assert calls == []
        assert timers.pending == 0


class TestFrameLoop:
    """Test delta time normalization."""

    def test_baseline_frame_is_one(self, config):
        loop = FrameLoop(config)
        loop.start(0)

        assert loop.delta(config.physics.baseline_frame_ms) == pytest.approx(1.0)

    def test_long_frame_scales_delta(self, config):
        loop = FrameLoop(config)
        loop.start(1000)

        assert loop.delta(1000 + 2 * config.physics.baseline_frame_ms) == pytest.approx(2.0)

    def test_clock_going_backwards_yields_zero(self, config):
        loop = FrameLoop(config)
        loop.start(1000)

        assert loop.delta(900) == 0
        assert loop.last_time == 900

    def test_start_stop_idempotent(self, config):
        loop = FrameLoop(config)
        loop.start(0)
        loop.start(0)
        assert loop.running

        loop.stop()
        loop.stop()
        assert not loop.running

    def test_counts_frames(self, config):
        loop = FrameLoop(config)
        loop.start(0)
        for i in range(1, 4):
            loop.delta(i * 10)

        assert loop.frames == 3
