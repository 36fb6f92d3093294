"""
Timer Queue
===========

Wall-clock timers that share one queue with the frame loop.

The host drains the queue once per frame with advance(now_ms) before the
frame callback runs, so timers and frames interleave on a single thread in
a deterministic order. Callbacks run in due-time order; ties run in the
order they were scheduled.
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple


@dataclass(eq=False)
class TimerHandle:
    """Handle for a scheduled callback."""
    name: str
    callback: Callable[[], None]
    due_ms: float
    interval_ms: Optional[float] = None  # Set for repeating timers
    cancelled: bool = False
    fired: int = field(default=0)

    @property
    def repeating(self) -> bool:
        return self.interval_ms is not None

    @property
    def active(self) -> bool:
        """True while the timer may still fire."""
        return not self.cancelled and (self.repeating or self.fired == 0)

    def cancel(self) -> None:
        """Cancel the timer. Safe to call more than once."""
        self.cancelled = True


class TimerQueue:
    """
    Single-consumer queue of one-shot and repeating timers.

    Time only moves when advance() is called, which makes the queue easy to
    drive from a real clock (pygame ticks) or a simulated one (tests, the
    Gymnasium wrapper).
    """

    def __init__(self, now_ms: float = 0.0):
        self._now = float(now_ms)
        self._heap: List[Tuple[float, int, TimerHandle]] = []
        self._counter = itertools.count()

    @property
    def now(self) -> float:
        """Current queue time in ms."""
        return self._now

    @property
    def pending(self) -> int:
        """Number of live timers."""
        return sum(1 for _, _, handle in self._heap if handle.active)

    def call_later(
        self,
        delay_ms: float,
        callback: Callable[[], None],
        name: str = "timer"
    ) -> TimerHandle:
        """
        Schedule a one-shot callback.

        Args:
            delay_ms: Delay from the current queue time.
            callback: Zero-argument callable.
            name: Label for debugging.

        Returns:
            Handle that can cancel the timer.
        """
        handle = TimerHandle(name=name, callback=callback, due_ms=self._now + max(0.0, delay_ms))
        self._push(handle)
        return handle

    def call_every(
        self,
        interval_ms: float,
        callback: Callable[[], None],
        name: str = "interval"
    ) -> TimerHandle:
        """
        Schedule a repeating callback, first firing one interval from now.

        Args:
            interval_ms: Repeat interval, must be positive.
            callback: Zero-argument callable.
            name: Label for debugging.

        Returns:
            Handle that can cancel the timer.
        """
        if interval_ms <= 0:
            raise ValueError(f"Interval must be positive, got {interval_ms}")
        handle = TimerHandle(
            name=name,
            callback=callback,
            due_ms=self._now + interval_ms,
            interval_ms=float(interval_ms),
        )
        self._push(handle)
        return handle

    @staticmethod
    def cancel(handle: Optional[TimerHandle]) -> None:
        """Cancel a timer. None and already-cancelled handles are ignored."""
        if handle is not None:
            handle.cancel()

    def advance(self, now_ms: float) -> int:
        """
        Move queue time forward and run every timer due by then.

        A repeating timer that fell several intervals behind fires once and
        skips the missed intervals. A timer whose callback raises is
        cancelled and the exception propagates to the caller; timers not yet
        run stay queued.

        Args:
            now_ms: New queue time. Earlier times are ignored.

        Returns:
            Number of callbacks run.
        """
        target = max(self._now, float(now_ms))
        ran = 0
        while self._heap and self._heap[0][0] <= target:
            due, _, handle = heapq.heappop(self._heap)
            if handle.cancelled:
                continue
            self._now = due
            handle.fired += 1
            if handle.repeating:
                handle.due_ms = due + handle.interval_ms
                if handle.due_ms <= target:
                    handle.due_ms = target + handle.interval_ms
                self._push(handle)
            ran += 1
            try:
                handle.callback()
            except Exception:
                handle.cancel()
                raise
        self._now = target
        return ran

    def clear(self) -> None:
        """Cancel and drop every timer."""
        for _, _, handle in self._heap:
            handle.cancel()
        self._heap.clear()

    def _push(self, handle: TimerHandle) -> None:
        heapq.heappush(self._heap, (handle.due_ms, next(self._counter), handle))
