"""
Frame Loop
==========

Frame timing for the game loop: converts host timestamps into delta times
normalized to the baseline frame.
"""

from __future__ import annotations

from typing import Optional

from flappyroo.roo_core.config_loader import GameConfig, get_config


class FrameLoop:
    """
    Tracks whether the loop is armed and the time of the last frame.

    The host calls CoreGame.tick() once per display frame; a stopped loop
    makes tick() a no-op until start() is called again.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()
        self._baseline_ms = config.physics.baseline_frame_ms
        self._running = False
        self._last_time = 0.0
        self.frames = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def last_time(self) -> float:
        return self._last_time

    def start(self, now_ms: float) -> None:
        """Arm the loop, measuring the next delta from now_ms."""
        self._running = True
        self._last_time = float(now_ms)

    def stop(self) -> None:
        """Disarm the loop. Idempotent."""
        self._running = False

    def delta(self, now_ms: float) -> float:
        """
        Delta time since the previous frame in baseline frames.

        Advances the last frame time. A clock that goes backwards yields 0.
        """
        elapsed = max(0.0, float(now_ms) - self._last_time)
        self._last_time = float(now_ms)
        self.frames += 1
        return elapsed / self._baseline_ms
