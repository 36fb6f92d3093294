"""
Scoring System
==============

Converts distance traveled and pickups into score and level.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from flappyroo.roo_core.config_loader import GameConfig, get_config


@dataclass
class GameSession:
    """Per-session score bookkeeping. Reset on every new game."""
    score: int = 0
    level: int = 1
    distance_traveled: float = 0.0
    last_score_update: float = 0.0
    high_score: int = 0


@dataclass
class ScoreUpdate:
    """Outcome of one frame of distance scoring."""
    points: int = 0
    level_up: Optional[int] = None  # New level if the frame crossed a threshold

    @property
    def changed(self) -> bool:
        return self.points > 0


class ScoreTracker:
    """
    Tracks score and level for a session.

    Distance converts to points in fixed quanta of distance_per_point.
    last_score_update advances by exactly the distance consumed, so any
    fractional remainder carries over to the next frame.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        starting_level: Optional[int] = None,
        level_threshold: Optional[int] = None,
        high_score: int = 0
    ):
        """
        Initialize score tracker.

        Args:
            config: Game configuration. Uses default if None.
            starting_level: First level of a session. Config default if None.
            level_threshold: Points per level. Config default if None.
            high_score: Best score so far.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._distance_per_point = config.scoring.distance_per_point
        self._starting_level = starting_level if starting_level is not None else config.defaults.starting_level
        self._level_threshold = level_threshold if level_threshold is not None else config.defaults.level_threshold
        self.session = GameSession(level=self._starting_level, high_score=high_score)

    @property
    def score(self) -> int:
        """Current total score."""
        return self.session.score

    @property
    def level(self) -> int:
        return self.session.level

    @property
    def starting_level(self) -> int:
        return self._starting_level

    @property
    def level_threshold(self) -> int:
        return self._level_threshold

    @property
    def high_score(self) -> int:
        return self.session.high_score

    def configure(self, starting_level: int, level_threshold: int) -> None:
        """Set level progression; takes effect for level computation at once."""
        self._starting_level = starting_level
        self._level_threshold = max(1, level_threshold)

    def reset(self) -> None:
        """Reset the session, keeping the high score."""
        self.session = GameSession(level=self._starting_level, high_score=self.session.high_score)

    def level_for_score(self, score: int) -> int:
        """Level reached at a given score."""
        return score // self._level_threshold + self._starting_level

    def update(self, game_speed: float, delta_time: float) -> ScoreUpdate:
        """
        Advance distance by one frame and award whole points.

        Args:
            game_speed: Current scroll speed per baseline frame.
            delta_time: Frame delta normalized to the baseline frame.

        Returns:
            Points awarded and the new level if a level-up occurred.
        """
        session = self.session
        session.distance_traveled += game_speed * delta_time

        pending = session.distance_traveled - session.last_score_update
        if pending < self._distance_per_point:
            return ScoreUpdate()

        points = math.floor(pending / self._distance_per_point)
        session.score += points
        session.last_score_update += points * self._distance_per_point

        return ScoreUpdate(points=points, level_up=self._check_level_up())

    def add_bonus(self, points: int) -> Optional[int]:
        """
        Add pickup points immediately.

        Returns:
            New level if the bonus crossed a level threshold.
        """
        if points <= 0:
            return None
        self.session.score += points
        return self._check_level_up()

    def _check_level_up(self) -> Optional[int]:
        new_level = self.level_for_score(self.session.score)
        if new_level > self.session.level:
            self.session.level = new_level
            return new_level
        return None

    def record_high_score(self) -> bool:
        """
        Promote the current score to high score if it beats it.

        Returns:
            True if the high score changed.
        """
        if self.session.score > self.session.high_score:
            self.session.high_score = self.session.score
            return True
        return False
