"""
Physics Model
=============

Derives gravity, jump strength and scroll speed from player multipliers and
the screen size.

Magnitudes are per baseline frame: the loop multiplies them by a delta time
normalized against the baseline frame duration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flappyroo.roo_core.config_loader import GameConfig, get_config
from flappyroo.roo_core.dimensions import Dimensions


@dataclass(frozen=True)
class Multipliers:
    """Player-tunable physics multipliers."""
    gravity: float = 1.0
    jump: float = 1.0
    speed: float = 1.0


@dataclass(frozen=True)
class PhysicsState:
    """
    Current physics magnitudes.

    jump_strength is a magnitude; the character applies it upward.
    """
    gravity: float
    jump_strength: float
    game_speed: float


class PhysicsModel:
    """
    Holds base physics for the current screen and multipliers.

    Current physics is always derived from the base values, so repeated
    recomputation (resize, level-up, live config changes) never compounds.
    """

    def __init__(
        self,
        dimensions: Dimensions,
        multipliers: Optional[Multipliers] = None,
        config: Optional[GameConfig] = None
    ):
        """
        Initialize physics model.

        Args:
            dimensions: Current screen dimensions.
            multipliers: Player multipliers. Neutral if None.
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._multipliers = multipliers or Multipliers()
        self._dimensions = dimensions
        self._base = self.calculate(self._multipliers, dimensions, config)
        self._speed_multiplier = 1.0

    @staticmethod
    def calculate(
        multipliers: Multipliers,
        dimensions: Dimensions,
        config: Optional[GameConfig] = None
    ) -> PhysicsState:
        """
        Calculate base physics for a screen size.

        Args:
            multipliers: Player multipliers.
            dimensions: Screen dimensions.
            config: Game configuration. Uses default if None.

        Returns:
            PhysicsState at level speed multiplier 1.
        """
        if config is None:
            config = get_config()
        phys = config.physics
        return PhysicsState(
            gravity=dimensions.height * phys.gravity_base * multipliers.gravity,
            jump_strength=dimensions.height * phys.jump_strength_base * multipliers.jump,
            game_speed=dimensions.width * phys.game_speed_base * multipliers.speed,
        )

    @property
    def base(self) -> PhysicsState:
        """Base physics (speed multiplier 1)."""
        return self._base

    @property
    def multipliers(self) -> Multipliers:
        return self._multipliers

    @property
    def speed_multiplier(self) -> float:
        """Difficulty speed multiplier currently applied."""
        return self._speed_multiplier

    @property
    def current(self) -> PhysicsState:
        """Physics with the difficulty speed multiplier applied to base speed."""
        return PhysicsState(
            gravity=self._base.gravity,
            jump_strength=self._base.jump_strength,
            game_speed=self._base.game_speed * self._speed_multiplier,
        )

    def set_speed_multiplier(self, speed_multiplier: float) -> PhysicsState:
        """Apply a difficulty speed multiplier and return current physics."""
        self._speed_multiplier = speed_multiplier
        return self.current

    def recompute(
        self,
        dimensions: Optional[Dimensions] = None,
        multipliers: Optional[Multipliers] = None
    ) -> PhysicsState:
        """
        Recompute base physics after a resize or multiplier change.

        The current speed multiplier is kept.
        """
        if dimensions is not None:
            self._dimensions = dimensions
        if multipliers is not None:
            self._multipliers = multipliers
        self._base = self.calculate(self._multipliers, self._dimensions, self._config)
        return self.current

    def reset(self) -> PhysicsState:
        """Drop back to base physics at the start of a session."""
        self._speed_multiplier = 1.0
        return self.current
