"""
Screen Dimensions
=================

Responsive playfield geometry derived from the window size.

Coordinates are y-up: y = 0 is the bottom edge of the screen and entity
positions refer to their bottom-left corner.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flappyroo.roo_core.config_loader import GameConfig, get_config


@dataclass(frozen=True)
class Dimensions:
    """Playfield geometry in pixels."""
    width: float
    height: float
    ground_height: float
    ceiling_height: float
    character_width: float
    character_height: float
    character_left: float

    @property
    def is_portrait(self) -> bool:
        return self.height > self.width

    @property
    def ceiling_limit(self) -> float:
        """Highest allowed bottom edge for the character."""
        return self.height - self.ceiling_height - self.character_height

    @classmethod
    def from_screen(
        cls,
        width: float,
        height: float,
        config: Optional[GameConfig] = None
    ) -> "Dimensions":
        """
        Compute responsive dimensions for a screen size.

        Args:
            width: Screen width in pixels.
            height: Screen height in pixels.
            config: Game configuration. Uses default if None.

        Returns:
            Dimensions scaled from the configured fractions.
        """
        if config is None:
            config = get_config()
        if width <= 0 or height <= 0:
            raise ValueError(f"Screen size must be positive, got {width}x{height}")

        env = config.environment
        char = config.character
        return cls(
            width=float(width),
            height=float(height),
            ground_height=height * env.ground_height_percent,
            ceiling_height=height * env.ceiling_height_percent,
            character_width=height * char.width_vh,
            character_height=height * char.height_vh,
            character_left=width * char.left_percent,
        )


class DimensionProvider:
    """
    Source of the current screen geometry.

    The game re-queries get_dimensions() whenever the host reports a resize.
    """

    def get_dimensions(self) -> Dimensions:
        raise NotImplementedError


class FixedDimensionProvider(DimensionProvider):
    """Dimension provider for a window whose size is set by the host."""

    def __init__(
        self,
        width: float = 800,
        height: float = 600,
        config: Optional[GameConfig] = None
    ):
        if config is None:
            config = get_config()
        self._config = config
        self._dimensions = Dimensions.from_screen(width, height, config)

    def resize(self, width: float, height: float) -> Dimensions:
        """Update the screen size and return the new dimensions."""
        self._dimensions = Dimensions.from_screen(width, height, self._config)
        return self._dimensions

    def get_dimensions(self) -> Dimensions:
        return self._dimensions
