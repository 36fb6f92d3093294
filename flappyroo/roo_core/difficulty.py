"""
Difficulty
==========

Maps a level to speed, obstacle cadence and obstacle height variation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flappyroo.roo_core.config_loader import GameConfig, get_config


@dataclass(frozen=True)
class Difficulty:
    """Difficulty parameters for one level."""
    speed_multiplier: float
    obstacle_frequency: float  # Obstacle spawn interval in ms
    height_variation: float    # Upper bound of obstacle height fraction


def calculate_difficulty(
    level: int,
    starting_level: int,
    config: Optional[GameConfig] = None
) -> Difficulty:
    """
    Calculate difficulty for a level.

    Always derived from the base constants, never from a previous result.

    Args:
        level: Current level.
        starting_level: Level the session started at.
        config: Game configuration. Uses default if None.

    Returns:
        Difficulty for the level.
    """
    if config is None:
        config = get_config()

    diff = config.difficulty
    obstacles = config.obstacles
    level_diff = level - starting_level

    return Difficulty(
        speed_multiplier=1 + level_diff * diff.speed_increase_per_level,
        obstacle_frequency=max(
            obstacles.frequency_floor_ms,
            obstacles.frequency_base_ms - level_diff * diff.frequency_decrease_per_level
        ),
        height_variation=min(
            diff.max_height_variation,
            obstacles.height_variation + level_diff * diff.variation_increase_per_level
        ),
    )
