"""
State Snapshot
==============

Packs game state into fixed-size numpy arrays for presenters and Gymnasium
observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, TYPE_CHECKING

import numpy as np

from flappyroo.roo_core.config_loader import GameConfig, get_config

if TYPE_CHECKING:
    from flappyroo.roo_core.game import CoreGame


@dataclass
class GameSnapshot:
    """
    Read-only copy of the game state for one frame.

    Entity arrays are fixed-size with a mask for the live entries. Clouds
    are omitted; they have no effect on play.
    """
    # Core state
    state: int
    score: int
    high_score: int
    level: int
    distance_traveled: float

    # Screen geometry
    screen_width: float
    screen_height: float
    ground_height: float
    ceiling_height: float

    # Character
    char_x: float
    char_y: float
    char_w: float
    char_h: float
    char_velocity: float

    # Physics
    gravity: float
    jump_strength: float
    game_speed: float

    # Entity arrays (fixed size, padded)
    obj_kind: np.ndarray              # (MAX_ENT,) int8, -1 for empty slots
    obj_x: np.ndarray                 # (MAX_ENT,) float32
    obj_y: np.ndarray                 # (MAX_ENT,) float32
    obj_w: np.ndarray                 # (MAX_ENT,) float32
    obj_h: np.ndarray                 # (MAX_ENT,) float32
    obj_speed: np.ndarray             # (MAX_ENT,) float32
    obj_mask: np.ndarray              # (MAX_ENT,) bool

    # Optional image
    frame_rgb: Optional[np.ndarray] = None

    @property
    def entity_count(self) -> int:
        return int(self.obj_mask.sum())

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to Gymnasium observation dictionary."""
        obs = {
            "state": np.array(self.state, dtype=np.int32),
            "score": np.array(self.score, dtype=np.int64),
            "level": np.array(self.level, dtype=np.int32),
            "distance_traveled": np.array(self.distance_traveled, dtype=np.float32),

            "screen_width": np.array(self.screen_width, dtype=np.float32),
            "screen_height": np.array(self.screen_height, dtype=np.float32),
            "ground_height": np.array(self.ground_height, dtype=np.float32),
            "ceiling_height": np.array(self.ceiling_height, dtype=np.float32),

            "char_y": np.array(self.char_y, dtype=np.float32),
            "char_velocity": np.array(self.char_velocity, dtype=np.float32),
            "game_speed": np.array(self.game_speed, dtype=np.float32),

            "obj_kind": self.obj_kind,
            "obj_x": self.obj_x,
            "obj_y": self.obj_y,
            "obj_w": self.obj_w,
            "obj_h": self.obj_h,
            "obj_speed": self.obj_speed,
            "obj_mask": self.obj_mask,
        }

        if self.frame_rgb is not None:
            obs["frame_rgb"] = self.frame_rgb

        return obs


class SnapshotBuilder:
    """Builds game state snapshots with pre-allocated arrays."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._max_entities = config.caps.max_entities

        # Pre-allocate arrays
        self._obj_kind = np.zeros(self._max_entities, dtype=np.int8)
        self._obj_x = np.zeros(self._max_entities, dtype=np.float32)
        self._obj_y = np.zeros(self._max_entities, dtype=np.float32)
        self._obj_w = np.zeros(self._max_entities, dtype=np.float32)
        self._obj_h = np.zeros(self._max_entities, dtype=np.float32)
        self._obj_speed = np.zeros(self._max_entities, dtype=np.float32)
        self._obj_mask = np.zeros(self._max_entities, dtype=bool)

    @property
    def max_entities(self) -> int:
        return self._max_entities

    def build(self, game: "CoreGame", frame_rgb: Optional[np.ndarray] = None) -> GameSnapshot:
        """Build a snapshot from current game state."""
        # Reset arrays
        self._obj_kind.fill(-1)
        self._obj_x.fill(0)
        self._obj_y.fill(0)
        self._obj_w.fill(0)
        self._obj_h.fill(0)
        self._obj_speed.fill(0)
        self._obj_mask.fill(False)

        # Obstacles first so they survive truncation
        live = list(game.world.obstacles)
        live.extend(e for e in game.world.collectibles if not e.collected)
        count = min(len(live), self._max_entities)

        for i in range(count):
            entity = live[i]
            self._obj_kind[i] = entity.kind.value
            self._obj_x[i] = entity.x
            self._obj_y[i] = entity.y
            self._obj_w[i] = entity.width
            self._obj_h[i] = entity.height
            self._obj_speed[i] = entity.speed
            self._obj_mask[i] = True

        session = game.session
        dims = game.dimensions
        char = game.character
        physics = game.physics

        return GameSnapshot(
            state=game.state.value,
            score=session.score,
            high_score=session.high_score,
            level=session.level,
            distance_traveled=session.distance_traveled,
            screen_width=dims.width,
            screen_height=dims.height,
            ground_height=dims.ground_height,
            ceiling_height=dims.ceiling_height,
            char_x=char.x,
            char_y=char.y,
            char_w=char.width,
            char_h=char.height,
            char_velocity=char.velocity,
            gravity=physics.gravity,
            jump_strength=physics.jump_strength,
            game_speed=physics.game_speed,
            obj_kind=self._obj_kind.copy(),
            obj_x=self._obj_x.copy(),
            obj_y=self._obj_y.copy(),
            obj_w=self._obj_w.copy(),
            obj_h=self._obj_h.copy(),
            obj_speed=self._obj_speed.copy(),
            obj_mask=self._obj_mask.copy(),
            frame_rgb=frame_rgb,
        )

