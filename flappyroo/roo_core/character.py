"""
Character Controller
====================

Vertical kinematics for the player character.

Velocity is a signed scalar with positive meaning falling: each frame
velocity grows by gravity and y drops by velocity. Rotation is a display
pose only and never feeds back into the simulation.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional, Tuple

from flappyroo.roo_core.collision import Rect, padded_hitbox
from flappyroo.roo_core.config_loader import GameConfig, get_config
from flappyroo.roo_core.dimensions import Dimensions
from flappyroo.roo_core.scheduler import TimerHandle, TimerQueue


class BoundaryHit(Enum):
    """Result of a gravity step."""
    NONE = "none"
    GROUND = "ground"
    CEILING = "ceiling"


class CharacterController:
    """
    Owns the character's position, velocity and display rotation.

    One instance per game; reset_position() re-centers it for each session.
    """

    def __init__(
        self,
        dimensions: Dimensions,
        timers: Optional[TimerQueue] = None,
        config: Optional[GameConfig] = None,
        is_active: Optional[Callable[[], bool]] = None
    ):
        """
        Initialize character.

        Args:
            dimensions: Current screen dimensions.
            timers: Timer queue for the jump pose reset. Pose resets are
                skipped if None.
            config: Game configuration. Uses default if None.
            is_active: Guard checked before a delayed pose reset mutates
                the character. Always active if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._char = config.character
        self._timers = timers
        self._is_active = is_active or (lambda: True)
        self._pose_timer: Optional[TimerHandle] = None

        self.x = 0.0
        self.y = 0.0
        self.velocity = 0.0
        self.width = 0.0
        self.height = 0.0
        self.rotation = self._char.rotation_neutral
        self._screen_height = 0.0

        self.update_dimensions(dimensions)
        self.reset_position()

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def update_dimensions(self, dimensions: Dimensions) -> None:
        """Resize the character and move it to the configured column."""
        self.width = dimensions.character_width
        self.height = dimensions.character_height
        self.x = dimensions.character_left
        self._screen_height = dimensions.height

    def reset_position(self) -> None:
        """Put the character at its start height with zero velocity."""
        self._cancel_pose_timer()
        self.y = self._screen_height * self._char.start_height_fraction
        self.velocity = 0.0
        self.rotation = self._char.rotation_neutral

    def apply_gravity(
        self,
        gravity: float,
        ground_height: float,
        ceiling_height: float,
        game_height: float
    ) -> BoundaryHit:
        """
        Integrate one step of gravity and enforce floor/ceiling bounds.

        Args:
            gravity: Gravity for this step, already scaled by delta time.
            ground_height: Lowest allowed bottom edge.
            ceiling_height: Height of the ceiling band.
            game_height: Screen height.

        Returns:
            CEILING or GROUND if a bound was hit (velocity zeroed, y clamped),
            NONE otherwise.
        """
        self.velocity += gravity
        self.y -= self.velocity

        ceiling_limit = game_height - ceiling_height - self.height
        if self.y > ceiling_limit:
            self.y = ceiling_limit
            self.velocity = 0.0
            return BoundaryHit.CEILING

        if self.y <= ground_height:
            self.y = ground_height
            self.velocity = 0.0
            return BoundaryHit.GROUND

        if self.velocity > self._char.fall_velocity_threshold:
            self.rotation = self._char.rotation_fall
        return BoundaryHit.NONE

    def jump(self, strength: float) -> None:
        """
        Launch the character upward.

        Sets velocity to -|strength| and shows the jump pose, which reverts
        to neutral after rotation_reset_ms unless the character is still
        moving fast in either direction.
        """
        self.velocity = -abs(strength)
        self.rotation = self._char.rotation_jump

        if self._timers is not None:
            self._cancel_pose_timer()
            self._pose_timer = self._timers.call_later(
                self._char.rotation_reset_ms,
                self._reset_pose,
                name="rotation_reset",
            )

    def _reset_pose(self) -> None:
        self._pose_timer = None
        if not self._is_active():
            return
        if abs(self.velocity) <= self._char.fall_velocity_threshold:
            self.rotation = self._char.rotation_neutral

    def _cancel_pose_timer(self) -> None:
        TimerQueue.cancel(self._pose_timer)
        self._pose_timer = None

    def stop(self) -> None:
        """Freeze movement at game over."""
        self._cancel_pose_timer()
        self.velocity = 0.0
        self.rotation = self._char.rotation_neutral

    def hitbox(self) -> Rect:
        """Collision box shrunk by the character padding."""
        return padded_hitbox(
            self.x, self.y, self.width, self.height,
            self._config.collision.character_padding
        )
