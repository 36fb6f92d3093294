"""
Spawn Scheduler
===============

Timer-driven creation of obstacles, clouds and collectibles.

Two repeating timers run off the shared TimerQueue: one for obstacles whose
interval follows the current difficulty, and one for clouds at a fixed
interval. Both re-check that the game is still playing before touching the
world, so a timer that fires after a pause or game over does nothing.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Callable, NamedTuple, Optional

from flappyroo.roo_core.config_loader import GameConfig, get_config
from flappyroo.roo_core.difficulty import calculate_difficulty
from flappyroo.roo_core.dimensions import Dimensions
from flappyroo.roo_core.entities import EntityKind, EntityWorld, WorldEntity
from flappyroo.roo_core.scheduler import TimerHandle, TimerQueue

logger = logging.getLogger(__name__)


class SpawnContext(NamedTuple):
    """Game state the spawner reads when a timer fires."""
    dimensions: Dimensions
    level: int
    starting_level: int
    game_speed: float  # Current scroll speed, level multiplier included
    now_ms: float


class SpawnScheduler:
    """
    Creates world entities on timers.

    The scheduler never reads game state directly; it asks `context()` for
    a SpawnContext each time it spawns and asks `is_playing()` before each
    timer-driven spawn.
    """

    def __init__(
        self,
        world: EntityWorld,
        timers: TimerQueue,
        context: Callable[[], SpawnContext],
        is_playing: Callable[[], bool],
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize spawner.

        Args:
            world: Entity collections to spawn into.
            timers: Shared timer queue.
            context: Returns the current SpawnContext.
            is_playing: State guard checked by every timer callback.
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._world = world
        self._timers = timers
        self._context = context
        self._is_playing = is_playing
        self._rng = random.Random(seed)

        self._obstacle_timer: Optional[TimerHandle] = None
        self._cloud_timer: Optional[TimerHandle] = None
        self._obstacle_interval: Optional[float] = None

    @property
    def obstacles_running(self) -> bool:
        return self._obstacle_timer is not None

    @property
    def clouds_running(self) -> bool:
        return self._cloud_timer is not None

    @property
    def obstacle_interval(self) -> Optional[float]:
        """Interval of the running obstacle timer, None if stopped."""
        return self._obstacle_interval

    # -------------------------------------------------------------- timers

    def start_obstacles(self, frequency_ms: float) -> None:
        """(Re)arm the obstacle timer at the given interval."""
        self.stop_obstacles()
        self._obstacle_interval = frequency_ms
        self._obstacle_timer = self._timers.call_every(
            frequency_ms, self._on_obstacle_timer, name="obstacle_spawn"
        )

    def restart_obstacles(self, frequency_ms: float) -> bool:
        """
        Re-arm the obstacle timer with a new interval if it is running.

        A level-up before the delayed first start leaves the timer stopped;
        it picks up the current difficulty when it starts.

        Returns:
            True if the timer was restarted.
        """
        if self._obstacle_timer is None:
            return False
        self.start_obstacles(frequency_ms)
        return True

    def stop_obstacles(self) -> None:
        TimerQueue.cancel(self._obstacle_timer)
        self._obstacle_timer = None
        self._obstacle_interval = None

    def start_clouds(self) -> None:
        """(Re)arm the fixed-interval cloud timer."""
        self.stop_clouds()
        self._cloud_timer = self._timers.call_every(
            self._config.clouds.spawn_interval_ms, self._on_cloud_timer, name="cloud_spawn"
        )

    def stop_clouds(self) -> None:
        TimerQueue.cancel(self._cloud_timer)
        self._cloud_timer = None

    def stop_all(self) -> None:
        """Cancel both spawn timers. Idempotent."""
        self.stop_obstacles()
        self.stop_clouds()

    def _on_obstacle_timer(self) -> None:
        if not self._is_playing():
            return
        self.create_obstacle()

    def _on_cloud_timer(self) -> None:
        if not self._is_playing():
            return
        if self._world.count(EntityKind.CLOUD) < self._config.clouds.max_count:
            self.create_cloud()

    # ------------------------------------------------------------ spawning

    def create_obstacle(self) -> WorldEntity:
        """
        Spawn one obstacle at the right screen edge.

        Also runs the collectible trial for this spawn.
        """
        ctx = self._context()
        dims = ctx.dimensions
        obs_cfg = self._config.obstacles
        difficulty = calculate_difficulty(ctx.level, ctx.starting_level, self._config)
        level_diff = ctx.level - ctx.starting_level

        height_fraction = self._rng.uniform(obs_cfg.height_floor, difficulty.height_variation)
        min_y = dims.ground_height + obs_cfg.ground_clearance
        max_y = dims.height * (obs_cfg.band_base + level_diff * obs_cfg.band_per_level)

        obstacle = self._world.spawn(
            EntityKind.OBSTACLE,
            x=dims.width,
            y=self._rng.uniform(min_y, max_y),
            width=dims.height * obs_cfg.width_vh,
            height=dims.height * height_fraction,
            speed=ctx.game_speed,
            level=ctx.level,
            spawn_time_ms=ctx.now_ms,
        )

        if self._rng.random() < self._config.collectibles.spawn_chance:
            self.try_create_collectible()

        return obstacle

    def create_cloud(self) -> WorldEntity:
        """Spawn one cloud just beyond the right edge."""
        dims = self._context().dimensions
        cfg = self._config.clouds
        size = self._rng.uniform(dims.height * cfg.size_min_vh, dims.height * cfg.size_max_vh)
        return self._world.spawn(
            EntityKind.CLOUD,
            x=self._rng.uniform(dims.width, dims.width * 1.5),
            y=self._rng.uniform(dims.height * cfg.band_min, dims.height * cfg.band_max),
            width=size,
            height=size,
            speed=self._rng.uniform(dims.width * cfg.speed_min, dims.width * cfg.speed_max),
        )

    def create_initial_clouds(self) -> int:
        """Populate the sky for a new session. Returns the number created."""
        count = min(self._config.clouds.initial_count, self._config.clouds.max_count)
        for _ in range(count):
            self.create_cloud()
        return count

    def try_create_collectible(self) -> Optional[WorldEntity]:
        """
        Search for a safe collectible position and spawn there.

        Up to max_attempts random candidates are tried; the first one far
        enough from every live obstacle wins. If none is found nothing is
        spawned.

        Returns:
            The collectible, or None if every attempt was rejected.
        """
        ctx = self._context()
        dims = ctx.dimensions
        cfg = self._config.collectibles
        size = dims.height * cfg.size_vh
        speed = ctx.game_speed * cfg.speed_multiplier

        min_y = dims.ground_height + size + cfg.edge_margin
        max_y = dims.height - dims.ceiling_height - size - cfg.edge_margin
        if max_y < min_y:
            max_y = min_y

        for attempt in range(cfg.max_attempts):
            x = self._rng.uniform(dims.width, dims.width * 1.5)
            y = self._rng.uniform(min_y, max_y)
            if self.is_position_safe(x, y):
                logger.debug(f"Collectible placed after {attempt + 1} attempts at ({x:.1f}, {y:.1f})")
                return self._world.spawn(
                    EntityKind.COLLECTIBLE,
                    x=x,
                    y=y,
                    width=size,
                    height=size,
                    speed=speed,
                    points=cfg.points,
                    lifetime_ms=cfg.lifetime_ms,
                    spawn_time_ms=ctx.now_ms,
                )

        logger.debug(f"No safe collectible position after {cfg.max_attempts} attempts")
        return None

    def is_position_safe(self, x: float, y: float) -> bool:
        """True if (x, y) is at least min_distance from every obstacle centre."""
        min_distance = self._config.collectibles.min_distance_from_obstacles
        for obstacle in self._world.obstacles:
            cx, cy = obstacle.center
            if math.hypot(x - cx, y - cy) < min_distance:
                return False
        return True
