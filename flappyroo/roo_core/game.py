"""
Core Game
=========

Main game orchestrator combining character physics, spawning, scoring,
collisions and the lifecycle state machine.

The host owns the clock. Once per display frame it calls pump(now_ms),
which drains due timers and then runs one frame tick. Input arrives as
activate(), pause() and resume().
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from flappyroo.roo_core.character import BoundaryHit, CharacterController
from flappyroo.roo_core.collision import check_collision
from flappyroo.roo_core.config_loader import GameConfig, get_config
from flappyroo.roo_core.config_store import ConfigStore, MemoryConfigStore, PlayerConfig
from flappyroo.roo_core.difficulty import Difficulty, calculate_difficulty
from flappyroo.roo_core.dimensions import DimensionProvider, Dimensions, FixedDimensionProvider
from flappyroo.roo_core.entities import EntityKind, EntityWorld, WorldEntity
from flappyroo.roo_core.events import EventBus, GameEvent, GameEventType
from flappyroo.roo_core.loop import FrameLoop
from flappyroo.roo_core.physics import Multipliers, PhysicsModel, PhysicsState
from flappyroo.roo_core.scheduler import TimerHandle, TimerQueue
from flappyroo.roo_core.scoring import GameSession, ScoreTracker
from flappyroo.roo_core.spawner import SpawnContext, SpawnScheduler
from flappyroo.roo_core.state_machine import GameState, GameStateMachine
from flappyroo.roo_core.state_snapshot import GameSnapshot, SnapshotBuilder

logger = logging.getLogger(__name__)


class CoreGame:
    """
    Main game simulation class.

    Orchestrates:
    - Character controller and physics model
    - Entity world and spawn timers
    - Score and level tracking
    - Lifecycle state machine and events
    - Player config store

    One frame = drain timers, then gravity, entity movement, scoring and
    collision checks in that order.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        store: Optional[ConfigStore] = None,
        dimension_provider: Optional[DimensionProvider] = None,
        seed: Optional[int] = None,
        now_ms: float = 0.0
    ):
        """
        Initialize game.

        Args:
            config: Game configuration. Uses default if None.
            store: Player config store. In-memory if None.
            dimension_provider: Screen geometry source. 800x600 if None.
            seed: Random seed for spawning.
            now_ms: Initial clock time.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._store = store if store is not None else MemoryConfigStore(config=config)
        self._dimension_provider = dimension_provider or FixedDimensionProvider(config=config)
        self._player = self._store.load_config()
        self._dimensions = self._dimension_provider.get_dimensions()

        # Initialize subsystems
        self._timers = TimerQueue(now_ms)
        self._events = EventBus()
        self._state = GameStateMachine()
        self._state.add_listener(self._on_state_changed)
        self._loop = FrameLoop(config)
        self._world = EntityWorld(config)
        self._physics = PhysicsModel(self._dimensions, self._multipliers(), config)
        self._character = CharacterController(
            self._dimensions,
            timers=self._timers,
            config=config,
            is_active=lambda: self._state.is_playing,
        )
        self._scorer = ScoreTracker(
            config,
            starting_level=self._player.starting_level,
            level_threshold=self._player.level_threshold,
            high_score=self._player.high_score,
        )
        self._spawner = SpawnScheduler(
            world=self._world,
            timers=self._timers,
            context=self._spawn_context,
            is_playing=lambda: self._state.is_playing,
            config=config,
            seed=seed,
        )
        self._snapshot_builder = SnapshotBuilder(config)

        self._obstacle_start: Optional[TimerHandle] = None
        self._indicators: Dict[str, TimerHandle] = {}
        self._session_id = 0
        self._end_reason = ""
        self._destroyed = False

        # Sky is populated on the start screen too
        self._spawner.create_initial_clouds()

    # ---------------------------------------------------------- properties

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def state(self) -> GameState:
        return self._state.state

    @property
    def events(self) -> EventBus:
        return self._events

    @property
    def timers(self) -> TimerQueue:
        return self._timers

    @property
    def world(self) -> EntityWorld:
        return self._world

    @property
    def character(self) -> CharacterController:
        return self._character

    @property
    def spawner(self) -> SpawnScheduler:
        return self._spawner

    @property
    def store(self) -> ConfigStore:
        return self._store

    @property
    def player_config(self) -> PlayerConfig:
        return self._player

    @property
    def dimensions(self) -> Dimensions:
        return self._dimensions

    @property
    def physics(self) -> PhysicsState:
        """Current physics, level speed multiplier included."""
        return self._physics.current

    @property
    def session(self) -> GameSession:
        return self._scorer.session

    @property
    def score(self) -> int:
        """Current score."""
        return self._scorer.score

    @property
    def level(self) -> int:
        return self._scorer.level

    @property
    def high_score(self) -> int:
        return self._scorer.high_score

    @property
    def now(self) -> float:
        """Game clock time in ms."""
        return self._timers.now

    @property
    def loop_running(self) -> bool:
        return self._loop.running

    @property
    def end_reason(self) -> str:
        """Reason for the last game over, or empty string."""
        return self._end_reason

    @property
    def active_indicators(self) -> List[str]:
        """Presentation indicators currently shown."""
        return sorted(self._indicators)

    @property
    def difficulty(self) -> Difficulty:
        return calculate_difficulty(self._scorer.level, self._scorer.starting_level, self._config)

    # --------------------------------------------------------------- input

    def activate(self) -> GameState:
        """
        Single input signal: start, jump or restart depending on state.

        Ignored while paused.

        Returns:
            State after handling the input.
        """
        state = self._state.state
        if state in (GameState.START, GameState.GAME_OVER):
            self.start_game()
        elif state == GameState.PLAYING:
            self.jump()
        return self._state.state

    def start_game(self) -> bool:
        """
        Begin a new session from START or GAME_OVER.

        Returns:
            True if a session started.
        """
        if self._state.state not in (GameState.START, GameState.GAME_OVER):
            logger.warning(f"Cannot start game from state {self._state.state.name}")
            return False

        self._cancel_session_timers()
        self._session_id += 1
        self._end_reason = ""

        self._scorer.configure(self._player.starting_level, self._player.level_threshold)
        self._scorer.reset()
        self._physics.reset()

        self._world.clear()
        self._spawner.create_initial_clouds()
        self._character.reset_position()

        self._state.transition(GameState.PLAYING)
        self._loop.start(self.now)

        self._obstacle_start = self._timers.call_later(
            self._config.obstacles.spawn_delay_ms,
            self._start_obstacle_spawning,
            name="obstacle_start",
        )
        self._spawner.start_clouds()

        logger.info(f"Game started at level {self._scorer.level}")
        self._emit(GameEventType.GAME_STARTED, {
            "level": self._scorer.level,
            "high_score": self._scorer.high_score,
        })
        return True

    def jump(self) -> bool:
        """Jump if playing. Returns True if the jump was applied."""
        if not self._state.is_playing:
            return False
        self._character.jump(self._physics.current.jump_strength)
        return True

    def pause(self) -> bool:
        """Stop the loop and spawn timers. Only valid while playing."""
        if not self._state.is_playing:
            return False
        self._state.transition(GameState.PAUSED)
        self._loop.stop()
        self._spawner.stop_all()
        TimerQueue.cancel(self._obstacle_start)
        self._obstacle_start = None
        self._emit(GameEventType.PAUSED, {"score": self._scorer.score})
        return True

    def resume(self) -> bool:
        """Restart the loop and spawn timers after a pause."""
        if self._state.state != GameState.PAUSED:
            return False
        self._state.transition(GameState.PLAYING)
        self._loop.start(self.now)
        self._spawner.start_obstacles(self.difficulty.obstacle_frequency)
        self._spawner.start_clouds()
        self._emit(GameEventType.RESUMED, {"score": self._scorer.score})
        return True

    def end_game(self, reason: str = "Unknown") -> bool:
        """
        End the session. Idempotent: only the first call while playing
        has any effect.

        Returns:
            True if this call ended the game.
        """
        if not self._state.is_playing:
            return False

        self._state.transition(GameState.GAME_OVER)
        self._loop.stop()
        self._spawner.stop_all()
        TimerQueue.cancel(self._obstacle_start)
        self._obstacle_start = None
        self._character.stop()
        self._end_reason = reason
        self._show_indicator("death_flash", self._config.timing.death_flash_ms)

        if self._scorer.record_high_score():
            self._store.save_high_score(self._scorer.high_score)

        logger.info(f"Game over: {reason} (score={self._scorer.score}, level={self._scorer.level})")
        self._emit(GameEventType.GAME_OVER, {
            "score": self._scorer.score,
            "high_score": self._scorer.high_score,
            "level": self._scorer.level,
            "reason": reason,
        })
        return True

    # ---------------------------------------------------------- frame loop

    def pump(self, now_ms: float) -> bool:
        """
        Drain due timers, then run one frame.

        Args:
            now_ms: Host clock time in ms.

        Returns:
            True if the loop is still armed after the frame.
        """
        try:
            self._timers.advance(now_ms)
        except Exception:
            logger.exception("Timer callback error")
            if self._state.is_playing:
                self._halt()
                return False
        return self.tick(now_ms)

    def tick(self, now_ms: float) -> bool:
        """
        Run one frame of the simulation.

        A fault inside the frame halts the loop and forces GAME_OVER without
        going through end_game().

        Args:
            now_ms: Host clock time in ms.

        Returns:
            True if the loop is still armed after the frame.
        """
        if not self._state.is_playing or not self._loop.running:
            self._loop.stop()
            return False

        try:
            delta_time = self._loop.delta(now_ms)
            self._update(delta_time, now_ms)
        except Exception:
            logger.exception("Game loop error")
            self._halt()
            return False

        if not self._state.is_playing:
            self._loop.stop()
        return self._loop.running

    def _update(self, delta_time: float, now_ms: float) -> None:
        physics = self._physics.current
        dims = self._dimensions

        hit = self._character.apply_gravity(
            physics.gravity * delta_time,
            dims.ground_height,
            dims.ceiling_height,
            dims.height,
        )
        if hit != BoundaryHit.NONE:
            self.end_game(f"{hit.value} collision")
            return

        if not self._state.is_playing:
            return

        self._world.update(delta_time, now_ms)

        update = self._scorer.update(self._physics.current.game_speed, delta_time)
        if update.level_up is not None:
            self._level_up(update.level_up)

        if self._check_obstacle_collisions():
            self.end_game("Obstacle collision")
            return

        self._check_collectible_collisions()

    def _check_obstacle_collisions(self) -> bool:
        hitbox = self._character.hitbox()
        for obstacle in self._world.obstacles:
            if check_collision(hitbox, obstacle.hitbox()):
                return True
        return False

    def _check_collectible_collisions(self) -> None:
        hitbox = self._character.hitbox()
        collectibles = self._world.collectibles
        for i in range(len(collectibles) - 1, -1, -1):
            item = collectibles[i]
            if item.collected:
                continue
            if not check_collision(hitbox, item.hitbox()):
                continue

            points = item.collect()
            if points <= 0:
                continue

            new_level = self._scorer.add_bonus(points)
            self._schedule_removal(item)
            self._show_indicator("item_collected", self._config.timing.collect_indicator_ms)
            logger.info(f"Item collected: +{points} points")
            self._emit(GameEventType.ITEM_COLLECTED, {
                "points": points,
                "score": self._scorer.score,
            })
            if new_level is not None:
                self._level_up(new_level)

    def _level_up(self, new_level: int) -> None:
        difficulty = calculate_difficulty(new_level, self._scorer.starting_level, self._config)
        self._physics.set_speed_multiplier(difficulty.speed_multiplier)
        self._spawner.restart_obstacles(difficulty.obstacle_frequency)
        self._show_indicator("level_up", self._config.timing.level_up_indicator_ms)
        logger.info(f"Level up: {new_level}")
        self._emit(GameEventType.LEVEL_UP, {"level": new_level})

    def _halt(self) -> None:
        self._loop.stop()
        self._spawner.stop_all()
        self._state.force(GameState.GAME_OVER)
        self._end_reason = "error"

    # -------------------------------------------------------------- timers

    def _start_obstacle_spawning(self) -> None:
        self._obstacle_start = None
        if not self._state.is_playing:
            return
        self._spawner.start_obstacles(self.difficulty.obstacle_frequency)

    def _schedule_removal(self, item: WorldEntity) -> None:
        session_id = self._session_id

        def remove() -> None:
            # A new session has already cleared the world
            if self._session_id != session_id:
                return
            self._world.remove(item)

        self._timers.call_later(self._config.collectibles.removal_delay_ms, remove, name="collectible_removal")

    def _show_indicator(self, name: str, duration_ms: float) -> None:
        TimerQueue.cancel(self._indicators.get(name))
        self._indicators[name] = self._timers.call_later(
            duration_ms, lambda: self._indicators.pop(name, None), name=f"{name}_indicator"
        )

    def _cancel_session_timers(self) -> None:
        TimerQueue.cancel(self._obstacle_start)
        self._obstacle_start = None
        self._spawner.stop_all()
        for handle in self._indicators.values():
            handle.cancel()
        self._indicators.clear()

    # -------------------------------------------------------- host changes

    def handle_resize(self) -> Dimensions:
        """
        Re-query screen geometry after a resize.

        Physics is recomputed from base and the character repositioned
        unless a session is in progress.
        """
        self._dimensions = self._dimension_provider.get_dimensions()
        self._physics.recompute(dimensions=self._dimensions)
        self._character.update_dimensions(self._dimensions)
        if not self._state.is_playing:
            self._character.reset_position()
        return self._dimensions

    def apply_config(self, player_config: PlayerConfig) -> None:
        """
        Apply changed player settings live.

        Physics is recomputed from base with the current level's speed
        multiplier, and the high score is reloaded from the store.
        """
        self._player = player_config
        self._physics.recompute(multipliers=self._multipliers())
        self._scorer.configure(player_config.starting_level, player_config.level_threshold)
        self._physics.set_speed_multiplier(self.difficulty.speed_multiplier)
        self._scorer.session.high_score = self._store.load_config().high_score
        logger.info("Player configuration applied")

    def destroy(self) -> None:
        """Stop everything and close the store. Idempotent."""
        if self._destroyed:
            return
        self._destroyed = True
        self._loop.stop()
        self._spawner.stop_all()
        self._timers.clear()
        self._indicators.clear()
        self._store.close()

    # ------------------------------------------------------------- outputs

    def snapshot(self) -> GameSnapshot:
        """Build a read-only numpy snapshot of the current state."""
        return self._snapshot_builder.build(self)

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        session = self._scorer.session
        return {
            "state": self._state.state.name,
            "score": session.score,
            "high_score": session.high_score,
            "level": session.level,
            "distance_traveled": session.distance_traveled,
            "obstacle_count": self._world.count(EntityKind.OBSTACLE),
            "collectible_count": self._world.count(EntityKind.COLLECTIBLE),
            "frames": self._loop.frames,
            "terminated_reason": self._end_reason,
        }

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dict with screen geometry, character pose and entity boxes.
        """
        dims = self._dimensions
        char = self._character

        def entity_data(entity: WorldEntity) -> Dict[str, Any]:
            return {
                "uid": entity.uid,
                "kind": entity.kind.name.lower(),
                "x": entity.x,
                "y": entity.y,
                "width": entity.width,
                "height": entity.height,
                "collected": entity.collected,
            }

        return {
            "width": dims.width,
            "height": dims.height,
            "ground_height": dims.ground_height,
            "ceiling_height": dims.ceiling_height,
            "character": {
                "x": char.x,
                "y": char.y,
                "width": char.width,
                "height": char.height,
                "rotation": char.rotation,
                "velocity": char.velocity,
            },
            "obstacles": [entity_data(e) for e in self._world.obstacles],
            "clouds": [entity_data(e) for e in self._world.clouds],
            "collectibles": [entity_data(e) for e in self._world.collectibles],
            "score": self._scorer.score,
            "high_score": self._scorer.high_score,
            "level": self._scorer.level,
            "state": self._state.state.name,
            "indicators": self.active_indicators,
            "appearance": {
                "rotation_angle": self._player.rotation_angle,
                "flip_horizontal": self._player.flip_horizontal,
                "use_custom_sprite": self._player.use_custom_sprite,
                "custom_sprite_path": self._player.custom_sprite_path,
            },
        }

    # ------------------------------------------------------------- helpers

    def _multipliers(self) -> Multipliers:
        return Multipliers(
            gravity=self._player.gravity_multiplier,
            jump=self._player.jump_multiplier,
            speed=self._player.game_speed_multiplier,
        )

    def _spawn_context(self) -> SpawnContext:
        return SpawnContext(
            dimensions=self._dimensions,
            level=self._scorer.level,
            starting_level=self._scorer.starting_level,
            game_speed=self._physics.current.game_speed,
            now_ms=self._timers.now,
        )

    def _emit(self, event_type: GameEventType, data: Dict[str, Any]) -> None:
        self._events.emit(GameEvent(type=event_type, data=data, timestamp=self._timers.now))

    def _on_state_changed(self, old_state: GameState, new_state: GameState) -> None:
        self._emit(GameEventType.STATE_CHANGED, {
            "from": old_state.name,
            "to": new_state.name,
        })
