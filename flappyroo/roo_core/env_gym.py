"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the FlappyRoo game.
Reward is always 0.0 - compute your own from the info dict.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from flappyroo.roo_core.config_loader import GameConfig, load_config
from flappyroo.roo_core.config_store import ConfigStore, MemoryConfigStore
from flappyroo.roo_core.dimensions import FixedDimensionProvider
from flappyroo.roo_core.game import CoreGame
from flappyroo.roo_core.render_solid import SolidRenderer
from flappyroo.roo_core.state_machine import GameState
from flappyroo.roo_core.state_snapshot import GameSnapshot

ACTION_GLIDE = 0
ACTION_ACTIVATE = 1


class FlappyRooEnv(gym.Env):
    """
    FlappyRoo side-scroller as a Gymnasium environment.

    Action Space:
        Discrete(2): 0 = glide (no input), 1 = activate (jump).

    Observation Space:
        Dict containing structured game state and optional RGB image.

    Each step advances one baseline frame on a simulated clock, draining
    spawn timers before the frame runs.

    Reward:
        Always 0.0. Compute your own reward from the info dict.
    """

    metadata = {
        "render_modes": ["rgb_array"],
        "render_fps": 60,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        render_mode: Optional[str] = None,
        image_obs: bool = False,
        screen_width: int = 800,
        screen_height: int = 600,
        image_width: int = 160,
        image_height: int = 120,
        store: Optional[ConfigStore] = None,
    ):
        """
        Initialize FlappyRoo environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            render_mode: "rgb_array" for numpy frames, None for headless.
            image_obs: If True, include frame_rgb in observations.
            screen_width: Simulated screen width in pixels.
            screen_height: Simulated screen height in pixels.
            image_width: Width of rendered frames.
            image_height: Height of rendered frames.
            store: Player config store. In-memory defaults if None.
        """
        super().__init__()

        if render_mode is not None and render_mode not in self.metadata["render_modes"]:
            raise ValueError(f"Unsupported render_mode: {render_mode}")

        self._config = load_config(config_path)
        self.render_mode = render_mode
        self._image_obs = image_obs
        self._img_width = image_width
        self._img_height = image_height
        self._store = store if store is not None else MemoryConfigStore(config=self._config)
        self._dimension_provider = FixedDimensionProvider(screen_width, screen_height, self._config)

        self._frame_ms = self._config.physics.baseline_frame_ms
        self._max_frames = self._config.caps.max_frames
        self._clock_ms = 0.0
        self._frames = 0

        self._game = self._make_game(seed=None)
        self._renderer: Optional[SolidRenderer] = None

        self.action_space = spaces.Discrete(2)
        self.observation_space = self._build_observation_space()

    def _make_game(self, seed: Optional[int]) -> CoreGame:
        return CoreGame(
            config=self._config,
            store=self._store,
            dimension_provider=self._dimension_provider,
            seed=seed,
            now_ms=0.0,
        )

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_ent = self._config.caps.max_entities
        dims = self._dimension_provider.get_dimensions()
        big = np.finfo(np.float32).max

        obs_dict = {
            "state": spaces.Box(low=0, high=len(GameState), shape=(), dtype=np.int32),
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "level": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),
            "distance_traveled": spaces.Box(low=0, high=big, shape=(), dtype=np.float32),

            "screen_width": spaces.Box(low=0, high=big, shape=(), dtype=np.float32),
            "screen_height": spaces.Box(low=0, high=big, shape=(), dtype=np.float32),
            "ground_height": spaces.Box(low=0, high=dims.height, shape=(), dtype=np.float32),
            "ceiling_height": spaces.Box(low=0, high=dims.height, shape=(), dtype=np.float32),

            "char_y": spaces.Box(low=0, high=dims.height, shape=(), dtype=np.float32),
            "char_velocity": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),
            "game_speed": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),

            "obj_kind": spaces.Box(low=-1, high=2, shape=(max_ent,), dtype=np.int8),
            "obj_x": spaces.Box(low=-np.inf, high=np.inf, shape=(max_ent,), dtype=np.float32),
            "obj_y": spaces.Box(low=-np.inf, high=np.inf, shape=(max_ent,), dtype=np.float32),
            "obj_w": spaces.Box(low=0, high=np.inf, shape=(max_ent,), dtype=np.float32),
            "obj_h": spaces.Box(low=0, high=np.inf, shape=(max_ent,), dtype=np.float32),
            "obj_speed": spaces.Box(low=0, high=np.inf, shape=(max_ent,), dtype=np.float32),
            "obj_mask": spaces.MultiBinary(max_ent),
        }

        if self._image_obs:
            obs_dict["frame_rgb"] = spaces.Box(
                low=0,
                high=255,
                shape=(self._img_height, self._img_width, 3),
                dtype=np.uint8
            )

        return spaces.Dict(obs_dict)

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment and start a new session.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        self._clock_ms = 0.0
        self._frames = 0
        self._game = self._make_game(seed)
        self._game.activate()

        obs = self._snapshot_to_obs(self._game.snapshot())
        info = self._game.get_info()
        info["delta_score"] = 0
        return obs, info

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one frame.

        Args:
            action: 0 to glide, 1 to activate.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item())

        score_before = self._game.score
        if action == ACTION_ACTIVATE and self._game.state == GameState.PLAYING:
            self._game.activate()

        self._clock_ms += self._frame_ms
        self._frames += 1
        self._game.pump(self._clock_ms)

        terminated = self._game.state == GameState.GAME_OVER
        truncated = not terminated and self._frames >= self._max_frames

        obs = self._snapshot_to_obs(self._game.snapshot())
        info = self._game.get_info()
        info["delta_score"] = self._game.score - score_before
        info["sim_time"] = self._clock_ms

        return obs, 0.0, terminated, truncated, info

    def _snapshot_to_obs(self, snapshot: GameSnapshot) -> Dict[str, np.ndarray]:
        """Convert snapshot to observation dict."""
        obs = snapshot.to_obs_dict()
        if self._image_obs:
            obs["frame_rgb"] = self._render_to_array()
        return obs

    def _render_to_array(self) -> np.ndarray:
        if self._renderer is None:
            self._renderer = SolidRenderer(self._config)
        return self._renderer.render(self._game.get_render_data(), self._img_width, self._img_height)

    def render(self) -> Optional[np.ndarray]:
        """
        Render the current game state.

        Returns:
            RGB array if render_mode is "rgb_array", None otherwise.
        """
        if self.render_mode == "rgb_array":
            return self._render_to_array()
        return None

    def close(self) -> None:
        """Clean up resources."""
        if self._renderer is not None:
            self._renderer.close()
            self._renderer = None
        self._game.destroy()

    @property
    def game(self) -> CoreGame:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
