"""
Roo Core - The FlappyRoo simulation.

This module provides the frame-driven game simulation, its Gymnasium
wrapper, and the supporting systems (physics, spawning, scoring,
collisions, lifecycle).

Main exports:
- CoreGame: Game orchestrator driven by pump(now_ms)
- FlappyRooEnv: Gymnasium environment for agents
- GameConfig: Configuration loaded from game_config.yaml
- ConfigStore: Player settings persistence (memory or JSON file)
"""

from flappyroo.roo_core.config_loader import GameConfig, get_config, load_config
from flappyroo.roo_core.config_store import (
    ConfigStore,
    JsonConfigStore,
    MemoryConfigStore,
    PlayerConfig,
)
from flappyroo.roo_core.dimensions import Dimensions, DimensionProvider, FixedDimensionProvider
from flappyroo.roo_core.events import EventBus, GameEvent, GameEventType
from flappyroo.roo_core.game import CoreGame
from flappyroo.roo_core.state_machine import GameState
from flappyroo.roo_core.env_gym import FlappyRooEnv

__all__ = [
    "GameConfig",
    "get_config",
    "load_config",
    "ConfigStore",
    "JsonConfigStore",
    "MemoryConfigStore",
    "PlayerConfig",
    "Dimensions",
    "DimensionProvider",
    "FixedDimensionProvider",
    "EventBus",
    "GameEvent",
    "GameEventType",
    "CoreGame",
    "GameState",
    "FlappyRooEnv",
]
