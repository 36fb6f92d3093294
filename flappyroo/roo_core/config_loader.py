"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import yaml


@dataclass(frozen=True)
class EnvironmentConfig:
    """Ground and ceiling bands."""
    ceiling_height_percent: float  # Fraction of screen height
    ground_height_percent: float   # Fraction of screen height


@dataclass(frozen=True)
class CharacterConfig:
    """Character geometry and display poses."""
    height_vh: float
    width_vh: float
    left_percent: float
    start_height_fraction: float
    rotation_neutral: float
    rotation_jump: float
    rotation_fall: float
    fall_velocity_threshold: float
    rotation_reset_ms: float


@dataclass(frozen=True)
class PhysicsConfig:
    """Base physics magnitudes, scaled by screen size and player multipliers."""
    gravity_base: float
    jump_strength_base: float
    game_speed_base: float
    baseline_frame_ms: float


@dataclass(frozen=True)
class ObstacleConfig:
    """Obstacle geometry and spawn cadence."""
    width_vh: float
    frequency_base_ms: float
    frequency_floor_ms: float
    height_floor: float
    height_variation: float
    spawn_delay_ms: float
    band_base: float
    band_per_level: float
    ground_clearance: float
    offscreen_margin: float


@dataclass(frozen=True)
class CloudConfig:
    """Background cloud population."""
    max_count: int
    initial_count: int
    size_min_vh: float
    size_max_vh: float
    spawn_interval_ms: float
    speed_min: float
    speed_max: float
    band_min: float
    band_max: float
    offscreen_margin: float


@dataclass(frozen=True)
class CollectibleConfig:
    """Bonus item spawning and lifetime."""
    spawn_chance: float
    size_vh: float
    speed_multiplier: float
    points: int
    min_distance_from_obstacles: float
    lifetime_ms: float
    max_attempts: int
    edge_margin: float
    removal_delay_ms: float
    offscreen_margin: float


@dataclass(frozen=True)
class ScoringConfig:
    """Scoring parameters."""
    distance_per_point: float


@dataclass(frozen=True)
class DifficultyConfig:
    """Per-level scaling steps."""
    speed_increase_per_level: float
    frequency_decrease_per_level: float
    variation_increase_per_level: float
    max_height_variation: float


@dataclass(frozen=True)
class CollisionConfig:
    """Fractional hitbox padding per side."""
    character_padding: float
    obstacle_padding: float
    collectible_padding: float


@dataclass(frozen=True)
class TimingConfig:
    """Presentation indicator durations."""
    level_up_indicator_ms: float
    collect_indicator_ms: float
    death_flash_ms: float


@dataclass(frozen=True)
class CapsConfig:
    """Game limits."""
    max_entities: int  # Size of snapshot entity arrays
    max_frames: int    # Truncation limit for the Gymnasium wrapper


@dataclass(frozen=True)
class DefaultsConfig:
    """Defaults for player-tunable settings."""
    gravity_multiplier: float
    jump_multiplier: float
    game_speed_multiplier: float
    level_threshold: int
    starting_level: int
    rotation_angle: float
    flip_horizontal: bool
    use_custom_sprite: bool


@dataclass(frozen=True)
class ValidationConfig:
    """Allowed (min, max) ranges for player-tunable settings."""
    gravity: Tuple[float, float]
    jump: Tuple[float, float]
    speed: Tuple[float, float]
    rotation: Tuple[float, float]
    starting_level: Tuple[int, int]
    level_threshold: Tuple[int, int]


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    environment: EnvironmentConfig
    character: CharacterConfig
    physics: PhysicsConfig
    obstacles: ObstacleConfig
    clouds: CloudConfig
    collectibles: CollectibleConfig
    scoring: ScoringConfig
    difficulty: DifficultyConfig
    collision: CollisionConfig
    timing: TimingConfig
    caps: CapsConfig
    defaults: DefaultsConfig
    validation: ValidationConfig


def _parse_range(range_data: list, cast=float) -> Tuple:
    """Parse a [min, max] pair from YAML."""
    if len(range_data) != 2:
        raise ValueError(f"Range must have 2 values [min, max], got {range_data}")
    low, high = cast(range_data[0]), cast(range_data[1])
    if low > high:
        raise ValueError(f"Range minimum {low} exceeds maximum {high}")
    return (low, high)


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    env = config.environment
    if env.ground_height_percent + env.ceiling_height_percent >= 1.0:
        raise ValueError(
            f"ground ({env.ground_height_percent}) and ceiling "
            f"({env.ceiling_height_percent}) bands leave no playfield"
        )

    obstacles = config.obstacles
    if obstacles.frequency_floor_ms <= 0:
        raise ValueError(f"obstacles.frequency_floor_ms must be positive, got {obstacles.frequency_floor_ms}")
    if obstacles.frequency_floor_ms > obstacles.frequency_base_ms:
        raise ValueError(
            f"obstacles.frequency_floor_ms ({obstacles.frequency_floor_ms}) exceeds "
            f"frequency_base_ms ({obstacles.frequency_base_ms})"
        )
    if obstacles.height_floor > obstacles.height_variation:
        raise ValueError(
            f"obstacles.height_floor ({obstacles.height_floor}) exceeds "
            f"height_variation ({obstacles.height_variation})"
        )

    if config.difficulty.max_height_variation < obstacles.height_variation:
        raise ValueError(
            f"difficulty.max_height_variation ({config.difficulty.max_height_variation}) "
            f"is below obstacles.height_variation ({obstacles.height_variation})"
        )

    if config.clouds.size_min_vh > config.clouds.size_max_vh:
        raise ValueError("clouds.size_min_vh exceeds clouds.size_max_vh")
    if config.clouds.speed_min > config.clouds.speed_max:
        raise ValueError("clouds.speed_min exceeds clouds.speed_max")

    if not 0.0 <= config.collectibles.spawn_chance <= 1.0:
        raise ValueError(f"collectibles.spawn_chance must be in [0, 1], got {config.collectibles.spawn_chance}")
    if config.collectibles.max_attempts < 1:
        raise ValueError("collectibles.max_attempts must be at least 1")

    if config.scoring.distance_per_point <= 0:
        raise ValueError(f"scoring.distance_per_point must be positive, got {config.scoring.distance_per_point}")

    if config.physics.baseline_frame_ms <= 0:
        raise ValueError("physics.baseline_frame_ms must be positive")

    for name in ("character_padding", "obstacle_padding", "collectible_padding"):
        padding = getattr(config.collision, name)
        if not 0.0 <= padding < 0.5:
            raise ValueError(f"collision.{name} must be in [0, 0.5), got {padding}")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    env_data = raw["environment"]
    environment = EnvironmentConfig(
        ceiling_height_percent=float(env_data["ceiling_height_percent"]),
        ground_height_percent=float(env_data["ground_height_percent"])
    )

    char_data = raw["character"]
    character = CharacterConfig(
        height_vh=float(char_data["height_vh"]),
        width_vh=float(char_data["width_vh"]),
        left_percent=float(char_data["left_percent"]),
        start_height_fraction=float(char_data.get("start_height_fraction", 0.4)),
        rotation_neutral=float(char_data.get("rotation_neutral", 0)),
        rotation_jump=float(char_data.get("rotation_jump", -15)),
        rotation_fall=float(char_data.get("rotation_fall", 15)),
        fall_velocity_threshold=float(char_data.get("fall_velocity_threshold", 5)),
        rotation_reset_ms=float(char_data.get("rotation_reset_ms", 200))
    )

    physics_data = raw["physics"]
    physics = PhysicsConfig(
        gravity_base=float(physics_data["gravity_base"]),
        jump_strength_base=float(physics_data["jump_strength_base"]),
        game_speed_base=float(physics_data["game_speed_base"]),
        baseline_frame_ms=float(physics_data.get("baseline_frame_ms", 16.67))
    )

    obs_data = raw["obstacles"]
    obstacles = ObstacleConfig(
        width_vh=float(obs_data["width_vh"]),
        frequency_base_ms=float(obs_data["frequency_base_ms"]),
        frequency_floor_ms=float(obs_data["frequency_floor_ms"]),
        height_floor=float(obs_data.get("height_floor", 0.1)),
        height_variation=float(obs_data["height_variation"]),
        spawn_delay_ms=float(obs_data.get("spawn_delay_ms", 1500)),
        band_base=float(obs_data.get("band_base", 0.5)),
        band_per_level=float(obs_data.get("band_per_level", 0.05)),
        ground_clearance=float(obs_data.get("ground_clearance", 5)),
        offscreen_margin=float(obs_data.get("offscreen_margin", 2.0))
    )

    cloud_data = raw["clouds"]
    clouds = CloudConfig(
        max_count=int(cloud_data["max_count"]),
        initial_count=int(cloud_data.get("initial_count", 5)),
        size_min_vh=float(cloud_data["size_min_vh"]),
        size_max_vh=float(cloud_data["size_max_vh"]),
        spawn_interval_ms=float(cloud_data["spawn_interval_ms"]),
        speed_min=float(cloud_data["speed_min"]),
        speed_max=float(cloud_data["speed_max"]),
        band_min=float(cloud_data.get("band_min", 0.1)),
        band_max=float(cloud_data.get("band_max", 0.4)),
        offscreen_margin=float(cloud_data.get("offscreen_margin", 1.0))
    )

    item_data = raw["collectibles"]
    collectibles = CollectibleConfig(
        spawn_chance=float(item_data["spawn_chance"]),
        size_vh=float(item_data["size_vh"]),
        speed_multiplier=float(item_data["speed_multiplier"]),
        points=int(item_data["points"]),
        min_distance_from_obstacles=float(item_data["min_distance_from_obstacles"]),
        lifetime_ms=float(item_data["lifetime_ms"]),
        max_attempts=int(item_data.get("max_attempts", 10)),
        edge_margin=float(item_data.get("edge_margin", 20)),
        removal_delay_ms=float(item_data.get("removal_delay_ms", 500)),
        offscreen_margin=float(item_data.get("offscreen_margin", 2.0))
    )

    scoring = ScoringConfig(
        distance_per_point=float(raw["scoring"]["distance_per_point"])
    )

    diff_data = raw["difficulty"]
    difficulty = DifficultyConfig(
        speed_increase_per_level=float(diff_data["speed_increase_per_level"]),
        frequency_decrease_per_level=float(diff_data["frequency_decrease_per_level"]),
        variation_increase_per_level=float(diff_data["variation_increase_per_level"]),
        max_height_variation=float(diff_data["max_height_variation"])
    )

    coll_data = raw.get("collision", {})
    collision = CollisionConfig(
        character_padding=float(coll_data.get("character_padding", 0.2)),
        obstacle_padding=float(coll_data.get("obstacle_padding", 0.2)),
        collectible_padding=float(coll_data.get("collectible_padding", 0.0))
    )

    timing_data = raw.get("timing", {})
    timing = TimingConfig(
        level_up_indicator_ms=float(timing_data.get("level_up_indicator_ms", 400)),
        collect_indicator_ms=float(timing_data.get("collect_indicator_ms", 400)),
        death_flash_ms=float(timing_data.get("death_flash_ms", 500))
    )

    caps_data = raw.get("caps", {})
    caps = CapsConfig(
        max_entities=int(caps_data.get("max_entities", 64)),
        max_frames=int(caps_data.get("max_frames", 108000))
    )

    def_data = raw["defaults"]
    defaults = DefaultsConfig(
        gravity_multiplier=float(def_data["gravity_multiplier"]),
        jump_multiplier=float(def_data["jump_multiplier"]),
        game_speed_multiplier=float(def_data["game_speed_multiplier"]),
        level_threshold=int(def_data["level_threshold"]),
        starting_level=int(def_data["starting_level"]),
        rotation_angle=float(def_data.get("rotation_angle", 0)),
        flip_horizontal=bool(def_data.get("flip_horizontal", False)),
        use_custom_sprite=bool(def_data.get("use_custom_sprite", False))
    )

    val_data = raw["validation"]
    validation = ValidationConfig(
        gravity=_parse_range(val_data["gravity"]),
        jump=_parse_range(val_data["jump"]),
        speed=_parse_range(val_data["speed"]),
        rotation=_parse_range(val_data["rotation"]),
        starting_level=_parse_range(val_data["starting_level"], int),
        level_threshold=_parse_range(val_data["level_threshold"], int)
    )

    config = GameConfig(
        environment=environment,
        character=character,
        physics=physics,
        obstacles=obstacles,
        clouds=clouds,
        collectibles=collectibles,
        scoring=scoring,
        difficulty=difficulty,
        collision=collision,
        timing=timing,
        caps=caps,
        defaults=defaults,
        validation=validation
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
