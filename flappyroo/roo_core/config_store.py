"""
Player Config Store
===================

Persistence for player-tunable settings and the high score.

Values are validated on every load and save: numbers are clamped to the
ranges in game_config.yaml and anything unparseable falls back to its
default with a warning. The game receives a store instance and closes it
explicitly; there is no global store.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from flappyroo.roo_core.config_loader import GameConfig, get_config

logger = logging.getLogger(__name__)

MAX_SPRITE_PATH_LENGTH = 4096


@dataclass
class PlayerConfig:
    """Player settings as loaded from a store."""
    gravity_multiplier: float = 0.5
    jump_multiplier: float = 0.5
    game_speed_multiplier: float = 1.0
    starting_level: int = 1
    level_threshold: int = 20
    high_score: int = 0
    rotation_angle: float = 0.0
    flip_horizontal: bool = False
    use_custom_sprite: bool = False
    custom_sprite_path: str = ""

    @classmethod
    def defaults(cls, config: Optional[GameConfig] = None) -> "PlayerConfig":
        """Player config built from the defaults section of game_config.yaml."""
        if config is None:
            config = get_config()
        d = config.defaults
        return cls(
            gravity_multiplier=d.gravity_multiplier,
            jump_multiplier=d.jump_multiplier,
            game_speed_multiplier=d.game_speed_multiplier,
            starting_level=d.starting_level,
            level_threshold=d.level_threshold,
            high_score=0,
            rotation_angle=d.rotation_angle,
            flip_horizontal=d.flip_horizontal,
            use_custom_sprite=d.use_custom_sprite,
            custom_sprite_path="",
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def validate_number(
    value: Any,
    bounds: Tuple[float, float],
    default: float,
    name: str = "value",
    cast=float
) -> float:
    """
    Coerce a stored value to a number within bounds.

    Args:
        value: Raw stored value (number or numeric string).
        bounds: Allowed (min, max).
        default: Returned when value is missing or not a finite number.
        name: Setting name for the log message.
        cast: float or int.

    Returns:
        The clamped value, or default.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        logger.warning(f"Invalid {name}: {value!r}, using default {default}")
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid {name}: {value!r}, using default {default}")
        return default
    if not math.isfinite(number):
        logger.warning(f"Invalid {name}: {value!r}, using default {default}")
        return default

    low, high = bounds
    clamped = min(max(number, low), high)
    if clamped != number:
        logger.warning(f"{name} {number} outside [{low}, {high}], clamped to {clamped}")
    return cast(clamped)


def validate_bool(value: Any, default: bool) -> bool:
    """Coerce a stored flag; strings compare case-insensitively to 'true'."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def validate_sprite_path(value: Any) -> str:
    """Accept a sprite path string, rejecting non-strings and oversize values."""
    if value is None or value == "":
        return ""
    if not isinstance(value, str) or len(value) > MAX_SPRITE_PATH_LENGTH or "\x00" in value:
        logger.warning("Rejected invalid custom sprite path")
        return ""
    return value.strip()


class ConfigStore:
    """
    Base class for player config persistence.

    Subclasses provide raw key/value access via _read_all() and _write_all();
    validation and defaults live here.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()
        self._config = config
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _read_all(self) -> Dict[str, Any]:
        raise NotImplementedError

    def _write_all(self, data: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def has_config(self) -> bool:
        """True if any physics setting has been stored."""
        data = self._read_all()
        return any(
            key in data
            for key in ("gravity_multiplier", "jump_multiplier", "game_speed_multiplier")
        )

    def load_config(self) -> PlayerConfig:
        """Load and validate the stored player config."""
        return self._validate(self._read_all())

    def save_config(self, player_config: Union[PlayerConfig, Dict[str, Any]]) -> bool:
        """
        Validate and store player settings.

        The high score is not written here; use save_high_score().

        Returns:
            True if the write succeeded.
        """
        if isinstance(player_config, PlayerConfig):
            raw = player_config.to_dict()
        else:
            raw = dict(player_config)

        data = self._read_all()
        validated = self._validate(raw).to_dict()
        validated.pop("high_score")
        data.update(validated)
        return self._write_all(data)

    def save_high_score(self, score: Any) -> bool:
        """Store a high score, clamped to a non-negative integer."""
        valid = validate_number(score, (0, float(2 ** 53 - 1)), 0, "high_score", int)
        data = self._read_all()
        data["high_score"] = valid
        return self._write_all(data)

    def reset_high_score(self) -> bool:
        return self.save_high_score(0)

    def reset_config(self) -> bool:
        """Restore default settings, keeping the high score."""
        return self.save_config(PlayerConfig.defaults(self._config))

    def export_config(self) -> str:
        """Serialize the current player config as indented JSON."""
        return json.dumps(self.load_config().to_dict(), indent=2)

    def import_config(self, json_string: str) -> bool:
        """
        Import settings from a JSON string.

        Returns:
            True if the settings were parsed and stored, False on invalid JSON.
        """
        try:
            raw = json.loads(json_string)
        except (TypeError, ValueError) as e:
            logger.error(f"Error importing configuration: {e}")
            return False
        if not isinstance(raw, dict):
            logger.error("Error importing configuration: expected a JSON object")
            return False
        return self.save_config(raw)

    def close(self) -> None:
        """Release the store. Safe to call more than once."""
        self._closed = True

    def _validate(self, raw: Dict[str, Any]) -> PlayerConfig:
        defaults = PlayerConfig.defaults(self._config)
        ranges = self._config.validation
        return PlayerConfig(
            gravity_multiplier=validate_number(
                raw.get("gravity_multiplier"), ranges.gravity,
                defaults.gravity_multiplier, "gravity_multiplier"
            ),
            jump_multiplier=validate_number(
                raw.get("jump_multiplier"), ranges.jump,
                defaults.jump_multiplier, "jump_multiplier"
            ),
            game_speed_multiplier=validate_number(
                raw.get("game_speed_multiplier"), ranges.speed,
                defaults.game_speed_multiplier, "game_speed_multiplier"
            ),
            starting_level=validate_number(
                raw.get("starting_level"), ranges.starting_level,
                defaults.starting_level, "starting_level", int
            ),
            level_threshold=validate_number(
                raw.get("level_threshold"), ranges.level_threshold,
                defaults.level_threshold, "level_threshold", int
            ),
            high_score=validate_number(
                raw.get("high_score"), (0, float(2 ** 53 - 1)), 0, "high_score", int
            ),
            rotation_angle=validate_number(
                raw.get("rotation_angle"), ranges.rotation,
                defaults.rotation_angle, "rotation_angle"
            ),
            flip_horizontal=validate_bool(raw.get("flip_horizontal"), defaults.flip_horizontal),
            use_custom_sprite=validate_bool(raw.get("use_custom_sprite"), defaults.use_custom_sprite),
            custom_sprite_path=validate_sprite_path(raw.get("custom_sprite_path")),
        )


class MemoryConfigStore(ConfigStore):
    """In-process store. Values do not survive a restart."""

    def __init__(
        self,
        initial: Optional[Dict[str, Any]] = None,
        config: Optional[GameConfig] = None
    ):
        super().__init__(config)
        self._data: Dict[str, Any] = dict(initial or {})

    def _read_all(self) -> Dict[str, Any]:
        return dict(self._data)

    def _write_all(self, data: Dict[str, Any]) -> bool:
        self._data = dict(data)
        return True


class JsonConfigStore(ConfigStore):
    """
    Store backed by a JSON file.

    If the file cannot be read or written the store switches to an
    in-memory dict for the rest of its life and logs a warning.
    """

    def __init__(self, path: Union[str, Path], config: Optional[GameConfig] = None):
        super().__init__(config)
        self._path = Path(path)
        self._memory: Optional[Dict[str, Any]] = None
        self._cache = self._load_file()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def persistent(self) -> bool:
        """False once the store has degraded to memory."""
        return self._memory is None

    def _load_file(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            self._degrade(f"cannot read {self._path}: {e}")
            return {}
        except ValueError as e:
            logger.warning(f"Corrupt config file {self._path}, using defaults: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Config file {self._path} does not hold an object, using defaults")
            return {}
        return data

    def _degrade(self, reason: str) -> None:
        if self._memory is None:
            logger.warning(f"Config storage unavailable ({reason}), using in-memory storage")
            self._memory = {}

    def _read_all(self) -> Dict[str, Any]:
        if self._memory is not None:
            return dict(self._memory)
        return dict(self._cache)

    def _write_all(self, data: Dict[str, Any]) -> bool:
        if self._memory is None:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with open(self._path, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                self._cache = dict(data)
                return True
            except OSError as e:
                self._degrade(f"cannot write {self._path}: {e}")
        self._memory = dict(data)
        return True
