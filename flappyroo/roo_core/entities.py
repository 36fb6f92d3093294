"""
World Entities
==============

Obstacles, clouds and collectibles as one tagged entity type.

Per-kind differences (collidable, lifetime, scoring, hitbox padding,
off-screen margin) live in a behavior table built from config instead of
three near-identical classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from flappyroo.roo_core.collision import Rect, padded_hitbox
from flappyroo.roo_core.config_loader import GameConfig, get_config


class EntityKind(Enum):
    """Entity discriminator."""
    OBSTACLE = 0
    CLOUD = 1
    COLLECTIBLE = 2


@dataclass(frozen=True)
class KindBehavior:
    """Static behavior of an entity kind."""
    collidable: bool          # Ends the game on contact
    collectible: bool         # Awards points on contact
    has_lifetime: bool        # Expires after lifetime_ms
    hitbox_padding: float     # Fraction shrunk from each side
    offscreen_margin: float   # Culled once x < -width * margin


def build_behavior_table(config: Optional[GameConfig] = None) -> Dict[EntityKind, KindBehavior]:
    """Build the per-kind behavior table from config."""
    if config is None:
        config = get_config()
    return {
        EntityKind.OBSTACLE: KindBehavior(
            collidable=True,
            collectible=False,
            has_lifetime=False,
            hitbox_padding=config.collision.obstacle_padding,
            offscreen_margin=config.obstacles.offscreen_margin,
        ),
        EntityKind.CLOUD: KindBehavior(
            collidable=False,
            collectible=False,
            has_lifetime=False,
            hitbox_padding=0.0,
            offscreen_margin=config.clouds.offscreen_margin,
        ),
        EntityKind.COLLECTIBLE: KindBehavior(
            collidable=False,
            collectible=True,
            has_lifetime=True,
            hitbox_padding=config.collision.collectible_padding,
            offscreen_margin=config.collectibles.offscreen_margin,
        ),
    }


@dataclass(eq=False)
class WorldEntity:
    """
    A moving world entity.

    Position is the bottom-left corner in y-up screen coordinates. Entities
    scroll left at `speed` pixels per baseline frame.
    """
    uid: int
    kind: EntityKind
    behavior: KindBehavior
    x: float
    y: float
    width: float
    height: float
    speed: float
    level: int = 0                # Level at spawn (obstacles)
    points: int = 0               # Award on pickup (collectibles)
    lifetime_ms: float = 0.0      # Expiry after spawn (collectibles)
    spawn_time_ms: float = 0.0
    collected: bool = False

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def move(self, delta_time: float) -> None:
        """Scroll left by speed * delta_time."""
        self.x -= self.speed * delta_time

    def hitbox(self) -> Rect:
        """Collision box shrunk by the kind's padding."""
        return padded_hitbox(self.x, self.y, self.width, self.height, self.behavior.hitbox_padding)

    def is_off_screen(self) -> bool:
        return self.x < -self.width * self.behavior.offscreen_margin

    def is_expired(self, now_ms: float) -> bool:
        """True once an uncollected entity outlives its lifetime."""
        if not self.behavior.has_lifetime:
            return False
        return now_ms - self.spawn_time_ms > self.lifetime_ms

    def collect(self) -> int:
        """
        Mark a collectible as collected.

        Returns:
            Points awarded, or 0 if already collected or not collectible.
        """
        if not self.behavior.collectible or self.collected:
            return 0
        self.collected = True
        return self.points


class EntityWorld:
    """
    One mutable collection per entity kind.

    Entities are created by the spawn timers and removed by the frame loop
    (culling), by collection, or by clear() on a new game.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize entity collections.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._behaviors = build_behavior_table(config)
        self._entities: Dict[EntityKind, List[WorldEntity]] = {kind: [] for kind in EntityKind}
        self._next_uid = 0

    @property
    def obstacles(self) -> List[WorldEntity]:
        return self._entities[EntityKind.OBSTACLE]

    @property
    def clouds(self) -> List[WorldEntity]:
        return self._entities[EntityKind.CLOUD]

    @property
    def collectibles(self) -> List[WorldEntity]:
        return self._entities[EntityKind.COLLECTIBLE]

    def count(self, kind: Optional[EntityKind] = None) -> int:
        """Number of live entities, optionally for one kind."""
        if kind is not None:
            return len(self._entities[kind])
        return sum(len(entities) for entities in self._entities.values())

    def __iter__(self) -> Iterator[WorldEntity]:
        for kind in EntityKind:
            yield from self._entities[kind]

    def spawn(
        self,
        kind: EntityKind,
        x: float,
        y: float,
        width: float,
        height: float,
        speed: float,
        **fields
    ) -> WorldEntity:
        """
        Create an entity and add it to its collection.

        Args:
            kind: Entity kind.
            x: Left edge.
            y: Bottom edge.
            width: Visual width.
            height: Visual height.
            speed: Scroll speed per baseline frame.
            **fields: Kind-specific fields (level, points, lifetime_ms,
                spawn_time_ms).

        Returns:
            The new entity.
        """
        entity = WorldEntity(
            uid=self._next_uid,
            kind=kind,
            behavior=self._behaviors[kind],
            x=x,
            y=y,
            width=width,
            height=height,
            speed=speed,
            **fields
        )
        self._next_uid += 1
        self._entities[kind].append(entity)
        return entity

    def update(self, delta_time: float, now_ms: float) -> int:
        """
        Move every entity and cull those off-screen or expired.

        Collected collectibles neither move nor expire here; they are removed
        by their delayed-removal timer. Traversal is in reverse so removal
        never skips an entry.

        Args:
            delta_time: Frame delta normalized to the baseline frame.
            now_ms: Current time for lifetime checks.

        Returns:
            Number of entities removed.
        """
        removed = 0
        for kind in EntityKind:
            entities = self._entities[kind]
            for i in range(len(entities) - 1, -1, -1):
                entity = entities[i]
                if entity.collected:
                    continue
                entity.move(delta_time)
                if entity.is_off_screen() or entity.is_expired(now_ms):
                    del entities[i]
                    removed += 1
        return removed

    def remove(self, entity: WorldEntity) -> bool:
        """
        Remove an entity if it is still live.

        Returns:
            True if the entity was found and removed.
        """
        entities = self._entities[entity.kind]
        for i in range(len(entities) - 1, -1, -1):
            if entities[i] is entity:
                del entities[i]
                return True
        return False

    def clear(self, kind: Optional[EntityKind] = None) -> None:
        """Remove all entities, optionally of one kind."""
        kinds = [kind] if kind is not None else list(EntityKind)
        for k in kinds:
            self._entities[k].clear()
