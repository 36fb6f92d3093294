"""
Tests for world entities and timer-driven spawning.
"""

import pytest

from flappyroo.roo_core.config_loader import load_config
from flappyroo.roo_core.dimensions import Dimensions
from flappyroo.roo_core.entities import EntityKind, EntityWorld
from flappyroo.roo_core.scheduler import TimerQueue
from flappyroo.roo_core.spawner import SpawnContext, SpawnScheduler


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def dims(config):
    return Dimensions.from_screen(800, 600, config)


@pytest.fixture
def world(config):
    return EntityWorld(config)


class SpawnHarness:
    """Spawner wired to a mutable context and play flag."""

    def __init__(self, config, dims, world, seed=42):
        self.timers = TimerQueue()
        self.world = world
        self.playing = True
        self.level = 1
        self.spawner = SpawnScheduler(
            world=world,
            timers=self.timers,
            context=lambda: SpawnContext(dims, self.level, 1, 2.4, self.timers.now),
            is_playing=lambda: self.playing,
            config=config,
            seed=seed,
        )


@pytest.fixture
def harness(config, dims, world):
    return SpawnHarness(config, dims, world)


class TestEntityWorld:
    """Test entity movement and culling."""

    def test_spawn_assigns_unique_ids(self, world):
        a = world.spawn(EntityKind.OBSTACLE, 100, 100, 36, 60, 2.4)
        b = world.spawn(EntityKind.CLOUD, 100, 100, 36, 36, 0.5)

        assert a.uid != b.uid
        assert world.count() == 2
        assert world.count(EntityKind.OBSTACLE) == 1

    def test_moves_left(self, world):
        obstacle = world.spawn(EntityKind.OBSTACLE, 100, 100, 36, 60, 2.4)

        world.update(2.0, 0)

        assert obstacle.x == pytest.approx(95.2)

    def test_culls_off_screen(self, world):
        """Obstacles go once x < -width * margin."""
        gone = world.spawn(EntityKind.OBSTACLE, -100, 100, 36, 60, 0)
        kept = world.spawn(EntityKind.OBSTACLE, -50, 100, 36, 60, 0)

        removed = world.update(1.0, 0)

        assert removed == 1
        assert world.obstacles == [kept]
        assert gone not in world.obstacles

    def test_collectible_expires(self, world):
        item = world.spawn(
            EntityKind.COLLECTIBLE, 400, 200, 24, 24, 0,
            points=20, lifetime_ms=15000, spawn_time_ms=0
        )

        world.update(1.0, 15000)
        assert item in world.collectibles

        world.update(1.0, 15001)
        assert item not in world.collectibles

    def test_collected_items_are_frozen(self, world):
        """Collected items wait for their removal timer."""
        item = world.spawn(
            EntityKind.COLLECTIBLE, -1000, 200, 24, 24, 5,
            points=20, lifetime_ms=10, spawn_time_ms=0
        )
        assert item.collect() == 20
        assert item.collect() == 0

        world.update(1.0, 99999)

        assert item in world.collectibles
        assert item.x == -1000

    def test_only_collectibles_award_points(self, world):
        obstacle = world.spawn(EntityKind.OBSTACLE, 100, 100, 36, 60, 0, points=20)

        assert obstacle.collect() == 0
        assert not obstacle.collected

    def test_remove(self, world):
        item = world.spawn(EntityKind.COLLECTIBLE, 100, 100, 24, 24, 0)

        assert world.remove(item)
        assert not world.remove(item)

    def test_clear_one_kind(self, world):
        world.spawn(EntityKind.OBSTACLE, 100, 100, 36, 60, 0)
        world.spawn(EntityKind.CLOUD, 100, 100, 36, 36, 0)

        world.clear(EntityKind.CLOUD)

        assert world.count(EntityKind.CLOUD) == 0
        assert world.count(EntityKind.OBSTACLE) == 1


class TestObstacleSpawning:
    """Test obstacle placement and timers."""

    def test_placement_bounds(self, harness, config):
        for _ in range(200):
            obstacle = harness.spawner.create_obstacle()

            assert obstacle.x == 800
            assert 95 <= obstacle.y <= 300
            assert 60 <= obstacle.height <= 90
            assert obstacle.width == pytest.approx(36)
            assert obstacle.speed == pytest.approx(2.4)
            assert obstacle.level == 1

    def test_band_grows_with_level(self, harness):
        harness.level = 3
        ys = [harness.spawner.create_obstacle().y for _ in range(300)]

        assert max(ys) <= 600 * (0.5 + 2 * 0.05)
        assert max(ys) > 300

    def test_timer_spawns_at_interval(self, harness):
        harness.spawner.start_obstacles(2000)

        harness.timers.advance(1999)
        assert harness.world.count(EntityKind.OBSTACLE) == 0

        for now in (2000, 4000, 6000):
            harness.timers.advance(now)
        assert harness.world.count(EntityKind.OBSTACLE) == 3

    def test_stale_timer_spawns_nothing(self, harness):
        """A timer firing while not playing leaves the world untouched."""
        harness.spawner.start_obstacles(2000)
        harness.spawner.start_clouds()
        harness.playing = False

        harness.timers.advance(20000)

        assert harness.world.count() == 0

    def test_restart_requires_running_timer(self, harness):
        assert not harness.spawner.restart_obstacles(1800)
        assert harness.spawner.obstacle_interval is None

        harness.spawner.start_obstacles(2000)
        assert harness.spawner.restart_obstacles(1800)
        assert harness.spawner.obstacle_interval == 1800

    def test_stop_all(self, harness):
        harness.spawner.start_obstacles(2000)
        harness.spawner.start_clouds()

        harness.spawner.stop_all()
        harness.spawner.stop_all()
        harness.timers.advance(20000)

        assert not harness.spawner.obstacles_running
        assert not harness.spawner.clouds_running
        assert harness.world.count() == 0

    def test_seed_reproducible(self, config, dims):
        a = SpawnHarness(config, dims, EntityWorld(config), seed=7)
        b = SpawnHarness(config, dims, EntityWorld(config), seed=7)

        ys_a = [a.spawner.create_obstacle().y for _ in range(20)]
        ys_b = [b.spawner.create_obstacle().y for _ in range(20)]

        assert ys_a == ys_b


class TestCloudSpawning:
    """Test sky population."""

    def test_initial_clouds(self, harness, config):
        assert harness.spawner.create_initial_clouds() == config.clouds.initial_count
        assert harness.world.count(EntityKind.CLOUD) == config.clouds.initial_count

    def test_cloud_placement(self, harness):
        cloud = harness.spawner.create_cloud()

        assert 800 <= cloud.x <= 1200
        assert 60 <= cloud.y <= 240
        assert 30 <= cloud.width <= 48
        assert cloud.width == cloud.height

    def test_timer_adds_clouds(self, harness, config):
        harness.spawner.create_initial_clouds()
        harness.spawner.start_clouds()

        harness.timers.advance(config.clouds.spawn_interval_ms)

        assert harness.world.count(EntityKind.CLOUD) == config.clouds.initial_count + 1

    def test_cloud_cap(self, harness, config):
        harness.spawner.start_clouds()

        for step in range(1, 51):
            harness.timers.advance(config.clouds.spawn_interval_ms * step)

        assert harness.world.count(EntityKind.CLOUD) == config.clouds.max_count


class TestCollectibleSpawning:
    """Test safe collectible placement."""

    def test_placement_without_obstacles(self, harness):
        item = harness.spawner.try_create_collectible()

        assert item is not None
        assert 800 <= item.x <= 1200
        assert 90 + 24 + 20 <= item.y <= 600 - 30 - 24 - 20
        assert item.width == pytest.approx(24)
        assert item.speed == pytest.approx(2.4 * 0.7)
        assert item.points == 20
        assert not item.collected

    def test_position_safety(self, harness, world):
        world.spawn(EntityKind.OBSTACLE, 100, 100, 20, 20, 0)

        assert not harness.spawner.is_position_safe(110, 200)
        assert harness.spawner.is_position_safe(110, 260)
        assert harness.spawner.is_position_safe(110, 300)

    def test_gives_up_after_max_attempts(self, harness, config, monkeypatch):
        """Every candidate rejected: nothing spawns."""
        calls = []

        def never_safe(x, y):
            calls.append((x, y))
            return False

        monkeypatch.setattr(harness.spawner, "is_position_safe", never_safe)

        assert harness.spawner.try_create_collectible() is None
        assert len(calls) == config.collectibles.max_attempts
        assert harness.world.count(EntityKind.COLLECTIBLE) == 0

    def test_placed_away_from_obstacles(self, harness, world, config):
        for _ in range(50):
            world.spawn(EntityKind.OBSTACLE, 900, 300, 36, 60, 0)
            item = harness.spawner.try_create_collectible()
            if item is None:
                continue
            for obstacle in world.obstacles:
                cx, cy = obstacle.center
                distance = ((item.x - cx) ** 2 + (item.y - cy) ** 2) ** 0.5
                assert distance >= config.collectibles.min_distance_from_obstacles
