"""
Tests for character kinematics and physics derivation.
"""

import random

import pytest

from flappyroo.roo_core.character import BoundaryHit, CharacterController
from flappyroo.roo_core.config_loader import load_config
from flappyroo.roo_core.dimensions import Dimensions, FixedDimensionProvider
from flappyroo.roo_core.physics import Multipliers, PhysicsModel
from flappyroo.roo_core.scheduler import TimerQueue


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def dims(config):
    return Dimensions.from_screen(800, 600, config)


@pytest.fixture
def timers():
    return TimerQueue()


@pytest.fixture
def character(config, dims, timers):
    return CharacterController(dims, timers=timers, config=config)


class TestDimensions:
    """Test responsive geometry."""

    def test_from_screen(self, dims):
        assert dims.ground_height == pytest.approx(90)
        assert dims.ceiling_height == pytest.approx(30)
        assert dims.character_width == pytest.approx(72)
        assert dims.character_height == pytest.approx(60)
        assert dims.character_left == pytest.approx(120)
        assert dims.ceiling_limit == pytest.approx(510)
        assert not dims.is_portrait

    def test_rejects_empty_screen(self, config):
        with pytest.raises(ValueError):
            Dimensions.from_screen(0, 600, config)

    def test_provider_resize(self, config):
        provider = FixedDimensionProvider(800, 600, config)
        provider.resize(400, 900)

        assert provider.get_dimensions().height == 900
        assert provider.get_dimensions().is_portrait


class TestPhysicsModel:
    """Test physics derived from multipliers and screen size."""

    def test_base_physics(self, config, dims):
        model = PhysicsModel(dims, Multipliers(gravity=0.5, jump=0.5, speed=1.0), config)

        assert model.base.gravity == pytest.approx(0.18)
        assert model.base.jump_strength == pytest.approx(3.6)
        assert model.base.game_speed == pytest.approx(2.4)

    def test_speed_multiplier_does_not_compound(self, config, dims):
        """Repeated level-ups scale from base, never from current."""
        model = PhysicsModel(dims, Multipliers(), config)
        base_speed = model.base.game_speed

        model.set_speed_multiplier(1.1)
        model.set_speed_multiplier(1.2)

        assert model.current.game_speed == pytest.approx(base_speed * 1.2)
        assert model.current.gravity == pytest.approx(model.base.gravity)

    def test_recompute_keeps_level_multiplier(self, config, dims):
        model = PhysicsModel(dims, Multipliers(), config)
        model.set_speed_multiplier(1.5)

        model.recompute(dimensions=Dimensions.from_screen(1000, 600, config))

        assert model.current.game_speed == pytest.approx(1000 * 0.003 * 1.5)

    def test_reset(self, config, dims):
        model = PhysicsModel(dims, Multipliers(), config)
        model.set_speed_multiplier(2.0)
        model.reset()

        assert model.speed_multiplier == 1.0
        assert model.current == model.base


class TestApplyGravity:
    """Test vertical integration and bounds."""

    def test_reset_position(self, character, config):
        assert character.y == pytest.approx(240)
        assert character.velocity == 0
        assert character.rotation == config.character.rotation_neutral

    def test_free_fall(self, character):
        hit = character.apply_gravity(0.18, 90, 30, 600)

        assert hit == BoundaryHit.NONE
        assert character.velocity == pytest.approx(0.18)
        assert character.y == pytest.approx(240 - 0.18)

    def test_ground_hit(self, character):
        character.y = 91
        character.velocity = 5

        hit = character.apply_gravity(0.18, 90, 30, 600)

        assert hit == BoundaryHit.GROUND
        assert character.y == 90
        assert character.velocity == 0

    def test_ceiling_hit(self, character):
        character.y = 509
        character.velocity = -5

        hit = character.apply_gravity(0.18, 90, 30, 600)

        assert hit == BoundaryHit.CEILING
        assert character.y == pytest.approx(510)
        assert character.velocity == 0

    def test_fall_pose(self, character, config):
        character.velocity = config.character.fall_velocity_threshold + 1

        character.apply_gravity(0.18, 90, 30, 600)

        assert character.rotation == config.character.rotation_fall

    def test_y_always_within_bounds(self, character, dims):
        """Random gravity/jump sequences never leave the playfield."""
        rng = random.Random(3)
        for _ in range(2000):
            if rng.random() < 0.1:
                character.jump(rng.uniform(1, 30))
            hit = character.apply_gravity(rng.uniform(0.05, 3), dims.ground_height, dims.ceiling_height, dims.height)
            assert dims.ground_height <= character.y <= dims.ceiling_limit
            if hit != BoundaryHit.NONE:
                assert character.velocity == 0
                character.reset_position()


class TestJump:
    """Test jump impulse and pose reset."""

    def test_jump_sets_upward_velocity(self, character, config):
        character.jump(3.6)

        assert character.velocity == pytest.approx(-3.6)
        assert character.rotation == config.character.rotation_jump

    def test_jump_strength_sign_ignored(self, character):
        character.jump(-3.6)

        assert character.velocity == pytest.approx(-3.6)

    def test_pose_resets_after_delay(self, character, timers, config):
        character.jump(3.6)

        timers.advance(config.character.rotation_reset_ms - 1)
        assert character.rotation == config.character.rotation_jump

        timers.advance(config.character.rotation_reset_ms)
        assert character.rotation == config.character.rotation_neutral

    def test_pose_kept_while_moving_fast(self, character, timers, config):
        character.jump(3.6)
        character.velocity = config.character.fall_velocity_threshold + 3

        timers.advance(config.character.rotation_reset_ms)

        assert character.rotation == config.character.rotation_jump

    def test_pose_reset_guarded(self, config, dims, timers):
        """Pose timer does nothing once the game is no longer active."""
        active = [True]
        character = CharacterController(dims, timers=timers, config=config, is_active=lambda: active[0])
        character.jump(3.6)
        active[0] = False

        timers.advance(config.character.rotation_reset_ms)

        assert character.rotation == config.character.rotation_jump

    def test_stop_cancels_pose_timer(self, character, timers, config):
        character.jump(3.6)
        character.stop()

        assert character.velocity == 0
        assert character.rotation == config.character.rotation_neutral
        assert timers.pending == 0

    def test_hitbox_is_padded(self, character):
        box = character.hitbox()

        assert box.left == pytest.approx(120 + 72 * 0.2)
        assert box.right == pytest.approx(120 + 72 * 0.8)
        assert box.top == pytest.approx(240 + 60 * 0.2)
        assert box.bottom == pytest.approx(240 + 60 * 0.8)
