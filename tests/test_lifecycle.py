"""
Tests for the lifecycle state machine and event bus.
"""

import logging

import pytest

from flappyroo.roo_core.events import EventBus, GameEvent, GameEventType
from flappyroo.roo_core.state_machine import GameState, GameStateMachine


@pytest.fixture
def machine():
    return GameStateMachine()


@pytest.fixture
def bus():
    return EventBus(history_limit=5)


class TestStateMachine:
    """Test transition rules."""

    def test_starts_in_start(self, machine):
        assert machine.state == GameState.START
        assert not machine.is_playing

    @pytest.mark.parametrize("path", [
        [GameState.PLAYING, GameState.PAUSED, GameState.PLAYING, GameState.GAME_OVER, GameState.PLAYING],
        [GameState.PLAYING, GameState.GAME_OVER],
    ])
    def test_valid_paths(self, machine, path):
        for state in path:
            assert machine.transition(state)
        assert machine.state == path[-1]

    @pytest.mark.parametrize("start,target", [
        (GameState.START, GameState.PAUSED),
        (GameState.START, GameState.GAME_OVER),
        (GameState.PAUSED, GameState.GAME_OVER),
        (GameState.GAME_OVER, GameState.PAUSED),
        (GameState.PLAYING, GameState.START),
    ])
    def test_invalid_transitions(self, start, target, caplog):
        machine = GameStateMachine(start)

        with caplog.at_level(logging.WARNING):
            assert not machine.transition(target)

        assert machine.state == start
        assert "Invalid transition" in caplog.text

    def test_listeners_notified(self, machine):
        seen = []
        machine.add_listener(lambda old, new: seen.append((old, new)))

        machine.transition(GameState.PLAYING)
        machine.transition(GameState.PAUSED)

        assert seen == [
            (GameState.START, GameState.PLAYING),
            (GameState.PLAYING, GameState.PAUSED),
        ]

    def test_listener_error_does_not_block(self, machine, caplog):
        seen = []

        def broken(old, new):
            raise RuntimeError("listener")

        machine.add_listener(broken)
        machine.add_listener(lambda old, new: seen.append(new))

        with caplog.at_level(logging.ERROR):
            assert machine.transition(GameState.PLAYING)

        assert seen == [GameState.PLAYING]
        assert "Error in state listener" in caplog.text

    def test_remove_listener(self, machine):
        seen = []

        def listener(old, new):
            seen.append(new)

        machine.add_listener(listener)
        machine.remove_listener(listener)
        machine.remove_listener(listener)
        machine.transition(GameState.PLAYING)

        assert seen == []

    def test_force_skips_listeners(self, machine):
        seen = []
        machine.add_listener(lambda old, new: seen.append(new))
        machine.transition(GameState.PLAYING)
        machine.transition(GameState.PAUSED)

        machine.force(GameState.GAME_OVER)

        assert machine.state == GameState.GAME_OVER
        assert seen == [GameState.PLAYING, GameState.PAUSED]

    def test_reset(self, machine):
        machine.transition(GameState.PLAYING)
        machine.reset()

        assert machine.state == GameState.START


class TestEventBus:
    """Test pub/sub delivery and history."""

    def test_subscribe_and_emit(self, bus):
        received = []
        bus.subscribe(GameEventType.LEVEL_UP, received.append)

        bus.emit(GameEvent(GameEventType.LEVEL_UP, {"level": 2}))
        bus.emit(GameEvent(GameEventType.PAUSED))

        assert [e.data for e in received] == [{"level": 2}]

    def test_subscribe_all(self, bus):
        received = []
        bus.subscribe_all(received.append)

        bus.emit(GameEvent(GameEventType.PAUSED))
        bus.emit(GameEvent(GameEventType.RESUMED))

        assert [e.type for e in received] == [GameEventType.PAUSED, GameEventType.RESUMED]

    def test_unsubscribe(self, bus):
        received = []
        unsubscribe = bus.subscribe(GameEventType.GAME_OVER, received.append)
        unsubscribe_all = bus.subscribe_all(received.append)

        unsubscribe()
        unsubscribe()
        unsubscribe_all()
        bus.emit(GameEvent(GameEventType.GAME_OVER))

        assert received == []

    def test_handler_error_is_logged(self, bus, caplog):
        received = []

        def broken(event):
            raise ValueError("handler")

        bus.subscribe(GameEventType.ITEM_COLLECTED, broken)
        bus.subscribe(GameEventType.ITEM_COLLECTED, received.append)

        with caplog.at_level(logging.ERROR):
            bus.emit(GameEvent(GameEventType.ITEM_COLLECTED, {"points": 20}))

        assert len(received) == 1
        assert "ITEM_COLLECTED" in caplog.text

    def test_history_is_bounded(self, bus):
        for level in range(10):
            bus.emit(GameEvent(GameEventType.LEVEL_UP, {"level": level}))

        history = bus.get_history(limit=100)
        assert len(history) == 5
        assert history[-1].data["level"] == 9

    def test_history_filter(self, bus):
        bus.emit(GameEvent(GameEventType.GAME_STARTED))
        bus.emit(GameEvent(GameEventType.LEVEL_UP, {"level": 2}))
        bus.emit(GameEvent(GameEventType.LEVEL_UP, {"level": 3}))

        history = bus.get_history(GameEventType.LEVEL_UP, limit=1)

        assert [e.data["level"] for e in history] == [3]

    def test_clear_history(self, bus):
        bus.emit(GameEvent(GameEventType.PAUSED))
        bus.clear_history()

        assert bus.get_history() == []
