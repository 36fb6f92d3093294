"""
State machine for the game lifecycle.

States:
    START: Initial screen, waiting for the first activate
    PLAYING: Frame loop and spawn timers running
    PAUSED: Loop and timers stopped by an external overlay
    GAME_OVER: Session ended, waiting for activate to restart
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Callable, List, Tuple

logger = logging.getLogger(__name__)


class GameState(Enum):
    """Game lifecycle states."""
    START = auto()
    PLAYING = auto()
    PAUSED = auto()
    GAME_OVER = auto()


StateListener = Callable[[GameState, GameState], None]


class GameStateMachine:
    """
    Validates lifecycle transitions and notifies listeners.

    GAME_OVER -> PLAYING covers restarts; PAUSED only returns to PLAYING.
    """

    VALID_TRANSITIONS: List[Tuple[GameState, GameState]] = [
        (GameState.START, GameState.PLAYING),
        (GameState.PLAYING, GameState.PAUSED),
        (GameState.PLAYING, GameState.GAME_OVER),
        (GameState.PAUSED, GameState.PLAYING),
        (GameState.GAME_OVER, GameState.PLAYING),
    ]

    def __init__(self, initial_state: GameState = GameState.START) -> None:
        self._state = initial_state
        self._listeners: List[StateListener] = []
        self._valid_transitions = set(self.VALID_TRANSITIONS)
        logger.debug(f"GameStateMachine initialized with state: {initial_state.name}")

    @property
    def state(self) -> GameState:
        """Get current state."""
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state == GameState.PLAYING

    def can_transition(self, to_state: GameState) -> bool:
        """Check if transition to given state is valid."""
        return (self._state, to_state) in self._valid_transitions

    def transition(self, to_state: GameState) -> bool:
        """
        Attempt to transition to a new state.

        Args:
            to_state: Target state

        Returns:
            True if transition successful, False otherwise
        """
        if not self.can_transition(to_state):
            logger.warning(f"Invalid transition: {self._state.name} -> {to_state.name}")
            return False

        old_state = self._state
        self._state = to_state
        logger.info(f"State transition: {old_state.name} -> {to_state.name}")
        self._notify(old_state, to_state)
        return True

    def force(self, to_state: GameState) -> None:
        """
        Set the state without validation or listener callbacks.

        Used by the frame loop's fault handler, which must not re-enter any
        game logic that could fault again.
        """
        if self._state != to_state:
            logger.warning(f"Forced state: {self._state.name} -> {to_state.name}")
        self._state = to_state

    def add_listener(self, callback: StateListener) -> None:
        """Add a state change listener."""
        self._listeners.append(callback)

    def remove_listener(self, callback: StateListener) -> None:
        """Remove a state change listener."""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def reset(self) -> None:
        """Return to START without notifying listeners."""
        self._state = GameState.START

    def _notify(self, old_state: GameState, new_state: GameState) -> None:
        for listener in self._listeners:
            try:
                listener(old_state, new_state)
            except Exception as e:
                logger.error(f"Error in state listener: {e}")
