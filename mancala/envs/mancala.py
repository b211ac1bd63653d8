# -*- coding: utf-8 -*-
"""Kalah game environment for search agents."""

from mancala.core.gameboard import GameState, check_winner, new_game, next_state
from mancala.core.gamemove import legal_actions
from mancala.core.winstate import WinState


class Mancala:
    """
    Kalah game environment.

    This class keeps the current position of one game and applies the players' moves to it, in the way a game
    harness drives an agent turn after turn.
    """

    # ##: Current game state.
    _current_state: GameState | None = None

    def __init__(self, num_slots: int = 6, stones_per_slot: int = 4):
        """
        Initialize the Kalah board.

        Parameters
        ----------
        num_slots : int, optional
            Number of play slots per side (default is 6).
        stones_per_slot : int, optional
            Stones placed in every slot at the start (default is 4).
        """
        self.num_slots = num_slots
        self.stones_per_slot = stones_per_slot

        self.reset()

    @property
    def state(self) -> GameState:
        """The current position."""
        return self._current_state

    @property
    def legal_actions(self) -> list[int]:
        """Slots the player to move may play."""
        return legal_actions(self._current_state)

    @property
    def winner(self) -> WinState:
        """Native classification of the current position."""
        return check_winner(self._current_state)

    @property
    def is_finished(self) -> bool:
        """
        Check if the game is finished.

        Returns
        -------
        bool
            True once one side is out of stones, False otherwise.
        """
        return self.winner.finished

    def reset(self, first_player: int = 0) -> GameState:
        """
        Start a new game.

        Parameters
        ----------
        first_player : int, optional
            The player who moves first (default is 0).

        Returns
        -------
        GameState
            The opening position.
        """
        self._current_state = new_game(
            num_slots=self.num_slots, stones_per_slot=self.stones_per_slot, first_player=first_player
        )
        return self._current_state

    def step(self, action: int) -> tuple[GameState, bool, bool]:
        """
        Play a move for the player to move.

        Parameters
        ----------
        action : int
            Board index of the slot to play.

        Returns
        -------
        tuple[GameState, bool, bool]
            A tuple containing:
            - The new position (GameState)
            - Whether the mover earned an extra turn (bool)
            - Whether the game has finished after this move (bool)
        """
        self._current_state, extra_turn = next_state(self._current_state, action)
        return self._current_state, extra_turn, self.is_finished
