# -*- coding: utf-8 -*-
"""
Outcome evaluation shared by node creation, rollouts and the root guard.

Extends the native end of game check with a majority rule: a player whose store holds more than half of the stones
in play has won, since the opponent can no longer catch up. This shortens simulations considerably.
"""

from mancala.core.gameboard import GameState, check_winner
from mancala.core.winstate import Status, WinState


def evaluate(state: GameState, points_to_win: int | None = None) -> WinState:
    """
    Classify a position as ongoing, won or drawn.

    Parameters
    ----------
    state : GameState
        The position to classify.
    points_to_win : int, optional
        Store size that must be exceeded to win early. Defaults to ``stones_per_slot * num_slots``.

    Returns
    -------
    WinState
        The native classification if the game is over, otherwise the player holding the majority of stones, if any.
    """
    win_state = check_winner(state)
    if win_state.status is Status.NOBODY:
        if points_to_win is None:
            points_to_win = state.stones_per_slot * state.num_slots
        for player in (0, 1):
            if state.stones_in_store(player) > points_to_win:
                return WinState.won_by(player)
    return win_state
