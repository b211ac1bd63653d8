# -*- coding: utf-8 -*-
"""
Game move utilities for the Kalah simulator, providing the board layout and functions for determining legal
moves.

The board is a flat array of ``2 * (num_slots + 1)`` stone counts in canonical order: player 0 slots, player 0
store, player 1 slots, player 1 store. A move is labelled by the index of the slot it empties.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from numpy import flatnonzero

if TYPE_CHECKING:
    from .gameboard import GameState


def store_index(num_slots: int, player: int) -> int:
    """
    Index of a player's store on the flat board.

    Parameters
    ----------
    num_slots : int
        Number of play slots per side.
    player : int
        Player id (0 or 1).

    Returns
    -------
    int
        Position of the store in the board array.
    """
    return player * (num_slots + 1) + num_slots


def slot_indices(num_slots: int, player: int) -> range:
    """
    Indices of a player's play slots on the flat board, in sowing order.

    Parameters
    ----------
    num_slots : int
        Number of play slots per side.
    player : int
        Player id (0 or 1).

    Returns
    -------
    range
        Positions of the player's slots.
    """
    first = player * (num_slots + 1)
    return range(first, first + num_slots)


def opposite_slot(num_slots: int, index: int) -> int:
    """Index of the slot facing ``index`` across the board."""
    return 2 * num_slots - index


def legal_actions(state: GameState) -> list[int]:
    """
    Determine legal actions for the current game state.

    Parameters
    ----------
    state : GameState
        The current game state.

    Returns
    -------
    list[int]
        Board indices of the non-empty slots of the player to move, in ascending order.

    Notes
    -----
    The order is stable for a given state, which lets the search tell expanded moves apart from untried ones.
    """
    slots = slot_indices(state.num_slots, state.current_player)
    return [int(index) + slots.start for index in flatnonzero(state.board[slots.start : slots.stop])]
