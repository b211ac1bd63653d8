# -*- coding: utf-8 -*-
"""
This module provides the Kalah rules engine: the immutable game state, legal moves, sowing with captures and extra
turns, and the native end of game check.
"""

from .gameboard import GameState, check_winner, is_done, new_game, next_state, sow
from .gamemove import legal_actions, opposite_slot, slot_indices, store_index
from .winstate import Status, WinState

__all__ = [
    "GameState",
    "Status",
    "WinState",
    "check_winner",
    "is_done",
    "legal_actions",
    "new_game",
    "next_state",
    "opposite_slot",
    "slot_indices",
    "sow",
    "store_index",
]
