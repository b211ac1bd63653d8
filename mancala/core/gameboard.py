# -*- coding: utf-8 -*-
"""
Core functionality for simulating Kalah, including the immutable game state, sowing, captures and the native end of
game check.
"""

from __future__ import annotations

from dataclasses import dataclass

from numpy import int64, ndarray, zeros

from .gamemove import legal_actions, opposite_slot, slot_indices, store_index
from .winstate import WinState


@dataclass(frozen=True, eq=False)
class GameState:
    """
    Immutable snapshot of a Kalah position.

    Attributes
    ----------
    board : ndarray
        Stone counts in canonical order (player 0 slots, player 0 store, player 1 slots, player 1 store).
        The array is made read-only on creation.
    current_player : int
        The player to move (0 or 1).
    stones_per_slot : int
        Number of stones each slot held at the start of the game.
    """

    board: ndarray
    current_player: int
    stones_per_slot: int

    def __post_init__(self):
        """Freeze the board so that every transition has to go through a copy."""
        if len(self.board) < 4 or len(self.board) % 2:
            raise ValueError(f'Board must hold two sides of slots and stores, got {len(self.board)} positions.')
        if self.current_player not in (0, 1):
            raise ValueError(f'Player must be 0 or 1, got {self.current_player}.')
        self.board.flags.writeable = False

    @property
    def num_slots(self) -> int:
        """Number of play slots per side."""
        return len(self.board) // 2 - 1

    def stones_in_store(self, player: int) -> int:
        """Number of stones in ``player``'s store."""
        return int(self.board[store_index(self.num_slots, player)])

    def stones_on_side(self, player: int) -> int:
        """Number of stones left in ``player``'s play slots."""
        slots = slot_indices(self.num_slots, player)
        return int(self.board[slots.start : slots.stop].sum())


def new_game(num_slots: int = 6, stones_per_slot: int = 4, first_player: int = 0) -> GameState:
    """
    Build the opening position.

    Parameters
    ----------
    num_slots : int, optional
        Number of play slots per side (default is 6).
    stones_per_slot : int, optional
        Stones placed in every play slot (default is 4).
    first_player : int, optional
        The player who moves first (default is 0).

    Returns
    -------
    GameState
        The opening position, both stores empty.
    """
    if num_slots < 1 or stones_per_slot < 1:
        raise ValueError('A game needs at least one slot per side and one stone per slot.')

    board = zeros(2 * (num_slots + 1), dtype=int64)
    for player in (0, 1):
        slots = slot_indices(num_slots, player)
        board[slots.start : slots.stop] = stones_per_slot
    return GameState(board=board, current_player=first_player, stones_per_slot=stones_per_slot)


def _sweep(board: ndarray, num_slots: int) -> None:
    """Move every stone left in the play slots into the store of the side it lies on."""
    for player in (0, 1):
        slots = slot_indices(num_slots, player)
        board[store_index(num_slots, player)] += board[slots.start : slots.stop].sum()
        board[slots.start : slots.stop] = 0


def sow(board: ndarray, num_slots: int, player: int, action: int) -> int:
    """
    Sow the stones of one slot counter-clockwise, skipping the opponent's store.

    Parameters
    ----------
    board : ndarray
        A writable board. **Modified in-place.**
    num_slots : int
        Number of play slots per side.
    player : int
        The player sowing.
    action : int
        Index of the slot to empty.

    Returns
    -------
    int
        Index of the position that received the last stone.
    """
    skipped = store_index(num_slots, 1 - player)
    size = len(board)

    stones = int(board[action])
    board[action] = 0
    position = action
    while stones > 0:
        position = (position + 1) % size
        if position == skipped:
            continue
        board[position] += 1
        stones -= 1
    return position


def next_state(state: GameState, action: int) -> tuple[GameState, bool]:
    """
    Compute the next state after the player to move plays ``action``.

    Parameters
    ----------
    state : GameState
        The current game state (never modified).
    action : int
        Board index of the slot to play.

    Returns
    -------
    new_state : GameState
        The resulting position, with the player to move already updated.
    extra_turn : bool
        Whether the last stone landed in the mover's store, so the mover plays again.

    Raises
    ------
    ValueError
        If the action is not legal in ``state``.

    Notes
    -----
    - A last stone landing in an empty slot of the mover, facing a non-empty slot, captures both into the
      mover's store.
    - When either side runs out of stones, the remaining stones go to the store of the side they lie on.
    """
    if action not in legal_actions(state):
        raise ValueError(f'Action {action} is not legal for player {state.current_player}.')

    num_slots = state.num_slots
    player = state.current_player
    board = state.board.copy()

    # ##>: Sow and resolve captures.
    last = sow(board, num_slots, player, action)
    if last in slot_indices(num_slots, player) and board[last] == 1:
        facing = opposite_slot(num_slots, last)
        if board[facing] > 0:
            board[store_index(num_slots, player)] += board[facing] + 1
            board[last] = 0
            board[facing] = 0

    extra_turn = last == store_index(num_slots, player)

    # ##>: One empty side ends the game.
    sides = [slot_indices(num_slots, side) for side in (0, 1)]
    if any(board[slots.start : slots.stop].sum() == 0 for slots in sides):
        _sweep(board, num_slots)

    next_player = player if extra_turn else 1 - player
    return GameState(board=board, current_player=next_player, stones_per_slot=state.stones_per_slot), extra_turn


def is_done(state: GameState) -> bool:
    """
    Check if the game has ended under the native rules.

    Parameters
    ----------
    state : GameState
        The game state.

    Returns
    -------
    bool
        True when one side has no stones left in its play slots.
    """
    return state.stones_on_side(0) == 0 or state.stones_on_side(1) == 0


def check_winner(state: GameState) -> WinState:
    """
    Native end of game check.

    Parameters
    ----------
    state : GameState
        The game state.

    Returns
    -------
    WinState
        Ongoing while both sides hold stones, otherwise the player with the larger total (store plus stones on
        their side), or a draw.
    """
    if not is_done(state):
        return WinState.ongoing()

    totals = [state.stones_in_store(player) + state.stones_on_side(player) for player in (0, 1)]
    if totals[0] == totals[1]:
        return WinState.draw()
    return WinState.won_by(0 if totals[0] > totals[1] else 1)
