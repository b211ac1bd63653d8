# -*- coding: utf-8 -*-
"""
Per-search parameters: who is searching, the board dimensions and the wall-clock budget.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from mancala.core.gameboard import GameState


@dataclass(frozen=True)
class TimeBudget:
    """
    Wall-clock budget of one search, read from a monotonic clock.

    Attributes
    ----------
    duration : float
        Nominal budget in seconds.
    margin : float
        Seconds kept aside so that the result is extracted before the deadline.
    clock : Callable[[], float]
        Monotonic clock, in seconds.
    start : float
        Clock reading when the budget was created.
    """

    duration: float
    margin: float = 0.6
    clock: Callable[[], float] = time.monotonic
    start: float | None = None

    def __post_init__(self):
        """Start the clock."""
        if self.start is None:
            object.__setattr__(self, 'start', self.clock())

    @property
    def usable(self) -> float:
        """Seconds available to the search once the margin is removed."""
        return self.duration - self.margin

    @property
    def elapsed(self) -> float:
        """Seconds since the budget started."""
        return self.clock() - self.start

    def in_time(self, fraction: float = 1.0) -> bool:
        """
        Check whether the elapsed time is below a fraction of the usable budget.

        Parameters
        ----------
        fraction : float, optional
            Fraction of the usable budget (default is the whole of it).

        Returns
        -------
        bool
            True while ``elapsed < fraction * (duration - margin)``.
        """
        return self.elapsed < fraction * self.usable


@dataclass(frozen=True)
class SearchContext:
    """
    Immutable parameters of one search, built once per move and passed to every component.

    Attributes
    ----------
    player : int
        Id of the searching agent.
    num_slots : int
        Number of play slots per side.
    points_to_win : int
        A store holding more stones than this has won (half of the stones in play).
    budget : TimeBudget
        The clock of this search.
    exploration : float
        Exploration constant used when a caller passes None.
    """

    player: int
    num_slots: int
    points_to_win: int
    budget: TimeBudget
    exploration: float

    @classmethod
    def from_state(cls, state: GameState, budget: TimeBudget, exploration: float) -> SearchContext:
        """
        Build the context of a search started from ``state``.

        Parameters
        ----------
        state : GameState
            The position to move from; its player to move is the searching agent.
        budget : TimeBudget
            The clock of this search.
        exploration : float
            Default exploration constant.

        Returns
        -------
        SearchContext
            The search parameters.
        """
        return cls(
            player=state.current_player,
            num_slots=state.num_slots,
            points_to_win=state.stones_per_slot * state.num_slots,
            budget=budget,
            exploration=exploration,
        )
