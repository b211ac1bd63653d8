# -*- coding: utf-8 -*-
"""
Outcome of a Kalah position as reported by the rules engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Status(str, Enum):
    """
    Classification of a position.

    NOBODY: The game is still running.
    SOMEONE: The game is over and ``WinState.player`` won.
    DRAW: The game is over and both stores hold the same number of stones.
    """

    NOBODY = 'nobody'
    SOMEONE = 'someone'
    DRAW = 'draw'


@dataclass(frozen=True)
class WinState:
    """
    Terminal classification of a game state.

    Attributes
    ----------
    status : Status
        Whether the game is running, won or drawn.
    player : int, optional
        The winner's id when ``status`` is ``Status.SOMEONE``, otherwise None.
    """

    status: Status
    player: int | None = None

    @classmethod
    def ongoing(cls) -> WinState:
        """Position where the game goes on."""
        return cls(Status.NOBODY)

    @classmethod
    def won_by(cls, player: int) -> WinState:
        """Position won by ``player``."""
        return cls(Status.SOMEONE, player)

    @classmethod
    def draw(cls) -> WinState:
        """Finished position without a winner."""
        return cls(Status.DRAW)

    @property
    def finished(self) -> bool:
        """True when the game is over, won or drawn."""
        return self.status is not Status.NOBODY
