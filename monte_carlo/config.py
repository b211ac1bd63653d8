# -*- coding: utf-8 -*-
"""
Configuration for the time-bounded Monte Carlo Tree Search.

The search budget is split into ordered phases. Each phase names the tree policy, the exploration constant and the
expansion policy used while the elapsed time is below its fraction of the budget. Later phases are cheaper and more
exploitative.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from math import sqrt

from .context import TimeBudget

DEFAULT_EXPLORATION = sqrt(2.0)


class SelectionPolicy(str, Enum):
    """
    Tree policy used to descend from the root to a leaf.

    UCT: Highest UCT score, skipping explored children.
    THRESHOLD: Like UCT, but stops at the first node with at most ``ceil(num_slots / 2)`` children.
    ENEMY_PERSPECTIVE: Lowest score when the children are opponent moves, highest otherwise; skips explored and
        tabu children.
    AVOID_TABU: Like UCT, also skipping tabu children.
    """

    UCT = 'uct'
    THRESHOLD = 'threshold'
    ENEMY_PERSPECTIVE = 'enemy_perspective'
    AVOID_TABU = 'avoid_tabu'


class ExpansionPolicy(str, Enum):
    """
    How many children a selected leaf receives.

    EXHAUSTIVE: One child per untried legal move.
    K_RANDOM: Up to ``count`` children for untried moves picked at random.
    """

    EXHAUSTIVE = 'exhaustive'
    K_RANDOM = 'k_random'


@dataclass(frozen=True)
class Phase:
    """
    Search settings applied until a fraction of the budget has elapsed.

    Attributes
    ----------
    until : float
        Fraction of the usable budget, in (0, 1], at which this phase ends.
    selection : SelectionPolicy
        Tree policy.
    exploration : float, optional
        UCT exploration constant. None means ``DEFAULT_EXPLORATION``.
    expansion : ExpansionPolicy
        Expansion policy.
    count : int
        Children created per iteration by ``ExpansionPolicy.K_RANDOM``.
    """

    until: float
    selection: SelectionPolicy = SelectionPolicy.UCT
    exploration: float | None = None
    expansion: ExpansionPolicy = ExpansionPolicy.EXHAUSTIVE
    count: int = 1


def _default_phases() -> tuple[Phase, ...]:
    return (
        # ##>: Wide and exploratory while the clock is young.
        Phase(until=0.5, selection=SelectionPolicy.UCT, exploration=10.0, expansion=ExpansionPolicy.EXHAUSTIVE),
        # ##>: Model the opponent as adversarial.
        Phase(
            until=0.75,
            selection=SelectionPolicy.ENEMY_PERSPECTIVE,
            exploration=5.0,
            expansion=ExpansionPolicy.K_RANDOM,
            count=3,
        ),
        Phase(
            until=0.95,
            selection=SelectionPolicy.ENEMY_PERSPECTIVE,
            exploration=DEFAULT_EXPLORATION,
            expansion=ExpansionPolicy.K_RANDOM,
            count=3,
        ),
        # ##>: Pure exploitation near the deadline.
        Phase(until=1.0, selection=SelectionPolicy.UCT, exploration=0.0, expansion=ExpansionPolicy.K_RANDOM, count=1),
    )


@dataclass
class SearchConfig:
    """
    Configuration of the search agent.

    Attributes
    ----------
    phases : tuple[Phase, ...]
        Ordered phase table, strictly increasing ``until`` values.
    safety_margin : float
        Seconds subtracted from the budget to leave room for extracting the result.
    exploration : float
        Exploration constant used when a phase or the final move choice leaves it unset.
    reuse_tree : bool
        Whether the previous winner's subtree seeds the next search.
    """

    phases: tuple[Phase, ...] = field(default_factory=_default_phases)
    safety_margin: float = 0.6  # Seconds
    exploration: float = DEFAULT_EXPLORATION
    reuse_tree: bool = True

    def __post_init__(self):
        """Validate the phase table."""
        if not self.phases:
            raise ValueError('At least one search phase is required.')
        previous = 0.0
        for phase in self.phases:
            if not previous < phase.until <= 1.0:
                raise ValueError(f'Phase fractions must increase within (0, 1], got {phase.until} after {previous}.')
            if phase.count < 1:
                raise ValueError(f'Phase expansion count must be positive, got {phase.count}.')
            previous = phase.until
        if self.safety_margin < 0:
            raise ValueError(f'Safety margin must be non-negative, got {self.safety_margin}.')

    def phase(self, budget: TimeBudget) -> Phase:
        """
        Get the phase matching the elapsed time.

        Parameters
        ----------
        budget : TimeBudget
            The running budget.

        Returns
        -------
        Phase
            The first phase whose fraction is still in time, or the last one once every fraction has passed.
        """
        for phase in self.phases:
            if budget.in_time(phase.until):
                return phase
        return self.phases[-1]


def default_config() -> SearchConfig:
    """
    Create the default search configuration.

    Returns
    -------
    SearchConfig
        Four phases at 50%, 75%, 95% and 100% of the budget and a 0.6 second margin.
    """
    return SearchConfig()


def fast_config() -> SearchConfig:
    """
    Create a configuration for short budgets.

    Keeps the phase table and shrinks the margin, for tests and quick games.

    Returns
    -------
    SearchConfig
        Reduced configuration.
    """
    return SearchConfig(safety_margin=0.05)
