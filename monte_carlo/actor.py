# -*- coding: utf-8 -*-
"""
Monte Carlo Tree Search agent for Kalah.

This module provides the agent called once per turn by a game harness. It builds the search context, reuses the
part of the previous turn's tree that is still reachable, runs the time-bounded search and keeps the chosen child's
subtree as the seed of the next turn.
"""

import logging

from mancala.core.gameboard import GameState
from mancala.core.gamemove import legal_actions

from .config import ExpansionPolicy, SearchConfig, default_config
from .context import SearchContext, TimeBudget
from .node import Node
from .search import best_child, describe_scores, expand, find_matching, monte_carlo_search

logger = logging.getLogger(__name__)


class MonteCarloAgent:
    """
    An agent that uses time-bounded Monte Carlo Tree Search to play Kalah.

    Attributes
    ----------
    config : SearchConfig
        The phase table, safety margin and default exploration constant.

    Methods
    -------
    choose_move(time_budget: int, state: GameState)
        Choose the best move for the given position within the budget.
    reset()
        Forget the tree kept from the previous turn.

    Notes
    -----
    The only state kept between calls is the subtree of the previously chosen move, held in memory.
    """

    def __init__(self, config: SearchConfig | None = None):
        """
        Initialize the Monte Carlo agent.

        Parameters
        ----------
        config : SearchConfig, optional
            The search configuration (default is ``default_config()``).
        """
        self.config = config if config is not None else default_config()
        self._last_winner: Node | None = None
        self._last_player: int | None = None

    def reset(self) -> None:
        """Forget the tree kept from the previous turn."""
        self._last_winner = None
        self._last_player = None

    def _warm_start(self, state: GameState, context: SearchContext) -> Node:
        """
        Get the root of this turn's search.

        Parameters
        ----------
        state : GameState
            The live position.
        context : SearchContext
            The search parameters.

        Returns
        -------
        Node
            The node of the kept subtree matching ``state``, detached from its parent, or a fresh root.
        """
        root = None
        if self.config.reuse_tree and self._last_winner is not None and self._last_player == context.player:
            root = find_matching(state, self._last_winner)

        if root is None:
            return Node.root(state, context)

        logger.debug('Reusing search tree: %d visits, %d children', root.visits, len(root.children))
        root.parent = None
        return root

    def choose_move(self, time_budget: int, state: GameState) -> int:
        """
        Choose the best move using Monte Carlo Tree Search.

        Parameters
        ----------
        time_budget : int
            Seconds available for this move. The configured safety margin is kept aside.
        state : GameState
            The current position. Its player to move is the agent.

        Returns
        -------
        int
            Board index of the slot to play.

        Raises
        ------
        ValueError
            If the player to move has no legal move.

        Notes
        -----
        - A single legal move is played without searching.
        - A position that is already over answers the first legal move.
        - The returned move is the root's child with the best UCT score under the default exploration constant.
        """
        budget = TimeBudget(duration=time_budget, margin=self.config.safety_margin)
        context = SearchContext.from_state(state, budget, self.config.exploration)

        actions = legal_actions(state)
        if not actions:
            raise ValueError(f'No legal move available for player {state.current_player}.')

        if len(actions) == 1:
            logger.info('Playing only available slot %d.', actions[0])
            return actions[0]

        # ##>: Load the kept subtree and find the node matching the live position.
        root = self._warm_start(state, context)
        self._last_player = context.player

        if root.terminal:
            logger.info('Game is over, playing first slot %d.', actions[0])
            self._last_winner = None
            return actions[0]

        root = monte_carlo_search(state, context, self.config, root=root)

        # ##!: Budget spent before the first expansion, answer with an unscored child.
        if not root.children:
            logger.warning('Search budget of %ss exhausted before expanding the root.', time_budget)
            expand(root, ExpansionPolicy.EXHAUSTIVE, 1, context)

        winner = best_child(root, context.exploration)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug('Root children after %.3fs:%s', budget.elapsed, root.describe_children())
            logger.debug('Root children scores:%s', describe_scores(root, context.exploration))
        logger.info(
            'Playing slot %d (wins/visits %d/%d, root visits %d).',
            winner.action,
            winner.wins,
            winner.visits,
            root.visits,
        )

        # ##>: Keep the winner's subtree for the next turn and release the rest.
        winner.parent = None
        self._last_winner = winner if self.config.reuse_tree else None
        return winner.action
