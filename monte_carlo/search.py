# -*- coding: utf-8 -*-
"""
Monte Carlo Tree Search (MCTS) implementation for Kalah.

This module provides a collection of functions that implement the core components of the Monte Carlo Tree Search
algorithm, tailored to a two-player game with extra turns. It includes functions for node scoring and selection,
expansion, random rollouts, backpropagation with adversarial pruning, and matching a live position against the
tree kept from the previous turn.

The search runs against a wall-clock budget. The phase table of the configuration decides, per iteration, which
tree policy and which expansion policy apply.
"""

import logging
from math import ceil, log, sqrt

from numpy import array_equal
from numpy.random import PCG64DXSM, default_rng

from mancala.core.gameboard import GameState, next_state
from mancala.core.gamemove import legal_actions
from mancala.core.winstate import Status, WinState

from .config import ExpansionPolicy, SearchConfig, SelectionPolicy
from .context import SearchContext
from .node import Node
from .outcome import evaluate

GENERATOR = default_rng(PCG64DXSM())

logger = logging.getLogger(__name__)


def ucb_score(node: Node, exploration: float) -> float:
    """
    Compute the UCT score of a node.

    Parameters
    ----------
    node : Node
        A node with a parent.
    exploration : float
        The exploration constant. Zero gives the pure win rate.

    Returns
    -------
    float
        The UCT score.

    Raises
    ------
    ValueError
        If the node has no parent.

    Notes
    -----
    Uses the formula: wins / visits + exploration * sqrt(log(parent_visits) / visits), where an unvisited node
    counts as visited once and an unvisited parent contributes no exploration bonus.
    """
    if node.parent is None:
        raise ValueError('UCT is only defined for nodes with a parent.')

    visits = node.visits if node.visits > 0 else 1
    log_visits = log(node.parent.visits) if node.parent.visits > 0 else 0.0
    return node.wins / visits + exploration * sqrt(log_visits / visits)


def best_child(
    node: Node, exploration: float, worst: bool = False, avoid_explored: bool = False, avoid_tabu: bool = False
) -> Node:
    """
    Pick the child with the best (or worst) UCT score, breaking ties at random.

    Parameters
    ----------
    node : Node
        The node whose children are scored.
    exploration : float
        The exploration constant passed to ``ucb_score``.
    worst : bool, optional
        Pick the lowest score instead of the highest.
    avoid_explored : bool, optional
        Skip explored children.
    avoid_tabu : bool, optional
        Skip tabu children.

    Returns
    -------
    Node
        The chosen child.

    Raises
    ------
    ValueError
        If the node has no children.

    Notes
    -----
    - When explored children are allowed, an explored child that won every simulation is returned at once.
    - When the filters leave no candidate, tabu children are allowed first, then explored ones, and finally the
      first child is returned.
    """
    if not node.children:
        raise ValueError('Cannot pick a child of a node without children.')

    candidates: list[Node] = []
    best_score = None
    for child in node.children:
        # ##>: Fully explored and winning all games is a guaranteed win.
        if not avoid_explored and child.explored and ucb_score(child, 0.0) >= 1.0:
            return child

        if (avoid_explored and child.explored) or (avoid_tabu and child.tabu):
            continue

        score = ucb_score(child, exploration)
        if best_score is None or (score < best_score if worst else score > best_score):
            candidates = [child]
            best_score = score
        elif score == best_score:
            candidates.append(child)

    if not candidates:
        if avoid_tabu:
            return best_child(node, exploration, worst=worst, avoid_explored=avoid_explored)
        if avoid_explored:
            return best_child(node, exploration, worst=worst)
        return node.children[0]
    return candidates[int(GENERATOR.integers(len(candidates)))]


def has_winning_child(node: Node) -> bool:
    """Check if some child is explored and won every simulation."""
    return any(child.explored and ucb_score(child, 0.0) >= 1.0 for child in node.children)


def describe_scores(node: Node, exploration: float) -> str:
    """
    Summarize the UCT score of every child, one line per move.

    Parameters
    ----------
    node : Node
        The node whose children are scored.
    exploration : float
        The exploration constant passed to ``ucb_score``.

    Returns
    -------
    str
        Lines of the form ``Slot <action>: <score>``.
    """
    lines = ['']
    for child in node.children:
        lines.append(f'Slot {child.action}: {ucb_score(child, exploration):.3f}')
    return '\n'.join(lines)


def select(root: Node, policy: SelectionPolicy, exploration: float | None, context: SearchContext) -> Node:
    """
    Descend from the root to the node to expand.

    Parameters
    ----------
    root : Node
        The root of the search tree.
    policy : SelectionPolicy
        The tree policy.
    exploration : float, optional
        The exploration constant. None uses the context's default.
    context : SearchContext
        The current search parameters.

    Returns
    -------
    Node
        A node without children, or for ``SelectionPolicy.THRESHOLD`` an expandable node with few children.
    """
    exploration = context.exploration if exploration is None else exploration
    current = root

    if policy is SelectionPolicy.THRESHOLD:
        # ##>: Broaden nodes with few children before going deeper.
        threshold = ceil(context.num_slots / 2)
        while current.children and (len(current.children) > threshold or not current.expandable()):
            current = best_child(current, exploration, avoid_explored=True)
    elif policy is SelectionPolicy.ENEMY_PERSPECTIVE:
        # ##>: The opponent picks what is worst for the agent.
        while current.children:
            worst = current.children[0].is_opponent_move
            current = best_child(current, exploration, worst=worst, avoid_explored=True, avoid_tabu=True)
    else:
        avoid_tabu = policy is SelectionPolicy.AVOID_TABU
        while current.children:
            current = best_child(current, exploration, avoid_explored=True, avoid_tabu=avoid_tabu)
    return current


def expand(node: Node, policy: ExpansionPolicy, count: int, context: SearchContext) -> list[Node]:
    """
    Create children for untried moves of a node.

    Parameters
    ----------
    node : Node
        The selected node.
    policy : ExpansionPolicy
        ``EXHAUSTIVE`` adds every untried move, ``K_RANDOM`` adds up to ``count`` random ones.
    count : int
        Maximum number of children for ``ExpansionPolicy.K_RANDOM``.
    context : SearchContext
        The current search parameters.

    Returns
    -------
    list[Node]
        The new children, ready for simulation. Empty if the game is over or the node is fully expanded.
    """
    if node.terminal or not node.expandable():
        return []

    if policy is ExpansionPolicy.K_RANDOM:
        created = []
        for _ in range(count):
            if not node.expandable():
                break
            action = int(GENERATOR.choice(node.untried_actions()))
            created.append(node.add_child(action, context))
        return created

    return [node.add_child(action, context) for action in node.untried_actions()]


def simulate(state: GameState, context: SearchContext) -> WinState:
    """
    Play random moves from a position until the game ends.

    Parameters
    ----------
    state : GameState
        The starting position. Game states are immutable, so the tree is never touched.
    context : SearchContext
        The current search parameters.

    Returns
    -------
    WinState
        The classification of the last position. Ongoing if the budget ran out first.

    Notes
    -----
    A move granting an extra turn leaves the same player to choose again.
    """
    outcome = evaluate(state, context.points_to_win)
    while not outcome.finished and context.budget.in_time():
        actions = legal_actions(state)
        if not actions:
            break
        state, _ = next_state(state, int(GENERATOR.choice(actions)))
        outcome = evaluate(state, context.points_to_win)
    return outcome


def backpropagate(node: Node, outcome: WinState, context: SearchContext) -> None:
    """
    Back-propagate a simulation result and update the pruning flags.

    Parameters
    ----------
    node : Node
        The simulated node.
    outcome : WinState
        Result of the simulation started at ``node``.
    context : SearchContext
        The current search parameters.

    Notes
    -----
    - Only simulations won by a player carry a signal. Unfinished and drawn simulations are ignored.
    - On every node up to the root: visits and wins are updated, then the explored, enemy win and tabu flags.
    - A node that becomes an enemy win or tabu has its wins reset, which keeps selection away from it while
      preserving its visit count.
    """
    if outcome.status is not Status.SOMEONE:
        return

    if node.terminal:
        node.explored = True

    won = outcome.player == context.player
    current: Node | None = node
    while current is not None:
        current.update(won)

        if current.all_moves_explored():
            current.explored = True

        if (
            not current.is_enemy_win
            and current.is_opponent_move
            and (current.lost_by(context.player) or current.any_child_enemy_win())
        ):
            current.is_enemy_win = True
            current.wins = 0

        if (
            not current.tabu
            and not current.is_opponent_move
            and (current.any_child_enemy_win() or current.all_children_tabu())
        ):
            current.tabu = True
            current.wins = 0

        current = current.parent


def same_position(state: GameState, other: GameState) -> bool:
    """Check if two states hold the same stones everywhere with the same player to move."""
    return state.current_player == other.current_player and array_equal(state.board, other.board)


def find_matching(state: GameState, node: Node) -> Node | None:
    """
    Find the node of a kept subtree that holds the live position.

    Parameters
    ----------
    state : GameState
        The live position.
    node : Node
        The subtree kept from the previous turn.

    Returns
    -------
    Node, optional
        The node itself or one of its descendants reached through opponent moves only, None if nothing matches.
    """
    if same_position(state, node.state):
        return node

    for child in node.children:
        if same_position(state, child.state):
            return child
        if child.is_opponent_move:
            match = find_matching(state, child)
            if match is not None:
                return match
    return None


def monte_carlo_search(
    state: GameState, context: SearchContext, config: SearchConfig, root: Node | None = None
) -> Node:
    """
    Perform Monte Carlo Tree Search on the given game state until the budget runs out.

    Parameters
    ----------
    state : GameState
        The position to move from.
    context : SearchContext
        The search parameters, including the budget.
    config : SearchConfig
        The phase table.
    root : Node, optional
        A root kept from a previous search for ``state``. A fresh root is created otherwise.

    Returns
    -------
    Node
        The root of the search tree.

    Notes
    -----
    The search stops when the budget is spent, the root is explored or the root has a proven winning child.

    Each iteration consists of four steps:
    1. Selection: Descend with the current phase's tree policy.
    2. Expansion: Add children with the current phase's expansion policy.
    3. Simulation: Play each new child out at random.
    4. Backpropagation: Update statistics and flags up to the root.
    """
    if root is None:
        root = Node.root(state, context)

    iterations = 0
    while context.budget.in_time() and not root.explored and not has_winning_child(root):
        phase = config.phase(context.budget)

        # ##>: Select a node and expand.
        leaf = select(root, phase.selection, phase.exploration, context)
        for candidate in expand(leaf, phase.expansion, phase.count, context):
            # ##>: Simulate and back-propagate.
            backpropagate(candidate, simulate(candidate.state, context), context)
        iterations += 1

    logger.debug(
        'Search stopped after %d iterations in %.3fs (root visits=%d, explored=%s)',
        iterations,
        context.budget.elapsed,
        root.visits,
        root.explored,
    )
    return root
