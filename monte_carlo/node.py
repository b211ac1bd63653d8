# -*- coding: utf-8 -*-
"""
Monte Carlo Tree Search node for adversarial, two-player decision-making.

Each node stores one position, its terminal classification, the search statistics collected through it and the
three pruning flags maintained by backpropagation:

- ``explored``: the subtree holds no further information.
- ``is_enemy_win``: a position where the opponent moves and can force a win.
- ``tabu``: a position where the agent moves that leads toward an enemy win.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from mancala.core.gameboard import GameState, next_state
from mancala.core.gamemove import legal_actions
from mancala.core.winstate import WinState

from .context import SearchContext
from .outcome import evaluate


@dataclass(kw_only=True, eq=False)
class Node:
    """
    A node in the search tree, representing the position reached by one move from its parent.

    Attributes
    ----------
    state : GameState
        The position after the move.
    outcome : WinState
        Classification of ``state``, computed once at creation.
    is_opponent_move : bool
        True if the player to move in ``state`` is not the searching agent.
    action : int, optional
        The move that produced this node from its parent. None for a root.
    parent : Node, optional
        The parent node. None for a root.
    children : list[Node]
        Child nodes in creation order.
    legal_moves : list[int]
        Legal moves of ``state``, empty once the game is over.
    visits : int
        Number of finished simulations back-propagated through this node.
    wins : int
        Number of those simulations won by the agent. Reset to zero when the node is pruned.
    explored : bool
        True when the node is terminal, or fully expanded with every child explored.
    is_enemy_win : bool
        True when the opponent moves here and can force a win.
    tabu : bool
        True when the agent moves here and the line should be avoided.
    """

    state: GameState
    outcome: WinState
    is_opponent_move: bool
    action: int | None = None
    parent: Node | None = None
    children: list[Node] = field(default_factory=list)
    legal_moves: list[int] = field(default_factory=list)
    visits: int = 0
    wins: int = 0
    explored: bool = False
    is_enemy_win: bool = False
    tabu: bool = False

    def __post_init__(self):
        """Initialize legal moves if the game goes on."""
        if not self.outcome.finished:
            self.legal_moves = legal_actions(self.state)

    @classmethod
    def root(cls, state: GameState, context: SearchContext) -> Node:
        """
        Create a parentless node for ``state``.

        Parameters
        ----------
        state : GameState
            The position to search from.
        context : SearchContext
            The current search parameters.

        Returns
        -------
        Node
            A fresh root.
        """
        return cls(
            state=state,
            outcome=evaluate(state, context.points_to_win),
            is_opponent_move=state.current_player != context.player,
        )

    @property
    def terminal(self) -> bool:
        """True when the game is over in this position."""
        return self.outcome.finished

    def fully_expanded(self) -> bool:
        """Check if all legal moves have a child."""
        return len(self.children) >= len(self.legal_moves)

    def expandable(self) -> bool:
        """Check if a legal move has no child yet."""
        return not self.fully_expanded()

    def untried_actions(self) -> list[int]:
        """Legal moves without a child, in legal order."""
        tried = {child.action for child in self.children}
        return [action for action in self.legal_moves if action not in tried]

    def add_child(self, action: int, context: SearchContext) -> Node:
        """
        Add the child reached by playing ``action``.

        Parameters
        ----------
        action : int
            An untried legal move.
        context : SearchContext
            The current search parameters.

        Returns
        -------
        Node
            The newly created child.

        Raises
        ------
        ValueError
            If the node is fully expanded or ``action`` is not an untried legal move.
        """
        if not self.expandable():
            raise ValueError('All actions have been tried. Node should be fully expanded.')
        if action not in self.untried_actions():
            raise ValueError(f'Action {action} is not an untried legal move.')

        child_state, _ = next_state(self.state, action)
        child = Node(
            state=child_state,
            outcome=evaluate(child_state, context.points_to_win),
            is_opponent_move=child_state.current_player != context.player,
            action=action,
            parent=self,
        )
        self.children.append(child)
        return child

    def update(self, won: bool) -> None:
        """
        Update node statistics after a finished simulation.

        Parameters
        ----------
        won : bool
            Whether the agent won the simulated game.
        """
        self.visits += 1
        if won:
            self.wins += 1

    def all_children_explored(self) -> bool:
        """Check if every child is explored."""
        return all(child.explored for child in self.children)

    def all_moves_explored(self) -> bool:
        """Check if the node is fully expanded and every child is explored."""
        return self.fully_expanded() and self.all_children_explored()

    def any_child_enemy_win(self) -> bool:
        """Check if some child lets the opponent force a win."""
        return any(child.is_enemy_win for child in self.children)

    def all_children_tabu(self) -> bool:
        """Check if the node is fully expanded and every one of its children is tabu."""
        return bool(self.children) and self.fully_expanded() and all(child.tabu for child in self.children)

    def lost_by(self, player: int) -> bool:
        """Check if the game is over here with another player winning."""
        return self.outcome.player is not None and self.outcome.player != player

    def describe_children(self) -> str:
        """
        Summarize the statistics of every child, one line per move.

        Returns
        -------
        str
            Lines of the form ``Slot <action> (<exploration state>) Wins/Visits: <wins>/<visits> = <rate>``.
        """
        lines = ['']
        for child in self.children:
            status = '    (fully explored)' if child.explored else '(not fully explored)'
            flags = ''.join([' [enemy win]' if child.is_enemy_win else '', ' [tabu]' if child.tabu else ''])
            rate = child.wins / child.visits if child.visits else 0.0
            lines.append(f'Slot {child.action} {status} Wins/Visits: {child.wins}/{child.visits} = {rate:.3f}{flags}')
        return '\n'.join(lines)
