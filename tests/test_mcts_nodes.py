"""
Tests for the MCTS node structure.

Focuses on node creation, parent-child relationships, expansion bookkeeping and the predicates used by
backpropagation.
"""

from math import sqrt
from unittest import TestCase, main

import numpy as np

from mancala.core.gameboard import GameState, new_game
from monte_carlo.context import SearchContext, TimeBudget
from monte_carlo.node import Node


def make_state(board, player=0, stones_per_slot=4):
    return GameState(board=np.array(board), current_player=player, stones_per_slot=stones_per_slot)


def make_context(state, player=None):
    context = SearchContext.from_state(state, TimeBudget(duration=60.0, margin=0.0), sqrt(2))
    if player is None:
        return context
    return SearchContext(
        player=player,
        num_slots=context.num_slots,
        points_to_win=context.points_to_win,
        budget=context.budget,
        exploration=context.exploration,
    )


class TestNodeCreation(TestCase):
    """Test root creation and legal move discovery."""

    def setUp(self):
        self.state = new_game()
        self.context = make_context(self.state)

    def test_root_initialization(self):
        """A root knows its legal moves and starts without statistics."""
        root = Node.root(self.state, self.context)

        self.assertIsNone(root.parent)
        self.assertIsNone(root.action)
        self.assertEqual(root.legal_moves, [0, 1, 2, 3, 4, 5])
        self.assertEqual((root.visits, root.wins), (0, 0))
        self.assertFalse(root.is_opponent_move)
        self.assertFalse(root.terminal)
        self.assertFalse(any([root.explored, root.is_enemy_win, root.tabu]))

    def test_root_for_opponent(self):
        """A root where the other player moves is an opponent node."""
        root = Node.root(self.state, make_context(self.state, player=1))

        self.assertTrue(root.is_opponent_move)

    def test_terminal_node_has_no_moves(self):
        """A finished position has nothing to expand."""
        state = make_state([1, 1, 0, 0, 0, 0, 25, 1, 1, 0, 0, 0, 0, 20])
        node = Node.root(state, make_context(state))

        # ##>: The majority rule ends the game although slots hold stones.
        self.assertTrue(node.terminal)
        self.assertEqual(node.legal_moves, [])
        self.assertTrue(node.fully_expanded())
        self.assertFalse(node.expandable())


class TestAddChild(TestCase):
    """Test child creation."""

    def setUp(self):
        self.state = new_game()
        self.context = make_context(self.state)
        self.root = Node.root(self.state, self.context)

    def test_child_links(self):
        """A child points back to its parent and records its move."""
        child = self.root.add_child(0, self.context)

        self.assertIs(child.parent, self.root)
        self.assertIn(child, self.root.children)
        self.assertEqual(child.action, 0)
        self.assertEqual(child.state.current_player, 1)

    def test_turn_passes_to_opponent(self):
        """A plain move gives an opponent node."""
        child = self.root.add_child(0, self.context)

        self.assertTrue(child.is_opponent_move)
        self.assertEqual(child.legal_moves, [7, 8, 9, 10, 11, 12])

    def test_extra_turn_keeps_agent(self):
        """A move ending in the store gives another agent node."""
        child = self.root.add_child(2, self.context)

        self.assertFalse(child.is_opponent_move)
        self.assertEqual(child.state.current_player, 0)

    def test_untried_actions_follow_legal_order(self):
        """Expanded moves are removed from the untried list."""
        self.root.add_child(3, self.context)
        self.root.add_child(0, self.context)

        self.assertEqual(self.root.untried_actions(), [1, 2, 4, 5])
        self.assertEqual([child.action for child in self.root.children], [3, 0])

    def test_add_child_twice_raises(self):
        """A move labels at most one child."""
        self.root.add_child(1, self.context)

        with self.assertRaises(ValueError):
            self.root.add_child(1, self.context)

    def test_add_illegal_child_raises(self):
        """Only legal moves can be expanded."""
        with self.assertRaises(ValueError):
            self.root.add_child(8, self.context)

    def test_add_child_raises_when_fully_expanded(self):
        """Cannot add child to fully expanded node."""
        for action in list(self.root.legal_moves):
            self.root.add_child(action, self.context)

        self.assertTrue(self.root.fully_expanded())
        with self.assertRaises(ValueError):
            self.root.add_child(0, self.context)

    def test_parent_state_untouched(self):
        """Expanding never modifies the parent's position."""
        before = self.root.state.board.copy()
        self.root.add_child(4, self.context)

        np.testing.assert_array_equal(self.root.state.board, before)


class TestNodePredicates(TestCase):
    """Test the helpers used by backpropagation."""

    def setUp(self):
        self.state = new_game(num_slots=2, stones_per_slot=1)
        self.context = make_context(self.state)
        self.root = Node.root(self.state, self.context)

    def test_update(self):
        """Visits always grow, wins only on a won simulation."""
        self.root.update(won=True)
        self.root.update(won=False)

        self.assertEqual((self.root.visits, self.root.wins), (2, 1))

    def test_all_moves_explored_requires_full_expansion(self):
        """Explored children of a partially expanded node are not enough."""
        child = self.root.add_child(0, self.context)
        child.explored = True
        self.assertFalse(self.root.all_moves_explored())

        other = self.root.add_child(1, self.context)
        self.assertFalse(self.root.all_moves_explored())

        other.explored = True
        self.assertTrue(self.root.all_moves_explored())

    def test_all_children_tabu_needs_children(self):
        """A node without children is never tabu by its children."""
        self.assertFalse(self.root.all_children_tabu())

        for action in list(self.root.legal_moves):
            self.root.add_child(action, self.context).tabu = True
        self.assertTrue(self.root.all_children_tabu())

    def test_any_child_enemy_win(self):
        child = self.root.add_child(0, self.context)
        self.assertFalse(self.root.any_child_enemy_win())

        child.is_enemy_win = True
        self.assertTrue(self.root.any_child_enemy_win())

    def test_describe_children(self):
        """The summary lists every child's statistics."""
        child = self.root.add_child(0, self.context)
        child.visits, child.wins = 4, 3

        summary = self.root.describe_children()
        self.assertIn('Slot 0 (not fully explored) Wins/Visits: 3/4 = 0.750', summary)


if __name__ == '__main__':
    main()
