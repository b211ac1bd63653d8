"""
Tests for the Monte Carlo agent.

Covers the shortcuts taken before searching, the choice of a forced win, the reuse of the previous tree and
complete games against a random opponent.
"""

from math import sqrt
from unittest import TestCase, main, mock

import numpy as np
from numpy.random import default_rng

from mancala.core.gameboard import GameState, new_game
from mancala.core.gamemove import legal_actions
from mancala.envs import Mancala
from monte_carlo import MonteCarloAgent, SearchConfig, fast_config
from monte_carlo.context import SearchContext, TimeBudget
from monte_carlo.node import Node


def make_state(board, player=0, stones_per_slot=4):
    return GameState(board=np.array(board), current_player=player, stones_per_slot=stones_per_slot)


class TestShortcuts(TestCase):
    """Test the answers given without running a search."""

    def setUp(self):
        self.agent = MonteCarloAgent(fast_config())

    def test_single_legal_move(self):
        """The only legal move is played at once."""
        state = make_state([0, 0, 0, 0, 0, 1, 10, 4, 4, 4, 4, 4, 4, 13])

        with mock.patch('monte_carlo.actor.monte_carlo_search') as search:
            with self.assertLogs('monte_carlo.actor', level='INFO'):
                self.assertEqual(self.agent.choose_move(1, state), 5)
        search.assert_not_called()

    def test_finished_position(self):
        """A position already won by majority answers the first legal move."""
        state = make_state([1, 1, 0, 0, 0, 0, 25, 1, 1, 0, 0, 0, 0, 20])

        with mock.patch('monte_carlo.actor.monte_carlo_search') as search:
            self.assertEqual(self.agent.choose_move(1, state), 0)
        search.assert_not_called()
        self.assertIsNone(self.agent._last_winner)

    def test_no_legal_move(self):
        state = make_state([0, 0, 0, 0, 0, 0, 24, 4, 4, 4, 4, 4, 4, 0])

        with self.assertRaises(ValueError):
            self.agent.choose_move(1, state)


class TestChooseMove(TestCase):
    """Test moves chosen by the search."""

    def test_returns_legal_move(self):
        agent = MonteCarloAgent(fast_config())
        state = new_game()

        self.assertIn(agent.choose_move(1, state), legal_actions(state))
        self.assertIsNotNone(agent._last_winner)
        self.assertIsNone(agent._last_winner.parent)

    def test_plays_forced_win(self):
        """Slot 5 ends in the store with more than half of the stones."""
        agent = MonteCarloAgent()
        state = make_state([3, 0, 0, 0, 0, 1, 24, 4, 4, 0, 4, 4, 4, 0])

        self.assertEqual(agent.choose_move(5, state), 5)

    def test_second_player(self):
        """The agent plays for whoever moves."""
        agent = MonteCarloAgent(fast_config())
        state = new_game(first_player=1)

        self.assertIn(agent.choose_move(1, state), range(7, 13))

    def test_exhausted_budget_still_answers(self):
        """Without time to search, a child of the root is still returned."""
        agent = MonteCarloAgent(SearchConfig(safety_margin=5.0))
        state = new_game()

        with self.assertLogs('monte_carlo.actor', level='WARNING'):
            self.assertIn(agent.choose_move(1, state), legal_actions(state))


class TestWarmStart(TestCase):
    """Test the reuse of the previous turn's tree."""

    def setUp(self):
        self.agent = MonteCarloAgent(fast_config())
        state = new_game()
        self.context = SearchContext.from_state(state, TimeBudget(duration=60.0, margin=0.0), sqrt(2))
        root = Node.root(state, self.context)
        self.kept = root.add_child(0, self.context)
        self.reply = self.kept.add_child(7, self.context)
        self.kept.parent = None

    def test_reuses_matching_node(self):
        """The matching node becomes the detached root."""
        self.agent._last_winner, self.agent._last_player = self.kept, 0

        root = self.agent._warm_start(self.reply.state, self.context)
        self.assertIs(root, self.reply)
        self.assertIsNone(root.parent)

    def test_fresh_root_when_player_changes(self):
        """A tree built for another player is discarded."""
        self.agent._last_winner, self.agent._last_player = self.kept, 1

        root = self.agent._warm_start(self.reply.state, self.context)
        self.assertIsNot(root, self.reply)
        self.assertEqual(root.visits, 0)

    def test_fresh_root_without_reuse(self):
        agent = MonteCarloAgent(SearchConfig(reuse_tree=False))
        agent._last_winner, agent._last_player = self.kept, 0

        self.assertIsNot(agent._warm_start(self.reply.state, self.context), self.reply)

    def test_reset(self):
        self.agent._last_winner, self.agent._last_player = self.kept, 0
        self.agent.reset()

        self.assertIsNone(self.agent._last_winner)
        self.assertIsNone(self.agent._last_player)


class TestCompleteGame(TestCase):
    """Play a whole game against a random opponent."""

    def test_game_against_random_player(self):
        rng = default_rng(3)
        agent = MonteCarloAgent(SearchConfig(safety_margin=0.8))
        env = Mancala(num_slots=4, stones_per_slot=3)
        env.reset()

        done = False
        while not done:
            if env.state.current_player == 0:
                action = agent.choose_move(1, env.state)
                self.assertIn(action, env.legal_actions)
            else:
                action = int(rng.choice(env.legal_actions))
            _, _, done = env.step(action)

        self.assertTrue(env.winner.finished)
        self.assertEqual(int(env.state.board.sum()), 24)


if __name__ == '__main__':
    main()
