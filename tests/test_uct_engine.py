"""Tests for the game-agnostic UCT engine, driven with Hearts states."""

import math
import random
from functools import partial

import numpy as np

from heartsai.games.hearts.adapter import HeartsGame, determinize
from heartsai.games.hearts.cards import CARD_INDEX, Card, Rank, Suit
from heartsai.games.hearts.game import deal, is_terminal, legal_actions, make_state, play_card
from heartsai.games.hearts.mcts_agent import make_config
from heartsai.games.hearts.rollout import GreedyRolloutPolicy
from heartsai.mcts import (
    MCTSConfig,
    SearchTree,
    _uct,
    _Node,
    best_action_index,
    determinized_search,
    mcts_choose,
    merge_scores,
    rollout,
    run_uct,
)

GAME = HeartsGame()
POLICY = GreedyRolloutPolicy()
CONFIG = MCTSConfig(iterations=200, samples=4, max_depth=53, max_rollout_steps=52)


def _late_state(seed=0, plays=36):
    rng = random.Random(seed)
    st = deal(seed)
    for _ in range(plays):
        st = play_card(st, rng.choice(legal_actions(st)))
    return st


def _walk(tree, idx=0):
    yield idx
    for child in tree.nodes[idx].children:
        yield from _walk(tree, child)


class TestUCTScore:
    def test_unvisited_child_is_infinite(self):
        assert _uct(_Node(state=None), 10, 1.41) == math.inf

    def test_formula(self):
        child = _Node(state=None, visits=4, value=8.0)
        expected = 2.0 + 1.41 * math.sqrt(math.log(16) / 4)
        assert math.isclose(_uct(child, 16, 1.41), expected)


class TestAccounting:
    def test_root_visits_equal_iterations(self):
        st = _late_state()
        tree = run_uct(st, GAME, POLICY, st.to_act, 150, CONFIG, random.Random(0))
        assert tree.root.visits == 150

    def test_child_never_exceeds_parent(self):
        st = _late_state(1)
        tree = run_uct(st, GAME, POLICY, st.to_act, 300, CONFIG, random.Random(1))
        for idx in _walk(tree):
            node = tree.nodes[idx]
            children = tree.child_nodes(idx)
            assert all(ch.visits <= node.visits for ch in children)
            assert sum(ch.visits for ch in children) <= node.visits
            for ch in children:
                assert tree.nodes[ch.parent] is node

    def test_root_children_cover_iterations(self):
        st = _late_state(2)
        tree = run_uct(st, GAME, POLICY, st.to_act, 120, CONFIG, random.Random(2))
        assert sum(ch.visits for ch in tree.child_nodes(0)) == 120

    def test_n_backprops_give_n_visits(self):
        st = _late_state(3)
        tree = SearchTree(st, GAME)
        rng = random.Random(3)
        child = tree.expand(0, rng)
        grandchild = tree.expand(child, rng)
        for _ in range(7):
            tree.backpropagate(grandchild, 2.0)
        for idx in (grandchild, child, 0):
            assert tree.nodes[idx].visits == 7
            assert tree.nodes[idx].value == 14.0


class TestPhases:
    def test_select_stops_at_node_with_untried_moves(self):
        tree = SearchTree(_late_state(4), GAME)
        assert tree.select(CONFIG.c, CONFIG.max_depth) == 0

    def test_expand_adds_exactly_one_child(self):
        st = _late_state(5)
        tree = SearchTree(st, GAME)
        n_moves = len(tree.root.untried)
        idx = tree.expand(0, random.Random(0))
        assert len(tree.nodes) == 2
        assert tree.root.children == [idx]
        assert len(tree.root.untried) == n_moves - 1
        child = tree.nodes[idx]
        assert child.state == play_card(st, child.action)

    def test_expand_without_untried_moves_is_a_no_op(self):
        terminal = make_state([[], [], [], []], to_act=0)
        tree = SearchTree(terminal, GAME)
        assert tree.expand(0, random.Random(0)) == 0
        assert len(tree.nodes) == 1

    def test_siblings_do_not_share_state(self):
        st = _late_state(6)
        tree = SearchTree(st, GAME)
        rng = random.Random(0)
        for _ in range(len(tree.root.untried)):
            tree.expand(0, rng)
        states = [ch.state for ch in tree.child_nodes(0)]
        assert len(set(states)) == len(states)
        assert tree.root.state == st

    def test_depth_cap_stops_selection(self):
        st = _late_state(7)
        tree = run_uct(st, GAME, POLICY, st.to_act, 200, CONFIG, random.Random(7))
        assert tree.select(CONFIG.c, 0) == 0


class TestRollout:
    def test_reaches_terminal(self):
        st = deal(0)
        value = rollout(st, GAME, POLICY, 0, random.Random(0), max_steps=52)
        assert -26 <= value <= 78

    def test_step_cap_returns_current_reward(self):
        st = deal(0)
        assert rollout(st, GAME, POLICY, 0, random.Random(0), max_steps=0) == 0.0

    def test_terminal_root_accumulates_reward(self):
        terminal = make_state([[], [], [], []], to_act=0)
        tree = run_uct(terminal, GAME, POLICY, 0, 5, CONFIG, random.Random(0))
        assert tree.root.visits == 5
        assert tree.root.children == []
        assert tree.root.value == 0.0


class TestDeterminizedSearch:
    def _sampler(self, st):
        seat = st.to_act
        return partial(
            determinize, seat, st.hands[seat], st.played, st.trick,
            hearts_broken=st.hearts_broken, hand_sizes=[len(h) for h in st.hands],
        )

    def test_returns_a_legal_move(self):
        st = _late_state(8)
        res = determinized_search(self._sampler(st), GAME, POLICY, st.to_act, CONFIG, random.Random(0))
        assert res is not None
        assert res.action in legal_actions(st)
        assert res.iterations == CONFIG.samples * CONFIG.iterations_per_sample
        assert res.seen.max() <= CONFIG.samples

    def test_same_seed_same_result(self):
        st = _late_state(9)
        a = determinized_search(self._sampler(st), GAME, POLICY, st.to_act, CONFIG, random.Random(5))
        b = determinized_search(self._sampler(st), GAME, POLICY, st.to_act, CONFIG, random.Random(5))
        assert a.action == b.action
        np.testing.assert_array_equal(a.scores, b.scores)

    def test_process_pool_matches_sequential(self):
        st = _late_state(10)
        pooled_config = MCTSConfig(
            iterations=CONFIG.iterations, samples=CONFIG.samples,
            max_depth=CONFIG.max_depth, max_rollout_steps=CONFIG.max_rollout_steps,
            num_workers=2,
        )
        seq = determinized_search(self._sampler(st), GAME, POLICY, st.to_act, CONFIG, random.Random(6))
        par = determinized_search(self._sampler(st), GAME, POLICY, st.to_act, pooled_config, random.Random(6))
        assert seq.action == par.action
        np.testing.assert_allclose(seq.scores, par.scores)
        np.testing.assert_array_equal(seq.seen, par.seen)

    def test_merge_is_order_independent(self):
        a = (np.array([1.0, 2.0]), np.array([1, 0]))
        b = (np.array([0.5, -1.0]), np.array([1, 1]))
        ab, ba = merge_scores(a, b), merge_scores(b, a)
        np.testing.assert_array_equal(ab[0], ba[0])
        np.testing.assert_array_equal(ab[1], ba[1])

    def test_mcts_choose_single_move(self):
        st = deal(0)
        assert mcts_choose(st, GAME, POLICY, st.to_act, CONFIG, random.Random(0)) == legal_actions(st)[0]

    def test_mcts_choose_on_full_state(self):
        st = _late_state(11)
        card = mcts_choose(st, GAME, POLICY, st.to_act, CONFIG, random.Random(0))
        assert card in legal_actions(st)
        assert not is_terminal(st)


class TestBestAction:
    def test_tie_goes_to_lowest_index(self):
        scores = np.array([0.0, 3.0, 1.0, 3.0])
        seen = np.array([1, 1, 1, 1])
        assert best_action_index(scores, seen) == 1

    def test_tie_between_cards_picks_lower_card_index(self):
        low, high = CARD_INDEX[Card(Suit.SPADES, Rank.KING)], CARD_INDEX[Card(Suit.HEARTS, Rank.TWO)]
        scores = np.zeros(52)
        seen = np.zeros(52, dtype=np.int64)
        scores[[low, high]] = 5.0
        seen[[low, high]] = 2
        assert best_action_index(scores, seen) == low

    def test_unseen_slot_never_wins(self):
        scores = np.array([0.0, -7.5, 0.0])
        seen = np.array([0, 3, 0])
        assert best_action_index(scores, seen) == 1


class TestConfig:
    def test_defaults_match_hearts_constants(self):
        assert MCTSConfig() == make_config()

    def test_iterations_per_sample(self):
        assert MCTSConfig(iterations=1500, samples=30).iterations_per_sample == 50
        assert MCTSConfig(iterations=10, samples=30).iterations_per_sample == 1
