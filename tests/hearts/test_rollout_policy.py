"""Tests for the Hearts play-out policies."""

import random

import pytest

from heartsai.games.hearts.cards import Card, Rank, Suit
from heartsai.games.hearts.game import deal, is_terminal, legal_actions, make_state, play_card
from heartsai.games.hearts.rollout import GreedyRolloutPolicy, RandomRolloutPolicy
from heartsai.games.interface import PassingStrategy, RolloutPolicy

C = Suit.CLUBS
D = Suit.DIAMONDS
S = Suit.SPADES
H = Suit.HEARTS


def K(suit, rank):
    return Card(suit, Rank(rank))


def _state(trick=()):
    # Hands are irrelevant to the policy; only the open trick matters.
    return make_state([[], [], [], []], to_act=len(trick), trick=trick, played=[K(D, 14)])


RNG = random.Random(0)
GREEDY = GreedyRolloutPolicy()


class TestGreedyLead:
    def test_lowest_zero_point_card(self):
        assert GREEDY.choose(_state(), [K(C, 5), K(D, 2), K(H, 3)], RNG) == K(D, 2)

    def test_forced_point_lead_is_lowest(self):
        assert GREEDY.choose(_state(), [K(H, 9), K(S, 12), K(H, 3)], RNG) == K(H, 3)


class TestGreedyFollow:
    def test_ducks_with_highest_lower_card(self):
        trick = ((0, K(S, 10)),)
        assert GREEDY.choose(_state(trick), [K(S, 2), K(S, 9), K(S, 13)], RNG) == K(S, 9)

    def test_ducks_under_best_card_not_lead_card(self):
        trick = ((0, K(S, 5)), (1, K(S, 11)), (2, K(H, 2)))
        assert GREEDY.choose(_state(trick), [K(S, 3), K(S, 10), K(S, 12)], RNG) == K(S, 10)

    def test_forced_win_plays_lowest_winner(self):
        trick = ((0, K(S, 4)),)
        assert GREEDY.choose(_state(trick), [K(S, 13), K(S, 9)], RNG) == K(S, 9)


class TestGreedySlough:
    def test_queen_of_spades_first(self):
        trick = ((0, K(C, 8)),)
        assert GREEDY.choose(_state(trick), [K(D, 3), K(S, 12), K(H, 13), K(H, 2)], RNG) == K(S, 12)

    def test_then_highest_heart(self):
        trick = ((0, K(C, 8)),)
        assert GREEDY.choose(_state(trick), [K(D, 3), K(H, 13), K(S, 14), K(H, 2)], RNG) == K(H, 13)

    def test_then_highest_card(self):
        trick = ((0, K(C, 8)),)
        assert GREEDY.choose(_state(trick), [K(D, 3), K(S, 14), K(D, 13)], RNG) == K(S, 14)


class TestPolicies:
    @pytest.mark.parametrize("policy", [GreedyRolloutPolicy(), RandomRolloutPolicy()])
    def test_protocol(self, policy):
        assert isinstance(policy, RolloutPolicy)

    @pytest.mark.parametrize("policy", [GreedyRolloutPolicy(), RandomRolloutPolicy()])
    def test_empty_legal_raises(self, policy):
        with pytest.raises(ValueError):
            policy.choose(_state(), [], RNG)

    @pytest.mark.parametrize("policy", [GreedyRolloutPolicy(), RandomRolloutPolicy()])
    def test_plays_a_full_round_legally(self, policy):
        rng = random.Random(7)
        st = deal(7)
        while not is_terminal(st):
            legal = legal_actions(st)
            card = policy.choose(st, legal, rng)
            assert card in legal
            st = play_card(st, card)

    def test_greedy_is_deterministic(self):
        st = deal(8)
        picks = {GREEDY.choose(st, legal_actions(st), random.Random(s)) for s in range(5)}
        assert len(picks) == 1


def test_passing_strategy_protocol():
    class PassHighest:
        def select_cards_to_pass(self, hand):
            return sorted(hand, key=lambda c: c.rank)[-3:]

    assert isinstance(PassHighest(), PassingStrategy)
    assert not isinstance(GREEDY, PassingStrategy)
