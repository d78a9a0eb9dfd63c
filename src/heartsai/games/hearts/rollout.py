"""Play-out policies for Hearts search.

:class:`GreedyRolloutPolicy` plays every seat with a cheap card-shedding
heuristic instead of uniform random moves, which keeps the search
converging within small iteration budgets.  :class:`RandomRolloutPolicy`
is the textbook uniform play-out.
"""

from __future__ import annotations

import random
from typing import Sequence

from heartsai.games.hearts.cards import Card, Suit
from heartsai.games.hearts.game import RoundState


def _rank(card: Card) -> int:
    return card.rank


class GreedyRolloutPolicy:
    """Deterministic greedy play: duck when following, shed points when void.

    Leading
      lowest zero-point card, else the lowest card.
    Following suit
      highest card still below the current best of the led suit; else the
      lowest card that wins; else the lowest card of the suit.
    Void
      Q♠, then the highest heart, then the highest card.
    """

    def choose(self, state: RoundState, legal: Sequence[Card], rng: random.Random) -> Card:
        if not legal:
            raise ValueError("No legal moves for rollout")

        if not state.trick:
            return self._lead(legal)

        led_suit = state.trick[0][1].suit
        following = [c for c in legal if c.suit == led_suit]
        if following:
            best = max(c.rank for _, c in state.trick if c.suit == led_suit)
            return self._follow(following, best)
        return self._slough(legal)

    @staticmethod
    def _lead(legal: Sequence[Card]) -> Card:
        safe = [c for c in legal if c.points() == 0]
        return min(safe or legal, key=_rank)

    @staticmethod
    def _follow(following: Sequence[Card], best: int) -> Card:
        ducks = [c for c in following if c.rank < best]
        if ducks:
            return max(ducks, key=_rank)
        winners = [c for c in following if c.rank > best]
        if winners:
            return min(winners, key=_rank)
        return min(following, key=_rank)

    @staticmethod
    def _slough(legal: Sequence[Card]) -> Card:
        for c in legal:
            if c.is_queen_of_spades:
                return c
        hearts = [c for c in legal if c.suit == Suit.HEARTS]
        if hearts:
            return max(hearts, key=_rank)
        return max(legal, key=_rank)


class RandomRolloutPolicy:
    """Uniformly random legal move."""

    def choose(self, state: RoundState, legal: Sequence[Card], rng: random.Random) -> Card:
        if not legal:
            raise ValueError("No legal moves for rollout")
        return rng.choice(list(legal))
