"""Round state and mechanics for Hearts.

A :class:`RoundState` is an immutable value.  Every card play returns a
new state, so search-tree branches never observe each other's edits.
Card passing and match orchestration are handled by the caller; this
module only deals, plays and scores.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Sequence

from heartsai.games.hearts.cards import (
    Card,
    DECK_SIZE,
    HAND_SIZE,
    NUM_PLAYERS,
    Suit,
    TOTAL_POINTS,
    make_deck,
    sort_cards,
)
from heartsai.games.hearts.rules import TrickResult, legal_moves, resolve_trick


GAME_OVER_SCORE: int = 100


# ---------------------------------------------------------------------------
#  Turn order
# ---------------------------------------------------------------------------


def next_seat(seat: int) -> int:
    """Next seat in play order (0 → 1 → 2 → 3 → 0)."""
    return (seat + 1) % NUM_PLAYERS


# ---------------------------------------------------------------------------
#  Round state
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RoundState:
    """Immutable state of one Hearts round."""

    hands: tuple[tuple[Card, ...], ...]        # [4], canonical card order
    trick: tuple[tuple[int, Card], ...]        # (seat, card) of the open trick, 0..3
    to_act: int                                # seat that plays next
    hearts_broken: bool
    played: tuple[Card, ...] = ()              # cards of completed tricks, in order
    won: tuple[tuple[Card, ...], ...] = ((), (), (), ())  # [4], captured cards
    last_trick: Optional[TrickResult] = None

    @property
    def first_trick(self) -> bool:
        """True until the first trick of the round has been completed."""
        return not self.played

    @property
    def trick_cards(self) -> tuple[Card, ...]:
        return tuple(c for _, c in self.trick)

    def hand(self, seat: int) -> tuple[Card, ...]:
        return self.hands[seat]


def make_state(
    hands: Sequence[Sequence[Card]],
    *,
    to_act: int,
    trick: Sequence[tuple[int, Card]] = (),
    hearts_broken: bool = False,
    played: Sequence[Card] = (),
    won: Optional[Sequence[Sequence[Card]]] = None,
) -> RoundState:
    """Build a :class:`RoundState`, normalising hands to canonical order."""
    if len(hands) != NUM_PLAYERS:
        raise ValueError(f"Expected {NUM_PLAYERS} hands, got {len(hands)}")
    if not 0 <= to_act < NUM_PLAYERS:
        raise ValueError(f"Invalid seat: {to_act}")
    if len(trick) >= NUM_PLAYERS:
        raise ValueError("An open trick holds at most 3 cards")
    return RoundState(
        hands=tuple(sort_cards(h) for h in hands),
        trick=tuple((int(s), c) for s, c in trick),
        to_act=to_act,
        hearts_broken=hearts_broken,
        played=tuple(played),
        won=tuple(tuple(w) for w in won) if won is not None else ((),) * NUM_PLAYERS,
    )


# ---------------------------------------------------------------------------
#  Dealing
# ---------------------------------------------------------------------------


def deal(seed: int = 0) -> RoundState:
    """Shuffle and deal 13 cards to each seat.

    The holder of the 2♣ acts first.
    """
    rng = random.Random(seed)
    deck = make_deck()
    rng.shuffle(deck)

    hands = [deck[i * HAND_SIZE : (i + 1) * HAND_SIZE] for i in range(NUM_PLAYERS)]
    leader = next(i for i, h in enumerate(hands) if any(c.is_two_of_clubs for c in h))
    return make_state(hands, to_act=leader)


def seat_with_two_of_clubs(state: RoundState) -> Optional[int]:
    for seat, hand in enumerate(state.hands):
        if any(c.is_two_of_clubs for c in hand):
            return seat
    return None


# ---------------------------------------------------------------------------
#  Queries
# ---------------------------------------------------------------------------


def legal_actions(state: RoundState) -> list[Card]:
    """Legal cards for the seat to act."""
    return legal_moves(
        state.hands[state.to_act],
        state.trick_cards,
        hearts_broken=state.hearts_broken,
        first_trick=state.first_trick,
    )


def is_terminal(state: RoundState) -> bool:
    return all(not h for h in state.hands)


def all_cards(state: RoundState) -> list[Card]:
    """Every card the state accounts for: hands, open trick, completed tricks."""
    cards: list[Card] = []
    for h in state.hands:
        cards.extend(h)
    cards.extend(state.trick_cards)
    cards.extend(state.played)
    return cards


def check_conservation(state: RoundState) -> None:
    """Raise ``ValueError`` unless the state holds each card exactly once."""
    cards = all_cards(state)
    if len(cards) != DECK_SIZE or len(set(cards)) != DECK_SIZE:
        raise ValueError(
            f"State accounts for {len(cards)} cards ({len(set(cards))} distinct), "
            f"expected {DECK_SIZE}"
        )


# ---------------------------------------------------------------------------
#  Transitions
# ---------------------------------------------------------------------------


def play_card(state: RoundState, card: Card) -> RoundState:
    """Play *card* for the seat to act and return the new state.

    Completing a trick (4th card) resolves it in the same transition:
    the cards go to the winner's pile and to ``played``, the winner acts
    next, and hearts break if any resolved card was a heart.
    """
    seat = state.to_act
    hand = state.hands[seat]
    if card not in legal_actions(state):
        raise ValueError(f"Illegal play {card!r} for seat {seat} (hand {list(hand)})")

    hands = list(state.hands)
    hands[seat] = tuple(c for c in hand if c != card)
    trick = state.trick + ((seat, card),)

    if len(trick) < NUM_PLAYERS:
        return RoundState(
            hands=tuple(hands),
            trick=trick,
            to_act=next_seat(seat),
            hearts_broken=state.hearts_broken,
            played=state.played,
            won=state.won,
            last_trick=state.last_trick,
        )

    result = resolve_trick(trick)
    won = list(state.won)
    won[result.winner] = won[result.winner] + result.cards
    broken = state.hearts_broken or any(c.suit == Suit.HEARTS for c in result.cards)
    return RoundState(
        hands=tuple(hands),
        trick=(),
        to_act=result.winner,
        hearts_broken=broken,
        played=state.played + result.cards,
        won=tuple(won),
        last_trick=result,
    )


# ---------------------------------------------------------------------------
#  Scoring
# ---------------------------------------------------------------------------


def points_taken(state: RoundState, seat: int) -> int:
    return sum(c.points() for c in state.won[seat])


def round_points(state: RoundState) -> list[int]:
    """Raw penalty points captured by each seat this round."""
    return [points_taken(state, s) for s in range(NUM_PLAYERS)]


def shooter(points: Sequence[int]) -> Optional[int]:
    """Seat that took all 26 points, if any."""
    for seat, p in enumerate(points):
        if p == TOTAL_POINTS:
            return seat
    return None


def apply_round_scores(totals: Sequence[int], points: Sequence[int]) -> list[int]:
    """Add one round's points to the running totals.

    Shooting the moon: the shooter scores 0 and every other seat +26.
    """
    moon = shooter(points)
    if moon is None:
        return [t + p for t, p in zip(totals, points)]
    return [t if s == moon else t + TOTAL_POINTS for s, t in enumerate(totals)]


def is_game_over(totals: Sequence[int], limit: int = GAME_OVER_SCORE) -> bool:
    return any(t >= limit for t in totals)


def winners(totals: Sequence[int]) -> list[int]:
    """Seats with the lowest total (ties share the win)."""
    low = min(totals)
    return [s for s, t in enumerate(totals) if t == low]
