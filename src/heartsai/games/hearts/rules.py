"""Trick-taking rules for 4-player Hearts.

The same ``legal_moves`` is used by the real game, by every node of the
search tree and by the rollout policies.  There is no separate
"simulation" rule set.

**Leading:**
  - First trick of the round: the 2♣ must be led if held.
  - Hearts may not be led until broken, unless the hand is all hearts.

**Following:**
  - Must follow the led suit.
  - Void on the first trick: no point cards (hearts, Q♠), unless the
    hand holds nothing but point cards.
  - Void on any later trick: any card.

**Trick winner:** highest card of the led suit.  No trump.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from heartsai.games.hearts.cards import Card, NUM_PLAYERS, Suit


# ---------------------------------------------------------------------------
#  Trick result
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TrickResult:
    """Result of a completed 4-card trick."""
    cards: tuple[Card, ...]          # cards in play order
    seats: tuple[int, ...]           # seat indices in play order
    winner: int                      # seat index who won the trick

    def points(self) -> int:
        return sum(c.points() for c in self.cards)


# ---------------------------------------------------------------------------
#  Legal moves
# ---------------------------------------------------------------------------


def legal_moves(
    hand: Sequence[Card],
    trick_cards: Sequence[Card],
    *,
    hearts_broken: bool,
    first_trick: bool,
) -> List[Card]:
    """Return the cards of *hand* that may legally be played.

    Parameters
    ----------
    hand : cards in the player's hand
    trick_cards : cards already on the table this trick, in play order
    hearts_broken : whether hearts have been broken this round
    first_trick : True until the first trick of the round is completed

    The result keeps the order of *hand* and is non-empty whenever
    *hand* is non-empty.
    """
    if not hand:
        return []

    # --- Leading ---
    if not trick_cards:
        if first_trick:
            twos = [c for c in hand if c.is_two_of_clubs]
            if twos:
                return twos
        if _can_lead_hearts(hand, hearts_broken):
            return list(hand)
        return [c for c in hand if c.suit != Suit.HEARTS]

    # --- Following ---
    led_suit = trick_cards[0].suit
    same_suit = [c for c in hand if c.suit == led_suit]
    if same_suit:
        return same_suit

    if first_trick:
        safe = [c for c in hand if c.points() == 0]
        # All-point hand: forced to play one
        return safe if safe else list(hand)
    return list(hand)


def _can_lead_hearts(hand: Sequence[Card], hearts_broken: bool) -> bool:
    return hearts_broken or all(c.suit == Suit.HEARTS for c in hand)


def is_legal(
    card: Card,
    hand: Sequence[Card],
    trick_cards: Sequence[Card],
    *,
    hearts_broken: bool,
    first_trick: bool,
) -> bool:
    return card in legal_moves(
        hand, trick_cards, hearts_broken=hearts_broken, first_trick=first_trick,
    )


# ---------------------------------------------------------------------------
#  Trick resolution
# ---------------------------------------------------------------------------


def resolve_trick(plays: Sequence[tuple[int, Card]]) -> TrickResult:
    """Determine the winner of a completed 4-card trick.

    Parameters
    ----------
    plays : sequence of ``(seat, card)`` in play order

    Only cards of the led suit can win; an off-suit card never wins,
    whatever its rank.
    """
    if len(plays) != NUM_PLAYERS:
        raise ValueError(f"A trick needs exactly {NUM_PLAYERS} cards, got {len(plays)}")

    led_suit = plays[0][1].suit
    best_seat, best_card = plays[0]
    for seat, card in plays[1:]:
        if card.suit == led_suit and card.rank > best_card.rank:
            best_seat, best_card = seat, card

    return TrickResult(
        cards=tuple(c for _, c in plays),
        seats=tuple(s for s, _ in plays),
        winner=best_seat,
    )
