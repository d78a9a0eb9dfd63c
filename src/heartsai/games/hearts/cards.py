"""Card definitions for Hearts (4-player trick-taking game).

Standard 52-card deck, ranks 2..Ace (Ace high), no trump.

Scoring: every Heart = 1 point, Queen of Spades = 13.
Total points in a round = 26.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable, List


# ---------------------------------------------------------------------------
#  Suits: declaration order is the canonical deck order
# ---------------------------------------------------------------------------


class Suit(str, Enum):
    CLUBS = "CLUBS"
    DIAMONDS = "DIAMONDS"
    SPADES = "SPADES"
    HEARTS = "HEARTS"


ALL_SUITS: tuple[Suit, ...] = tuple(Suit)


# ---------------------------------------------------------------------------
#  Ranks: IntEnum values are the trick strength (2 low, Ace high)
# ---------------------------------------------------------------------------


class Rank(IntEnum):
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14


ALL_RANKS: tuple[Rank, ...] = tuple(Rank)


# ---------------------------------------------------------------------------
#  Constants
# ---------------------------------------------------------------------------

NUM_PLAYERS: int = 4
HAND_SIZE: int = 13
DECK_SIZE: int = 52
QUEEN_OF_SPADES_POINTS: int = 13
TOTAL_POINTS: int = 26  # 13 hearts + Q♠


# ---------------------------------------------------------------------------
#  Card
# ---------------------------------------------------------------------------

_RANK_SHORT: dict[Rank, str] = {
    Rank.TWO: "2", Rank.THREE: "3", Rank.FOUR: "4", Rank.FIVE: "5",
    Rank.SIX: "6", Rank.SEVEN: "7", Rank.EIGHT: "8", Rank.NINE: "9",
    Rank.TEN: "10", Rank.JACK: "J", Rank.QUEEN: "Q", Rank.KING: "K",
    Rank.ACE: "A",
}

_SUIT_SHORT: dict[Suit, str] = {
    Suit.CLUBS: "C", Suit.DIAMONDS: "D",
    Suit.SPADES: "S", Suit.HEARTS: "H",
}

_SHORT_TO_RANK: dict[str, Rank] = {v: k for k, v in _RANK_SHORT.items()}
_SHORT_TO_SUIT: dict[str, Suit] = {v: k for k, v in _SUIT_SHORT.items()}


@dataclass(frozen=True, slots=True)
class Card:
    suit: Suit
    rank: Rank

    def points(self) -> int:
        """Penalty points: Heart = 1, Q♠ = 13, everything else = 0."""
        if self.suit == Suit.HEARTS:
            return 1
        if self.suit == Suit.SPADES and self.rank == Rank.QUEEN:
            return QUEEN_OF_SPADES_POINTS
        return 0

    @property
    def is_two_of_clubs(self) -> bool:
        return self.suit == Suit.CLUBS and self.rank == Rank.TWO

    @property
    def is_queen_of_spades(self) -> bool:
        return self.suit == Suit.SPADES and self.rank == Rank.QUEEN

    def short(self) -> str:
        """Human-readable short label, e.g. 'H10', 'SQ'."""
        return f"{_SUIT_SHORT[self.suit]}{_RANK_SHORT[self.rank]}"

    def __repr__(self) -> str:
        return f"Card({self.short()})"


TWO_OF_CLUBS = Card(Suit.CLUBS, Rank.TWO)
QUEEN_OF_SPADES = Card(Suit.SPADES, Rank.QUEEN)


# ---------------------------------------------------------------------------
#  Deck
# ---------------------------------------------------------------------------


def make_deck() -> List[Card]:
    """Create the full 52-card deck in canonical order."""
    return [Card(s, r) for s in ALL_SUITS for r in ALL_RANKS]


# Fixed action space: one index per card, in deck order.
CARD_INDEX: dict[Card, int] = {c: i for i, c in enumerate(make_deck())}
INDEX_TO_CARD: tuple[Card, ...] = tuple(make_deck())


def sort_cards(cards: Iterable[Card]) -> tuple[Card, ...]:
    """Cards in canonical deck order (suit, then rank)."""
    return tuple(sorted(cards, key=CARD_INDEX.__getitem__))


def parse_card(label: str) -> Card:
    """Inverse of :meth:`Card.short` (case-insensitive), e.g. ``'sq'`` → Q♠."""
    text = label.strip().upper()
    if len(text) < 2:
        raise ValueError(f"Invalid card label: {label!r}")
    suit = _SHORT_TO_SUIT.get(text[0])
    rank = _SHORT_TO_RANK.get(text[1:])
    if suit is None or rank is None:
        raise ValueError(f"Invalid card label: {label!r}")
    return Card(suit, rank)


def parse_cards(text: str) -> list[Card]:
    """Parse a comma/space separated list of card labels."""
    labels = [t for t in text.replace(",", " ").split() if t]
    return [parse_card(t) for t in labels]
