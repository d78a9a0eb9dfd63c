"""HeartsGame: implements GameInterface for determinized UCT search.

Wraps the Hearts round engine behind the generic GameInterface protocol
so that the search code in :mod:`heartsai.mcts` remains game-agnostic.

Key design points:
  - 4 players, every seat for itself (no coalitions).
  - Action space = 52 (one per card in the deck).
  - ``determinize`` keeps the acting seat's hand and all public cards,
    and deals the unseen pool uniformly to the other seats.  No void
    inference is attempted: an opponent may be dealt a suit it has
    already shown out of.
  - ``reward`` is computed from the terminal state relative to the
    searching seat (score differential, shoot-the-moon bonus).
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from heartsai.games.hearts.cards import (
    CARD_INDEX,
    Card,
    DECK_SIZE,
    INDEX_TO_CARD,
    NUM_PLAYERS,
    TOTAL_POINTS,
    make_deck,
)
from heartsai.games.hearts.constants import (
    HEART_PENALTY_WEIGHT,
    QUEEN_PENALTY_WEIGHT,
    SHOOT_THE_MOON_BONUS,
)
from heartsai.games.hearts.game import (
    RoundState,
    deal,
    is_terminal as _is_terminal,
    legal_actions as _legal_actions,
    make_state,
    play_card,
    points_taken,
)

_ALL_CARDS: frozenset[Card] = frozenset(make_deck())


# ---------------------------------------------------------------------------
#  Reward
# ---------------------------------------------------------------------------


class RewardMode(str, Enum):
    DIFFERENTIAL = "differential"
    WEIGHTED = "weighted"


@dataclass(frozen=True, slots=True)
class RewardConfig:
    """How a finished play-out is scored for the searching seat."""

    mode: RewardMode = RewardMode.DIFFERENTIAL
    moon_bonus: float = SHOOT_THE_MOON_BONUS
    queen_weight: float = QUEEN_PENALTY_WEIGHT  # WEIGHTED only
    heart_weight: float = HEART_PENALTY_WEIGHT  # WEIGHTED only


def reward(state: RoundState, seat: int, config: RewardConfig = RewardConfig()) -> float:
    """Reward for *seat* at the end of a play-out (higher is better).

    * 26 points taken → ``config.moon_bonus``.
    * Differential: others' points minus own points.
    * Weighted: others' points minus ``queen_weight·Q♠ + heart_weight·hearts``.
    """
    own = points_taken(state, seat)
    if own == TOTAL_POINTS:
        return config.moon_bonus

    others = sum(points_taken(state, s) for s in range(NUM_PLAYERS) if s != seat)
    if config.mode is RewardMode.WEIGHTED:
        won = state.won[seat]
        queens = sum(1 for c in won if c.is_queen_of_spades)
        hearts = sum(1 for c in won if c.points() == 1)
        return float(others) - (queens * config.queen_weight + hearts * config.heart_weight)
    return float(others - own)


# ---------------------------------------------------------------------------
#  Determinization
# ---------------------------------------------------------------------------


def expected_hand_sizes(
    seat: int,
    hand_size: int,
    trick: Sequence[tuple[int, Card]],
) -> list[int]:
    """Hand sizes implied by the acting seat's own count.

    Every seat holds as many cards as the actor, minus one if it has
    already played into the open trick.
    """
    in_trick = {s for s, _ in trick}
    return [
        hand_size if s == seat else hand_size - (1 if s in in_trick else 0)
        for s in range(NUM_PLAYERS)
    ]


def determinize(
    seat: int,
    hand: Sequence[Card],
    played: Sequence[Card],
    trick: Sequence[tuple[int, Card]],
    rng: random.Random,
    *,
    hearts_broken: bool,
    hand_sizes: Optional[Sequence[int]] = None,
    won: Optional[Sequence[Sequence[Card]]] = None,
) -> RoundState:
    """Sample one complete :class:`RoundState` consistent with *seat*'s view.

    Parameters
    ----------
    seat : acting seat; its hand is kept as-is
    hand : the acting seat's true hand
    played : cards of completed tricks this round
    trick : the open trick, ``(seat, card)`` in play order
    rng : source of the shuffle
    hearts_broken : flag copied into the sampled state
    hand_sizes : current card count per seat (defaults to
        :func:`expected_hand_sizes`)
    won : public won piles per seat; empty piles if omitted

    The unseen pool is shuffled and dealt in contiguous slices to the
    other seats in seat order.  Each call is independent.
    """
    if not 0 <= seat < NUM_PLAYERS:
        raise ValueError(f"Invalid seat: {seat}")

    trick_cards = [c for _, c in trick]
    known: list[Card] = list(hand) + list(played) + trick_cards
    known_set = set(known)
    if len(known_set) != len(known):
        raise ValueError("Hand, played history and trick share cards")
    if not known_set <= _ALL_CARDS:
        raise ValueError("Unknown card in input")

    if hand_sizes is None:
        sizes = expected_hand_sizes(seat, len(hand), trick)
    else:
        sizes = list(hand_sizes)
        if len(sizes) != NUM_PLAYERS:
            raise ValueError(f"Expected {NUM_PLAYERS} hand sizes, got {len(sizes)}")
        sizes[seat] = len(hand)

    # Deck order before shuffling keeps the sample a pure function of rng
    unseen = [c for c in make_deck() if c not in known_set]
    needed = sum(sizes[s] for s in range(NUM_PLAYERS) if s != seat)
    if needed != len(unseen) or any(n < 0 for n in sizes):
        raise ValueError(
            f"Hand sizes {sizes} need {needed} unseen cards, but {len(unseen)} are unseen"
        )
    rng.shuffle(unseen)

    hands: list[Sequence[Card]] = [()] * NUM_PLAYERS
    hands[seat] = hand
    idx = 0
    for s in range(NUM_PLAYERS):
        if s == seat:
            continue
        hands[s] = unseen[idx : idx + sizes[s]]
        idx += sizes[s]

    return make_state(
        hands,
        to_act=seat,
        trick=trick,
        hearts_broken=hearts_broken,
        played=played,
        won=won,
    )


# ---------------------------------------------------------------------------
#  GameInterface implementation
# ---------------------------------------------------------------------------


class HeartsGame:
    """GameInterface implementation for one Hearts round."""

    def __init__(self, reward_config: RewardConfig = RewardConfig()) -> None:
        self.reward_config = reward_config

    # -- game rules --------------------------------------------------------

    @property
    def num_players(self) -> int:
        return NUM_PLAYERS

    def current_player(self, state: RoundState) -> int:
        return state.to_act

    def legal_actions(self, state: RoundState) -> list[Card]:
        return _legal_actions(state)

    def apply(self, state: RoundState, action: Card) -> RoundState:
        return play_card(state, action)

    def is_terminal(self, state: RoundState) -> bool:
        return _is_terminal(state)

    def reward(self, state: RoundState, player: int) -> float:
        return reward(state, player, self.reward_config)

    # -- imperfect information ---------------------------------------------

    def determinize(self, state: RoundState, player: int, rng: random.Random) -> RoundState:
        """Resample every hand but *player*'s, keeping the hand sizes of *state*."""
        return determinize(
            player,
            state.hands[player],
            state.played,
            state.trick,
            rng,
            hearts_broken=state.hearts_broken,
            hand_sizes=[len(h) for h in state.hands],
            won=state.won,
        )

    # -- action space --------------------------------------------------------

    @property
    def action_space_size(self) -> int:
        return DECK_SIZE

    def action_to_index(self, action: Card) -> int:
        return CARD_INDEX[action]

    def index_to_action(self, index: int) -> Card:
        return INDEX_TO_CARD[index]

    # -- new round -----------------------------------------------------------

    def new_game(self, seed: int) -> RoundState:
        return deal(seed)
