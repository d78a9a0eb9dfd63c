"""
Card selection for a computer-controlled Hearts seat.

Uses determinized UCT (see :mod:`heartsai.mcts`) to handle hidden
hands: sample many complete deals consistent with what the seat can
see, search each one, and sum the per-card mean rewards of the root
moves.  The card with the largest sum is played.

All inputs arrive as explicit parameters; nothing is read from global
settings.
"""

from __future__ import annotations

import asyncio
import logging
import random
from concurrent.futures import Executor
from dataclasses import dataclass, field
from functools import partial
from typing import Optional, Sequence

from heartsai.games.hearts.adapter import HeartsGame, RewardConfig, determinize
from heartsai.games.hearts.cards import Card, NUM_PLAYERS, make_deck
from heartsai.games.hearts.constants import (
    DEFAULT_DIFFICULTY,
    DEFAULT_SAMPLES,
    Difficulty,
    EXPLORATION_C,
    MAX_ROLLOUT_STEPS,
    MAX_SELECTION_DEPTH,
)
from heartsai.games.hearts.game import RoundState
from heartsai.games.hearts.rollout import GreedyRolloutPolicy
from heartsai.games.hearts.rules import legal_moves
from heartsai.games.interface import RolloutPolicy
from heartsai.mcts import MCTSConfig, determinized_search

log = logging.getLogger(__name__)

_DECK: frozenset[Card] = frozenset(make_deck())


def make_config(
    difficulty: Difficulty = DEFAULT_DIFFICULTY,
    *,
    iterations: Optional[int] = None,
    samples: int = DEFAULT_SAMPLES,
    num_workers: int = 1,
) -> MCTSConfig:
    """Search configuration for a difficulty preset (or an explicit budget)."""
    return MCTSConfig(
        iterations=difficulty.iterations if iterations is None else iterations,
        samples=samples,
        c=EXPLORATION_C,
        max_depth=MAX_SELECTION_DEPTH,
        max_rollout_steps=MAX_ROLLOUT_STEPS,
        num_workers=num_workers,
    )


@dataclass(slots=True)
class Decision:
    """Outcome of one decision call.

    ``card`` is ``None`` when the seat has nothing left to play.
    ``scores`` holds the summed per-sample mean reward of every card
    that was searched.
    """

    card: Optional[Card]
    iterations: int = 0
    samples: int = 0
    scores: dict[Card, float] = field(default_factory=dict)


def _validate(
    seat: int,
    hand: Sequence[Card],
    trick: Sequence[tuple[int, Card]],
    played: Sequence[Card],
) -> None:
    if not 0 <= seat < NUM_PLAYERS:
        raise ValueError(f"Invalid seat: {seat}")
    if len(trick) >= NUM_PLAYERS:
        raise ValueError("An open trick holds at most 3 cards")
    trick_seats = [s for s, _ in trick]
    if len(set(trick_seats)) != len(trick_seats) or any(
        not 0 <= s < NUM_PLAYERS for s in trick_seats
    ):
        raise ValueError(f"Invalid trick seats: {trick_seats}")
    if seat in trick_seats:
        raise ValueError(f"Seat {seat} has already played to this trick")
    expected = [(seat - len(trick) + i) % NUM_PLAYERS for i in range(len(trick))]
    if trick_seats != expected:
        raise ValueError(
            f"Trick seats {trick_seats} must be the {len(trick)} seat(s) before seat {seat} "
            f"in play order, expected {expected}"
        )
    cards = list(hand) + list(played) + [c for _, c in trick]
    if len(set(cards)) != len(cards):
        raise ValueError("Duplicate card across hand, trick and played history")
    if not set(cards) <= _DECK:
        raise ValueError("Unknown card in input")


def search(
    seat: int,
    hand: Sequence[Card],
    *,
    trick: Sequence[tuple[int, Card]] = (),
    played: Sequence[Card] = (),
    hearts_broken: bool = False,
    hand_sizes: Optional[Sequence[int]] = None,
    won: Optional[Sequence[Sequence[Card]]] = None,
    config: Optional[MCTSConfig] = None,
    reward_config: RewardConfig = RewardConfig(),
    policy: Optional[RolloutPolicy] = None,
    rng: Optional[random.Random] = None,
) -> Decision:
    """Pick the card *seat* should play.

    Parameters
    ----------
    seat : acting seat (0..3)
    hand : the seat's true hand
    trick : open trick as ``(seat, card)`` in play order
    played : cards of the completed tricks this round, in order
    hearts_broken : whether hearts are broken
    hand_sizes : card count per seat as known to the caller; only used to
        size the sampled hands
    won : public won piles per seat (optional)
    config : search budget; defaults to :func:`make_config`
    reward_config : reward formula for play-outs
    policy : rollout policy; defaults to :class:`GreedyRolloutPolicy`
    rng : randomness source; pass a seeded one for reproducible play
    """
    _validate(seat, hand, trick, played)
    if not hand:
        return Decision(card=None)

    first_trick = not played
    legal = legal_moves(
        hand, [c for _, c in trick], hearts_broken=hearts_broken, first_trick=first_trick,
    )
    if not legal:
        log.error(
            "Rules engine returned no legal move for seat %d with hand %s; playing %r",
            seat, list(hand), hand[0],
        )
        return Decision(card=hand[0])
    if len(legal) == 1:
        return Decision(card=legal[0])

    config = config or make_config()
    policy = policy or GreedyRolloutPolicy()
    rng = rng or random.Random()
    game = HeartsGame(reward_config)

    sampler = partial(
        determinize, seat, tuple(hand), tuple(played), tuple(trick),
        hearts_broken=hearts_broken,
        hand_sizes=tuple(hand_sizes) if hand_sizes is not None else None,
        won=tuple(tuple(w) for w in won) if won is not None else None,
    )
    result = determinized_search(sampler, game, policy, seat, config, rng)
    if result is None:
        log.warning("Search produced no root moves for seat %d; playing %r", seat, legal[0])
        return Decision(card=legal[0], samples=config.samples)

    scores = {
        game.index_to_action(i): float(result.scores[i])
        for i in range(game.action_space_size)
        if result.seen[i] > 0
    }
    if result.action not in legal:
        # Sampled roots share the real hand and context, so this means rule drift
        log.error("Search chose %r outside the legal set %s", result.action, legal)
        return Decision(card=legal[0], iterations=result.iterations, samples=config.samples)

    log.debug(
        "Seat %d: %r after %d iterations over %d samples (%d candidates)",
        seat, result.action, result.iterations, config.samples, len(scores),
    )
    return Decision(
        card=result.action,
        iterations=result.iterations,
        samples=config.samples,
        scores=scores,
    )


def choose_card(seat: int, hand: Sequence[Card], **kwargs) -> Optional[Card]:
    """Convenience wrapper around :func:`search` returning only the card."""
    return search(seat, hand, **kwargs).card


def choose_for_state(
    state: RoundState,
    *,
    config: Optional[MCTSConfig] = None,
    reward_config: RewardConfig = RewardConfig(),
    policy: Optional[RolloutPolicy] = None,
    rng: Optional[random.Random] = None,
) -> Decision:
    """Decide for ``state.to_act`` using only what that seat can observe."""
    seat = state.to_act
    return search(
        seat,
        state.hands[seat],
        trick=state.trick,
        played=state.played,
        hearts_broken=state.hearts_broken,
        hand_sizes=[len(h) for h in state.hands],
        won=state.won,
        config=config,
        reward_config=reward_config,
        policy=policy,
        rng=rng,
    )


async def choose_card_async(
    seat: int,
    hand: Sequence[Card],
    *,
    executor: Optional[Executor] = None,
    **kwargs,
) -> Decision:
    """Run :func:`search` off the event loop and await its decision."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, partial(search, seat, hand, **kwargs))
