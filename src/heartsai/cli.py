from __future__ import annotations

import argparse
import logging
import random
import time
from typing import Optional, Sequence

import numpy as np

from heartsai.games.hearts.adapter import RewardConfig, RewardMode
from heartsai.games.hearts.cards import Card, NUM_PLAYERS, parse_card, parse_cards
from heartsai.games.hearts.constants import DEFAULT_SAMPLES, Difficulty
from heartsai.games.hearts.game import (
    apply_round_scores,
    deal,
    is_terminal,
    legal_actions,
    play_card,
    round_points,
)
from heartsai.games.hearts.mcts_agent import choose_for_state, make_config, search
from heartsai.games.hearts.rollout import GreedyRolloutPolicy

log = logging.getLogger(__name__)


def _parse_trick(text: str) -> list[tuple[int, Card]]:
    """``"1:SQ 2:S3"`` → ``[(1, Q♠), (2, 3♠)]``."""
    plays: list[tuple[int, Card]] = []
    for item in text.replace(",", " ").split():
        seat, _, label = item.partition(":")
        if not label:
            raise argparse.ArgumentTypeError(f"Trick entries look like SEAT:CARD, got {item!r}")
        plays.append((int(seat), parse_card(label)))
    return plays


def _parse_sizes(text: str) -> list[int]:
    sizes = [int(t) for t in text.replace(",", " ").split()]
    if len(sizes) != NUM_PLAYERS:
        raise argparse.ArgumentTypeError(f"Need {NUM_PLAYERS} hand sizes, got {len(sizes)}")
    return sizes


def _add_search_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--difficulty", type=str, default=Difficulty.MEDIUM.value,
        choices=[d.value for d in Difficulty],
    )
    p.add_argument("--iterations", type=int, default=None, help="Overrides the difficulty budget.")
    p.add_argument("--samples", type=int, default=DEFAULT_SAMPLES)
    p.add_argument("--workers", type=int, default=1, help="Process pool size for samples.")
    p.add_argument(
        "--reward", type=str, default=RewardMode.DIFFERENTIAL.value,
        choices=[m.value for m in RewardMode],
    )
    p.add_argument("--seed", type=int, default=0)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Hearts: determinized UCT card selection")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    d = sub.add_parser("decide", help="Pick a card for one seat.")
    d.add_argument("--seat", type=int, default=0)
    d.add_argument("--hand", type=parse_cards, required=True, help='e.g. "C2 D10 SQ H4"')
    d.add_argument("--trick", type=_parse_trick, default=[], help='e.g. "1:C5 2:CK"')
    d.add_argument("--played", type=parse_cards, default=[], help="Cards of completed tricks.")
    d.add_argument("--hand-sizes", type=_parse_sizes, default=None, help='e.g. "5 5 4 4"')
    d.add_argument("--hearts-broken", action="store_true")
    _add_search_args(d)

    s = sub.add_parser("selfplay", help="Play rounds: search seats against greedy seats.")
    s.add_argument("--rounds", type=int, default=4)
    s.add_argument(
        "--search-seats", type=str, default="0",
        help="Comma separated seats that use the search (others play greedy).",
    )
    _add_search_args(s)
    return parser


def _reward_config(args: argparse.Namespace) -> RewardConfig:
    return RewardConfig(mode=RewardMode(args.reward))


def _search_config(args: argparse.Namespace):
    return make_config(
        Difficulty(args.difficulty),
        iterations=args.iterations,
        samples=args.samples,
        num_workers=args.workers,
    )


def cmd_decide(args: argparse.Namespace) -> int:
    t0 = time.perf_counter()
    decision = search(
        args.seat,
        args.hand,
        trick=args.trick,
        played=args.played,
        hearts_broken=args.hearts_broken,
        hand_sizes=args.hand_sizes,
        config=_search_config(args),
        reward_config=_reward_config(args),
        rng=random.Random(args.seed),
    )
    elapsed = time.perf_counter() - t0
    if decision.card is None:
        print("no decision (empty hand)")
        return 0
    print(decision.card.short())
    for card, score in sorted(decision.scores.items(), key=lambda kv: -kv[1]):
        print(f"  {card.short():>4}  {score:10.3f}")
    print(f"{decision.iterations} iterations, {decision.samples} samples, {elapsed:.2f}s")
    return 0


def play_round(
    seed: int,
    search_seats: Sequence[int],
    args: argparse.Namespace,
    rng: random.Random,
) -> list[int]:
    """Play one dealt round to the end and return the raw points per seat."""
    state = deal(seed)
    greedy = GreedyRolloutPolicy()
    config = _search_config(args)
    reward_config = _reward_config(args)
    while not is_terminal(state):
        if state.to_act in search_seats:
            card = choose_for_state(
                state, config=config, reward_config=reward_config, rng=rng,
            ).card
        else:
            card = greedy.choose(state, legal_actions(state), rng)
        state = play_card(state, card)
    return round_points(state)


def cmd_selfplay(args: argparse.Namespace) -> int:
    search_seats = [int(s) for s in args.search_seats.split(",") if s.strip()]
    rng = random.Random(args.seed)
    points = np.zeros((args.rounds, NUM_PLAYERS), dtype=np.int64)
    totals = [0] * NUM_PLAYERS
    t0 = time.perf_counter()
    for r in range(args.rounds):
        pts = play_round(args.seed + r, search_seats, args, rng)
        points[r] = pts
        totals = apply_round_scores(totals, pts)
        log.info("Round %d: points=%s totals=%s", r + 1, pts, totals)

    mean = points.mean(axis=0)
    print(f"{args.rounds} rounds in {time.perf_counter() - t0:.1f}s (search seats: {search_seats})")
    for seat in range(NUM_PLAYERS):
        tag = "search" if seat in search_seats else "greedy"
        print(f"  seat {seat} [{tag:>6}]  mean points {mean[seat]:6.2f}  total {totals[seat]}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        if args.command == "decide":
            return cmd_decide(args)
        return cmd_selfplay(args)
    except ValueError as e:
        parser.error(str(e))


if __name__ == "__main__":
    raise SystemExit(main())
