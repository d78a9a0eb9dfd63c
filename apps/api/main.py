from __future__ import annotations

import logging
import random
from typing import Any, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from heartsai.games.hearts.adapter import RewardConfig, RewardMode
from heartsai.games.hearts.cards import Card, Rank, Suit
from heartsai.games.hearts.constants import DEFAULT_SAMPLES, Difficulty
from heartsai.games.hearts.mcts_agent import choose_card_async, make_config
from heartsai.games.hearts.rules import legal_moves

log = logging.getLogger(__name__)

# Hard ceiling on caller-supplied budgets so one request cannot pin a worker
_MAX_ITERATIONS = 20_000
_MAX_SAMPLES = 200


def _card_to_json(c: Card) -> dict[str, Any]:
    return {"suit": c.suit.value, "rank": int(c.rank), "label": c.short()}


def _card_from_json(obj: Any) -> Card:
    try:
        return Card(Suit(str(obj["suit"])), Rank(int(obj["rank"])))
    except Exception as e:  # noqa: BLE001
        raise HTTPException(status_code=400, detail=f"Invalid card: {obj!r} ({e})")


def _cards_from_json(items: Any) -> list[Card]:
    if not isinstance(items, list):
        raise HTTPException(status_code=400, detail=f"Expected a list of cards, got {items!r}")
    return [_card_from_json(o) for o in items]


def _trick_from_json(items: Any) -> list[tuple[int, Card]]:
    if not isinstance(items, list):
        raise HTTPException(status_code=400, detail=f"Expected a list of plays, got {items!r}")
    plays: list[tuple[int, Card]] = []
    for o in items:
        try:
            seat = int(o["seat"])
        except Exception as e:  # noqa: BLE001
            raise HTTPException(status_code=400, detail=f"Invalid play: {o!r} ({e})")
        plays.append((seat, _card_from_json(o.get("card"))))
    return plays


def _int_field(payload: dict[str, Any], key: str, default: Optional[int]) -> Optional[int]:
    raw = payload.get(key, None)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail=f"{key} must be an integer, got {raw!r}")


def _bool_field(payload: dict[str, Any], key: str, default: bool = False) -> bool:
    raw = payload.get(key, None)
    if raw is None:
        return default
    if not isinstance(raw, bool):
        raise HTTPException(status_code=400, detail=f"{key} must be true or false, got {raw!r}")
    return raw


app = FastAPI(title="Hearts AI API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/difficulties")
def difficulties() -> dict[str, Any]:
    return {"difficulties": [{"name": d.value, "iterations": d.iterations} for d in Difficulty]}


@app.post("/api/legal")
def legal(payload: dict[str, Any]) -> dict[str, Any]:
    """Legal cards for a hand in the given trick context."""
    hand = _cards_from_json(payload.get("hand", []))
    trick = _trick_from_json(payload.get("trick", []))
    played = _cards_from_json(payload.get("played", []))
    moves = legal_moves(
        hand,
        [c for _, c in trick],
        hearts_broken=_bool_field(payload, "heartsBroken"),
        first_trick=not played,
    )
    return {"legal": [_card_to_json(c) for c in moves]}


@app.post("/api/decide")
async def decide(payload: dict[str, Any]) -> dict[str, Any]:
    """Pick a card for one seat.

    Body: ``{seat, hand, trick: [{seat, card}], played, heartsBroken,
    handSizes?, difficulty?, iterations?, samples?, reward?, seed?}``
    """
    seat = _int_field(payload, "seat", 0)
    hand = _cards_from_json(payload.get("hand", []))
    trick = _trick_from_json(payload.get("trick", []))
    played = _cards_from_json(payload.get("played", []))

    hand_sizes = payload.get("handSizes", None)
    if hand_sizes is not None:
        try:
            hand_sizes = [int(n) for n in hand_sizes]
        except (TypeError, ValueError):
            raise HTTPException(status_code=400, detail=f"Invalid handSizes: {hand_sizes!r}")

    try:
        difficulty = Difficulty(str(payload.get("difficulty", Difficulty.MEDIUM.value)))
        reward_mode = RewardMode(str(payload.get("reward", RewardMode.DIFFERENTIAL.value)))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    iterations = _int_field(payload, "iterations", None)
    samples = _int_field(payload, "samples", DEFAULT_SAMPLES)
    if iterations is not None and not 1 <= iterations <= _MAX_ITERATIONS:
        raise HTTPException(status_code=400, detail=f"iterations must be in 1..{_MAX_ITERATIONS}")
    if not 1 <= samples <= _MAX_SAMPLES:
        raise HTTPException(status_code=400, detail=f"samples must be in 1..{_MAX_SAMPLES}")

    seed = _int_field(payload, "seed", None)
    rng = random.Random(seed) if seed is not None else random.Random()

    try:
        decision = await choose_card_async(
            seat,
            hand,
            trick=trick,
            played=played,
            hearts_broken=_bool_field(payload, "heartsBroken"),
            hand_sizes=hand_sizes,
            config=make_config(difficulty, iterations=iterations, samples=samples),
            reward_config=RewardConfig(mode=reward_mode),
            rng=rng,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    log.info(
        "decide seat=%d card=%s iterations=%d", seat,
        decision.card.short() if decision.card else None, decision.iterations,
    )
    return {
        "card": _card_to_json(decision.card) if decision.card is not None else None,
        "iterations": decision.iterations,
        "samples": decision.samples,
        "scores": [
            {"card": _card_to_json(c), "score": s}
            for c, s in sorted(decision.scores.items(), key=lambda kv: -kv[1])
        ],
    }
