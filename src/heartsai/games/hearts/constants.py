"""Centralized constants and defaults for Hearts search & play.

Every tunable default lives here.  Import from this module instead
of hardcoding magic numbers elsewhere.

Usage::

    from heartsai.games.hearts.constants import (
        DEFAULT_SAMPLES,
        Difficulty,
    )
"""
from __future__ import annotations

from enum import Enum

from heartsai.games.hearts.cards import DECK_SIZE, NUM_PLAYERS, TOTAL_POINTS

# ---------------------------------------------------------------------------
#  Search defaults
# ---------------------------------------------------------------------------

DEFAULT_ITERATIONS: int = 1500
"""Total UCT iterations per decision, split evenly across samples."""

DEFAULT_SAMPLES: int = 30
"""Determinized worlds sampled per decision."""

EXPLORATION_C: float = 1.41
"""UCT exploration constant (≈ √2)."""

MAX_SELECTION_DEPTH: int = DECK_SIZE + 1
"""Selection never descends further than one level per card in the deck."""

MAX_ROLLOUT_STEPS: int = DECK_SIZE
"""A round has at most 52 plays, so a play-out never needs more steps."""

# ---------------------------------------------------------------------------
#  Reward
# ---------------------------------------------------------------------------

SHOOT_THE_MOON_BONUS: float = float((NUM_PLAYERS - 1) * TOTAL_POINTS)
"""Reward for taking all 26 points: each opponent is charged 26 (= 78).

Strictly above the best differential reward of a normal round (26).
"""

QUEEN_PENALTY_WEIGHT: float = 75.0
"""Weighted reward variant: Q♠ counts 75× a heart against the searcher."""

HEART_PENALTY_WEIGHT: float = 1.0


# ---------------------------------------------------------------------------
#  Difficulty presets
# ---------------------------------------------------------------------------


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def iterations(self) -> int:
        return _DIFFICULTY_ITERATIONS[self]


_DIFFICULTY_ITERATIONS: dict[Difficulty, int] = {
    Difficulty.EASY: 500,
    Difficulty.MEDIUM: DEFAULT_ITERATIONS,
    Difficulty.HARD: 2000,
}

DEFAULT_DIFFICULTY: Difficulty = Difficulty.MEDIUM
