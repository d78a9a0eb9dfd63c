"""Generic game interface for determinized tree search.

A game implements :class:`GameInterface` so that the UCT engine in
:mod:`heartsai.mcts` stays game-agnostic.  Play-out behaviour and the
pre-round card exchange are pluggable strategies behind
:class:`RolloutPolicy` and :class:`PassingStrategy`.
"""

from __future__ import annotations

import random
from typing import Any, Protocol, Sequence, runtime_checkable


# Generic type aliases; concrete games define their own State / Action types.
State = Any
Action = Any


@runtime_checkable
class GameInterface(Protocol):
    """Protocol that every game must implement."""

    # ------------------------------------------------------------------
    #  Game rules
    # ------------------------------------------------------------------

    @property
    def num_players(self) -> int:
        ...

    def current_player(self, state: State) -> int:
        """Index of the player who acts next."""
        ...

    def legal_actions(self, state: State) -> list[Action]:
        """Legal actions for the current player."""
        ...

    def apply(self, state: State, action: Action) -> State:
        """Apply *action* and return a **new** state (no mutation)."""
        ...

    def is_terminal(self, state: State) -> bool:
        ...

    def reward(self, state: State, player: int) -> float:
        """Terminal reward for *player* (higher is better).

        Called only on terminal states, or on the last state reached
        when a play-out hits its step cap.
        """
        ...

    # ------------------------------------------------------------------
    #  Imperfect information
    # ------------------------------------------------------------------

    def determinize(self, state: State, player: int, rng: random.Random) -> State:
        """Sample a concrete state consistent with *player*'s observations."""
        ...

    # ------------------------------------------------------------------
    #  Action space
    # ------------------------------------------------------------------

    @property
    def action_space_size(self) -> int:
        """Total number of distinct actions."""
        ...

    def action_to_index(self, action: Action) -> int:
        """Map an action to its fixed index in [0, action_space_size)."""
        ...

    def index_to_action(self, index: int) -> Action:
        ...


@runtime_checkable
class RolloutPolicy(Protocol):
    """Chooses moves for every seat during a simulated play-out."""

    def choose(self, state: State, legal: Sequence[Action], rng: random.Random) -> Action:
        """Pick one of *legal* (never empty) for the player to act in *state*."""
        ...


@runtime_checkable
class PassingStrategy(Protocol):
    """Picks the cards handed to another seat before a round starts.

    The exchange heuristic itself lives outside this package; the
    search only needs to know the shape of the collaborator.
    """

    def select_cards_to_pass(self, hand: Sequence[Action]) -> list[Action]:
        ...
