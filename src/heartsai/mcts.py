"""Determinized UCT search, game-agnostic.

Works with any game that implements
:class:`~heartsai.games.interface.GameInterface`; play-outs are driven by
a :class:`~heartsai.games.interface.RolloutPolicy`.

One search samples ``config.samples`` complete worlds, grows an
independent UCT tree on each, and merges the per-move mean rewards of
the root children.  Samples share nothing, so they can run in a process
pool; the merge is a plain vector sum.
"""

from __future__ import annotations

import logging
import math
import random
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from functools import partial, reduce
from typing import Any, Callable, Optional

import numpy as np

from heartsai.games.interface import GameInterface, RolloutPolicy

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MCTSConfig:
    """Tuning knobs for the determinized UCT search."""

    iterations: int = 1500  # total UCT iterations, split across samples
    samples: int = 30  # determinized worlds
    c: float = 1.41  # UCT exploration constant
    max_depth: int = 53  # selection depth cap (one level per card, plus the root)
    max_rollout_steps: int = 52  # play-out length cap (a full round)
    num_workers: int = 1  # > 1 = samples run in a process pool

    @property
    def iterations_per_sample(self) -> int:
        return max(1, self.iterations // max(1, self.samples))


# ---------------------------------------------------------------------------
#  Tree
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class _Node:
    state: Any
    action: Any = None  # action taken to reach this node
    parent: int = -1  # arena index of the parent, -1 for the root
    children: list[int] = field(default_factory=list)
    untried: list[Any] = field(default_factory=list)
    visits: int = 0
    value: float = 0.0  # cumulative reward from the searcher's perspective

    @property
    def mean(self) -> float:
        return self.value / self.visits if self.visits else 0.0


def _uct(child: _Node, parent_visits: int, c: float) -> float:
    if child.visits == 0:
        return math.inf
    return child.value / child.visits + c * math.sqrt(math.log(parent_visits) / child.visits)


class SearchTree:
    """UCT tree over one determinized state.

    Nodes live in an arena (``self.nodes``) and refer to each other by
    index; the parent index is only used to walk back up.
    """

    def __init__(self, state: Any, game: GameInterface) -> None:
        self.game = game
        self.nodes: list[_Node] = [self._new_node(state, None, -1)]

    def _new_node(self, state: Any, action: Any, parent: int) -> _Node:
        untried = [] if self.game.is_terminal(state) else list(self.game.legal_actions(state))
        return _Node(state=state, action=action, parent=parent, untried=untried)

    @property
    def root(self) -> _Node:
        return self.nodes[0]

    def child_nodes(self, idx: int) -> list[_Node]:
        return [self.nodes[i] for i in self.nodes[idx].children]

    # -- phases ----------------------------------------------------------

    def select(self, c: float, max_depth: int) -> int:
        """Descend by UCT until a node with untried moves or no children."""
        nodes = self.nodes
        idx = 0
        depth = 0
        node = nodes[0]
        while node.children and not node.untried:
            if depth >= max_depth:
                log.warning("Selection hit depth cap %d", max_depth)
                break
            pv = node.visits
            idx = max(node.children, key=lambda i: _uct(nodes[i], pv, c))
            node = nodes[idx]
            depth += 1
        return idx

    def expand(self, idx: int, rng: random.Random) -> int:
        """Add one child for a uniformly chosen untried move; return its index."""
        node = self.nodes[idx]
        if not node.untried:
            return idx
        action = node.untried.pop(rng.randrange(len(node.untried)))
        child = self._new_node(self.game.apply(node.state, action), action, idx)
        self.nodes.append(child)
        child_idx = len(self.nodes) - 1
        node.children.append(child_idx)
        return child_idx

    def backpropagate(self, idx: int, value: float) -> None:
        """Add *value* and one visit to *idx* and every ancestor."""
        nodes = self.nodes
        while idx >= 0:
            node = nodes[idx]
            node.visits += 1
            node.value += value
            idx = node.parent

    # -- driver ------------------------------------------------------------

    def run(
        self,
        iterations: int,
        policy: RolloutPolicy,
        perspective: int,
        config: MCTSConfig,
        rng: random.Random,
    ) -> None:
        for _ in range(iterations):
            leaf = self.expand(self.select(config.c, config.max_depth), rng)
            value = rollout(
                self.nodes[leaf].state, self.game, policy, perspective, rng,
                max_steps=config.max_rollout_steps,
            )
            self.backpropagate(leaf, value)

    def root_results(self) -> list[tuple[Any, float, int]]:
        """``(action, mean reward, visits)`` for each root child."""
        return [(ch.action, ch.mean, ch.visits) for ch in self.child_nodes(0)]


# ---------------------------------------------------------------------------
#  Play-out
# ---------------------------------------------------------------------------


def rollout(
    state: Any,
    game: GameInterface,
    policy: RolloutPolicy,
    perspective: int,
    rng: random.Random,
    *,
    max_steps: int,
) -> float:
    """Let *policy* play every seat to the end, return the reward for *perspective*."""
    _is_terminal = game.is_terminal
    _legal = game.legal_actions
    _apply = game.apply
    _choose = policy.choose
    steps = 0
    while not _is_terminal(state):
        if steps >= max_steps:
            log.warning("Rollout hit step cap %d", max_steps)
            break
        legal = _legal(state)
        if not legal:
            log.error("No legal actions in a non-terminal rollout state")
            break
        state = _apply(state, _choose(state, legal, rng))
        steps += 1
    return game.reward(state, perspective)


def run_uct(
    state: Any,
    game: GameInterface,
    policy: RolloutPolicy,
    perspective: int,
    iterations: int,
    config: MCTSConfig,
    rng: random.Random,
) -> SearchTree:
    """Grow a UCT tree on one fully known *state*."""
    tree = SearchTree(state, game)
    tree.run(iterations, policy, perspective, config, rng)
    return tree


# ---------------------------------------------------------------------------
#  Determinized search
# ---------------------------------------------------------------------------

# One sample's contribution: (sum of mean rewards, times seen) per action index
SampleScores = tuple[np.ndarray, np.ndarray]


@dataclass(slots=True)
class SearchResult:
    action: Any
    scores: np.ndarray  # (action_space,) summed per-sample mean reward
    seen: np.ndarray  # (action_space,) samples in which the action was a root child
    iterations: int  # UCT iterations run across all samples


def _search_sample(
    sample_state: Callable[[random.Random], Any],
    game: GameInterface,
    policy: RolloutPolicy,
    perspective: int,
    config: MCTSConfig,
    seed: int,
) -> SampleScores:
    """Determinize with *seed*, search, and score the root moves."""
    rng = random.Random(seed)
    det = sample_state(rng)
    tree = run_uct(det, game, policy, perspective, config.iterations_per_sample, config, rng)

    n = game.action_space_size
    scores = np.zeros(n, dtype=np.float64)
    seen = np.zeros(n, dtype=np.int64)
    for action, mean, visits in tree.root_results():
        if visits == 0:
            continue
        i = game.action_to_index(action)
        scores[i] += mean
        seen[i] += 1
    return scores, seen


def merge_scores(a: SampleScores, b: SampleScores) -> SampleScores:
    """Associative, commutative merge of two sample results."""
    return a[0] + b[0], a[1] + b[1]


def best_action_index(scores: np.ndarray, seen: np.ndarray) -> int:
    """Index of the highest score among seen actions; ties go to the lowest index."""
    masked = np.where(seen > 0, scores, -np.inf)
    return int(np.argmax(masked))


def _game_sampler(game: GameInterface, state: Any, player: int, rng: random.Random) -> Any:
    return game.determinize(state, player, rng)


def determinized_search(
    sample_state: Callable[[random.Random], Any],
    game: GameInterface,
    policy: RolloutPolicy,
    player: int,
    config: MCTSConfig,
    rng: random.Random,
) -> Optional[SearchResult]:
    """Run ``config.samples`` independent searches and merge them.

    Each sample gets its own seed drawn from *rng* up front, so the
    result does not depend on ``config.num_workers``.  The chosen action
    has the highest summed mean reward; ties go to the lowest action
    index.  Returns ``None`` if no sample produced a root move.
    """
    seeds = [rng.randrange(1 << 30) for _ in range(config.samples)]
    task = partial(_search_sample, sample_state, game, policy, player, config)

    if config.num_workers > 1 and len(seeds) > 1:
        with ProcessPoolExecutor(max_workers=config.num_workers) as executor:
            parts = list(executor.map(task, seeds))
    else:
        parts = [task(s) for s in seeds]

    n = game.action_space_size
    empty: SampleScores = (np.zeros(n, dtype=np.float64), np.zeros(n, dtype=np.int64))
    scores, seen = reduce(merge_scores, parts, empty)
    if not seen.any():
        return None

    best = best_action_index(scores, seen)
    return SearchResult(
        action=game.index_to_action(best),
        scores=scores,
        seen=seen,
        iterations=len(seeds) * config.iterations_per_sample,
    )


def mcts_choose(
    state: Any,
    game: GameInterface,
    policy: RolloutPolicy,
    player: int,
    config: MCTSConfig,
    rng: random.Random,
) -> Any:
    """Choose an action for *player* by determinized UCT on *state*.

    Only *player*'s hand and public information of *state* are used;
    the other hands are resampled by ``game.determinize``.
    """
    actions = game.legal_actions(state)
    if len(actions) <= 1:
        return actions[0] if actions else None
    result = determinized_search(
        partial(_game_sampler, game, state, player), game, policy, player, config, rng,
    )
    if result is None:
        return rng.choice(actions)
    return result.action
