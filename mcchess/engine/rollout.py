"""Time-boxed random-rollout move search (no tree, no neural network).

Each rollout copies the position, plays up to ``max_depth`` uniformly random
legal moves for alternating sides and sums the evaluation after every ply.
The sum is credited to the rollout's first move. When the deadline passes,
the first move with the best accumulated score is returned.

Score convention: totals are always White-perspective. The searching side
picks the highest total when it is White and the lowest when it is Black.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from dataclasses import dataclass, field
from typing import Optional

from mcchess.engine.evaluation import evaluate
from mcchess.game.notation import move_to_uci
from mcchess.game.rules import generate_legal_moves
from mcchess.game.state import NO_MOVE, Board, Move, Player

logger = logging.getLogger("mcchess.search")

DEFAULT_TIME_BUDGET = 5.0  # seconds
DEFAULT_MAX_DEPTH = 8  # half-moves per rollout


@dataclass
class SearchResult:
    """Outcome of one search call."""
    move: Move
    rollouts: int = 0
    elapsed: float = 0.0
    scores: dict[Move, int] = field(default_factory=dict)
    fallback: bool = False  # True when the move was picked at random

    @property
    def found(self) -> bool:
        return not self.move.is_null


class RolloutSearch:
    """Depth-limited Monte-Carlo rollouts under a wall-clock deadline."""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH,
                 time_budget: float = DEFAULT_TIME_BUDGET,
                 rng: Optional[random.Random] = None, seed: Optional[int] = None):
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        if time_budget < 0:
            raise ValueError("time_budget must be non-negative")
        self.max_depth = max_depth
        self.time_budget = time_budget
        self.rng = rng if rng is not None else random.Random(seed)

    def search(self, board: Board, deadline: Optional[float] = None,
               cancel: Optional[threading.Event] = None,
               max_rollouts: Optional[int] = None) -> SearchResult:
        """Search for a move for the side to move on ``board``.

        The board is never mutated; all simulation happens on copies.

        Args:
            board: Position to search from.
            deadline: ``time.monotonic()`` instant at which to stop. Defaults
                to now + ``time_budget``.
            cancel: Optional event; when set, no further rollout is started.
            max_rollouts: Optional cap on the number of rollouts.

        Returns:
            A SearchResult whose move is NO_MOVE if the side has no legal move.
        """
        start = time.monotonic()
        if deadline is None:
            deadline = start + self.time_budget

        root = board.copy()
        player = root.current_player
        root_moves = generate_legal_moves(root)

        if not root_moves:
            logger.debug(f"No legal moves for {player.display_name}")
            return SearchResult(NO_MOVE, elapsed=time.monotonic() - start)

        if len(root_moves) == 1:
            return SearchResult(root_moves[0], elapsed=time.monotonic() - start)

        scores: dict[Move, int] = {}
        rollouts = 0
        while time.monotonic() < deadline:
            if cancel is not None and cancel.is_set():
                logger.debug("Search cancelled")
                break
            if max_rollouts is not None and rollouts >= max_rollouts:
                break
            first_move, total = self._rollout(root, root_moves)
            scores[first_move] = scores.get(first_move, 0) + total
            rollouts += 1

        elapsed = time.monotonic() - start

        if not scores:
            # No rollout finished: pick any legal move from the real position
            fallback = generate_legal_moves(board)
            if not fallback:
                return SearchResult(NO_MOVE, elapsed=elapsed)
            return SearchResult(self.rng.choice(fallback), elapsed=elapsed, fallback=True)

        best = self._select(scores, player)
        logger.debug(f"{player.display_name}: {rollouts} rollouts in {elapsed:.2f}s, "
                     f"best {move_to_uci(best)} ({scores[best]})")
        return SearchResult(best, rollouts=rollouts, elapsed=elapsed, scores=scores)

    def best_move(self, board: Board, **kwargs) -> Move:
        """Convenience wrapper returning only the chosen move."""
        return self.search(board, **kwargs).move

    def _rollout(self, root: Board, root_moves: list[Move]) -> tuple[Move, int]:
        """Play one random rollout. Returns (first move, summed evaluation)."""
        sim = root.copy()
        first_move = self.rng.choice(root_moves)
        sim.make_move(first_move)
        total = evaluate(sim)

        for _ in range(self.max_depth - 1):
            moves = generate_legal_moves(sim)
            if not moves:
                break
            sim.make_move(self.rng.choice(moves))
            total += evaluate(sim)

        return first_move, total

    @staticmethod
    def _select(scores: dict[Move, int], player: Player) -> Move:
        """First move (in insertion order) with the best score for player."""
        sign = player.sign
        return max(scores, key=lambda m: sign * scores[m])
