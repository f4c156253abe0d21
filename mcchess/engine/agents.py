"""Move sources that can play one side of a game."""

from __future__ import annotations

import logging
import random
import threading
from typing import Optional, Sequence

from mcchess.engine.rollout import RolloutSearch
from mcchess.engine.uci import UCIEngine
from mcchess.game.notation import parse_move
from mcchess.game.rules import generate_legal_moves
from mcchess.game.state import NO_MOVE, Board, Move

logger = logging.getLogger("mcchess.agents")


class Agent:
    """Base agent interface.

    ``board`` is a private copy the agent may read freely; ``history`` is the
    game's coordinate-notation move list from the starting position.
    """

    name = "agent"

    def get_move(self, board: Board, history: Sequence[str] = (),
                 cancel: Optional[threading.Event] = None) -> Move:
        raise NotImplementedError


class RandomAgent(Agent):
    """Plays random legal moves."""

    name = "random"

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)

    def get_move(self, board, history=(), cancel=None) -> Move:
        moves = generate_legal_moves(board)
        if not moves:
            return NO_MOVE
        return self.rng.choice(moves)


class RolloutAgent(Agent):
    """Plays the move chosen by a time-boxed random-rollout search."""

    name = "rollout"

    def __init__(self, search: Optional[RolloutSearch] = None, **search_kwargs):
        self.search = search if search is not None else RolloutSearch(**search_kwargs)
        self.last_result = None

    def get_move(self, board, history=(), cancel=None) -> Move:
        result = self.search.search(board, cancel=cancel)
        self.last_result = result
        if result.found:
            logger.info(f"Rollout search: {result.rollouts} rollouts in {result.elapsed:.2f}s"
                        + (" (random fallback)" if result.fallback else ""))
        return result.move


class UCIEngineAgent(Agent):
    """Plays the best move reported by an external UCI engine."""

    name = "uci"

    def __init__(self, engine: UCIEngine, movetime_ms: int = 1000):
        self.engine = engine
        self.movetime_ms = movetime_ms

    def get_move(self, board, history=(), cancel=None) -> Move:
        reply = self.engine.best_move(list(history), self.movetime_ms)
        if reply is None:
            logger.info("Engine reported no move")
            return NO_MOVE
        if self.engine.last_score is not None:
            logger.debug(f"Engine score: {self.engine.last_score:+.2f}")
        return parse_move(reply, board.current_player)
