"""Game session: owns the authoritative board for one game in progress."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from mcchess.game.notation import castling_notation, history_to_string, move_to_uci, parse_move
from mcchess.game.rules import generate_legal_moves, is_checkmate, is_in_check, is_stalemate
from mcchess.game.state import Board, Move, Player

logger = logging.getLogger("mcchess.session")


class IllegalMoveError(ValueError):
    """A move that is not legal in the current position was submitted."""


class StalePositionError(RuntimeError):
    """The position changed while a move for it was being computed."""


class GameStatus(Enum):
    ONGOING = "ongoing"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


@dataclass
class MoveRequest:
    """A move being computed on a worker thread.

    ``done`` is set once the move has been applied (or failed), so a game
    loop or renderer can wait on it before starting the next turn.
    """
    done: threading.Event = field(default_factory=threading.Event)
    move: Optional[Move] = None
    error: Optional[BaseException] = None
    thread: Optional[threading.Thread] = None

    def wait(self, timeout: Optional[float] = None) -> Optional[Move]:
        """Wait for the request and return the applied move.

        Re-raises any error raised on the worker thread.
        """
        if not self.done.wait(timeout):
            raise TimeoutError("Move request did not finish in time")
        if self.error is not None:
            raise self.error
        return self.move


class GameSession:
    """The single writer of one game's board.

    Every mutation happens under a lock, and readers only ever receive
    copies, so a search running on another thread never races the board.
    """

    def __init__(self, board: Optional[Board] = None):
        self._board = board if board is not None else Board()
        self._lock = threading.Lock()
        self.history: list[str] = []

    @property
    def current_player(self) -> Player:
        return self._board.current_player

    @property
    def ply(self) -> int:
        return len(self.history)

    def snapshot(self) -> tuple[tuple[int, ...], ...]:
        """Immutable copy of the grid for renderers."""
        with self._lock:
            return self._board.snapshot()

    def board_copy(self) -> Board:
        with self._lock:
            return self._board.copy()

    def legal_moves(self) -> list[Move]:
        with self._lock:
            return generate_legal_moves(self._board)

    def history_string(self) -> str:
        return history_to_string(self.history)

    def apply(self, move: Move, expected_ply: Optional[int] = None) -> Move:
        """Apply a legal move for the side to move and record it.

        Args:
            move: The move to play.
            expected_ply: If given, the history length the move was computed
                for; a mismatch raises StalePositionError.

        Raises:
            IllegalMoveError: If the move is not legal here. The board is unchanged.
        """
        with self._lock:
            if expected_ply is not None and expected_ply != len(self.history):
                raise StalePositionError(
                    f"Move computed at ply {expected_ply}, game is at ply {len(self.history)}")
            if move not in generate_legal_moves(self._board):
                raise IllegalMoveError(f"Illegal move: {move_to_uci(move)}")
            text = move_to_uci(move, self._board)
            castle = castling_notation(self._board, move)
            player = self._board.current_player
            self._board.make_move(move)
            self.history.append(text)
        logger.debug(f"{player.display_name} played {text}" + (f" ({castle})" if castle else ""))
        return move

    def play(self, text: str) -> Move:
        """Parse a move string ("e2e4", "0-0", ...) and apply it.

        Raises:
            ValueError: If the notation is invalid.
            IllegalMoveError: If the move is not legal here.
        """
        move = parse_move(text, self.current_player)
        if move.is_null:
            raise IllegalMoveError("Null move cannot be played")
        return self.apply(move)

    def status(self) -> GameStatus:
        with self._lock:
            player = self._board.current_player
            if is_checkmate(self._board, player):
                return GameStatus.CHECKMATE
            if is_stalemate(self._board, player):
                return GameStatus.STALEMATE
        return GameStatus.ONGOING

    def is_in_check(self) -> bool:
        with self._lock:
            return is_in_check(self._board, self._board.current_player)

    def is_checkmate(self) -> bool:
        return self.status() == GameStatus.CHECKMATE

    def is_stalemate(self) -> bool:
        return self.status() == GameStatus.STALEMATE

    def reset(self):
        """Start a new game from the standard arrangement."""
        with self._lock:
            self._board.reset()
            self.history.clear()
        logger.debug("Board reset")

    def compute_and_apply(self, agent, cancel: Optional[threading.Event] = None) -> Move:
        """Ask an agent for a move on a private copy, then apply it.

        Returns the agent's move; a null move is returned without being applied.
        """
        with self._lock:
            board = self._board.copy()
            history = list(self.history)
        move = agent.get_move(board, history, cancel=cancel)
        if move.is_null:
            return move
        return self.apply(move, expected_ply=len(history))

    def request_move_async(self, agent,
                           cancel: Optional[threading.Event] = None) -> MoveRequest:
        """Compute and apply the agent's move on a worker thread."""
        request = MoveRequest()

        def _worker():
            try:
                request.move = self.compute_and_apply(agent, cancel=cancel)
            except Exception as e:
                logger.error(f"Move computation failed: {e}")
                request.error = e
            finally:
                request.done.set()

        request.thread = threading.Thread(target=_worker, daemon=True, name="move-worker")
        request.thread.start()
        return request
