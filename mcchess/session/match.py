"""Game loop: two agents alternate moves on one session until the game ends."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from mcchess.engine.agents import Agent
from mcchess.game.state import Move, Player
from mcchess.session.game_session import GameSession, GameStatus

logger = logging.getLogger("mcchess.match")


@dataclass
class GameRecord:
    """Result of one finished game."""
    moves: list[str] = field(default_factory=list)
    result: str = "*"  # "1-0", "0-1", "1/2-1/2", "*" (unfinished)
    reason: str = ""
    winner: Optional[Player] = None


class Match:
    """Plays games between a White and a Black agent.

    Each move is computed on a worker thread and the loop waits for it to be
    applied before the next turn, so at most one move is ever in flight.
    After checkmate the board is reset for the next game.
    """

    def __init__(self, white: Agent, black: Agent,
                 session: Optional[GameSession] = None,
                 move_pause: float = 0.0, max_plies: int = 400,
                 on_move: Optional[Callable[[GameSession, Move], None]] = None):
        self.white = white
        self.black = black
        self.session = session if session is not None else GameSession()
        self.move_pause = move_pause
        self.max_plies = max_plies
        self.on_move = on_move

    def agent_for(self, player: Player) -> Agent:
        return self.white if player == Player.WHITE else self.black

    def play_game(self, cancel: Optional[threading.Event] = None) -> GameRecord:
        """Play one game from the starting position."""
        session = self.session
        session.reset()
        record = GameRecord()

        while True:
            if cancel is not None and cancel.is_set():
                record.reason = "cancelled"
                break

            mover = session.current_player
            agent = self.agent_for(mover)
            move = session.request_move_async(agent, cancel=cancel).wait()

            if move is None or move.is_null:
                logger.info(f"{mover.display_name} ({agent.name}) has no move, game over")
                record.reason = "no move"
                break

            if self.on_move is not None:
                self.on_move(session, move)

            status = session.status()
            if status == GameStatus.CHECKMATE:
                record.winner = mover
                record.result = "1-0" if mover == Player.WHITE else "0-1"
                record.reason = "checkmate"
                logger.info(f"Checkmate! {mover.display_name} wins after {session.ply} plies")
                break
            if status == GameStatus.STALEMATE:
                record.result = "1/2-1/2"
                record.reason = "stalemate"
                logger.info(f"Stalemate after {session.ply} plies")
                break
            if session.ply >= self.max_plies:
                record.reason = "ply limit"
                logger.info(f"Ply limit {self.max_plies} reached")
                break

            if self.move_pause > 0:
                time.sleep(self.move_pause)

        record.moves = list(session.history)
        if record.reason == "checkmate":
            session.reset()
        return record

    def play(self, games: int = 1,
             cancel: Optional[threading.Event] = None) -> list[GameRecord]:
        """Play several games in a row."""
        records = []
        for i in range(games):
            logger.info(f"Starting game {i + 1}/{games}: "
                        f"{self.white.name} (White) vs {self.black.name} (Black)")
            record = self.play_game(cancel=cancel)
            records.append(record)
            logger.info(f"Game {i + 1}: {record.result} ({record.reason}), "
                        f"{len(record.moves)} plies")
            if record.reason == "cancelled":
                break
        return records
