"""Game sessions and the match loop."""

from mcchess.session.game_session import (
    GameSession, GameStatus, IllegalMoveError, MoveRequest, StalePositionError,
)
from mcchess.session.match import GameRecord, Match

__all__ = [
    "GameSession", "GameStatus", "IllegalMoveError", "MoveRequest",
    "StalePositionError", "GameRecord", "Match",
]
