"""Chess rules engine: board state, move generation, check detection, notation."""

from mcchess.game.state import Board, Move, MoveResult, NO_MOVE, PieceType, Player
from mcchess.game.rules import (
    generate_legal_moves, generate_pseudo_legal_moves, is_checkmate, is_in_check,
    is_stalemate, pseudo_legal_moves_for_piece,
)
from mcchess.game.board import BOARD_SIZE, STARTING_GRID, render_board
from mcchess.game.notation import move_to_uci, parse_move, parse_history

__all__ = [
    "Board", "Move", "MoveResult", "NO_MOVE", "PieceType", "Player",
    "generate_legal_moves", "generate_pseudo_legal_moves", "is_checkmate",
    "is_in_check", "is_stalemate", "pseudo_legal_moves_for_piece",
    "BOARD_SIZE", "STARTING_GRID", "render_board",
    "move_to_uci", "parse_move", "parse_history",
]
