"""Move notation parser and emitter.

Move formats:
  e2e4       Move from e2 to e4 (coordinate notation, as used by UCI engines)
  e7e8q      Promotion; the suffix is accepted but pawns always become queens
  0-0        Kingside castling for the side to move (O-O also accepted)
  0-0-0      Queenside castling for the side to move (O-O-O also accepted)
  0000       Null move, i.e. "no move available"

Move histories are space-separated coordinate moves, the form sent to an
external engine after "position startpos moves".
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from mcchess.game.board import (
    BLACK_HOME_ROW, KING_HOME_COL, WHITE_HOME_ROW, notation_to_rc, rc_to_notation,
)
from mcchess.game.state import NO_MOVE, Board, Move, Player

NULL_MOVE = "0000"

_MOVE_RE = re.compile(r"^([a-h][1-8])([a-h][1-8])([qrbn]?)$")
_KINGSIDE = ("0-0", "O-O")
_QUEENSIDE = ("0-0-0", "O-O-O")


def move_to_uci(move: Move, board: Optional[Board] = None) -> str:
    """Convert a move to coordinate notation like 'e2e4'.

    Args:
        move: The move to convert.
        board: The board BEFORE the move is applied. When given, pawn moves
            onto the last rank get a 'q' promotion suffix.
    """
    if move.is_null:
        return NULL_MOVE
    text = rc_to_notation(*move.from_rc) + rc_to_notation(*move.to_rc)
    if board is not None and abs(board.grid[move.from_row][move.from_col]) == 1 \
            and move.to_row in (0, 7):
        text += "q"
    return text


def castling_move(player: Player, kingside: bool) -> Move:
    """The king move that castles for player."""
    row = WHITE_HOME_ROW if player == Player.WHITE else BLACK_HOME_ROW
    return Move(row, KING_HOME_COL, row, 6 if kingside else 2)


def parse_move(text: str, player: Player = Player.WHITE) -> Move:
    """Parse a move string into a Move.

    Args:
        text: Coordinate move, castling token, or the null move.
        player: Side to move, needed to place "0-0" / "0-0-0" on a rank.

    Returns:
        A Move, or NO_MOVE for "0000".

    Raises:
        ValueError: If the notation is invalid.
    """
    text = text.strip()

    if text == NULL_MOVE:
        return NO_MOVE
    if text in _KINGSIDE:
        return castling_move(player, kingside=True)
    if text in _QUEENSIDE:
        return castling_move(player, kingside=False)

    m = _MOVE_RE.match(text)
    if m:
        fr, fc = notation_to_rc(m.group(1))
        tr, tc = notation_to_rc(m.group(2))
        return Move(fr, fc, tr, tc)

    raise ValueError(f"Invalid move notation: {text!r}")


def castling_notation(board: Board, move: Move) -> Optional[str]:
    """Return "0-0" / "0-0-0" if move castles on this board, else None."""
    piece = board.grid[move.from_row][move.from_col] if move.in_bounds() else 0
    if abs(piece) != 6 or move.from_col != KING_HOME_COL or move.from_row != move.to_row:
        return None
    if move.to_col == 6:
        return "0-0"
    if move.to_col == 2:
        return "0-0-0"
    return None


def history_to_string(moves: Iterable[str]) -> str:
    """Join coordinate moves into a history string."""
    return " ".join(moves)


def parse_history(text: str) -> list[Move]:
    """Replay a space-separated history from the starting position.

    Castling tokens are resolved against the side to move at that point.

    Raises:
        ValueError: If any token is invalid.
    """
    board = Board()
    moves = []
    for token in text.split():
        move = parse_move(token, board.current_player)
        if move.is_null:
            break
        board.make_move(move)
        moves.append(move)
    return moves
