"""Static position evaluation: material plus a pawn piece-square table.

Scores are in centipawns from White's perspective: positive favours White,
negative favours Black.
"""

from __future__ import annotations

import numpy as np

from mcchess.game.state import Board

# Indexed by piece-code magnitude: -, pawn, rook, knight, bishop, queen, king
PIECE_VALUES = np.array([0, 100, 500, 320, 330, 900, 20000], dtype=np.int64)

# Pawn bonus from the pawn's own side: row 6 is its starting rank, row 0 the last rank.
# White pawns index it by row, Black pawns by the mirrored row.
PAWN_TABLE = np.array([
    [0, 0, 0, 0, 0, 0, 0, 0],
    [50, 50, 50, 50, 50, 50, 50, 50],
    [10, 10, 20, 30, 30, 20, 10, 10],
    [5, 5, 10, 25, 25, 10, 5, 5],
    [0, 0, 0, 20, 20, 0, 0, 0],
    [5, -5, -10, 0, 0, -10, -5, 5],
    [5, 10, 10, -20, -20, 10, 10, 5],
    [0, 0, 0, 0, 0, 0, 0, 0],
], dtype=np.int64)

_PAWN_TABLE_BLACK = PAWN_TABLE[::-1]


def evaluate(board) -> int:
    """Evaluate a position.

    Args:
        board: A Board, or any 8x8 grid of signed piece codes (e.g. a snapshot).

    Returns:
        The White-perspective score in centipawns.
    """
    grid = np.asarray(board.grid if isinstance(board, Board) else board, dtype=np.int64)
    material = np.sign(grid) * PIECE_VALUES[np.abs(grid)]
    pawns = PAWN_TABLE[grid == 1].sum() - _PAWN_TABLE_BLACK[grid == -1].sum()
    return int(material.sum() + pawns)
