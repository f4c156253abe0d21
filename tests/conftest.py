"""Shared test fixtures."""

import os
import sys

import pytest

from mcchess.game.state import Board, Player

FAKE_ENGINE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fake_uci_engine.py")

SCHOLARS_MATE = ["e2e4", "e7e5", "f1c4", "b8c6", "d1h5", "g8f6", "h5f7"]


def _make_board(pieces: dict, player: Player = Player.WHITE,
                castling=None, en_passant=None) -> Board:
    grid = [[0] * 8 for _ in range(8)]
    for (row, col), piece in pieces.items():
        grid[row][col] = piece
    return Board.from_grid(grid, current_player=player,
                           castling=castling, en_passant=en_passant)


@pytest.fixture
def make_board():
    """Build a board from a {(row, col): piece_code} mapping."""
    return _make_board


@pytest.fixture
def fake_engine_cmd():
    """(executable, args) that launch the fake UCI engine."""
    return sys.executable, [FAKE_ENGINE]


@pytest.fixture
def single_move_board():
    """White to move with exactly one legal move: the h4 pawn push.

    The White king on a1 is boxed in by Black rooks on b8 and h2.
    """
    return _make_board({
        (7, 0): 6,    # White king a1
        (4, 7): 1,    # White pawn h4
        (0, 1): -2,   # Black rook b8
        (6, 7): -2,   # Black rook h2
        (0, 7): -6,   # Black king h8
    })


@pytest.fixture
def stalemate_board():
    """White to move, not in check, no legal moves."""
    return _make_board({
        (7, 0): 6,    # White king a1
        (0, 1): -2,   # Black rook b8
        (6, 7): -2,   # Black rook h2
        (0, 7): -6,   # Black king h8
    })
