"""Board state for a single game: piece grid, side to move, castling rights."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

import numpy as np

from mcchess.game.board import (
    BLACK_HOME_ROW, BOARD_SIZE, KING_HOME_COL, STARTING_GRID, WHITE_HOME_ROW,
    in_bounds, render_board,
)


class Player(IntEnum):
    WHITE = 0
    BLACK = 1

    @property
    def opponent(self) -> Player:
        return Player(1 - self)

    @property
    def sign(self) -> int:
        """+1 for White pieces, -1 for Black pieces."""
        return 1 if self == Player.WHITE else -1

    @property
    def display_name(self) -> str:
        return "White" if self == Player.WHITE else "Black"


class PieceType(IntEnum):
    PAWN = 1
    ROOK = 2
    KNIGHT = 3
    BISHOP = 4
    QUEEN = 5
    KING = 6


class MoveResult(Enum):
    """Outcome of a board mutation. Only OK is truthy."""
    OK = "ok"
    OUT_OF_BOUNDS = "out_of_bounds"
    EMPTY_SQUARE = "empty_square"
    INVALID_PIECE = "invalid_piece"

    def __bool__(self) -> bool:
        return self is MoveResult.OK


@dataclass(frozen=True)
class Move:
    """A move from (from_row, from_col) to (to_row, to_col).

    Pawns reaching the last rank always become queens, so no promotion
    piece is carried.
    """
    from_row: int
    from_col: int
    to_row: int
    to_col: int

    @property
    def from_rc(self) -> tuple[int, int]:
        return (self.from_row, self.from_col)

    @property
    def to_rc(self) -> tuple[int, int]:
        return (self.to_row, self.to_col)

    @property
    def is_null(self) -> bool:
        return self == NO_MOVE

    def in_bounds(self) -> bool:
        return in_bounds(self.from_row, self.from_col) and in_bounds(self.to_row, self.to_col)

    def __iter__(self):
        return iter((self.from_row, self.from_col, self.to_row, self.to_col))


# Returned by searches when the side to move has nothing to play
NO_MOVE = Move(-1, -1, -1, -1)

# Castling rights, FEN style: K/Q for White king/queen side, k/q for Black
ALL_CASTLING_RIGHTS = frozenset("KQkq")

# Corner square -> the castling right lost when it is vacated or captured on
_ROOK_CORNERS = {
    (WHITE_HOME_ROW, 7): "K",
    (WHITE_HOME_ROW, 0): "Q",
    (BLACK_HOME_ROW, 7): "k",
    (BLACK_HOME_ROW, 0): "q",
}
_KING_HOMES = {
    (WHITE_HOME_ROW, KING_HOME_COL): "KQ",
    (BLACK_HOME_ROW, KING_HOME_COL): "kq",
}


def piece_owner(piece: int) -> Optional[Player]:
    """Return the colour of a piece code, or None for an empty square."""
    if piece > 0:
        return Player.WHITE
    if piece < 0:
        return Player.BLACK
    return None


class Board:
    """An 8x8 grid of signed piece codes plus the side to move.

    The grid is mutated in place by :meth:`apply_move`. Consumers outside
    the game loop should read :meth:`snapshot`, which never aliases it.
    """

    def __init__(self):
        self.grid: list[list[int]] = [list(row) for row in STARTING_GRID]
        self.current_player: Player = Player.WHITE
        self.castling: set[str] = set(ALL_CASTLING_RIGHTS)
        self.en_passant: Optional[tuple[int, int]] = None

    @classmethod
    def from_grid(cls, grid, current_player: Player = Player.WHITE,
                  castling: Optional[str] = None,
                  en_passant: Optional[tuple[int, int]] = None) -> Board:
        """Build a board from an arbitrary 8x8 grid.

        When castling is None, a right is granted wherever the king and the
        matching rook stand on their home squares.

        Raises:
            ValueError: If the grid is not 8x8 or holds an invalid code.
        """
        if len(grid) != BOARD_SIZE or any(len(row) != BOARD_SIZE for row in grid):
            raise ValueError("Board grid must be 8x8")
        board = cls.__new__(cls)
        board.grid = [[int(cell) for cell in row] for row in grid]
        for row in board.grid:
            for cell in row:
                if not -6 <= cell <= 6:
                    raise ValueError(f"Invalid piece code: {cell}")
        board.current_player = Player(current_player)
        if castling is None:
            board.castling = board._infer_castling()
        else:
            board.castling = set(castling) & ALL_CASTLING_RIGHTS
        board.en_passant = en_passant
        return board

    def _infer_castling(self) -> set[str]:
        rights = set()
        for (row, col), right in _ROOK_CORNERS.items():
            sign = 1 if right.isupper() else -1
            if self.grid[row][KING_HOME_COL] == 6 * sign and self.grid[row][col] == 2 * sign:
                rights.add(right)
        return rights

    def copy(self) -> Board:
        """Return an independent deep copy of this board."""
        new = Board.__new__(Board)
        new.grid = [row[:] for row in self.grid]
        new.current_player = self.current_player
        new.castling = set(self.castling)
        new.en_passant = self.en_passant
        return new

    def piece_at(self, row: int, col: int) -> int:
        """Return the piece code at (row, col).

        Raises:
            IndexError: If the square is off the board.
        """
        if not in_bounds(row, col):
            raise IndexError(f"Square ({row}, {col}) is off the board")
        return self.grid[row][col]

    def find_king(self, player: Player) -> Optional[tuple[int, int]]:
        """Find the king of the given player, or None if it is missing."""
        king = 6 * player.sign
        for row in range(BOARD_SIZE):
            for col in range(BOARD_SIZE):
                if self.grid[row][col] == king:
                    return (row, col)
        return None

    def apply_move(self, move: Move) -> MoveResult:
        """Move a piece without changing the side to move.

        Handles castling (a king moving two files from its home square also
        moves the rook), en passant (a pawn moving diagonally onto an empty
        square removes the enemy pawn behind it) and promotion to a queen.
        No legality checks are made beyond bounds and a non-empty source.
        """
        if not move.in_bounds():
            return MoveResult.OUT_OF_BOUNDS

        fr, fc, tr, tc = move
        grid = self.grid
        piece = grid[fr][fc]
        if piece == 0:
            return MoveResult.EMPTY_SQUARE

        kind = abs(piece)
        sign = 1 if piece > 0 else -1
        new_en_passant = None

        home_row = WHITE_HOME_ROW if sign > 0 else BLACK_HOME_ROW
        if kind == 6 and fr == tr == home_row and fc == KING_HOME_COL and tc in (2, 6):
            # Castling: king jumps two files, rook lands on the square it crossed
            rook_from, rook_to = (7, 5) if tc == 6 else (0, 3)
            grid[fr][fc] = 0
            grid[tr][tc] = piece
            if grid[fr][rook_from] == 2 * sign:
                grid[fr][rook_from] = 0
                grid[fr][rook_to] = 2 * sign
        else:
            if kind == 1 and fc != tc and grid[tr][tc] == 0:
                # En passant: the captured pawn sits behind the destination
                captured_row = tr + 1 if sign > 0 else tr - 1
                if in_bounds(captured_row, tc) and grid[captured_row][tc] == -piece:
                    grid[captured_row][tc] = 0

            grid[fr][fc] = 0
            grid[tr][tc] = piece

            if kind == 1:
                last_row = 0 if sign > 0 else BOARD_SIZE - 1
                if tr == last_row:
                    grid[tr][tc] = 5 * sign
                elif abs(tr - fr) == 2:
                    new_en_passant = ((fr + tr) // 2, fc)

        self._update_castling(move)
        self.en_passant = new_en_passant
        return MoveResult.OK

    def make_move(self, move: Move) -> MoveResult:
        """Apply a move and hand the turn to the other side."""
        result = self.apply_move(move)
        if result:
            self.next_turn()
        return result

    def _update_castling(self, move: Move):
        if not self.castling:
            return
        for square in (move.from_rc, move.to_rc):
            right = _ROOK_CORNERS.get(square)
            if right is not None:
                self.castling.discard(right)
        rights = _KING_HOMES.get(move.from_rc)
        if rights is not None:
            self.castling.difference_update(rights)

    def add_piece(self, row: int, col: int, piece: int) -> MoveResult:
        """Place a piece code on a square, replacing whatever was there."""
        if not in_bounds(row, col):
            return MoveResult.OUT_OF_BOUNDS
        if not -6 <= piece <= 6:
            return MoveResult.INVALID_PIECE
        self.grid[row][col] = piece
        return MoveResult.OK

    def remove_piece(self, row: int, col: int) -> MoveResult:
        """Clear a square."""
        if not in_bounds(row, col):
            return MoveResult.OUT_OF_BOUNDS
        self.grid[row][col] = 0
        return MoveResult.OK

    def next_turn(self):
        self.current_player = self.current_player.opponent

    def reset(self):
        """Restore the standard starting arrangement with White to move."""
        self.grid = [list(row) for row in STARTING_GRID]
        self.current_player = Player.WHITE
        self.castling = set(ALL_CASTLING_RIGHTS)
        self.en_passant = None

    def snapshot(self) -> tuple[tuple[int, ...], ...]:
        """Return an immutable copy of the grid for renderers and loggers."""
        return tuple(tuple(row) for row in self.grid)

    def to_array(self) -> np.ndarray:
        """Return the grid as a fresh (8, 8) int8 array."""
        return np.array(self.grid, dtype=np.int8)

    def position_key(self) -> tuple:
        """Hashable key identifying the position (grid, side, rights, en passant)."""
        return (self.snapshot(), self.current_player,
                "".join(sorted(self.castling)), self.en_passant)

    def __eq__(self, other):
        if not isinstance(other, Board):
            return NotImplemented
        return self.position_key() == other.position_key()

    def render(self) -> str:
        return render_board(self.grid, current_player=self.current_player.display_name)

    def __str__(self) -> str:
        return render_board(self.grid)

    def serialize(self) -> str:
        """Serialize the board to a JSON string."""
        return json.dumps({
            "grid": self.grid,
            "current_player": int(self.current_player),
            "castling": "".join(sorted(self.castling)),
            "en_passant": list(self.en_passant) if self.en_passant else None,
        })

    @classmethod
    def deserialize(cls, data: str) -> Board:
        """Deserialize a board from a JSON string."""
        d = json.loads(data)
        en_passant = tuple(d["en_passant"]) if d.get("en_passant") else None
        return cls.from_grid(
            d["grid"],
            current_player=Player(d["current_player"]),
            castling=d.get("castling", ""),
            en_passant=en_passant,
        )
