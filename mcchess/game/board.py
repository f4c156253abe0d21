"""Board constants, the starting arrangement, square notation and text rendering."""

from __future__ import annotations

BOARD_SIZE = 8

# Piece codes: magnitude is the piece type, sign is the colour (+ White, - Black)
EMPTY = 0
PAWN = 1
ROOK = 2
KNIGHT = 3
BISHOP = 4
QUEEN = 5
KING = 6

# Row 0 is rank 8 (Black's back rank), row 7 is rank 1 (White's back rank)
STARTING_GRID: tuple[tuple[int, ...], ...] = (
    (-2, -3, -4, -5, -6, -4, -3, -2),
    (-1, -1, -1, -1, -1, -1, -1, -1),
    (0, 0, 0, 0, 0, 0, 0, 0),
    (0, 0, 0, 0, 0, 0, 0, 0),
    (0, 0, 0, 0, 0, 0, 0, 0),
    (0, 0, 0, 0, 0, 0, 0, 0),
    (1, 1, 1, 1, 1, 1, 1, 1),
    (2, 3, 4, 5, 6, 4, 3, 2),
)

# Home squares used for castling
KING_HOME_COL = 4
WHITE_HOME_ROW = 7
BLACK_HOME_ROW = 0

PIECE_SYMBOLS = {
    1: "P", 2: "R", 3: "N", 4: "B", 5: "Q", 6: "K",
    -1: "p", -2: "r", -3: "n", -4: "b", -5: "q", -6: "k",
}

# Column labels for notation
COL_LABELS = "abcdefgh"
# Rank labels indexed by row (row 0 = "8", row 7 = "1")
ROW_LABELS = "87654321"


def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def rc_to_notation(row: int, col: int) -> str:
    """Convert (row, col) to algebraic notation like 'e4'."""
    return COL_LABELS[col] + ROW_LABELS[row]


def notation_to_rc(sq: str) -> tuple[int, int]:
    """Convert algebraic notation like 'e4' to (row, col).

    Raises:
        ValueError: If the square is not a valid file/rank pair.
    """
    if len(sq) != 2 or sq[0] not in COL_LABELS or sq[1] not in ROW_LABELS:
        raise ValueError(f"Invalid square: {sq!r}")
    return (ROW_LABELS.index(sq[1]), COL_LABELS.index(sq[0]))


def render_board(grid, current_player: str | None = None) -> str:
    """Render a grid of piece codes as text, White at the bottom.

    Args:
        grid: 8x8 sequence of signed piece codes.
        current_player: Optional name of the side to move, shown as a header.
    """
    lines = []
    if current_player is not None:
        lines.append(f"{current_player} to move")
        lines.append("")

    lines.append("    a   b   c   d   e   f   g   h")
    lines.append("  +---+---+---+---+---+---+---+---+")
    for row in range(BOARD_SIZE):
        rank = ROW_LABELS[row]
        row_str = f"{rank} |"
        for col in range(BOARD_SIZE):
            piece = grid[row][col]
            symbol = PIECE_SYMBOLS.get(piece, " ")
            row_str += f" {symbol} |"
        row_str += f" {rank}"
        lines.append(row_str)
        lines.append("  +---+---+---+---+---+---+---+---+")
    lines.append("    a   b   c   d   e   f   g   h")

    return "\n".join(lines)
