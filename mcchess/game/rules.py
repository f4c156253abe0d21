"""Move generation, check detection and checkmate/stalemate detection.

Pseudo-legal moves follow each piece's movement pattern and occupancy rules.
Legal moves are the pseudo-legal ones that do not leave the mover's own king
attacked, plus castling when every castling condition holds.
"""

from __future__ import annotations

from typing import Optional

from mcchess.game.board import (
    BLACK_HOME_ROW, BOARD_SIZE, KING_HOME_COL, WHITE_HOME_ROW, in_bounds,
)
from mcchess.game.state import Board, Move, PieceType, Player, piece_owner

ORTHOGONAL = [(1, 0), (-1, 0), (0, 1), (0, -1)]
DIAGONAL = [(1, 1), (1, -1), (-1, 1), (-1, -1)]
ALL_DIRS = ORTHOGONAL + DIAGONAL
KNIGHT_OFFSETS = [(-2, -1), (-2, 1), (-1, -2), (-1, 2), (1, -2), (1, 2), (2, -1), (2, 1)]
KING_OFFSETS = ALL_DIRS

SLIDING_DIRS = {
    PieceType.ROOK: ORTHOGONAL,
    PieceType.BISHOP: DIAGONAL,
    PieceType.QUEEN: ALL_DIRS,
}

# (castling right, king destination col, squares that must be empty, squares the king crosses)
_CASTLING_SIDES = {
    Player.WHITE: [
        ("K", 6, (5, 6), (5, 6)),
        ("Q", 2, (1, 2, 3), (3, 2)),
    ],
    Player.BLACK: [
        ("k", 6, (5, 6), (5, 6)),
        ("q", 2, (1, 2, 3), (3, 2)),
    ],
}


def _is_enemy(piece: int, player: Player) -> bool:
    return piece * player.sign < 0


def _is_friend(piece: int, player: Player) -> bool:
    return piece * player.sign > 0


def _gen_pawn_moves(board: Board, row: int, col: int, player: Player,
                    moves: list[Move]):
    """Pawn: one forward, two from the starting rank, diagonal captures.

    White pawns advance towards row 0, Black pawns towards row 7.
    """
    grid = board.grid
    forward = -1 if player == Player.WHITE else 1
    start_row = 6 if player == Player.WHITE else 1

    r1 = row + forward
    if in_bounds(r1, col) and grid[r1][col] == 0:
        moves.append(Move(row, col, r1, col))
        r2 = row + 2 * forward
        if row == start_row and grid[r2][col] == 0:
            moves.append(Move(row, col, r2, col))

    for dc in (-1, 1):
        c1 = col + dc
        if not in_bounds(r1, c1):
            continue
        if _is_enemy(grid[r1][c1], player):
            moves.append(Move(row, col, r1, c1))
        elif board.en_passant == (r1, c1) and grid[row][c1] == -grid[row][col]:
            moves.append(Move(row, col, r1, c1))


def _gen_step_moves(board: Board, row: int, col: int, player: Player,
                    offsets, moves: list[Move]):
    """Knight and king: fixed offsets onto empty or enemy squares."""
    grid = board.grid
    for dr, dc in offsets:
        r2, c2 = row + dr, col + dc
        if in_bounds(r2, c2) and not _is_friend(grid[r2][c2], player):
            moves.append(Move(row, col, r2, c2))


def _gen_sliding_moves(board: Board, row: int, col: int, player: Player,
                       directions, moves: list[Move]):
    """Rook, bishop, queen: slide until the edge, a friend, or an enemy (inclusive)."""
    grid = board.grid
    for dr, dc in directions:
        r2, c2 = row + dr, col + dc
        while in_bounds(r2, c2):
            target = grid[r2][c2]
            if _is_friend(target, player):
                break
            moves.append(Move(row, col, r2, c2))
            if target != 0:
                break
            r2 += dr
            c2 += dc


def pseudo_legal_moves_for_piece(board: Board, row: int, col: int) -> list[Move]:
    """Generate pseudo-legal moves for the piece on (row, col).

    Castling is not included; it is added by :func:`generate_legal_moves`.
    Returns an empty list for an empty or off-board square.
    """
    if not in_bounds(row, col):
        return []
    piece = board.grid[row][col]
    player = piece_owner(piece)
    if player is None:
        return []

    moves: list[Move] = []
    kind = abs(piece)
    if kind == PieceType.PAWN:
        _gen_pawn_moves(board, row, col, player, moves)
    elif kind == PieceType.KNIGHT:
        _gen_step_moves(board, row, col, player, KNIGHT_OFFSETS, moves)
    elif kind == PieceType.KING:
        _gen_step_moves(board, row, col, player, KING_OFFSETS, moves)
    else:
        _gen_sliding_moves(board, row, col, player, SLIDING_DIRS[kind], moves)
    return moves


def generate_pseudo_legal_moves(board: Board, player: Optional[Player] = None) -> list[Move]:
    """Generate all pseudo-legal moves for a player (default: side to move)."""
    if player is None:
        player = board.current_player
    moves: list[Move] = []
    for row in range(BOARD_SIZE):
        for col in range(BOARD_SIZE):
            if _is_friend(board.grid[row][col], player):
                moves.extend(pseudo_legal_moves_for_piece(board, row, col))
    return moves


def is_square_attacked(board: Board, row: int, col: int, by_player: Player) -> bool:
    """Check whether any piece of by_player attacks (row, col).

    Pawns attack their two forward diagonals whether or not the square is
    occupied; every other piece attacks the destinations of its pseudo-legal
    moves.
    """
    grid = board.grid
    pawn = by_player.sign
    # A pawn attacking (row, col) stands one row behind it, relative to its direction
    pawn_row = row + 1 if by_player == Player.WHITE else row - 1
    for dc in (-1, 1):
        if in_bounds(pawn_row, col + dc) and grid[pawn_row][col + dc] == pawn:
            return True

    target = (row, col)
    for r in range(BOARD_SIZE):
        for c in range(BOARD_SIZE):
            piece = grid[r][c]
            if not _is_friend(piece, by_player) or abs(piece) == PieceType.PAWN:
                continue
            for move in pseudo_legal_moves_for_piece(board, r, c):
                if move.to_rc == target:
                    return True
    return False


def is_in_check(board: Board, player: Player) -> bool:
    """Check if the given player's king is attacked. A missing king is never in check."""
    king = board.find_king(player)
    if king is None:
        return False
    return is_square_attacked(board, king[0], king[1], player.opponent)


def _castling_moves(board: Board, player: Player) -> list[Move]:
    """Castling moves available to player.

    Requires the right to be intact (king and rook never moved, rook never
    captured), empty squares between king and rook, a king that is not in
    check, and no attacked square on the king's path or destination.
    """
    row = WHITE_HOME_ROW if player == Player.WHITE else BLACK_HOME_ROW
    grid = board.grid
    if grid[row][KING_HOME_COL] != 6 * player.sign:
        return []

    moves = []
    in_check = None
    for right, king_to, between, crossed in _CASTLING_SIDES[player]:
        if right not in board.castling:
            continue
        rook_col = 7 if king_to == 6 else 0
        if grid[row][rook_col] != 2 * player.sign:
            continue
        if any(grid[row][c] != 0 for c in between):
            continue
        if in_check is None:
            in_check = is_in_check(board, player)
        if in_check:
            break
        if any(is_square_attacked(board, row, c, player.opponent) for c in crossed):
            continue
        moves.append(Move(row, KING_HOME_COL, row, king_to))
    return moves


def is_move_legal(board: Board, move: Move, player: Optional[Player] = None) -> bool:
    """Check that a pseudo-legal move does not leave the mover's king attacked.

    Applies the move to a scratch copy, so the board itself is never touched.
    """
    if player is None:
        player = board.current_player
    scratch = board.copy()
    if not scratch.apply_move(move):
        return False
    return not is_in_check(scratch, player)


def generate_legal_moves(board: Board, player: Optional[Player] = None) -> list[Move]:
    """Generate all legal moves for a player (default: side to move)."""
    if player is None:
        player = board.current_player
    legal = [m for m in generate_pseudo_legal_moves(board, player)
             if is_move_legal(board, m, player)]
    legal.extend(_castling_moves(board, player))
    return legal


def has_legal_move(board: Board, player: Player) -> bool:
    """Return True as soon as one legal move is found."""
    for move in generate_pseudo_legal_moves(board, player):
        if is_move_legal(board, move, player):
            return True
    return bool(_castling_moves(board, player))


def is_checkmate(board: Board, player: Player) -> bool:
    """True iff player is in check and has no legal move."""
    if not is_in_check(board, player):
        return False
    return not has_legal_move(board, player)


def is_stalemate(board: Board, player: Player) -> bool:
    """True iff player is not in check but has no legal move."""
    if is_in_check(board, player):
        return False
    return not has_legal_move(board, player)
