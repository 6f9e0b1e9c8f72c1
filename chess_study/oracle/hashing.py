"""
Zobrist position keys.

Position keys identify a position independently of the move counters, so
two nodes reached through different move orders (transpositions) share a
key while their FENs may differ in the half-move and full-move fields.

References:
    - Zobrist Hashing: https://www.chessprogramming.org/Zobrist_Hashing
"""

import random

import chess

# ============================================================================
# Zobrist tables
# ============================================================================
# Key = XOR of one random 64-bit number per feature:
#   - 12 piece kinds * 64 squares
#   - castling rights (16 combinations)
#   - en passant file (8 files)
#   - side to move
# A private generator with a fixed seed keeps keys stable across runs
# without touching the global random state.
# ============================================================================

_rng = random.Random(42)

# [piece_type][color][square], piece_type 0 is unused
ZOBRIST_PIECES = [
    [[_rng.getrandbits(64) for _ in range(64)] for _ in range(2)]
    for _ in range(7)
]

ZOBRIST_CASTLING = [_rng.getrandbits(64) for _ in range(16)]

ZOBRIST_EN_PASSANT = [_rng.getrandbits(64) for _ in range(8)]

ZOBRIST_SIDE_TO_MOVE = _rng.getrandbits(64)


def position_key(board: chess.Board) -> int:
    """
    Compute the Zobrist key of a position.

    The en passant file only contributes when a legal en passant capture
    exists, matching the repetition rules.

    Args:
        board: python-chess Board object

    Returns:
        64-bit integer key
    """
    key = 0

    for square, piece in board.piece_map().items():
        key ^= ZOBRIST_PIECES[piece.piece_type][piece.color][square]

    castling_index = 0
    if board.has_kingside_castling_rights(chess.WHITE):
        castling_index |= 1
    if board.has_queenside_castling_rights(chess.WHITE):
        castling_index |= 2
    if board.has_kingside_castling_rights(chess.BLACK):
        castling_index |= 4
    if board.has_queenside_castling_rights(chess.BLACK):
        castling_index |= 8
    key ^= ZOBRIST_CASTLING[castling_index]

    if board.has_legal_en_passant():
        key ^= ZOBRIST_EN_PASSANT[chess.square_file(board.ep_square)]

    if board.turn == chess.BLACK:
        key ^= ZOBRIST_SIDE_TO_MOVE

    return key


def fen_key(fen: str) -> int:
    """Position key of a FEN string."""
    return position_key(chess.Board(fen))
