"""
Position Analysis

Summary of a single position as a lesson panel shows it to students:
    1. Material (pawn units) and piece counts
    2. Centre occupation
    3. King safety
    4. Game phase
    5. Theoretical draw detection

These are teaching heuristics, not an engine evaluation.
"""

from dataclasses import dataclass
from enum import Enum

import chess

# ============================================================================
# Material Values (pawn units)
# ============================================================================

PIECE_VALUES = {
    chess.PAWN: 1,
    chess.KNIGHT: 3,
    chess.BISHOP: 3,
    chess.ROOK: 5,
    chess.QUEEN: 9,
    chess.KING: 0,
}

CENTER_SQUARES = (chess.D4, chess.E4, chess.D5, chess.E5)

# Endgame once at most this many pieces (kings and pawns included) remain
ENDGAME_PIECE_LIMIT = 12

# Positions after this many half-moves of the game count as middlegame
OPENING_PLY_LIMIT = 15


class GamePhase(Enum):
    OPENING = "opening"
    MIDDLEGAME = "middlegame"
    ENDGAME = "endgame"


class KingSafety(Enum):
    SAFE = "safe"
    EXPOSED = "exposed"
    DANGER = "danger"


@dataclass(frozen=True)
class Material:
    """Material of both sides in pawn units."""

    white: int
    black: int

    @property
    def balance(self) -> int:
        """White minus Black; positive when White is ahead."""
        return self.white - self.black


@dataclass(frozen=True)
class PositionAnalysis:
    """
    Teaching summary of one position.

    Attributes:
        material: Material of both sides
        white_pieces: Number of White pieces, king and pawns included
        black_pieces: Number of Black pieces, king and pawns included
        center_control: White minus Black pieces standing on d4, e4, d5, e5
        white_king: Safety of the White king
        black_king: Safety of the Black king
        phase: Opening, middlegame or endgame
        is_theoretical_draw: Neither side can force mate
    """

    material: Material
    white_pieces: int
    black_pieces: int
    center_control: int
    white_king: KingSafety
    black_king: KingSafety
    phase: GamePhase
    is_theoretical_draw: bool


def count_material(board: chess.Board) -> Material:
    totals = {chess.WHITE: 0, chess.BLACK: 0}
    for piece in board.piece_map().values():
        totals[piece.color] += PIECE_VALUES[piece.piece_type]
    return Material(totals[chess.WHITE], totals[chess.BLACK])


def game_phase(board: chess.Board) -> GamePhase:
    """
    Classify the position by the pieces left and the moves played.

    The half-move count comes from the FEN's move number, so positions set
    up from a FEN are classified by where they stand in their game.
    """
    if len(board.piece_map()) <= ENDGAME_PIECE_LIMIT:
        return GamePhase.ENDGAME
    if board.ply() > OPENING_PLY_LIMIT:
        return GamePhase.MIDDLEGAME
    return GamePhase.OPENING


def king_safety(board: chess.Board, color: chess.Color) -> KingSafety:
    """
    Rate a king: in danger when in check, exposed on its starting square,
    safe otherwise.
    """
    if board.turn == color and board.is_check():
        return KingSafety.DANGER

    home = chess.E1 if color == chess.WHITE else chess.E8
    if board.king(color) == home:
        return KingSafety.EXPOSED

    return KingSafety.SAFE


def is_theoretical_draw(board: chess.Board) -> bool:
    """
    True when neither side can force mate.

    python-chess covers bare kings, a single minor piece and same-coloured
    bishops; two knights against a bare king are added on top.
    """
    if board.is_insufficient_material():
        return True

    extras = [p.piece_type for p in board.piece_map().values() if p.piece_type != chess.KING]
    return extras == [chess.KNIGHT, chess.KNIGHT]


def analyze_position(fen: str) -> PositionAnalysis:
    """
    Analyze a position.

    Args:
        fen: Position to analyze

    Returns:
        PositionAnalysis

    Raises:
        ValueError: If the FEN is not a valid position
    """
    board = chess.Board(fen)

    white = black = center = 0
    for square, piece in board.piece_map().items():
        if piece.color == chess.WHITE:
            white += 1
            sign = 1
        else:
            black += 1
            sign = -1
        if square in CENTER_SQUARES:
            center += sign

    return PositionAnalysis(
        material=count_material(board),
        white_pieces=white,
        black_pieces=black,
        center_control=center,
        white_king=king_safety(board, chess.WHITE),
        black_king=king_safety(board, chess.BLACK),
        phase=game_phase(board),
        is_theoretical_draw=is_theoretical_draw(board),
    )
