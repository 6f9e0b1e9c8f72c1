"""
python-chess Move Oracle

Delegates all rules questions to python-chess: SAN/UCI parsing, legality,
FEN validation and game-over detection.

Draw detection works on a single FEN, so only draws visible in one
position are reported (insufficient material, fifty/seventy-five move
rules). Repetitions need the move history and are detected by the tree.
"""

import logging
from typing import List

import chess

from chess_study.errors import IllegalMove
from chess_study.oracle.base import AppliedMove, GameStatus, MoveInput, MoveOracle
from chess_study.oracle.hashing import position_key

logger = logging.getLogger(__name__)


class PythonChessOracle(MoveOracle):
    """Move oracle backed by python-chess."""

    def apply_move(self, fen: str, move: MoveInput) -> AppliedMove:
        board = chess.Board(fen)
        parsed = self.parse_move(board, move)

        san = board.san(parsed)
        board.push(parsed)

        return AppliedMove(move=parsed, san=san, fen=board.fen())

    def parse_move(self, board: chess.Board, move: MoveInput) -> chess.Move:
        """
        Resolve a move given as SAN, UCI or chess.Move on a board.

        SAN is tried first since that is what students type and what game
        records contain; UCI is the fallback for board drag-and-drop input.

        Raises:
            IllegalMove: If the move is unparseable, illegal or a null move
        """
        fen = board.fen()

        if isinstance(move, chess.Move):
            if move and board.is_legal(move):
                return move
            raise IllegalMove(move, fen)

        text = str(move).strip()
        if not text:
            raise IllegalMove(move, fen, "empty move")

        try:
            parsed = board.parse_san(text)
        except ValueError as san_error:
            try:
                parsed = chess.Move.from_uci(text)
            except ValueError:
                raise IllegalMove(text, fen, str(san_error)) from san_error

            if not board.is_legal(parsed):
                raise IllegalMove(text, fen)

        # parse_san() accepts "--" as a null move without a legality check
        if not parsed:
            raise IllegalMove(text, fen, "null moves are not allowed")

        return parsed

    def legal_moves(self, fen: str) -> List[str]:
        board = chess.Board(fen)
        return [board.san(move) for move in board.legal_moves]

    def game_status(self, fen: str) -> GameStatus:
        board = chess.Board(fen)

        if board.is_checkmate():
            return GameStatus.CHECKMATE
        if board.is_stalemate():
            return GameStatus.STALEMATE
        if (
            board.is_insufficient_material()
            or board.is_seventyfive_moves()
            or board.is_fifty_moves()
        ):
            return GameStatus.DRAW

        return GameStatus.ONGOING

    def normalize_fen(self, fen: str) -> str:
        board = chess.Board(fen)

        status = board.status()
        if status != chess.STATUS_VALID:
            raise ValueError(f"Invalid position ({status!r}): {fen}")

        return board.fen()

    def position_key(self, fen: str) -> int:
        return position_key(chess.Board(fen))
