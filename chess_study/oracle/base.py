"""
Abstract Move Oracle Interface

The variation tree never decides chess legality itself. It asks a move
oracle, which answers three questions about a position given as FEN:

    1. apply_move(fen, move): the resulting position, or IllegalMove
    2. legal_moves(fen): every legal move in SAN
    3. game_status(fen): checkmate, stalemate, draw or ongoing

Any rules implementation can be plugged into the tree by subclassing
MoveOracle; PythonChessOracle is the default.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Union

import chess

MoveInput = Union[str, chess.Move]


class GameStatus(Enum):
    """Terminal state of a position."""
    ONGOING = "ongoing"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"

    @property
    def is_terminal(self) -> bool:
        return self is not GameStatus.ONGOING


@dataclass(frozen=True)
class AppliedMove:
    """Outcome of a legal move."""

    move: chess.Move
    san: str
    fen: str


class MoveOracle(ABC):
    """
    Abstract base class for move legality oracles.

    Oracles are stateless: every call receives the full position.
    """

    @abstractmethod
    def apply_move(self, fen: str, move: MoveInput) -> AppliedMove:
        """
        Apply a move to a position.

        Args:
            fen: Position before the move
            move: SAN string, UCI string or chess.Move

        Returns:
            AppliedMove with the normalized move, its SAN and the new FEN

        Raises:
            IllegalMove: If the move cannot be parsed or is not legal
        """
        pass

    @abstractmethod
    def legal_moves(self, fen: str) -> List[str]:
        """Return every legal move of the position in SAN."""
        pass

    @abstractmethod
    def game_status(self, fen: str) -> GameStatus:
        """Return whether the position is checkmate, stalemate, drawn or ongoing."""
        pass

    @abstractmethod
    def normalize_fen(self, fen: str) -> str:
        """
        Validate a FEN and return its canonical form.

        Raises:
            ValueError: If the FEN is not a valid position
        """
        pass

    @abstractmethod
    def position_key(self, fen: str) -> int:
        """Return a key equal for positions that differ only in move counters."""
        pass

    def turn(self, fen: str) -> chess.Color:
        """Side to move of a FEN (chess.WHITE or chess.BLACK)."""
        return chess.WHITE if fen.split()[1] == "w" else chess.BLACK
