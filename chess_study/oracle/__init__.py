"""
Move Oracle Module

The variation tree delegates every chess-rules question to a move oracle,
so tree bookkeeping stays independent of how legality is computed.

Key Components:
    - MoveOracle (ABC): apply_move / legal_moves / game_status interface
    - PythonChessOracle: python-chess implementation
    - position_key: Zobrist key used to detect transpositions

Data Flow:
    (fen, "Nf3") → oracle.apply_move() → AppliedMove(move, san, fen)
"""

from chess_study.oracle.base import AppliedMove, GameStatus, MoveInput, MoveOracle
from chess_study.oracle.hashing import fen_key, position_key
from chess_study.oracle.python_chess import PythonChessOracle

__all__ = [
    'AppliedMove',
    'GameStatus',
    'MoveInput',
    'MoveOracle',
    'PythonChessOracle',
    'fen_key',
    'position_key',
]
