"""
Puzzle Module

Puzzle mode: a starting position plus solution lines, evaluated move by
move while the user plays in a variation tree.

Key Components:
    - Puzzle: start position, solution lines, themes, difficulty
    - PuzzleSession: evaluation state machine (CORRECT / SOLVED / INCORRECT)
    - PuzzleLoader: stream puzzles from PGN collections
    - PuzzleSetValidator: collection quality report

Data Flow:
    PGN file → PuzzleLoader → Puzzle → PuzzleSession(tree, puzzle)
                                          ↑ on_move(parent, node) per user move
"""

from chess_study.puzzle.loader import PuzzleLoader
from chess_study.puzzle.puzzle import (
    DIFFICULTIES,
    Puzzle,
    detect_themes,
    estimate_difficulty,
    puzzles_to_pgn,
)
from chess_study.puzzle.session import (
    Hint,
    PuzzleOutcome,
    PuzzleProgress,
    PuzzleResult,
    PuzzleSession,
    PuzzleStatus,
)
from chess_study.puzzle.validator import PuzzleSetReport, PuzzleSetValidator

__all__ = [
    "DIFFICULTIES",
    "Hint",
    "Puzzle",
    "PuzzleLoader",
    "PuzzleOutcome",
    "PuzzleProgress",
    "PuzzleResult",
    "PuzzleSession",
    "PuzzleSetReport",
    "PuzzleSetValidator",
    "PuzzleStatus",
    "detect_themes",
    "estimate_difficulty",
    "puzzles_to_pgn",
]
