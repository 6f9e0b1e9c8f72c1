"""
Interactive Puzzle Trainer

A text front end for solving puzzle collections in a terminal. Each line
typed is either a move or a command; the trainer evaluates moves against
the puzzle, auto-plays the opponent and keeps score.

Session Flow:
    Trainer → "Puzzle 1/20: Back rank mate"
    Trainer → board diagram
    User → "Qd8+"
    Trainer → "Correct!" / "Opponent plays 23... Rxd8"
    User → "Rxd8#"
    Trainer → "Puzzle solved! Score: 2.00 (100% accuracy)"
    User → "next"

Usage:
    python -m chess_study.trainer puzzles.pgn
"""

from chess_study.trainer.interface import PuzzleTrainer, format_move_list, setup_logger

__all__ = ['PuzzleTrainer', 'format_move_list', 'setup_logger']
