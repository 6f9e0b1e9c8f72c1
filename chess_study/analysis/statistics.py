"""
Study statistics over variation trees.

Every move of a tree counts, side lines included. A move is annotated when
it carries a comment (before or after it) or an annotation glyph, and
tactical when it captures, gives check or promotes. Phases are those of
the position after the move.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

import chess

from chess_study.analysis.position import GamePhase, game_phase
from chess_study.tree.node import PositionNode
from chess_study.tree.variation_tree import VariationTree

logger = logging.getLogger(__name__)


@dataclass
class StudyStatistics:
    """Move counts of one or more trees."""

    chapters: int = 0
    total_moves: int = 0
    annotated_moves: int = 0
    tactical_moves: int = 0
    opening_moves: int = 0
    middlegame_moves: int = 0
    endgame_moves: int = 0

    @property
    def average_moves_per_chapter(self) -> float:
        return self.total_moves / self.chapters if self.chapters else 0.0

    @property
    def annotation_coverage(self) -> float:
        """Percentage of moves carrying an annotation (0.0 without moves)."""
        if not self.total_moves:
            return 0.0
        return 100.0 * self.annotated_moves / self.total_moves


def is_tactical(node: PositionNode) -> bool:
    """True when the move into `node` captures, gives check or promotes."""
    board = chess.Board(node.parent.fen)
    return (
        board.is_capture(node.move)
        or board.gives_check(node.move)
        or node.move.promotion is not None
    )


def is_annotated(node: PositionNode) -> bool:
    return bool(node.comment or node.starting_comment or node.nags)


def study_statistics(trees: Iterable[VariationTree]) -> StudyStatistics:
    """
    Count the moves of several trees (one per chapter).

    Args:
        trees: Chapter trees

    Returns:
        StudyStatistics over all of them
    """
    stats = StudyStatistics()

    for tree in trees:
        stats.chapters += 1
        for node in tree:
            if node.is_root:
                continue

            stats.total_moves += 1
            if is_annotated(node):
                stats.annotated_moves += 1
            if is_tactical(node):
                stats.tactical_moves += 1

            phase = game_phase(chess.Board(node.fen))
            if phase is GamePhase.OPENING:
                stats.opening_moves += 1
            elif phase is GamePhase.MIDDLEGAME:
                stats.middlegame_moves += 1
            else:
                stats.endgame_moves += 1

    logger.debug(
        f"Statistics: {stats.chapters} chapters, {stats.total_moves} moves, "
        f"{stats.annotation_coverage:.0f}% annotated"
    )
    return stats


def tree_statistics(tree: VariationTree) -> StudyStatistics:
    """Statistics of a single tree."""
    return study_statistics([tree])
