"""
Analysis Module

Teaching summaries of positions and studies.

Key Components:
    - analyze_position: material, piece counts, centre, king safety, phase,
      theoretical draw
    - study_statistics: move, annotation, tactic and phase counts over trees
"""

from chess_study.analysis.position import (
    PIECE_VALUES,
    GamePhase,
    KingSafety,
    Material,
    PositionAnalysis,
    analyze_position,
    count_material,
    game_phase,
    is_theoretical_draw,
    king_safety,
)
from chess_study.analysis.statistics import (
    StudyStatistics,
    is_annotated,
    is_tactical,
    study_statistics,
    tree_statistics,
)

__all__ = [
    'GamePhase',
    'KingSafety',
    'Material',
    'PIECE_VALUES',
    'PositionAnalysis',
    'StudyStatistics',
    'analyze_position',
    'count_material',
    'game_phase',
    'is_annotated',
    'is_tactical',
    'is_theoretical_draw',
    'king_safety',
    'study_statistics',
    'tree_statistics',
]
