"""
chess_study: Variation Tree and Puzzle Engine

The chess core of a K-12 learning platform: students explore lines from a
position, import and export annotated games, and solve puzzles with
immediate feedback.

## Architecture

1. **oracle**: Chess rules, delegated
   - MoveOracle interface (apply_move, legal_moves, game_status)
   - PythonChessOracle backed by python-chess
   - Zobrist position keys for transpositions

2. **tree**: Variation tree
   - PositionNode with move, annotations and ordered children
   - VariationTree: submit/undo/redo/jump/promote, import/export
   - Dict serialization for persistence

3. **record**: Game record format
   - Strict PGN-subset parser reporting error offsets
   - PGN export through python-chess

4. **puzzle**: Puzzle mode
   - Puzzle definitions with multiple solution lines
   - PuzzleSession evaluation with partial credit and hints
   - Collection loader and validator

5. **engine**: StudyEngine facade for UIs

6. **analysis** and **study**: Lesson tools
   - Position analysis: material, phase, king safety, theoretical draws
   - Study statistics: annotation coverage, tactical and phase counts
   - Study: named chapters, each with its own variation tree

7. **trainer**: Interactive text front end

## Quick Start

```python
from chess_study import StudyEngine, Puzzle

engine = StudyEngine()
engine.submit_move("e4")
engine.undo()

engine.load_puzzle(Puzzle(fen=chess.STARTING_FEN, solution_lines=[["e4", "e5", "Nf3"]]))
result = engine.submit_move("e4")
print(result.puzzle.outcome)  # PuzzleOutcome.CORRECT, e5 auto-played
```

## Version

0.1.0
"""

__version__ = "0.1.0"
__license__ = "MIT"

from chess_study.config import EngineConfig
from chess_study.engine import EngineSnapshot, MoveResult, StudyEngine
from chess_study.errors import (
    AtRoot,
    ChapterNotFound,
    IllegalMove,
    NoChildren,
    NodeNotFound,
    ParseError,
    PuzzleError,
    StudyError,
)
from chess_study.puzzle import Puzzle, PuzzleOutcome, PuzzleSession, PuzzleStatus
from chess_study.study import Chapter, Study
from chess_study.tree import PositionNode, VariationTree

__all__ = [
    'AtRoot',
    'Chapter',
    'ChapterNotFound',
    'EngineConfig',
    'EngineSnapshot',
    'IllegalMove',
    'MoveResult',
    'NoChildren',
    'NodeNotFound',
    'ParseError',
    'PositionNode',
    'Puzzle',
    'PuzzleError',
    'PuzzleOutcome',
    'PuzzleSession',
    'PuzzleStatus',
    'Study',
    'StudyEngine',
    'StudyError',
    'VariationTree',
]
