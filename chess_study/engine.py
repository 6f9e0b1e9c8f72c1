"""
Study Engine

The single object a UI talks to. It owns the variation tree, the optional
puzzle session and the result of the last operation; a rendering layer
reads snapshot() after every call to redraw its board and move list.

All operations run synchronously to completion. A failed operation raises
a StudyError and leaves tree, cursor, puzzle state and last_result as they
were.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import chess

from chess_study.analysis import PositionAnalysis, StudyStatistics, analyze_position, tree_statistics
from chess_study.config import EngineConfig
from chess_study.errors import PuzzleError
from chess_study.oracle import GameStatus, MoveInput, MoveOracle
from chess_study.puzzle.puzzle import Puzzle
from chess_study.puzzle.session import Hint, PuzzleResult, PuzzleSession, PuzzleStatus
from chess_study.record.parser import GameRecord
from chess_study.tree.node import PositionNode
from chess_study.tree.variation_tree import VariationTree

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MoveResult:
    """
    Result of a submitted move.

    Attributes:
        node: Node of the submitted move
        created: A new node was added (False when an explored move was reused)
        puzzle: Puzzle evaluation, None outside puzzle mode or for free exploration
    """

    node: PositionNode
    created: bool
    puzzle: Optional[PuzzleResult] = None


@dataclass(frozen=True)
class EngineSnapshot:
    """Consistent view of the engine state for rendering."""

    tree: VariationTree
    cursor: PositionNode
    last_result: Optional[MoveResult]
    game_status: GameStatus
    puzzle_status: Optional[PuzzleStatus]


class StudyEngine:
    """
    Variation tree engine with an optional puzzle mode.

    Attributes:
        config: Engine configuration
        tree: The variation tree
        session: Active puzzle session (None outside puzzle mode)
        last_result: Result of the last successful move submission
    """

    def __init__(
        self,
        fen: str = chess.STARTING_FEN,
        config: Optional[EngineConfig] = None,
        oracle: Optional[MoveOracle] = None,
    ):
        self.config = config or EngineConfig()
        self.tree = VariationTree(fen, oracle=oracle, max_import_plies=self.config.max_import_plies)
        self.session: Optional[PuzzleSession] = None
        self.last_result: Optional[MoveResult] = None

    @property
    def cursor(self) -> PositionNode:
        return self.tree.cursor

    @property
    def puzzle(self) -> Optional[Puzzle]:
        return self.session.puzzle if self.session else None

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            tree=self.tree,
            cursor=self.tree.cursor,
            last_result=self.last_result,
            game_status=self.tree.game_status(),
            puzzle_status=self.session.status if self.session else None,
        )

    # ------------------------------------------------------------------
    # Moves and navigation
    # ------------------------------------------------------------------

    def submit_move(self, move: MoveInput) -> MoveResult:
        """
        Play a move at the cursor; in puzzle mode, evaluate it.

        Raises:
            IllegalMove: If the move is illegal; nothing changes
        """
        parent = self.tree.cursor
        size = len(self.tree)

        node = self.tree.submit_move(move)
        created = len(self.tree) > size

        evaluation = self.session.on_move(parent, node) if self.session else None

        self.last_result = MoveResult(node=node, created=created, puzzle=evaluation)
        return self.last_result

    def evaluate_puzzle_move(self, move: MoveInput) -> Optional[PuzzleResult]:
        """
        Submit a move in puzzle mode and return its evaluation.

        Raises:
            PuzzleError: If no puzzle is loaded
            IllegalMove: If the move is illegal
        """
        if self.session is None:
            raise PuzzleError("No puzzle loaded")
        return self.submit_move(move).puzzle

    def undo(self) -> PositionNode:
        node = self.tree.undo()
        self.last_result = None
        return node

    def redo(self, child_index: int = 0) -> PositionNode:
        node = self.tree.redo(child_index)
        self.last_result = None
        return node

    advance = redo

    def jump_to(self, node_id) -> PositionNode:
        node = self.tree.jump_to(node_id)
        self.last_result = None
        return node

    def promote_line(self, node_id) -> PositionNode:
        return self.tree.promote_line(node_id)

    def reset(self, fen: Optional[str] = None) -> PositionNode:
        """Start a fresh tree; leaves puzzle mode."""
        root = self.tree.reset(fen)
        self._end_puzzle()
        self.last_result = None
        return root

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def import_record(self, text: str, merge: bool = False) -> GameRecord:
        """
        Load a game record into the tree; leaves puzzle mode.

        Raises:
            ParseError: On malformed input; nothing changes
        """
        record = self.tree.import_record(text, merge=merge)
        self._end_puzzle()
        self.last_result = None
        return record

    def export_record(self, main_line_only: Optional[bool] = None) -> str:
        if main_line_only is None:
            main_line_only = self.config.export_main_line_only
        return self.tree.export_record(main_line_only=main_line_only)

    # ------------------------------------------------------------------
    # Puzzle mode
    # ------------------------------------------------------------------

    def load_puzzle(self, puzzle: Puzzle) -> PuzzleSession:
        """Reset the tree to the puzzle position and enter puzzle mode."""
        self.session = PuzzleSession(self.tree, puzzle, self.config)
        self.last_result = None
        return self.session

    def clear_puzzle(self):
        """Leave puzzle mode, keeping the tree as it is."""
        self._end_puzzle()

    def _end_puzzle(self):
        if self.session is not None:
            logger.info(f"Leaving puzzle mode ({self.session.puzzle.title})")
            self.session = None

    def _require_session(self) -> PuzzleSession:
        if self.session is None:
            raise PuzzleError("No puzzle loaded")
        return self.session

    def reset_to_last_correct(self) -> PositionNode:
        node = self._require_session().reset_to_last_correct()
        self.last_result = None
        return node

    def hint(self) -> Optional[Hint]:
        return self._require_session().hint()

    def solution_moves(self) -> List[str]:
        return self._require_session().solution_moves()

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze(self) -> PositionAnalysis:
        """Teaching summary of the position at the cursor."""
        return analyze_position(self.cursor.fen)

    def statistics(self) -> StudyStatistics:
        """Move, annotation and phase counts of the whole tree."""
        return tree_statistics(self.tree)
