"""
Puzzle evaluation over a variation tree.

A PuzzleSession links nodes of the user's (visible) tree to nodes of the
puzzle's solution tree. A player move is evaluated only from a linked node:

    linked node, player to move
        ├── move matches a solution child ─┬─ child is a leaf  → SOLVED
        │   (or a transposition at the     └─ otherwise        → CORRECT,
        │    same ply)                        opponent reply auto-played
        └── no match                                           → INCORRECT

Moves from unlinked nodes (inside a deviation) and moves after the puzzle
is solved are free exploration and are not evaluated.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from chess_study.config import EngineConfig
from chess_study.puzzle.puzzle import Puzzle
from chess_study.tree.node import PositionNode
from chess_study.tree.variation_tree import VariationTree

logger = logging.getLogger(__name__)


class PuzzleOutcome(Enum):
    """Evaluation of one player move."""
    CORRECT = "correct"
    SOLVED = "solved"
    INCORRECT = "incorrect"


class PuzzleStatus(Enum):
    """State of the puzzle as a whole."""
    ACTIVE = "active"
    SOLVED = "solved"
    FAILED = "failed"


@dataclass(frozen=True)
class PuzzleResult:
    """
    Result of an evaluated move.

    Attributes:
        outcome: CORRECT, SOLVED or INCORRECT
        node: Visible node of the evaluated move
        reply: Visible node of the auto-played opponent reply, if any
        alternate: The move was correct but not the main solution move
    """

    outcome: PuzzleOutcome
    node: PositionNode
    reply: Optional[PositionNode] = None
    alternate: bool = False

    @property
    def is_correct(self) -> bool:
        return self.outcome is not PuzzleOutcome.INCORRECT


@dataclass
class PuzzleProgress:
    """Counters for one puzzle attempt."""

    attempts: int = 0
    correct_moves: int = 0
    mistakes: int = 0
    alternate_moves: int = 0
    hints_used: int = 0
    score: float = 0.0
    solved: bool = False

    @property
    def accuracy(self) -> float:
        """Share of evaluated moves that were correct (0.0 when none)."""
        return self.correct_moves / self.attempts if self.attempts else 0.0


@dataclass(frozen=True)
class Hint:
    """The main solution move at the last correct position."""

    san: str
    comment: str = ""


class PuzzleSession:
    """Evaluate moves played in a variation tree against a puzzle."""

    def __init__(
        self,
        tree: VariationTree,
        puzzle: Puzzle,
        config: Optional[EngineConfig] = None,
    ):
        """
        Start a puzzle: reset the tree to the puzzle position.

        When the player is not to move first and auto_advance is on, the
        first solution move is played for the opponent right away.

        Args:
            tree: Visible tree the user plays in (it is reset)
            puzzle: Puzzle to solve
            config: Engine configuration (uses defaults if None)
        """
        self.tree = tree
        self.puzzle = puzzle
        self.config = config or EngineConfig()

        self.solution = puzzle.solution_tree(tree.oracle)
        self._by_ply: Dict[int, List[PositionNode]] = defaultdict(list)
        for node in self.solution:
            self._by_ply[node.ply].append(node)

        self._links: Dict[int, PositionNode] = {}
        self.progress = PuzzleProgress()
        self.status = PuzzleStatus.ACTIVE

        tree.reset(puzzle.fen)
        tree.headers = {
            name: value for name, value in puzzle.headers.items() if name not in ("FEN", "SetUp")
        }
        self._link(tree.root, self.solution.root)
        self.last_correct = tree.root

        logger.info(f"Puzzle started: {puzzle.title} ({len(puzzle.solution_lines)} lines)")

        if tree.root.turn != puzzle.player_color and self.config.auto_advance:
            self._play_reply(self.solution.root)

    # ------------------------------------------------------------------

    def _link(self, node: PositionNode, solution_node: PositionNode):
        self._links[node.node_id] = solution_node
        if not node.is_root:
            node.is_solution = True
            node.is_deviation = False

    def solution_node_for(self, node: PositionNode) -> Optional[PositionNode]:
        """Solution node a visible node is linked to, if any."""
        return self._links.get(node.node_id)

    def _match(self, solution_parent: PositionNode, node: PositionNode) -> Optional[PositionNode]:
        for candidate in solution_parent.children:
            if candidate.move == node.move:
                return candidate

        # Transposition into another solution line at the same depth
        for candidate in self._by_ply.get(node.ply, []):
            if candidate.position_key == node.position_key:
                return candidate

        return None

    def _play_reply(self, solution_node: PositionNode) -> Optional[PuzzleResult]:
        """Play the first registered reply; return SOLVED if it ends the line."""
        reply_solution = solution_node.children[0]
        reply = self.tree.submit_move(reply_solution.move)
        self._link(reply, reply_solution)
        self.last_correct = reply

        logger.debug(f"Auto-played reply {reply.san}")

        if reply_solution.is_leaf:
            return self._solve(PuzzleResult(PuzzleOutcome.SOLVED, reply))
        return None

    def _solve(self, result: PuzzleResult) -> PuzzleResult:
        self.status = PuzzleStatus.SOLVED
        self.progress.solved = True
        logger.info(
            f"Puzzle solved: {self.puzzle.title} "
            f"(attempts={self.progress.attempts}, score={self.progress.score:.2f})"
        )
        return result

    # ------------------------------------------------------------------

    def on_move(self, parent: PositionNode, node: PositionNode) -> Optional[PuzzleResult]:
        """
        Evaluate a move just played from `parent` to `node`.

        Returns:
            PuzzleResult for evaluated player moves, None for free exploration
        """
        if self.status is PuzzleStatus.SOLVED:
            return None

        solution_parent = self._links.get(parent.node_id)
        if solution_parent is None:
            return None

        match = self._match(solution_parent, node)

        if parent.turn != self.puzzle.player_color:
            # The user played the opponent's side; keep following the solution
            if match is None:
                return None
            self._link(node, match)
            self.last_correct = node
            if match.is_leaf:
                return self._solve(PuzzleResult(PuzzleOutcome.SOLVED, node))
            return None

        self.progress.attempts += 1

        if match is None:
            node.is_deviation = True
            self.last_correct = parent
            self.progress.mistakes += 1
            self.status = PuzzleStatus.FAILED
            logger.debug(f"Incorrect move {node.san} (mistakes={self.progress.mistakes})")
            return PuzzleResult(PuzzleOutcome.INCORRECT, node)

        alternate = match is not solution_parent.children[0]
        self._link(node, match)
        self.last_correct = node
        self.status = PuzzleStatus.ACTIVE
        self.progress.correct_moves += 1
        if alternate:
            self.progress.alternate_moves += 1
            self.progress.score += self.config.alternate_credit
        else:
            self.progress.score += 1.0

        logger.debug(f"Correct move {node.san}{' (alternate)' if alternate else ''}")

        if match.is_leaf:
            return self._solve(PuzzleResult(PuzzleOutcome.SOLVED, node, alternate=alternate))

        if not self.config.auto_advance:
            return PuzzleResult(PuzzleOutcome.CORRECT, node, alternate=alternate)

        solved = self._play_reply(match)
        reply = self.tree.cursor
        if solved is not None:
            return PuzzleResult(PuzzleOutcome.SOLVED, node, reply=reply, alternate=alternate)
        return PuzzleResult(PuzzleOutcome.CORRECT, node, reply=reply, alternate=alternate)

    def _anchor(self) -> PositionNode:
        """Solution node at the cursor when it is on the path, else at the last correct node."""
        linked = self._links.get(self.tree.cursor.node_id)
        if linked is not None:
            return linked
        return self._links[self.last_correct.node_id]

    def reset_to_last_correct(self) -> PositionNode:
        """
        Move the cursor back to the last on-path node and re-arm evaluation.

        Deviation nodes stay in the tree.
        """
        node = self.tree.jump_to(self.last_correct.node_id)
        if self.status is PuzzleStatus.FAILED:
            self.status = PuzzleStatus.ACTIVE
        logger.debug(f"Reset to last correct node {node.node_id}")
        return node

    def hint(self) -> Optional[Hint]:
        """
        Reveal the main solution move at the cursor, or at the last correct
        position when the cursor is off the solution path.

        Each hint costs `hint_penalty` points. Returns None once solved.
        """
        if self.status is PuzzleStatus.SOLVED:
            return None

        solution_node = self._anchor()
        if solution_node.is_leaf:
            return None

        upcoming = solution_node.children[0]
        self.progress.hints_used += 1
        self.progress.score = max(0.0, self.progress.score - self.config.hint_penalty)

        logger.debug(f"Hint requested: {upcoming.san}")
        return Hint(upcoming.san, upcoming.comment)

    def solution_moves(self) -> List[str]:
        """Remaining main solution from the cursor (or last correct position), in SAN."""
        moves = []
        node = self._anchor()
        while node.children:
            node = node.children[0]
            moves.append(node.san)
        return moves

    def __repr__(self) -> str:
        return (
            f"PuzzleSession(puzzle={self.puzzle.id!r}, status={self.status.value}, "
            f"score={self.progress.score:.2f})"
        )
