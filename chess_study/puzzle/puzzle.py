"""
Puzzle definitions.

A puzzle is a starting position plus one or more solution lines. Lines
sharing a prefix are merged into a solution tree, so the acceptable moves at
any decision point are the children of the matching solution node. The
first registered line is the main solution.
"""

import hashlib
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

import chess
import chess.pgn

from chess_study.oracle import MoveOracle, PythonChessOracle
from chess_study.record.parser import GameRecord
from chess_study.tree.variation_tree import VariationTree

logger = logging.getLogger(__name__)

DIFFICULTIES = ("beginner", "intermediate", "advanced")

# "?", "??" and "?!" mark a line as a refutation rather than a solution
MISTAKE_NAGS = {
    chess.pgn.NAG_MISTAKE,
    chess.pgn.NAG_BLUNDER,
    chess.pgn.NAG_DUBIOUS_MOVE,
}


@dataclass
class Puzzle:
    """A starting position with its solution lines."""

    fen: str
    solution_lines: List[List[str]]
    player_color: Optional[chess.Color] = None
    id: str = ""
    title: str = ""
    description: str = ""
    themes: List[str] = field(default_factory=list)
    difficulty: str = "beginner"
    headers: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[Tuple[str, ...], str] = field(default_factory=dict)
    """Comments keyed by the SAN path from the start position"""
    oracle: Optional[MoveOracle] = field(default=None, repr=False, compare=False)
    """Move oracle validating the lines (default: PythonChessOracle)"""

    def __post_init__(self):
        """Validate the puzzle and normalize its lines to SAN."""
        if self.oracle is None:
            self.oracle = PythonChessOracle()
        oracle = self.oracle
        self.fen = oracle.normalize_fen(self.fen)

        if self.player_color is None:
            self.player_color = oracle.turn(self.fen)

        if self.difficulty not in DIFFICULTIES:
            raise ValueError(
                f"difficulty should be one of {', '.join(DIFFICULTIES)}, got {self.difficulty}"
            )

        lines = [list(line) for line in self.solution_lines if line]
        if not lines:
            raise ValueError("Puzzle needs at least one non-empty solution line")

        # Replaying every line raises IllegalMove on an invalid solution
        self.solution_lines = [self._normalize_line(oracle, line) for line in lines]

        if not self.id:
            digest = hashlib.sha1(
                (self.fen + "|" + "|".join(" ".join(l) for l in self.solution_lines)).encode()
            )
            self.id = digest.hexdigest()[:12]

        if not self.title:
            self.title = f"Puzzle {self.id}"

    def _normalize_line(self, oracle: MoveOracle, line: List[str]) -> List[str]:
        fen = self.fen
        sans = []
        for move in line:
            applied = oracle.apply_move(fen, move)
            sans.append(applied.san)
            fen = applied.fen
        return sans

    @property
    def main_line(self) -> List[str]:
        return self.solution_lines[0]

    @property
    def player_move_count(self) -> int:
        """Number of player moves in the main solution."""
        player_first = self.oracle.turn(self.fen) == self.player_color
        count = len(self.main_line)
        return math.ceil(count / 2) if player_first else count // 2

    def solution_tree(self, oracle: Optional[MoveOracle] = None) -> VariationTree:
        """
        Build the solution tree: every line merged from the start position.

        Nodes are flagged as solution nodes and carry the line annotations.
        Uses the puzzle's own oracle unless another one is given.
        """
        tree = VariationTree(self.fen, oracle=oracle or self.oracle)

        for line in self.solution_lines:
            tree.jump_to(tree.root.node_id)
            for i, san in enumerate(line):
                node = tree.submit_move(san)
                node.is_solution = True
                comment = self.annotations.get(tuple(line[: i + 1]))
                if comment and not node.comment:
                    node.comment = comment

        tree.jump_to(tree.root.node_id)
        return tree

    @classmethod
    def from_record(
        cls, record: GameRecord, index: int = 1, oracle: Optional[MoveOracle] = None
    ) -> "Puzzle":
        """
        Create a puzzle from a parsed game record.

        The side to move at the start is the player. Every line of the record
        is a solution line unless one of the player's moves in it is marked
        as a mistake ("?", "??" or "?!").

        Args:
            record: Parsed record
            index: Position of the record in its collection, used for titles
            oracle: Move oracle for the puzzle (default: PythonChessOracle)

        Raises:
            ValueError: If the record has no usable solution line
        """
        player = chess.Board(record.start_fen).turn

        lines: List[List[str]] = []
        annotations: Dict[Tuple[str, ...], str] = {}
        for line in record.lines():
            board = chess.Board(record.start_fen)
            rejected = False
            for move in line:
                if board.turn == player and MISTAKE_NAGS.intersection(move.nags):
                    rejected = True
                    break
                board.push(move.move)
            if rejected:
                continue

            sans = [move.san for move in line]
            lines.append(sans)
            for i, move in enumerate(line):
                if move.comment:
                    annotations.setdefault(tuple(sans[: i + 1]), move.comment)

        if not lines:
            raise ValueError("Record has no solution line")

        headers = dict(record.headers)
        themes = _themes_from_headers(headers) or detect_themes(record.start_fen, lines[0], headers)

        difficulty = headers.get("Difficulty", "").strip().lower()
        if difficulty not in DIFFICULTIES:
            difficulty = estimate_difficulty(record.max_depth(), record.ply_count())

        event = headers.get("Event", "").strip()
        title = headers.get("Title", "").strip()
        if not title:
            title = f"{event} - Puzzle {index}" if event and event != "?" else f"Puzzle {index}"

        puzzle = cls(
            fen=record.start_fen,
            solution_lines=lines,
            player_color=player,
            id=headers.get("PuzzleId", ""),
            title=title,
            themes=themes,
            difficulty=difficulty,
            headers=headers,
            annotations=annotations,
            oracle=oracle,
        )
        puzzle.description = describe(puzzle)
        return puzzle

    def __repr__(self) -> str:
        return (
            f"Puzzle(id={self.id!r}, title={self.title!r}, lines={len(self.solution_lines)}, "
            f"difficulty={self.difficulty})"
        )


def _themes_from_headers(headers: Dict[str, str]) -> List[str]:
    value = headers.get("Themes", "")
    return [theme for theme in re.split(r"[,\s]+", value.strip().lower()) if theme]


def detect_themes(fen: str, line: List[str], headers: Optional[Dict[str, str]] = None) -> List[str]:
    """
    Guess puzzle themes from the main solution.

    Args:
        fen: Starting position
        line: Main solution in SAN
        headers: Record headers (Opening/ECO add the "opening" theme)

    Returns:
        Sorted theme names
    """
    headers = headers or {}
    themes = set()

    if headers.get("Opening") or headers.get("ECO"):
        themes.add("opening")

    board = chess.Board(fen)
    for san in line:
        move = board.parse_san(san)
        if board.is_capture(move):
            themes.add("tactics")
        if board.is_castling(move):
            themes.add("castling")
        if move.promotion:
            themes.add("promotion")
        board.push(move)

    if board.is_checkmate():
        themes.add("mate")

    if len(board.piece_map()) <= 7:
        themes.add("endgame")

    return sorted(themes)


def estimate_difficulty(max_depth: int, node_count: int) -> str:
    """
    Rate a puzzle by its variation nesting depth and number of moves.

    Returns:
        "beginner", "intermediate" or "advanced"
    """
    if max_depth <= 3 and node_count <= 5:
        return "beginner"
    if max_depth <= 6 and node_count <= 15:
        return "intermediate"
    return "advanced"


def describe(puzzle: Puzzle) -> str:
    """One-paragraph description: players, themes, solution length, opening."""
    headers = puzzle.headers
    parts = []

    white, black = headers.get("White", "?"), headers.get("Black", "?")
    if white != "?" and black != "?":
        players = f"{white} vs {black}"
        date = headers.get("Date", "")
        if date and "?" not in date:
            players += f" ({date})"
        parts.append(players + ".")

    if puzzle.themes:
        parts.append(f"Themes: {', '.join(puzzle.themes)}.")

    moves = puzzle.player_move_count
    parts.append(f"Solution requires {moves} move{'s' if moves != 1 else ''}.")

    if headers.get("Opening"):
        parts.append(f"Opening: {headers['Opening']}.")

    return " ".join(parts)


def puzzles_to_pgn(puzzles: Iterable[Puzzle]) -> str:
    """
    Export a puzzle collection to PGN.

    Every solution line becomes a variation, merged on shared prefixes, and
    the Difficulty/Themes headers let Puzzle.from_record() restore them.
    """
    games = []

    for index, puzzle in enumerate(puzzles, start=1):
        game = chess.pgn.Game()
        for name in ("Event", "Site", "Date", "White", "Black", "ECO", "Opening"):
            if name in puzzle.headers:
                game.headers[name] = puzzle.headers[name]
        game.headers["Title"] = puzzle.title
        game.headers["Round"] = str(index)
        game.headers["Result"] = puzzle.headers.get("Result", "*")
        game.headers["PuzzleId"] = puzzle.id
        game.headers["Difficulty"] = puzzle.difficulty
        if puzzle.themes:
            game.headers["Themes"] = ", ".join(puzzle.themes)

        if puzzle.fen != chess.STARTING_FEN:
            game.setup(chess.Board(puzzle.fen))

        for line in puzzle.solution_lines:
            node = game
            for i, san in enumerate(line):
                move = node.board().parse_san(san)
                if node.has_variation(move):
                    node = node.variation(move)
                else:
                    comment = puzzle.annotations.get(tuple(line[: i + 1]), "")
                    node = node.add_variation(move, comment=comment)

        games.append(str(game))

    logger.info(f"Exported {len(games)} puzzles to PGN")
    return "\n\n".join(games) + "\n"
