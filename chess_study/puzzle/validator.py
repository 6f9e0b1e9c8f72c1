"""
Quality validation for puzzle collections.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import chess
from tqdm import tqdm

from chess_study.oracle import fen_key
from chess_study.puzzle.loader import PuzzleLoader
from chess_study.puzzle.puzzle import DIFFICULTIES, Puzzle

logger = logging.getLogger(__name__)


@dataclass
class PuzzleSetReport:
    """Results of puzzle collection validation."""

    total_puzzles: int
    difficulty_counts: Dict[str, int]
    theme_counts: Dict[str, int]
    duplicates: List[Tuple[str, str]]  # (puzzle id, id of the earlier copy)
    opponent_endings: List[str]  # ids of puzzles with a line ending on an opponent move
    load_errors: List[str]
    average_solution_length: float

    @property
    def is_valid(self) -> bool:
        return not self.duplicates and not self.load_errors

    def to_markdown(self) -> str:
        """Generate markdown validation report."""
        lines = [
            "# Puzzle Set Validation Report",
            "",
            f"**Generated**: {datetime.now().isoformat()}",
            "",
            "## Summary",
            "",
            f"- **Total Puzzles**: {self.total_puzzles:,}",
            f"- **Average Solution Length**: {self.average_solution_length:.1f} plies",
            f"- **Duplicates**: {len(self.duplicates):,}",
            f"- **Load Errors**: {len(self.load_errors):,}",
            f"- **Status**: {'✅ PASS' if self.is_valid else '❌ FAIL'}",
            "",
            "## Difficulty",
            "",
            "| Difficulty | Count | Percentage |",
            "|------------|-------|------------|",
        ]

        for difficulty in DIFFICULTIES:
            count = self.difficulty_counts.get(difficulty, 0)
            pct = count / self.total_puzzles * 100 if self.total_puzzles else 0.0
            lines.append(f"| {difficulty.capitalize()} | {count:,} | {pct:.1f}% |")

        if self.theme_counts:
            lines.extend(["", "## Themes", "", "| Theme | Count |", "|-------|-------|"])
            for theme, count in sorted(self.theme_counts.items(), key=lambda item: (-item[1], item[0])):
                lines.append(f"| {theme} | {count:,} |")

        if self.duplicates:
            lines.extend(["", "## Duplicates", ""])
            for puzzle_id, original_id in self.duplicates[:10]:
                lines.append(f"- {puzzle_id} duplicates {original_id}")
            if len(self.duplicates) > 10:
                lines.append(f"- ... and {len(self.duplicates) - 10} more")

        if self.opponent_endings:
            lines.extend(["", "## Lines Ending On An Opponent Move", ""])
            for puzzle_id in self.opponent_endings[:10]:
                lines.append(f"- {puzzle_id}")
            if len(self.opponent_endings) > 10:
                lines.append(f"- ... and {len(self.opponent_endings) - 10} more")

        if self.load_errors:
            lines.extend(["", "## Load Errors", ""])
            for error in self.load_errors[:10]:
                lines.append(f"- {error}")
            if len(self.load_errors) > 10:
                lines.append(f"- ... and {len(self.load_errors) - 10} more")

        return "\n".join(lines)


class PuzzleSetValidator:
    """Validate a collection of puzzles."""

    def __init__(self, puzzles: Iterable[Puzzle], load_errors: Optional[List[str]] = None):
        """
        Initialize puzzle set validator.

        Args:
            puzzles: Puzzles to check
            load_errors: Errors collected while loading the collection
        """
        self.puzzles = list(puzzles)
        self.load_errors = list(load_errors or [])
        self.report: Optional[PuzzleSetReport] = None
        logger.info(f"Initialized validator for {len(self.puzzles)} puzzles")

    @classmethod
    def from_path(cls, path: Path, max_puzzles: Optional[int] = None) -> "PuzzleSetValidator":
        """
        Load a PGN file or directory and validate what it holds.

        Raises:
            FileNotFoundError: If the path does not exist
        """
        if not path.exists():
            raise FileNotFoundError(f"Puzzle collection not found: {path}")

        loader = PuzzleLoader(max_puzzles=max_puzzles)
        puzzles = loader.load(path)
        return cls(puzzles, load_errors=loader.errors)

    def check_duplicates(self) -> List[Tuple[str, str]]:
        """
        Detect puzzles with the same start position and the same first move.

        Returns:
            (puzzle id, id of the first puzzle seen with that key) pairs
        """
        seen: Dict[Tuple[int, str], str] = {}
        duplicates = []

        for puzzle in tqdm(self.puzzles, desc="Checking duplicates", disable=len(self.puzzles) < 100):
            key = (fen_key(puzzle.fen), puzzle.main_line[0])
            if key in seen:
                duplicates.append((puzzle.id, seen[key]))
            else:
                seen[key] = puzzle.id

        if duplicates:
            logger.warning(f"Found {len(duplicates)} duplicate puzzles")
        return duplicates

    def check_line_endings(self) -> List[str]:
        """
        Find puzzles with a solution line that ends on the opponent's move.

        Such a puzzle is solved by the automatic reply, never by the player.
        """
        flagged = []

        for puzzle in tqdm(self.puzzles, desc="Checking solution lines", disable=len(self.puzzles) < 100):
            first_mover = chess.Board(puzzle.fen).turn
            for line in puzzle.solution_lines:
                last_mover = first_mover if len(line) % 2 == 1 else not first_mover
                if last_mover != puzzle.player_color:
                    flagged.append(puzzle.id)
                    break

        return flagged

    def difficulty_distribution(self) -> Dict[str, int]:
        return dict(Counter(puzzle.difficulty for puzzle in self.puzzles))

    def theme_distribution(self) -> Dict[str, int]:
        return dict(Counter(theme for puzzle in self.puzzles for theme in puzzle.themes))

    def generate_report(self, output_path: Optional[Path] = None) -> str:
        """
        Generate comprehensive validation report.

        Args:
            output_path: If provided, write report to file

        Returns:
            Markdown-formatted report string
        """
        logger.info("Generating puzzle set report...")

        lengths = [len(puzzle.main_line) for puzzle in self.puzzles]
        report = PuzzleSetReport(
            total_puzzles=len(self.puzzles),
            difficulty_counts=self.difficulty_distribution(),
            theme_counts=self.theme_distribution(),
            duplicates=self.check_duplicates(),
            opponent_endings=self.check_line_endings(),
            load_errors=self.load_errors,
            average_solution_length=sum(lengths) / len(lengths) if lengths else 0.0,
        )
        self.report = report

        report_md = report.to_markdown()

        if output_path is not None:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(report_md)
            logger.info(f"Validation report written to: {output_path}")

        return report_md
