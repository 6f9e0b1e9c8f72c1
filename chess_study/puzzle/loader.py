"""
Puzzle collection loader for PGN files.
"""

import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from chess_study.errors import StudyError
from chess_study.oracle import MoveOracle
from chess_study.puzzle.puzzle import DIFFICULTIES, Puzzle
from chess_study.record.parser import RecordParser, split_records

logger = logging.getLogger(__name__)


class PuzzleLoader:
    """Stream puzzles from PGN collections, skipping malformed games."""

    def __init__(
        self,
        max_puzzles: Optional[int] = None,
        themes: Optional[Iterable[str]] = None,
        difficulty: Optional[str] = None,
        oracle: Optional[MoveOracle] = None,
        max_plies: int = 2000,
    ):
        """
        Initialize puzzle loader with filtering criteria.

        Args:
            max_puzzles: Maximum number of puzzles to load (None = unlimited)
            themes: Keep only puzzles with at least one of these themes
            difficulty: Keep only puzzles of this difficulty
            oracle: Move oracle used by the record parser
            max_plies: Largest number of moves accepted per game

        Raises:
            ValueError: If difficulty is not a known level
        """
        if difficulty is not None and difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty: {difficulty}")

        self.max_puzzles = max_puzzles
        self.themes = {theme.lower() for theme in themes} if themes else None
        self.difficulty = difficulty
        self.parser = RecordParser(oracle, max_plies=max_plies)

        self.errors: List[str] = []
        self._puzzles_loaded = 0

    def parse_text(self, text: str, source: str = "<text>") -> Iterator[Puzzle]:
        """
        Stream puzzles from PGN text.

        Args:
            text: One or more games
            source: Name used in error messages

        Yields:
            Puzzle objects that pass the filters
        """
        game_number = 0

        for offset, chunk in split_records(text):
            try:
                for record in self.parser.iter_games(chunk, base_offset=offset):
                    if self._limit_reached():
                        return

                    game_number += 1
                    try:
                        puzzle = Puzzle.from_record(
                            record, index=game_number, oracle=self.parser.oracle
                        )
                    except (StudyError, ValueError) as e:
                        self._record_error(source, game_number, e)
                        continue

                    if self._passes_filter(puzzle):
                        self._puzzles_loaded += 1
                        yield puzzle

            except StudyError as e:
                game_number += 1
                self._record_error(source, game_number, e)
                continue

    def parse_file(self, pgn_path: Path) -> Iterator[Puzzle]:
        """
        Stream puzzles from a single PGN file.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        if not pgn_path.exists():
            raise FileNotFoundError(f"PGN file not found: {pgn_path}")

        logger.info(f"Loading puzzles from: {pgn_path}")
        before = self._puzzles_loaded

        text = pgn_path.read_text(encoding="utf-8", errors="ignore")
        yield from self.parse_text(text, source=str(pgn_path))

        logger.info(f"Loaded {self._puzzles_loaded - before} puzzles from {pgn_path}")

    def parse_directory(self, dir_path: Path) -> Iterator[Puzzle]:
        """
        Stream puzzles from all PGN files in a directory.

        Raises:
            NotADirectoryError: If the path is not a directory
        """
        if not dir_path.is_dir():
            raise NotADirectoryError(f"Not a directory: {dir_path}")

        pgn_files = sorted(dir_path.glob("*.pgn"))
        logger.info(f"Found {len(pgn_files)} PGN files in {dir_path}")

        for pgn_file in pgn_files:
            if self._limit_reached():
                break
            yield from self.parse_file(pgn_file)

    def load(self, path: Path) -> List[Puzzle]:
        """Load every puzzle from a file or a directory."""
        if path.is_dir():
            return list(self.parse_directory(path))
        return list(self.parse_file(path))

    def _limit_reached(self) -> bool:
        return self.max_puzzles is not None and self._puzzles_loaded >= self.max_puzzles

    def _passes_filter(self, puzzle: Puzzle) -> bool:
        if self.difficulty is not None and puzzle.difficulty != self.difficulty:
            return False

        if self.themes is not None and not self.themes.intersection(puzzle.themes):
            return False

        return True

    def _record_error(self, source: str, game_number: int, error: Exception):
        message = f"{source}: game {game_number}: {error}"
        logger.warning(f"Skipping puzzle: {message}")
        self.errors.append(message)

    def get_puzzles_loaded(self) -> int:
        """Get count of puzzles loaded so far."""
        return self._puzzles_loaded
