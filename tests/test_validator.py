"""Tests for puzzle collection validator."""

import chess
import pytest

from chess_study.puzzle import Puzzle, PuzzleSetValidator, puzzles_to_pgn


@pytest.fixture
def puzzles():
    return [
        Puzzle(fen=chess.STARTING_FEN, solution_lines=[["e4", "e5", "Nf3"]], themes=["opening"]),
        Puzzle(fen=chess.STARTING_FEN, solution_lines=[["e4", "c5", "Nf3"]], themes=["opening"]),
        Puzzle(
            fen=chess.STARTING_FEN,
            solution_lines=[["d4", "d5"]],
            difficulty="intermediate",
            themes=["opening", "tactics"],
        ),
    ]


class TestPuzzleSetValidator:
    """Test PuzzleSetValidator class."""

    def test_check_duplicates(self, puzzles):
        validator = PuzzleSetValidator(puzzles)

        duplicates = validator.check_duplicates()

        assert duplicates == [(puzzles[1].id, puzzles[0].id)]

    def test_check_line_endings(self, puzzles):
        validator = PuzzleSetValidator(puzzles)

        assert validator.check_line_endings() == [puzzles[2].id]

    def test_distributions(self, puzzles):
        validator = PuzzleSetValidator(puzzles)

        assert validator.difficulty_distribution() == {"beginner": 2, "intermediate": 1}
        assert validator.theme_distribution() == {"opening": 3, "tactics": 1}

    def test_generate_report(self, puzzles, tmp_path):
        validator = PuzzleSetValidator(puzzles)
        output_path = tmp_path / "reports" / "report.md"

        report = validator.generate_report(output_path=output_path)

        assert "# Puzzle Set Validation Report" in report
        assert "**Total Puzzles**: 3" in report
        assert "FAIL" in report
        assert output_path.read_text() == report
        assert validator.report.duplicates
        assert not validator.report.is_valid

    def test_clean_set_passes(self, puzzles):
        validator = PuzzleSetValidator(puzzles[:1])

        report = validator.generate_report()

        assert "PASS" in report
        assert validator.report.is_valid
        assert validator.report.average_solution_length == 3.0

    def test_from_path(self, puzzles, tmp_path):
        path = tmp_path / "set.pgn"
        path.write_text(puzzles_to_pgn(puzzles[:1]) + '\n[Event "Bad"]\n\n1. e5 *\n')

        validator = PuzzleSetValidator.from_path(path)

        assert len(validator.puzzles) == 1
        assert len(validator.load_errors) == 1

        validator.generate_report()
        assert not validator.report.is_valid

    def test_from_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PuzzleSetValidator.from_path(tmp_path / "missing.pgn")

    def test_empty_set(self):
        validator = PuzzleSetValidator([])

        report = validator.generate_report()

        assert "**Total Puzzles**: 0" in report
