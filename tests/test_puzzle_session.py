"""
Unit Tests for Puzzle Sessions

Tests for move evaluation in puzzle mode, focusing on:
    - Correct moves with automatic opponent replies
    - Solving, failing and retrying
    - Alternative solution lines and transpositions
    - Hints, scoring and free exploration
"""

import chess
import pytest

from chess_study.config import EngineConfig
from chess_study.puzzle import Puzzle, PuzzleOutcome, PuzzleSession, PuzzleStatus
from chess_study.tree import VariationTree


def play(session, tree, move):
    """Submit a move to the tree and let the session evaluate it."""
    parent = tree.cursor
    node = tree.submit_move(move)
    return session.on_move(parent, node)


@pytest.fixture
def opening_puzzle():
    return Puzzle(fen=chess.STARTING_FEN, solution_lines=[["e4", "e5", "Nf3"]])


@pytest.fixture
def tree():
    return VariationTree()


class TestPuzzleScenario:
    """The basic solve and fail paths."""

    def test_session_resets_tree(self, tree, opening_puzzle):
        tree.submit_move("d4")

        session = PuzzleSession(tree, opening_puzzle)

        assert len(tree) == 1
        assert tree.cursor is tree.root
        assert session.status is PuzzleStatus.ACTIVE

    def test_correct_move_auto_plays_reply(self, tree, opening_puzzle):
        session = PuzzleSession(tree, opening_puzzle)

        result = play(session, tree, "e4")

        assert result.outcome is PuzzleOutcome.CORRECT
        assert result.reply is not None
        assert result.reply.san == "e5"
        assert tree.cursor is result.reply
        assert tree.main_line_sans() == ["e4", "e5"]

    def test_last_move_solves(self, tree, opening_puzzle):
        session = PuzzleSession(tree, opening_puzzle)
        play(session, tree, "e4")

        result = play(session, tree, "Nf3")

        assert result.outcome is PuzzleOutcome.SOLVED
        assert session.status is PuzzleStatus.SOLVED
        assert session.progress.solved
        assert session.progress.score == 2.0

    def test_incorrect_move(self, tree, opening_puzzle):
        session = PuzzleSession(tree, opening_puzzle)

        result = play(session, tree, "d4")

        assert result.outcome is PuzzleOutcome.INCORRECT
        assert not result.is_correct
        assert result.node.is_deviation
        assert session.status is PuzzleStatus.FAILED
        assert session.progress.mistakes == 1

    def test_reset_to_last_correct_keeps_deviation(self, tree, opening_puzzle):
        session = PuzzleSession(tree, opening_puzzle)
        deviation = play(session, tree, "d4").node

        node = session.reset_to_last_correct()

        assert node is tree.root
        assert tree.cursor is tree.root
        assert deviation.node_id in tree
        assert len(tree) == 2
        assert session.status is PuzzleStatus.ACTIVE

    def test_retry_after_mistake(self, tree, opening_puzzle):
        session = PuzzleSession(tree, opening_puzzle)
        play(session, tree, "e4")
        play(session, tree, "Nc3")
        session.reset_to_last_correct()

        assert tree.cursor.san == "e5"

        result = play(session, tree, "Nf3")

        assert result.outcome is PuzzleOutcome.SOLVED
        assert session.progress.attempts == 3
        assert session.progress.accuracy == pytest.approx(2 / 3)

    def test_solution_nodes_flagged(self, tree, opening_puzzle):
        session = PuzzleSession(tree, opening_puzzle)
        play(session, tree, "e4")

        assert all(node.is_solution for node in tree.main_line())


class TestFreeExploration:
    """Moves outside the evaluated path return None."""

    def test_moves_after_deviation_not_evaluated(self, tree, opening_puzzle):
        session = PuzzleSession(tree, opening_puzzle)
        play(session, tree, "d4")

        assert play(session, tree, "d5") is None
        assert session.progress.attempts == 1

    def test_moves_after_solved_not_evaluated(self, tree, opening_puzzle):
        session = PuzzleSession(tree, opening_puzzle)
        play(session, tree, "e4")
        play(session, tree, "Nf3")

        assert play(session, tree, "Nc6") is None
        assert session.status is PuzzleStatus.SOLVED

    def test_user_plays_opponent_move(self, tree, opening_puzzle):
        """With auto_advance off the user may play the reply themselves."""
        session = PuzzleSession(tree, opening_puzzle, EngineConfig(auto_advance=False))

        first = play(session, tree, "e4")
        assert first.outcome is PuzzleOutcome.CORRECT
        assert first.reply is None

        assert play(session, tree, "e5") is None

        result = play(session, tree, "Nf3")
        assert result.outcome is PuzzleOutcome.SOLVED


class TestAlternatives:
    """Multiple solution lines and transpositions."""

    @pytest.fixture
    def two_line_puzzle(self):
        return Puzzle(
            fen=chess.STARTING_FEN,
            solution_lines=[["e4", "e5", "Nf3"], ["d4", "d5", "c4"]],
        )

    def test_alternate_line_accepted(self, tree, two_line_puzzle):
        session = PuzzleSession(tree, two_line_puzzle)

        result = play(session, tree, "d4")

        assert result.outcome is PuzzleOutcome.CORRECT
        assert result.alternate
        assert result.reply.san == "d5"

    def test_alternate_credit(self, tree, two_line_puzzle):
        session = PuzzleSession(tree, two_line_puzzle, EngineConfig(alternate_credit=0.5))
        play(session, tree, "d4")

        result = play(session, tree, "c4")

        assert result.outcome is PuzzleOutcome.SOLVED
        assert not result.alternate
        assert session.progress.alternate_moves == 1
        assert session.progress.score == pytest.approx(1.5)

    def test_first_line_reply_wins_ties(self, tree):
        puzzle = Puzzle(
            fen=chess.STARTING_FEN,
            solution_lines=[["e4", "e5", "Nf3"], ["e4", "c5", "Nf3"]],
        )
        session = PuzzleSession(tree, puzzle)

        result = play(session, tree, "e4")

        assert result.reply.san == "e5"

    def test_transposition_accepted(self, tree):
        """A move order reaching a solution position at the same depth counts."""
        puzzle = Puzzle(
            fen=chess.STARTING_FEN,
            solution_lines=[["Nf3", "Nf6", "d4", "d5"], ["d4", "Nf6", "c4"]],
        )
        session = PuzzleSession(tree, puzzle, EngineConfig(auto_advance=False))

        play(session, tree, "d4")
        play(session, tree, "Nf6")
        result = play(session, tree, "Nf3")

        assert result.is_correct
        assert result.alternate

        linked = session.solution_node_for(result.node)
        assert linked.san == "d4"
        assert [node.san for node in linked.ancestors()][:2] == ["Nf6", "Nf3"]
        assert session.hint().san == "d5"

    def test_player_is_black(self, tree):
        """When the opponent moves first, its move is played on load."""
        puzzle = Puzzle(
            fen=chess.STARTING_FEN,
            solution_lines=[["e4", "e5", "Nf3", "Nc6"]],
            player_color=chess.BLACK,
        )

        session = PuzzleSession(tree, puzzle)

        assert tree.cursor.san == "e4"
        assert session.last_correct is tree.cursor

        result = play(session, tree, "e5")
        assert result.outcome is PuzzleOutcome.CORRECT
        assert result.reply.san == "Nf3"

        assert play(session, tree, "Nc6").outcome is PuzzleOutcome.SOLVED

    def test_reply_ending_line_solves(self, tree):
        puzzle = Puzzle(fen=chess.STARTING_FEN, solution_lines=[["e4", "e5"]])
        session = PuzzleSession(tree, puzzle)

        result = play(session, tree, "e4")

        assert result.outcome is PuzzleOutcome.SOLVED
        assert result.reply.san == "e5"
        assert session.status is PuzzleStatus.SOLVED


class TestHints:
    """Tests for hint() and solution_moves()."""

    def test_hint_reveals_main_move(self, tree, opening_puzzle):
        session = PuzzleSession(tree, opening_puzzle)

        hint = session.hint()

        assert hint.san == "e4"
        assert session.progress.hints_used == 1

    def test_hint_penalty(self, tree, opening_puzzle):
        session = PuzzleSession(tree, opening_puzzle, EngineConfig(hint_penalty=0.25))
        play(session, tree, "e4")

        session.hint()

        assert session.progress.score == pytest.approx(0.75)

    def test_score_never_negative(self, tree, opening_puzzle):
        session = PuzzleSession(tree, opening_puzzle, EngineConfig(hint_penalty=1.0))

        session.hint()
        session.hint()

        assert session.progress.score == 0.0

    def test_hint_after_mistake_uses_last_correct(self, tree, opening_puzzle):
        session = PuzzleSession(tree, opening_puzzle)
        play(session, tree, "e4")
        play(session, tree, "Nc3")

        assert session.hint().san == "Nf3"

    def test_hint_comment(self, tree):
        puzzle = Puzzle(
            fen=chess.STARTING_FEN,
            solution_lines=[["e4"]],
            annotations={("e4",): "Control the centre"},
        )
        session = PuzzleSession(tree, puzzle)

        assert session.hint().comment == "Control the centre"

    def test_no_hint_when_solved(self, tree, opening_puzzle):
        session = PuzzleSession(tree, opening_puzzle)
        play(session, tree, "e4")
        play(session, tree, "Nf3")

        assert session.hint() is None

    def test_solution_moves(self, tree, opening_puzzle):
        session = PuzzleSession(tree, opening_puzzle)

        assert session.solution_moves() == ["e4", "e5", "Nf3"]

        play(session, tree, "e4")
        assert session.solution_moves() == ["Nf3"]


class TestNavigationInPuzzle:
    """Evaluation state follows the cursor when the user steps back."""

    def test_mistake_after_undo_resets_to_its_parent(self, tree, opening_puzzle):
        session = PuzzleSession(tree, opening_puzzle)
        play(session, tree, "e4")
        tree.undo()
        tree.undo()

        result = play(session, tree, "d4")
        node = session.reset_to_last_correct()

        assert result.outcome is PuzzleOutcome.INCORRECT
        assert node is tree.root, "retry should return to where the mistake was played"
        assert tree.cursor is tree.root

    def test_retry_after_undo_then_solve(self, tree, opening_puzzle):
        session = PuzzleSession(tree, opening_puzzle)
        play(session, tree, "e4")
        tree.undo()
        tree.undo()
        play(session, tree, "d4")
        session.reset_to_last_correct()

        assert play(session, tree, "e4").outcome is PuzzleOutcome.CORRECT
        assert play(session, tree, "Nf3").outcome is PuzzleOutcome.SOLVED

    def test_hint_follows_cursor(self, tree):
        puzzle = Puzzle(fen=chess.STARTING_FEN, solution_lines=[["e4", "e5", "Bc4"]])
        session = PuzzleSession(tree, puzzle)
        play(session, tree, "e4")
        tree.undo()
        tree.undo()

        hint = session.hint()

        assert hint.san == "e4"
        assert hint.san in tree.legal_moves()
        assert session.solution_moves() == ["e4", "e5", "Bc4"]

    def test_hint_after_undo_mistake(self, tree, opening_puzzle):
        session = PuzzleSession(tree, opening_puzzle)
        play(session, tree, "e4")
        tree.undo()
        tree.undo()
        play(session, tree, "d4")

        assert session.hint().san == "e4"
        assert session.solution_moves() == ["e4", "e5", "Nf3"]
