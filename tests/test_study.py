"""
Unit Tests for Studies

Tests for Study, focusing on:
    - Adding, removing, selecting and reordering chapters
    - The current chapter across edits
    - Multi-game PGN export/import
    - Dict persistence
"""

import json

import chess
import pytest

from chess_study import ChapterNotFound, ParseError, Study

ENDGAME_FEN = "8/4P3/8/8/8/8/k7/4K3 w - - 0 1"


@pytest.fixture
def study():
    study = Study("Open games", description="1. e4 e5 lessons", tags=["opening"])
    study.add_chapter("Italian", record="1. e4 e5 2. Nf3 Nc6 3. Bc4 *")
    study.add_chapter("Scotch", record="1. e4 e5 2. Nf3 Nc6 3. d4 {Open centre} *")
    study.add_chapter("Promotion", fen=ENDGAME_FEN)
    return study


def names(study):
    return [chapter.name for chapter in study.chapters]


class TestChapters:
    """Tests for chapter management."""

    def test_new_study_is_empty(self):
        study = Study("Empty")

        assert len(study) == 0
        assert study.current is None
        assert len(study.id) == 12

    def test_blank_name_rejected(self):
        with pytest.raises(ValueError, match="name"):
            Study("  ")

    def test_add_chapter_becomes_current(self, study):
        assert names(study) == ["Italian", "Scotch", "Promotion"]
        assert study.current.name == "Promotion"
        assert study.current.starting_fen == ENDGAME_FEN

    def test_chapters_have_own_trees(self, study):
        italian, scotch, _ = study.chapters

        assert italian.tree.main_line_sans()[-1] == "Bc4"
        assert scotch.tree.main_line_sans()[-1] == "d4"
        assert italian.tree is not scotch.tree

    def test_bad_record_leaves_study_unchanged(self, study):
        with pytest.raises(ParseError):
            study.add_chapter("Broken", record="1. e4 e4")

        assert len(study) == 3
        assert study.current.name == "Promotion"

    def test_select_chapter(self, study):
        chapter = study.select_chapter(0)

        assert chapter.name == "Italian"
        assert study.current is chapter

    @pytest.mark.parametrize("index", [3, -1, "0"])
    def test_select_unknown_chapter(self, study, index):
        with pytest.raises(ChapterNotFound):
            study.select_chapter(index)

        assert study.current_index == 2

    def test_remove_before_current_keeps_selection(self, study):
        study.remove_chapter(0)

        assert names(study) == ["Scotch", "Promotion"]
        assert study.current.name == "Promotion"

    def test_remove_current_selects_successor(self, study):
        study.select_chapter(1)

        study.remove_chapter(1)

        assert study.current.name == "Promotion"

    def test_remove_last_current_selects_new_last(self, study):
        study.remove_chapter(2)

        assert study.current.name == "Scotch"

    def test_remove_every_chapter(self, study):
        for _ in range(3):
            study.remove_chapter(0)

        assert study.current is None

    def test_remove_unknown_chapter(self, study):
        with pytest.raises(ChapterNotFound):
            study.remove_chapter(5)

    def test_move_chapter_keeps_current(self, study):
        study.select_chapter(0)

        study.move_chapter(0, 2)

        assert names(study) == ["Scotch", "Promotion", "Italian"]
        assert study.current.name == "Italian"

    def test_statistics(self, study):
        stats = study.statistics()

        assert stats.chapters == 3
        assert stats.total_moves == 10
        assert stats.annotated_moves == 1


class TestStudyPgn:
    """Tests for export_pgn() and from_pgn()."""

    def test_round_trip(self, study):
        text = study.export_pgn()

        restored = Study.from_pgn(text)

        assert restored.name == "Open games"
        assert names(restored) == names(study)
        assert restored.chapters[2].starting_fen == ENDGAME_FEN
        assert restored.chapters[1].tree.main_line()[-1].comment == "Open centre"
        assert "ChapterName" not in restored.chapters[0].tree.headers
        assert restored.current.name == "Italian"

    def test_chapter_headers_written(self, study):
        text = study.export_pgn()

        assert '[StudyName "Open games"]' in text
        assert '[ChapterName "Scotch"]' in text

    def test_chapter_name_fallbacks(self):
        restored = Study.from_pgn('[Event "Italian"]\n\n1. e4 e5 *\n\n1. d4 d5 *', name="Mixed")

        assert restored.name == "Mixed"
        assert names(restored) == ["Italian", "Chapter 2"]

    def test_empty_text_rejected(self):
        with pytest.raises(ParseError):
            Study.from_pgn("")


class TestStudyPersistence:
    """Tests for to_dict() and from_dict()."""

    def test_round_trip(self, study):
        study.select_chapter(1)

        data = json.loads(json.dumps(study.to_dict()))
        restored = Study.from_dict(data)

        assert restored.id == study.id
        assert restored.tags == ["opening"]
        assert restored.description == "1. e4 e5 lessons"
        assert names(restored) == names(study)
        assert restored.current.name == "Scotch"
        assert restored.chapters[0].tree.main_line_sans() == ["e4", "e5", "Nf3", "Nc6", "Bc4"]

    def test_unknown_version(self, study):
        data = study.to_dict()
        data["version"] = 2

        with pytest.raises(ValueError, match="version"):
            Study.from_dict(data)

    def test_current_out_of_range_falls_back(self, study):
        data = study.to_dict()
        data["current"] = 10

        assert Study.from_dict(data).current_index == 0

    def test_empty_study(self):
        restored = Study.from_dict(Study("Empty").to_dict())

        assert restored.current is None
        assert restored.chapters == []


def test_default_chapter_starts_from_initial_position():
    study = Study("Basics")

    chapter = study.add_chapter("Start")

    assert chapter.starting_fen == chess.STARTING_FEN
