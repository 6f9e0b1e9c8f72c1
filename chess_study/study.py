"""
Studies

A study is a named collection of chapters. Each chapter is a variation tree
with its own starting position, so one study can hold an opening line, a
middlegame plan and an endgame technique side by side. One chapter is the
current one, the chapter a UI shows.

Studies travel as multi-game PGN (one game per chapter, with StudyName and
ChapterName headers) or as plain dicts for the persistence layer.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import chess

from chess_study.analysis import StudyStatistics, study_statistics
from chess_study.errors import ChapterNotFound, ParseError
from chess_study.oracle import MoveOracle
from chess_study.record.exporter import export_tree
from chess_study.record.parser import RecordParser
from chess_study.tree import VariationTree, tree_from_dict, tree_to_dict

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

# Written on export and stripped from chapter headers on import
_STUDY_HEADERS = ("StudyName", "ChapterName")


@dataclass
class Chapter:
    """A named variation tree inside a study."""

    name: str
    tree: VariationTree
    description: str = ""

    @property
    def starting_fen(self) -> str:
        return self.tree.root.fen


class Study:
    """
    Named collection of chapters with a current chapter.

    Attributes:
        id: Study identifier
        name: Display name
        description: Free text
        tags: Search tags
        is_public: Visible to other users
        chapters: Chapters in display order
        current_index: Index of the current chapter (None when empty)
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        tags: Optional[Iterable[str]] = None,
        is_public: bool = False,
        study_id: Optional[str] = None,
        oracle: Optional[MoveOracle] = None,
        max_import_plies: int = 2000,
    ):
        """
        Initialize an empty study.

        Raises:
            ValueError: If the name is blank
        """
        if not name.strip():
            raise ValueError("Study name must not be empty")

        self.id = study_id or uuid.uuid4().hex[:12]
        self.name = name.strip()
        self.description = description
        self.tags = list(tags) if tags else []
        self.is_public = is_public
        self.oracle = oracle
        self.max_import_plies = max_import_plies

        self.chapters: List[Chapter] = []
        self.current_index: Optional[int] = None

    def __len__(self) -> int:
        return len(self.chapters)

    @property
    def current(self) -> Optional[Chapter]:
        if self.current_index is None:
            return None
        return self.chapters[self.current_index]

    def _new_tree(self, fen: str) -> VariationTree:
        return VariationTree(fen, oracle=self.oracle, max_import_plies=self.max_import_plies)

    def _check_index(self, index: int):
        if not isinstance(index, int) or not 0 <= index < len(self.chapters):
            raise ChapterNotFound(index)

    # ------------------------------------------------------------------
    # Chapters
    # ------------------------------------------------------------------

    def add_chapter(
        self,
        name: str,
        fen: str = chess.STARTING_FEN,
        description: str = "",
        record: Optional[str] = None,
    ) -> Chapter:
        """
        Append a chapter and make it the current one.

        Args:
            name: Chapter name
            fen: Starting position (ignored when a record is given)
            description: Free text
            record: Game record to import into the chapter

        Returns:
            The new chapter

        Raises:
            ValueError: If the name is blank or the FEN invalid
            ParseError: If the record is malformed; the study is unchanged
        """
        if not name.strip():
            raise ValueError("Chapter name must not be empty")

        tree = self._new_tree(fen)
        if record is not None:
            tree.import_record(record)

        chapter = Chapter(name.strip(), tree, description)
        self.chapters.append(chapter)
        self.current_index = len(self.chapters) - 1

        logger.info(f"Study {self.name!r}: added chapter {chapter.name!r}")
        return chapter

    def remove_chapter(self, index: int) -> Chapter:
        """
        Remove a chapter.

        The current chapter stays selected when another one is removed; when
        the current chapter itself goes, its successor (or the new last
        chapter) becomes current.

        Raises:
            ChapterNotFound: If the index is out of range
        """
        self._check_index(index)
        chapter = self.chapters.pop(index)

        if not self.chapters:
            self.current_index = None
        elif index < self.current_index:
            self.current_index -= 1
        elif index == self.current_index:
            self.current_index = min(index, len(self.chapters) - 1)

        logger.info(f"Study {self.name!r}: removed chapter {chapter.name!r}")
        return chapter

    def select_chapter(self, index: int) -> Chapter:
        """
        Make a chapter the current one.

        Raises:
            ChapterNotFound: If the index is out of range
        """
        self._check_index(index)
        self.current_index = index
        return self.chapters[index]

    def move_chapter(self, index: int, new_index: int) -> Chapter:
        """
        Reorder a chapter; the current chapter stays the same chapter.

        Raises:
            ChapterNotFound: If either index is out of range
        """
        self._check_index(index)
        self._check_index(new_index)

        current = self.current
        chapter = self.chapters.pop(index)
        self.chapters.insert(new_index, chapter)
        self.current_index = self.chapters.index(current)
        return chapter

    def statistics(self) -> StudyStatistics:
        """Move, annotation, tactic and phase counts over all chapters."""
        return study_statistics(chapter.tree for chapter in self.chapters)

    # ------------------------------------------------------------------
    # PGN
    # ------------------------------------------------------------------

    def export_pgn(self) -> str:
        """Export every chapter as one game of a multi-game PGN text."""
        games = []
        for chapter in self.chapters:
            headers = {"Event": self.name}
            headers.update(chapter.tree.headers)
            headers["StudyName"] = self.name
            headers["ChapterName"] = chapter.name
            games.append(export_chapter(chapter, headers))
        return "\n\n".join(games)

    @classmethod
    def from_pgn(
        cls,
        text: str,
        name: Optional[str] = None,
        oracle: Optional[MoveOracle] = None,
        max_import_plies: int = 2000,
    ) -> "Study":
        """
        Build a study with one chapter per game of a PGN text.

        Chapter names come from the ChapterName header, else the Event
        header, else "Chapter n". The study name defaults to the first
        StudyName header.

        Raises:
            ParseError: On malformed input or a text without games
        """
        parser = RecordParser(oracle, max_plies=max_import_plies)
        records = list(parser.iter_games(text))
        if not records:
            raise ParseError("No game record found", 0)

        study_name = name or records[0].headers.get("StudyName") or "Imported study"
        study = cls(study_name, oracle=oracle, max_import_plies=max_import_plies)

        for number, record in enumerate(records, 1):
            event = record.headers.get("Event", "").strip()
            chapter_name = (
                record.headers.get("ChapterName", "").strip()
                or (event if event and event != "?" else "")
                or f"Chapter {number}"
            )

            tree = study._new_tree(record.start_fen)
            tree.load_record(record)
            for header in _STUDY_HEADERS:
                tree.headers.pop(header, None)

            study.chapters.append(Chapter(chapter_name, tree))

        study.current_index = 0
        logger.info(f"Imported study {study.name!r} with {len(study.chapters)} chapters")
        return study

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Encode the study as JSON-compatible data."""
        return {
            "version": FORMAT_VERSION,
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "tags": list(self.tags),
            "is_public": self.is_public,
            "current": self.current_index,
            "chapters": [
                {
                    "name": chapter.name,
                    "description": chapter.description,
                    "tree": tree_to_dict(chapter.tree),
                }
                for chapter in self.chapters
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], oracle: Optional[MoveOracle] = None) -> "Study":
        """
        Rebuild a study from to_dict() output.

        Raises:
            ValueError: On an unknown version or invalid chapter data
        """
        if data.get("version") != FORMAT_VERSION:
            raise ValueError(f"Unsupported study format version: {data.get('version')}")

        study = cls(
            data["name"],
            description=data.get("description", ""),
            tags=data.get("tags"),
            is_public=bool(data.get("is_public")),
            study_id=data.get("id"),
            oracle=oracle,
        )
        for entry in data.get("chapters") or []:
            tree = tree_from_dict(entry["tree"], oracle=oracle)
            study.chapters.append(Chapter(entry["name"], tree, entry.get("description", "")))

        current = data.get("current")
        if study.chapters:
            in_range = isinstance(current, int) and 0 <= current < len(study.chapters)
            study.current_index = current if in_range else 0

        return study

    def __repr__(self) -> str:
        return f"Study(name={self.name!r}, chapters={len(self.chapters)}, current={self.current_index})"


def export_chapter(chapter: Chapter, headers: Optional[Dict[str, str]] = None) -> str:
    """Export one chapter's tree with the given headers (default: its own)."""
    tree = chapter.tree
    return export_tree(
        tree.root,
        headers if headers is not None else tree.headers,
        result=tree.result,
    )
