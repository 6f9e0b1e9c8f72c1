"""
Game record parser.

Reads the PGN subset described in `chess_study.record` into GameRecord
objects. Every move is checked against the move oracle while parsing, so an
illegal move is reported at its own offset just like a syntax error.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

import chess

from chess_study.errors import IllegalMove, ParseError
from chess_study.oracle import MoveOracle, PythonChessOracle
from chess_study.record.tokenizer import (
    CLOSE,
    COMMENT,
    NAG,
    NUMBER,
    OPEN,
    RESULT,
    SAN,
    SUFFIX_NAGS,
    TAG,
    Token,
    tokenize,
)

logger = logging.getLogger(__name__)


@dataclass
class RecordMove:
    """A move of a parsed record with its continuations."""

    move: chess.Move
    san: str
    fen: str
    offset: int
    comment: str = ""
    starting_comment: str = ""
    nags: List[int] = field(default_factory=list)
    children: List["RecordMove"] = field(default_factory=list)


@dataclass
class GameRecord:
    """A parsed game: headers, starting position and the move tree."""

    headers: Dict[str, str]
    start_fen: str
    moves: List[RecordMove] = field(default_factory=list)
    comment: str = ""
    result: str = "*"
    offset: int = 0

    def main_line(self) -> List[RecordMove]:
        """Moves following the first continuation at every branch."""
        line = []
        moves = self.moves
        while moves:
            line.append(moves[0])
            moves = moves[0].children
        return line

    def lines(self) -> Iterator[List[RecordMove]]:
        """Yield every root-to-leaf line, main line first."""
        stack: List[Tuple[List[RecordMove], List[RecordMove]]] = [([], self.moves)]
        while stack:
            prefix, moves = stack.pop()
            if not moves:
                if prefix:
                    yield prefix
                continue
            for move in reversed(moves):
                stack.append((prefix + [move], move.children))

    def ply_count(self) -> int:
        """Number of moves in the record, side lines included."""
        count = 0
        stack = list(self.moves)
        while stack:
            move = stack.pop()
            count += 1
            stack.extend(move.children)
        return count

    def max_depth(self) -> int:
        """Deepest variation nesting level (0 for a record without side lines)."""
        deepest = 0
        stack = [(move, 0 if i == 0 else 1) for i, move in enumerate(self.moves)]
        while stack:
            move, depth = stack.pop()
            deepest = max(deepest, depth)
            for i, child in enumerate(move.children):
                stack.append((child, depth if i == 0 else depth + 1))
        return deepest


class _GameReader:
    """Recursive-descent reader for one game starting at a token index."""

    def __init__(self, tokens: List[Token], oracle: MoveOracle, max_plies: int):
        self.tokens = tokens
        self.oracle = oracle
        self.max_plies = max_plies
        self.plies = 0
        self.record: Optional[GameRecord] = None

    def read(self, pos: int) -> int:
        """Read one game from `pos`; return the index after it."""
        start = self.tokens[pos].offset
        headers: Dict[str, str] = {}

        while pos < len(self.tokens) and self.tokens[pos].kind == TAG:
            name, value = self.tokens[pos].value
            headers[name] = value
            pos += 1

        start_fen = self._start_fen(headers, pos)
        self.record = GameRecord(headers=headers, start_fen=start_fen, offset=start)

        pos = self._read_line(pos, start_fen, self.record.moves, depth=0)

        if pos < len(self.tokens) and self.tokens[pos].kind == RESULT:
            self.record.result = self.tokens[pos].text
            pos += 1

        if "Result" in headers and self.record.result == "*":
            self.record.result = headers["Result"]

        return pos

    def _start_fen(self, headers: Dict[str, str], pos: int) -> str:
        if "FEN" not in headers:
            return chess.STARTING_FEN

        tag = next(
            t for t in reversed(self.tokens[:pos]) if t.kind == TAG and t.value[0] == "FEN"
        )
        try:
            return self.oracle.normalize_fen(headers["FEN"])
        except ValueError as e:
            raise ParseError(f"Invalid FEN header: {e}", tag.offset) from e

    def _read_line(self, pos: int, fen: str, siblings: List[RecordMove], depth: int) -> int:
        """
        Read moves of one line until its end.

        Args:
            pos: Token index where the line starts
            fen: Position before the line's first move
            siblings: List the line's first move is appended to
            depth: Variation nesting level (0 = main line)

        Returns:
            Index of the token that ended the line (")", a result, a tag,
            or len(tokens))
        """
        line_fen = fen
        before_last: Optional[str] = None
        container = siblings
        last_container: Optional[List[RecordMove]] = None
        last: Optional[RecordMove] = None
        pending_comment = ""

        while pos < len(self.tokens):
            token = self.tokens[pos]

            if token.kind == NUMBER:
                pos += 1

            elif token.kind == SAN:
                san, suffix = token.value
                try:
                    applied = self.oracle.apply_move(line_fen, san)
                except IllegalMove as e:
                    raise ParseError(f"Illegal move {san!r}", token.offset) from e

                self.plies += 1
                if self.plies > self.max_plies:
                    raise ParseError(
                        f"Record exceeds {self.max_plies} moves", token.offset
                    )

                node = RecordMove(
                    move=applied.move,
                    san=applied.san,
                    fen=applied.fen,
                    offset=token.offset,
                    starting_comment=pending_comment,
                )
                if suffix:
                    node.nags.append(SUFFIX_NAGS[suffix])
                pending_comment = ""

                container.append(node)
                last_container = container
                container = node.children
                before_last = line_fen
                line_fen = applied.fen
                last = node
                pos += 1

            elif token.kind == COMMENT:
                text = token.value[0]
                if last is not None:
                    last.comment = f"{last.comment} {text}".strip()
                elif depth == 0:
                    self.record.comment = f"{self.record.comment} {text}".strip()
                else:
                    pending_comment = f"{pending_comment} {text}".strip()
                pos += 1

            elif token.kind == NAG:
                if last is None:
                    raise ParseError("Annotation glyph without a move", token.offset)
                last.nags.append(int(token.value[0]))
                pos += 1

            elif token.kind == OPEN:
                if last is None:
                    raise ParseError("Variation without a preceding move", token.offset)
                end = self._read_line(pos + 1, before_last, last_container, depth + 1)
                if end >= len(self.tokens) or self.tokens[end].kind != CLOSE:
                    raise ParseError("Unterminated variation", token.offset)
                pos = end + 1

            elif token.kind == CLOSE:
                if depth == 0:
                    raise ParseError("Unmatched ')'", token.offset)
                return pos

            elif token.kind == RESULT:
                if depth > 0:
                    raise ParseError("Game result inside a variation", token.offset)
                return pos

            elif token.kind == TAG:
                if depth > 0:
                    raise ParseError("Tag pair inside a variation", token.offset)
                return pos

            else:
                raise ParseError(f"Unexpected token {token.text!r}", token.offset)

        return pos


class RecordParser:
    """Parse game records into GameRecord objects."""

    def __init__(self, oracle: Optional[MoveOracle] = None, max_plies: int = 2000):
        """
        Initialize record parser.

        Args:
            oracle: Move oracle used to validate moves (default: PythonChessOracle)
            max_plies: Largest number of moves accepted per game
        """
        self.oracle = oracle if oracle else PythonChessOracle()
        self.max_plies = max_plies

    def iter_games(self, text: str, base_offset: int = 0) -> Iterator[GameRecord]:
        """
        Parse every game of a text.

        The whole text is tokenized first, so a lexical error anywhere fails
        before the first game is yielded.

        Raises:
            ParseError: At the first unparseable token
        """
        tokens = tokenize(text, base_offset)
        pos = 0

        while pos < len(tokens):
            reader = _GameReader(tokens, self.oracle, self.max_plies)
            end = reader.read(pos)
            if end == pos:
                raise ParseError(f"Unexpected token {tokens[pos].text!r}", tokens[pos].offset)
            pos = end
            yield reader.record

    def parse(self, text: str) -> GameRecord:
        """
        Parse a single game.

        Games after the first are ignored with a warning.

        Raises:
            ParseError: On malformed input or when the text holds no game
        """
        games = list(self.iter_games(text))
        if not games:
            raise ParseError("No game record found", 0)

        if len(games) > 1:
            logger.warning(f"Record holds {len(games)} games, only the first is used")

        record = games[0]
        logger.debug(
            f"Parsed record: {record.ply_count()} moves, {len(record.headers)} headers"
        )
        return record


# Movetext line whose last token is a game result
_RESULT_AT_END = re.compile(r"(?:^|\s)(?:1-0|0-1|1/2-1/2|\*)\s*$")


def split_records(text: str) -> List[Tuple[int, str]]:
    """
    Cut a multi-game text into per-game chunks.

    Lets a collection loader skip a malformed game and carry on with the
    next one. A game ends at a movetext line closing with a result, or where
    a new block of tag pairs starts. Text inside {comments} never splits.

    Returns:
        (offset, chunk) pairs
    """
    chunks: List[Tuple[int, str]] = []
    start: Optional[int] = None
    offset = 0
    in_tags = False
    in_comment = False

    def close(end: int):
        nonlocal start
        if start is not None and text[start:end].strip():
            chunks.append((start, text[start:end]))
        start = None

    for line in text.splitlines(keepends=True):
        stripped = line.strip()
        is_tag = not in_comment and stripped.startswith("[")

        if is_tag and not in_tags:
            close(offset)
        if stripped:
            in_tags = is_tag
            if start is None:
                start = offset

        for char in line:
            if char == "{":
                in_comment = True
            elif char == "}":
                in_comment = False

        offset += len(line)

        if stripped and not is_tag and not in_comment and _RESULT_AT_END.search(stripped):
            close(offset)
            in_tags = False

    close(len(text))
    return chunks
