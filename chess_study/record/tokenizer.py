"""
Tokenizer for game records.

Splits a PGN-style text into tokens that remember their character offset,
so a parse failure can point at the exact token that stopped it.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from chess_study.errors import ParseError

# Suffix annotations and their numeric annotation glyphs
SUFFIX_NAGS = {
    "!": 1,
    "?": 2,
    "!!": 3,
    "??": 4,
    "!?": 5,
    "?!": 6,
}

# Order matters: results before move numbers, so "1-0" is never read as "1".
TOKEN_PATTERN = re.compile(
    r"""
      (?P<ws>\s+)
    | (?P<tag>\[\s*(?P<tag_name>[A-Za-z0-9_]+)\s+"(?P<tag_value>(?:[^"\\]|\\.)*)"\s*\])
    | (?P<comment>\{(?P<comment_text>[^}]*)\})
    | (?P<open>\()
    | (?P<close>\))
    | (?P<nag>\$(?P<nag_value>\d+))
    | (?P<result>1-0|0-1|1/2-1/2|\*)
    | (?P<number>\d+\.+)
    | (?P<san>
        (?:O-O-O|O-O|0-0-0|0-0|[NBRQK]?[a-h]?[1-8]?x?[a-h][1-8](?:=?[NBRQnbrq])?)
        [+\#]?
      )(?P<suffix>!!|\?\?|!\?|\?!|!|\?)?(?![A-Za-z0-9=+\#-])
    """,
    re.VERBOSE,
)

TAG = "tag"
COMMENT = "comment"
OPEN = "open"
CLOSE = "close"
NAG = "nag"
RESULT = "result"
NUMBER = "number"
SAN = "san"


@dataclass(frozen=True)
class Token:
    """A lexical token of a game record."""

    kind: str
    text: str
    offset: int
    value: Optional[Tuple[str, ...]] = None


def _unescape(value: str) -> str:
    return re.sub(r"\\(.)", r"\1", value)


def _bad_token(text: str, offset: int) -> str:
    parts = text[offset:].split(None, 1)
    return parts[0] if parts else text[offset:]


def tokenize(text: str, base_offset: int = 0) -> List[Token]:
    """
    Split a record into tokens.

    Args:
        text: Record text
        base_offset: Added to every offset, for texts cut out of a larger file

    Returns:
        Tokens in input order, whitespace dropped

    Raises:
        ParseError: At the first character that starts no valid token
    """
    tokens: List[Token] = []
    pos = 0

    while pos < len(text):
        match = TOKEN_PATTERN.match(text, pos)
        if match is None:
            raise ParseError(
                f"Unexpected token {_bad_token(text, pos)!r}", base_offset + pos
            )

        kind = match.lastgroup
        offset = base_offset + pos
        pos = match.end()

        if kind == "ws":
            continue

        if kind == "tag":
            value = (match.group("tag_name"), _unescape(match.group("tag_value")))
            tokens.append(Token(TAG, match.group(0), offset, value))
        elif kind == "comment":
            tokens.append(
                Token(COMMENT, match.group(0), offset, (match.group("comment_text").strip(),))
            )
        elif kind == "nag":
            tokens.append(Token(NAG, match.group(0), offset, (match.group("nag_value"),)))
        elif kind in ("san", "suffix"):
            san = match.group("san")
            suffix = match.group("suffix") or ""
            tokens.append(Token(SAN, match.group(0), offset, (san, suffix)))
        else:
            tokens.append(Token(kind, match.group(0), offset))

    return tokens
