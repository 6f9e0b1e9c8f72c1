"""
Error taxonomy for the variation tree and puzzle engine.

Every error is raised synchronously, carries its data as attributes and
leaves the tree and cursor exactly as they were before the call.
"""

from typing import Optional


class StudyError(Exception):
    """Base class for all recoverable engine errors."""


class IllegalMove(StudyError):
    """The move oracle rejected a move at the given position."""

    def __init__(self, move, fen: str, reason: Optional[str] = None):
        self.move = move
        self.fen = fen
        self.reason = reason
        message = f"Illegal move {move!s} in position {fen}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class AtRoot(StudyError):
    """Cannot retreat: the cursor is already at the starting position."""

    def __init__(self):
        super().__init__("Cursor is already at the root")


class NoChildren(StudyError):
    """Cannot advance: the cursor has no (such) continuation."""

    def __init__(self, node_id: int, child_index: int = 0):
        self.node_id = node_id
        self.child_index = child_index
        super().__init__(f"Node {node_id} has no child at index {child_index}")


class NodeNotFound(StudyError):
    """The requested node id is not part of the tree."""

    def __init__(self, node_id):
        self.node_id = node_id
        super().__init__(f"Node not found: {node_id}")


class ParseError(StudyError):
    """A game record could not be parsed.

    Attributes:
        offset: Character offset in the input where parsing stopped
    """

    def __init__(self, message: str, offset: int):
        self.offset = offset
        self.message = message
        super().__init__(f"{message} (at offset {offset})")


class PuzzleError(StudyError):
    """A puzzle-only operation was called without an active puzzle."""


class ChapterNotFound(StudyError):
    """The requested chapter index is not part of the study."""

    def __init__(self, index):
        self.index = index
        super().__init__(f"Chapter not found: {index}")
