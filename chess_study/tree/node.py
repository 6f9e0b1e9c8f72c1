"""
Position nodes of the variation tree.
"""

from typing import Iterator, List, Optional

import chess


class PositionNode:
    """
    A position reached from the tree's starting position.

    Attributes:
        node_id: Identifier, unique within one tree
        fen: Canonical position identifier
        move: Move that produced this node from its parent (None at the root)
        san: The move in SAN (None at the root)
        ply: Half-moves played since the tree's starting position
        position_key: Zobrist key, equal for transposed positions
        parent: Parent node (None at the root)
        children: Continuations in exploration order; children[0] is the main line
        comment: Free-text annotation after the move
        starting_comment: Annotation written before the move when it opens a side line
        nags: Numeric annotation glyphs ($1 = good move, $2 = mistake, ...)
        is_solution: Node lies on a puzzle solution path
        is_deviation: Node is a wrong puzzle move
    """

    def __init__(
        self,
        node_id: int,
        fen: str,
        position_key: int,
        move: Optional[chess.Move] = None,
        san: Optional[str] = None,
        ply: int = 0,
        parent: Optional["PositionNode"] = None,
    ):
        self.node_id = node_id
        self.fen = fen
        self.position_key = position_key
        self.move = move
        self.san = san
        self.ply = ply
        self.parent = parent
        self.children: List[PositionNode] = []

        self.comment: str = ""
        self.starting_comment: str = ""
        self.nags: List[int] = []
        self.is_solution = False
        self.is_deviation = False

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def turn(self) -> chess.Color:
        """Side to move in this node's position."""
        return chess.WHITE if self.fen.split()[1] == "w" else chess.BLACK

    @property
    def is_main_line(self) -> bool:
        """True when every step from the root to this node is a first child."""
        node = self
        while node.parent is not None:
            if node.parent.children[0] is not node:
                return False
            node = node.parent
        return True

    def child_for(self, move: chess.Move) -> Optional["PositionNode"]:
        """Return the child reached by `move`, if it was explored already."""
        for child in self.children:
            if child.move == move:
                return child
        return None

    def ancestors(self) -> Iterator["PositionNode"]:
        """Yield the parent, grandparent, ... up to the root."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def walk(self) -> Iterator["PositionNode"]:
        """Yield this node and its descendants in pre-order, main lines first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def __repr__(self) -> str:
        return (
            f"PositionNode(id={self.node_id}, ply={self.ply}, "
            f"san={self.san}, children={len(self.children)})"
        )
