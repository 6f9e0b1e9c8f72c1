"""
Variation Tree

A tree of chess positions explored from one starting position, plus a
cursor marking the position the user is looking at.

Invariants:
    - every node's FEN is the oracle's result of its move on the parent FEN
    - no parent has two children reached by the same move (merge rule)
    - the cursor always points at a node of the tree
    - failed operations leave tree and cursor untouched

Nodes are never deleted by navigation; only reset() and a replacing
import_record() discard the old tree.
"""

import itertools
import logging
from typing import Dict, Iterator, List, Optional

import chess

from chess_study.errors import AtRoot, NoChildren, NodeNotFound, ParseError
from chess_study.oracle import GameStatus, MoveInput, MoveOracle, PythonChessOracle
from chess_study.record.exporter import export_tree
from chess_study.record.parser import GameRecord, RecordParser
from chess_study.tree.node import PositionNode

logger = logging.getLogger(__name__)


class VariationTree:
    """
    Tree of explored positions with a cursor.

    Attributes:
        oracle: Move oracle deciding legality
        root: Starting position
        cursor: Currently active node
        headers: Record metadata (Event, Date, White, Black, ...)
        result: Game result written on export
    """

    def __init__(
        self,
        fen: str = chess.STARTING_FEN,
        oracle: Optional[MoveOracle] = None,
        max_import_plies: int = 2000,
    ):
        """
        Initialize a tree holding only the starting position.

        Args:
            fen: Starting position
            oracle: Move oracle (default: PythonChessOracle)
            max_import_plies: Largest number of moves accepted by import_record()

        Raises:
            ValueError: If the FEN is not a valid position
        """
        self.oracle = oracle if oracle else PythonChessOracle()
        self.max_import_plies = max_import_plies
        self.parser = RecordParser(self.oracle, max_plies=max_import_plies)

        # Ids keep increasing across resets so stale ids never alias new nodes
        self._ids = itertools.count()
        self._nodes: Dict[int, PositionNode] = {}

        self.headers: Dict[str, str] = {}
        self.result = "*"
        self.root = self._new_root(fen, self._nodes)
        self.cursor = self.root

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    def _new_root(self, fen: str, nodes: Dict[int, PositionNode]) -> PositionNode:
        fen = self.oracle.normalize_fen(fen)
        root = PositionNode(next(self._ids), fen, self.oracle.position_key(fen))
        nodes[root.node_id] = root
        return root

    def _attach(
        self,
        parent: PositionNode,
        move: chess.Move,
        san: str,
        fen: str,
        nodes: Dict[int, PositionNode],
    ) -> PositionNode:
        node = PositionNode(
            node_id=next(self._ids),
            fen=fen,
            position_key=self.oracle.position_key(fen),
            move=move,
            san=san,
            ply=parent.ply + 1,
            parent=parent,
        )
        parent.children.append(node)
        nodes[node.node_id] = node
        return node

    def _replace(
        self,
        root: PositionNode,
        nodes: Dict[int, PositionNode],
        cursor: Optional[PositionNode] = None,
    ):
        """Swap in a fully built tree in one step."""
        self.root = root
        self._nodes = nodes
        self.cursor = cursor if cursor is not None else root
        if nodes:
            self._ids = itertools.count(max(nodes) + 1)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[PositionNode]:
        return self.root.walk()

    def node(self, node_id) -> PositionNode:
        """
        Look up a node by id.

        Raises:
            NodeNotFound: If no node has this id
        """
        try:
            return self._nodes[node_id]
        except (KeyError, TypeError):
            raise NodeNotFound(node_id) from None

    def path_to(self, node_id) -> List[PositionNode]:
        """Nodes from the root down to `node_id`, both included."""
        node = self.node(node_id)
        path = [node, *node.ancestors()]
        path.reverse()
        return path

    def main_line(self) -> List[PositionNode]:
        """Nodes following the first child from the root (root excluded)."""
        line = []
        node = self.root
        while node.children:
            node = node.children[0]
            line.append(node)
        return line

    def main_line_sans(self) -> List[str]:
        return [node.san for node in self.main_line()]

    def legal_moves(self) -> List[str]:
        """Legal moves at the cursor, in SAN."""
        return self.oracle.legal_moves(self.cursor.fen)

    def game_status(self) -> GameStatus:
        """
        Terminal state at the cursor.

        Threefold repetition is counted along the path from the root, since
        a single FEN does not carry the history the oracle would need.
        """
        status = self.oracle.game_status(self.cursor.fen)
        if status is not GameStatus.ONGOING:
            return status

        key = self.cursor.position_key
        occurrences = 1 + sum(1 for n in self.cursor.ancestors() if n.position_key == key)
        if occurrences >= 3:
            return GameStatus.DRAW

        return GameStatus.ONGOING

    @staticmethod
    def move_label(node: PositionNode) -> str:
        """Move number prefix for a move list: "12." for White, "12..." for Black."""
        if node.parent is None:
            return ""
        fields = node.parent.fen.split()
        number = int(fields[5])
        return f"{number}." if fields[1] == "w" else f"{number}..."

    # ------------------------------------------------------------------
    # Moves and navigation
    # ------------------------------------------------------------------

    def submit_move(self, move: MoveInput) -> PositionNode:
        """
        Play a move at the cursor.

        Args:
            move: SAN string, UCI string or chess.Move

        Returns:
            The node the cursor moved to (existing child or new last child)

        Raises:
            IllegalMove: If the oracle rejects the move; nothing changes
        """
        applied = self.oracle.apply_move(self.cursor.fen, move)

        existing = self.cursor.child_for(applied.move)
        if existing is not None:
            logger.debug(f"Move {applied.san} already explored, advancing to node {existing.node_id}")
            self.cursor = existing
            return existing

        node = self._attach(self.cursor, applied.move, applied.san, applied.fen, self._nodes)
        logger.debug(
            f"Added node {node.node_id} ({self.move_label(node)} {node.san}) "
            f"under node {self.cursor.node_id}"
        )
        self.cursor = node
        return node

    def undo(self) -> PositionNode:
        """
        Move the cursor to its parent.

        Raises:
            AtRoot: If the cursor is at the root
        """
        if self.cursor.parent is None:
            raise AtRoot()
        self.cursor = self.cursor.parent
        return self.cursor

    def redo(self, child_index: int = 0) -> PositionNode:
        """
        Move the cursor into a child, the main line by default.

        Raises:
            NoChildren: If the cursor is a leaf or has no child at that index
        """
        if child_index < 0 or child_index >= len(self.cursor.children):
            raise NoChildren(self.cursor.node_id, child_index)
        self.cursor = self.cursor.children[child_index]
        return self.cursor

    advance = redo

    def jump_to(self, node_id) -> PositionNode:
        """
        Move the cursor to any node of the tree.

        Raises:
            NodeNotFound: If the id is not in the tree
        """
        self.cursor = self.node(node_id)
        return self.cursor

    def promote_line(self, node_id) -> PositionNode:
        """
        Make the line leading to `node_id` the main line.

        Each ancestor on the path moves the path's child to the front of its
        children. Membership and positions are unchanged.

        Raises:
            NodeNotFound: If the id is not in the tree
        """
        target = self.node(node_id)

        node = target
        while node.parent is not None:
            siblings = node.parent.children
            if siblings[0] is not node:
                siblings.remove(node)
                siblings.insert(0, node)
            node = node.parent

        logger.debug(f"Promoted line to node {node_id} (ply {target.ply})")
        return target

    def set_comment(self, node_id, comment: str) -> PositionNode:
        """Replace a node's comment."""
        node = self.node(node_id)
        node.comment = comment.strip()
        return node

    def reset(self, fen: Optional[str] = None) -> PositionNode:
        """
        Discard the tree and start again from `fen` (default: current root).

        Raises:
            ValueError: If the FEN is not a valid position
        """
        nodes: Dict[int, PositionNode] = {}
        root = self._new_root(fen or self.root.fen, nodes)

        self.root = root
        self._nodes = nodes
        self.cursor = root
        self.headers = {}
        self.result = "*"

        logger.info(f"Tree reset to {root.fen}")
        return root

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def import_record(self, text: str, merge: bool = False) -> GameRecord:
        """
        Load a game record.

        Args:
            text: Record text
            merge: Graft the record into the current tree instead of
                replacing it; the record must start from the root position

        Returns:
            The parsed record

        Raises:
            ParseError: On malformed input; the tree is unchanged
        """
        record = self.parser.parse(text)
        self.load_record(record, merge=merge)
        return record

    def load_record(self, record: GameRecord, merge: bool = False):
        """Build nodes for an already parsed record (see import_record)."""
        if merge:
            if self.oracle.position_key(record.start_fen) != self.root.position_key:
                raise ParseError(
                    "Record starts from a different position than the tree", record.offset
                )
            root, nodes = self.root, self._nodes
        else:
            nodes = {}
            root = self._new_root(record.start_fen, nodes)

        before = len(nodes)
        stack = [(root, record.moves)]
        while stack:
            parent, moves = stack.pop()
            for record_move in moves:
                child = parent.child_for(record_move.move)
                if child is None:
                    child = self._attach(
                        parent, record_move.move, record_move.san, record_move.fen, nodes
                    )
                if record_move.comment and not child.comment:
                    child.comment = record_move.comment
                if record_move.starting_comment and not child.starting_comment:
                    child.starting_comment = record_move.starting_comment
                child.nags.extend(n for n in record_move.nags if n not in child.nags)
                stack.append((child, record_move.children))

        if record.comment and not root.comment:
            root.comment = record.comment

        if merge:
            self.headers.update(record.headers)
            self.cursor = self.root
        else:
            self._replace(root, nodes)
            self.headers = dict(record.headers)

        self.result = record.result
        logger.info(
            f"Imported record: {len(nodes) - before} new nodes, "
            f"{len(self._nodes)} total ({'merged' if merge else 'replaced'})"
        )

    def export_record(self, main_line_only: bool = False) -> str:
        """Serialize the tree, or only its main line, to PGN."""
        return export_tree(
            self.root, self.headers, main_line_only=main_line_only, result=self.result
        )

    def __repr__(self) -> str:
        return (
            f"VariationTree(nodes={len(self._nodes)}, cursor={self.cursor.node_id}, "
            f"root={self.root.fen!r})"
        )
