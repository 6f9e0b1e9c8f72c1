"""
Plain-dict serialization of variation trees.

The persistence layer stores trees between sessions as JSON. Nodes are
written as a flat pre-order list (parents before children, siblings in
order), which keeps both encoding and decoding iterative and preserves node
ids so stored references stay valid.
"""

import logging
from typing import Any, Dict, List, Optional

import chess

from chess_study.errors import IllegalMove
from chess_study.oracle import MoveOracle
from chess_study.tree.node import PositionNode
from chess_study.tree.variation_tree import VariationTree

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def tree_to_dict(tree: VariationTree) -> Dict[str, Any]:
    """
    Encode a tree as JSON-compatible data.

    Args:
        tree: Tree to encode

    Returns:
        Dict with headers, result, cursor id and the node list
    """
    nodes: List[Dict[str, Any]] = []
    for node in tree:
        nodes.append(
            {
                "id": node.node_id,
                "parent": node.parent.node_id if node.parent else None,
                "move": node.move.uci() if node.move else None,
                "san": node.san,
                "fen": node.fen,
                "comment": node.comment,
                "starting_comment": node.starting_comment,
                "nags": list(node.nags),
                "solution": node.is_solution,
                "deviation": node.is_deviation,
            }
        )

    return {
        "version": FORMAT_VERSION,
        "headers": dict(tree.headers),
        "result": tree.result,
        "cursor": tree.cursor.node_id,
        "nodes": nodes,
    }


def tree_from_dict(
    data: Dict[str, Any],
    oracle: Optional[MoveOracle] = None,
    max_import_plies: int = 2000,
) -> VariationTree:
    """
    Rebuild a tree from tree_to_dict() output.

    Every stored move is replayed through the oracle, so corrupted data
    cannot break the tree invariants.

    Raises:
        ValueError: On an unknown version, a dangling parent, an illegal
            move, or a FEN that does not match its move
    """
    if data.get("version") != FORMAT_VERSION:
        raise ValueError(f"Unsupported tree format version: {data.get('version')}")

    entries = data.get("nodes") or []
    if not entries or entries[0].get("parent") is not None:
        raise ValueError("Tree data must start with the root node")

    tree = VariationTree(entries[0]["fen"], oracle=oracle, max_import_plies=max_import_plies)
    oracle = tree.oracle

    root = PositionNode(entries[0]["id"], tree.root.fen, tree.root.position_key)
    nodes: Dict[int, PositionNode] = {root.node_id: root}
    _restore_annotations(root, entries[0])

    for entry in entries[1:]:
        parent = nodes.get(entry.get("parent"))
        if parent is None:
            raise ValueError(f"Node {entry.get('id')} has unknown parent {entry.get('parent')}")
        if entry["id"] in nodes:
            raise ValueError(f"Duplicate node id {entry['id']}")

        try:
            applied = oracle.apply_move(parent.fen, chess.Move.from_uci(entry["move"]))
        except (IllegalMove, ValueError, TypeError) as e:
            raise ValueError(f"Node {entry['id']}: invalid move {entry.get('move')!r}") from e

        if parent.child_for(applied.move) is not None:
            raise ValueError(f"Node {entry['id']}: duplicate move {applied.san}")

        if entry.get("fen") and oracle.position_key(entry["fen"]) != oracle.position_key(applied.fen):
            raise ValueError(f"Node {entry['id']}: FEN does not match move {applied.san}")

        node = PositionNode(
            node_id=entry["id"],
            fen=applied.fen,
            position_key=oracle.position_key(applied.fen),
            move=applied.move,
            san=applied.san,
            ply=parent.ply + 1,
            parent=parent,
        )
        _restore_annotations(node, entry)
        parent.children.append(node)
        nodes[node.node_id] = node

    cursor = nodes.get(data.get("cursor"), root)
    tree._replace(root, nodes, cursor)
    tree.headers = dict(data.get("headers") or {})
    tree.result = data.get("result") or "*"

    logger.debug(f"Restored tree with {len(nodes)} nodes")
    return tree


def _restore_annotations(node: PositionNode, entry: Dict[str, Any]):
    node.comment = entry.get("comment") or ""
    node.starting_comment = entry.get("starting_comment") or ""
    node.nags = [int(n) for n in entry.get("nags") or []]
    node.is_solution = bool(entry.get("solution"))
    node.is_deviation = bool(entry.get("deviation"))
