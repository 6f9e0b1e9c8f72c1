"""
Game record exporter.

Builds a chess.pgn.Game from a variation tree and lets python-chess write
the PGN text, so exported records are standard PGN readable by any chess
tool and by RecordParser.
"""

import logging
from typing import TYPE_CHECKING, Dict, Optional

import chess
import chess.pgn

if TYPE_CHECKING:
    from chess_study.tree.node import PositionNode

logger = logging.getLogger(__name__)

# Set by Game.setup() from the root position
_SETUP_HEADERS = ("FEN", "SetUp")


def tree_to_game(
    root: "PositionNode",
    headers: Optional[Dict[str, str]] = None,
    result: Optional[str] = None,
) -> chess.pgn.Game:
    """
    Convert a tree of PositionNodes into a python-chess game.

    Args:
        root: Root node of the tree
        headers: Tag pairs to write (FEN/SetUp are derived from the root)
        result: Game result; defaults to the Result header or "*"

    Returns:
        chess.pgn.Game mirroring the tree, children order preserved
    """
    game = chess.pgn.Game()

    for name, value in (headers or {}).items():
        if name not in _SETUP_HEADERS:
            game.headers[name] = value

    if root.fen != chess.STARTING_FEN:
        game.setup(chess.Board(root.fen))

    game.headers["Result"] = result or game.headers.get("Result", "*")
    game.comment = root.comment

    # Iterative walk: records can be longer than the recursion limit
    stack = [(game, root)]
    while stack:
        game_node, node = stack.pop()
        for i, child in enumerate(node.children):
            starting_comment = child.starting_comment
            if i == 0 and starting_comment:
                # Only side lines carry a starting comment in PGN
                game_node.comment = f"{game_node.comment} {starting_comment}".strip()
                starting_comment = ""
            variation = game_node.add_variation(
                child.move,
                comment=child.comment,
                starting_comment=starting_comment,
                nags=child.nags,
            )
            stack.append((variation, child))

    return game


def export_tree(
    root: "PositionNode",
    headers: Optional[Dict[str, str]] = None,
    main_line_only: bool = False,
    result: Optional[str] = None,
) -> str:
    """
    Serialize a tree to PGN text.

    Args:
        root: Root node of the tree
        headers: Tag pairs to write
        main_line_only: Drop every side line
        result: Game result written after the moves

    Returns:
        PGN text
    """
    game = tree_to_game(root, headers, result)
    exporter = chess.pgn.StringExporter(
        headers=True, variations=not main_line_only, comments=True
    )
    text = game.accept(exporter)

    logger.debug(f"Exported record ({len(text)} chars, main_line_only={main_line_only})")
    return text
