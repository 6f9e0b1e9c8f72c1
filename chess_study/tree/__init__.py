"""
Variation Tree Module

Bookkeeping of explored positions: which moves were tried from which
position, which line is the main line, and where the user currently is.

Key Components:
    - PositionNode: one position with its move, annotations and children
    - VariationTree: the tree, its cursor and all navigation operations
    - tree_to_dict / tree_from_dict: persistence format

Data Flow:
    submit_move("Nf3") → oracle.apply_move() → new or merged PositionNode
                                             → cursor moves to it
"""

from chess_study.tree.node import PositionNode
from chess_study.tree.serialization import tree_from_dict, tree_to_dict
from chess_study.tree.variation_tree import VariationTree

__all__ = ['PositionNode', 'VariationTree', 'tree_from_dict', 'tree_to_dict']
