"""
Unit Tests for the Variation Tree

Tests for tree operations, focusing on:
    - submit_move: new nodes, merge rule, illegal moves
    - Navigation: undo, redo, jump_to
    - promote_line: reorders children only
    - reset, queries and game status
    - Failed operations leave the tree untouched
"""

import chess
import pytest

from chess_study.errors import AtRoot, IllegalMove, NoChildren, NodeNotFound
from chess_study.oracle import GameStatus
from chess_study.tree import VariationTree


def tree_shape(tree):
    """(id, parent id, san, child ids) for every node, to compare tree states."""
    return [
        (node.node_id, node.parent.node_id if node.parent else None, node.san,
         [child.node_id for child in node.children])
        for node in tree
    ]


@pytest.fixture
def tree():
    return VariationTree()


@pytest.fixture
def branched_tree():
    """1. e4 e5 2. Nf3 with side lines 1... c5 and 1. d4."""
    tree = VariationTree()
    tree.submit_move("e4")
    tree.submit_move("e5")
    tree.submit_move("Nf3")
    tree.undo()
    tree.undo()
    tree.submit_move("c5")
    tree.jump_to(tree.root.node_id)
    tree.submit_move("d4")
    return tree


class TestSubmitMove:
    """Tests for submit_move()."""

    def test_new_tree_has_root_only(self, tree):
        assert len(tree) == 1
        assert tree.cursor is tree.root
        assert tree.root.fen == chess.STARTING_FEN
        assert tree.root.move is None

    def test_submit_adds_child(self, tree):
        node = tree.submit_move("e4")

        assert len(tree) == 2
        assert tree.cursor is node
        assert node.parent is tree.root
        assert tree.root.children == [node]
        assert node.san == "e4"
        assert node.ply == 1

    def test_child_fen_matches_oracle(self, tree):
        node = tree.submit_move("e4")

        assert node.fen == tree.oracle.apply_move(chess.STARTING_FEN, "e4").fen

    def test_same_move_reuses_node(self, tree):
        """The same move twice from one node adds at most one node."""
        first = tree.submit_move("e4")
        tree.undo()
        second = tree.submit_move("e4")

        assert first is second
        assert len(tree) == 2
        assert len(tree.root.children) == 1

    def test_same_move_different_notation(self, tree):
        """SAN and UCI for the same move share a node."""
        first = tree.submit_move("Nf3")
        tree.undo()
        second = tree.submit_move("g1f3")

        assert first is second
        assert len(tree) == 2

    def test_new_move_appended_last(self, tree):
        e4 = tree.submit_move("e4")
        tree.undo()
        d4 = tree.submit_move("d4")

        assert tree.root.children == [e4, d4]
        assert e4.is_main_line
        assert not d4.is_main_line

    def test_illegal_move_leaves_tree_unchanged(self, tree):
        tree.submit_move("e4")
        before = tree_shape(tree)
        cursor = tree.cursor

        with pytest.raises(IllegalMove):
            tree.submit_move("e4")

        assert tree_shape(tree) == before
        assert tree.cursor is cursor

    def test_node_ids_unique(self, tree):
        for san in ["e4", "e5", "Nf3", "Nc6", "Bb5"]:
            tree.submit_move(san)

        ids = [node.node_id for node in tree]
        assert len(ids) == len(set(ids))

    def test_submit_then_undo_restores_cursor(self, tree):
        """submit_move then undo returns to the prior node, count unchanged by undo."""
        tree.submit_move("e4")
        before = tree.cursor
        tree.submit_move("e5")
        count = len(tree)

        tree.undo()

        assert tree.cursor is before
        assert len(tree) == count


class TestNavigation:
    """Tests for undo(), redo() and jump_to()."""

    def test_undo_at_root_raises(self, tree):
        with pytest.raises(AtRoot):
            tree.undo()

        assert tree.cursor is tree.root

    def test_redo_follows_main_line(self, branched_tree):
        tree = branched_tree
        tree.jump_to(tree.root.node_id)

        node = tree.redo()

        assert node.san == "e4"
        assert tree.redo().san == "e5"

    def test_redo_child_index(self, branched_tree):
        tree = branched_tree
        tree.jump_to(tree.root.children[0].node_id)

        assert tree.redo(1).san == "c5"

    def test_redo_leaf_raises(self, tree):
        tree.submit_move("e4")

        with pytest.raises(NoChildren):
            tree.redo()

    def test_redo_bad_index_raises(self, branched_tree):
        tree = branched_tree
        tree.jump_to(tree.root.node_id)

        with pytest.raises(NoChildren) as excinfo:
            tree.redo(5)

        assert excinfo.value.child_index == 5
        assert tree.cursor is tree.root

    def test_advance_alias(self, tree):
        tree.submit_move("e4")
        tree.undo()

        assert tree.advance().san == "e4"

    def test_jump_to_any_node(self, branched_tree):
        tree = branched_tree
        nf3 = tree.main_line()[-1]

        assert tree.jump_to(nf3.node_id) is nf3
        assert tree.cursor is nf3

    def test_jump_to_unknown_raises(self, tree):
        with pytest.raises(NodeNotFound):
            tree.jump_to(999)

        assert tree.cursor is tree.root

    def test_navigation_never_deletes(self, branched_tree):
        tree = branched_tree
        count = len(tree)

        tree.jump_to(tree.main_line()[-1].node_id)
        tree.undo()
        tree.undo()
        tree.redo(1)

        assert len(tree) == count


class TestPromoteLine:
    """Tests for promote_line()."""

    def test_promote_side_line_leaf(self, branched_tree):
        """Promoting a side-line leaf changes the main line only."""
        tree = branched_tree
        c5 = next(node for node in tree if node.san == "c5")
        parents = {node.node_id: node.parent for node in tree}
        count = len(tree)

        tree.promote_line(c5.node_id)

        assert tree.main_line_sans() == ["e4", "c5"]
        assert len(tree) == count
        assert {node.node_id: node.parent for node in tree} == parents
        assert c5.is_main_line

    def test_promote_changes_export(self, branched_tree):
        tree = branched_tree
        before = tree.export_record(main_line_only=True)

        d4 = tree.root.children[1]
        tree.promote_line(d4.node_id)
        after = tree.export_record(main_line_only=True)

        assert "1. e4" in before
        assert "1. d4" in after
        assert "e4" not in after

    def test_promote_main_line_is_noop(self, branched_tree):
        tree = branched_tree
        before = tree_shape(tree)

        tree.promote_line(tree.main_line()[-1].node_id)

        assert tree_shape(tree) == before

    def test_promote_keeps_cursor(self, branched_tree):
        tree = branched_tree
        cursor = tree.cursor

        tree.promote_line(tree.root.children[0].children[1].node_id)

        assert tree.cursor is cursor

    def test_promote_unknown_raises(self, tree):
        with pytest.raises(NodeNotFound):
            tree.promote_line(42)


class TestQueries:
    """Tests for lookups, paths and status."""

    def test_path_to(self, branched_tree):
        tree = branched_tree
        nf3 = tree.main_line()[-1]

        path = tree.path_to(nf3.node_id)

        assert path[0] is tree.root
        assert [node.san for node in path[1:]] == ["e4", "e5", "Nf3"]

    def test_contains_and_node(self, tree):
        node = tree.submit_move("e4")

        assert node.node_id in tree
        assert tree.node(node.node_id) is node
        assert 12345 not in tree

    def test_iteration_is_preorder_main_first(self, branched_tree):
        sans = [node.san for node in branched_tree]

        assert sans == [None, "e4", "e5", "Nf3", "c5", "d4"]

    def test_legal_moves_at_cursor(self, tree):
        assert len(tree.legal_moves()) == 20

    def test_move_label(self, tree):
        e4 = tree.submit_move("e4")
        e5 = tree.submit_move("e5")

        assert VariationTree.move_label(e4) == "1."
        assert VariationTree.move_label(e5) == "1..."
        assert VariationTree.move_label(tree.root) == ""

    def test_checkmate_status(self, tree):
        for san in ["f3", "e5", "g4", "Qh4#"]:
            tree.submit_move(san)

        assert tree.game_status() is GameStatus.CHECKMATE

    def test_threefold_repetition(self, tree):
        """Repetitions along the path are a draw."""
        for _ in range(2):
            for san in ["Nf3", "Nf6", "Ng1", "Ng8"]:
                tree.submit_move(san)

        assert tree.game_status() is GameStatus.DRAW

    def test_twofold_is_ongoing(self, tree):
        for san in ["Nf3", "Nf6", "Ng1", "Ng8"]:
            tree.submit_move(san)

        assert tree.game_status() is GameStatus.ONGOING

    def test_custom_start_position(self):
        fen = "8/8/4k3/8/8/3K4/4P3/8 w - - 0 1"
        tree = VariationTree(fen)

        assert tree.root.fen == fen
        assert tree.submit_move("e4").san == "e4"

    def test_invalid_start_position(self):
        with pytest.raises(ValueError):
            VariationTree("8/8/8/8/8/8/8/8 w - - 0 1")


class TestReset:
    """Tests for reset() and set_comment()."""

    def test_reset_discards_nodes(self, branched_tree):
        tree = branched_tree
        tree.headers["Event"] = "Club game"

        root = tree.reset()

        assert len(tree) == 1
        assert tree.cursor is root
        assert tree.headers == {}
        assert root.fen == chess.STARTING_FEN

    def test_reset_new_position(self, tree):
        fen = "8/8/4k3/8/8/3K4/4P3/8 w - - 0 1"

        tree.reset(fen)

        assert tree.root.fen == fen

    def test_ids_not_reused_after_reset(self, tree):
        old = tree.submit_move("e4")

        tree.reset()
        new = tree.submit_move("e4")

        assert new.node_id != old.node_id
        assert old.node_id not in tree

    def test_invalid_reset_keeps_tree(self, branched_tree):
        tree = branched_tree
        before = tree_shape(tree)

        with pytest.raises(ValueError):
            tree.reset("garbage")

        assert tree_shape(tree) == before

    def test_set_comment(self, tree):
        node = tree.submit_move("e4")

        tree.set_comment(node.node_id, "  Best by test  ")

        assert node.comment == "Best by test"
