"""
Tests for mind-map tree operations: descendants and cascading delete.
"""
from omnido.schema import MindMapNode
from omnido.tree import cascade_delete, children_index, depth_first, descendant_ids, orphans, roots


def _chain():
    """root -> A -> B -> C, plus root -> D"""
    root = MindMapNode(id="root", title="root")
    a = MindMapNode(id="A", title="A", parent_id="root")
    b = MindMapNode(id="B", title="B", parent_id="A")
    c = MindMapNode(id="C", title="C", parent_id="B")
    d = MindMapNode(id="D", title="D", parent_id="root")
    return [root, a, b, c, d]


def _ids(nodes):
    return [node.id for node in nodes]


def test_children_index():
    index = children_index(_chain())
    assert _ids(index[None]) == ["root"]
    assert _ids(index["root"]) == ["A", "D"]
    assert "C" not in index


def test_descendants_depth_first():
    nodes = _chain()
    assert descendant_ids(nodes, "root") == ["A", "B", "C", "D"]
    assert descendant_ids(nodes, "A") == ["B", "C"]
    assert descendant_ids(nodes, "C") == []
    assert descendant_ids(nodes, "missing") == []


def test_cascade_delete_subtree():
    assert _ids(cascade_delete(_chain(), "A")) == ["root", "D"]


def test_cascade_delete_root_removes_everything():
    assert cascade_delete(_chain(), "root") == []


def test_cascade_delete_leaf_removes_one():
    remaining = cascade_delete(_chain(), "C")
    assert _ids(remaining) == ["root", "A", "B", "D"]


def test_cascade_delete_unknown_id_is_noop():
    nodes = _chain()
    assert cascade_delete(nodes, "nope") == nodes


def test_cycle_does_not_loop_forever():
    x = MindMapNode(id="X", title="X", parent_id="Y")
    y = MindMapNode(id="Y", title="Y", parent_id="X")
    assert descendant_ids([x, y], "X") == ["Y"]
    assert cascade_delete([x, y], "X") == []


def test_orphans_and_roots():
    nodes = _chain() + [MindMapNode(id="lost", title="lost", parent_id="gone")]
    assert _ids(roots(nodes)) == ["root"]
    assert _ids(orphans(nodes)) == ["lost"]
    # the orphan survives deleting the root, it was never part of that subtree
    assert _ids(cascade_delete(nodes, "root")) == ["lost"]


def test_depth_first_walk():
    walked = [(depth, node.id) for depth, node in depth_first(_chain())]
    assert walked == [(0, "root"), (1, "A"), (2, "B"), (3, "C"), (1, "D")]
