"""
Mind-map tree operations.

Nodes only store a parent pointer; the parent -> children index is rebuilt
for every traversal and never persisted.
"""
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from .schema import MindMapNode


def children_index(nodes: Sequence[MindMapNode]) -> Dict[Optional[str], List[MindMapNode]]:
    """Map each parent id (None for roots) to its direct children, in list order."""
    index: Dict[Optional[str], List[MindMapNode]] = defaultdict(list)
    for node in nodes:
        index[node.parent_id].append(node)
    return index


def descendant_ids(nodes: Sequence[MindMapNode], node_id: str) -> List[str]:
    """
    All transitive children of node_id, depth-first pre-order.

    The target itself is not included. A parent cycle cannot loop forever:
    every id is visited at most once.
    """
    index = children_index(nodes)
    found: List[str] = []
    seen = {node_id}
    stack = list(reversed(index.get(node_id, [])))
    while stack:
        child = stack.pop()
        if child.id in seen:
            continue
        seen.add(child.id)
        found.append(child.id)
        stack.extend(reversed(index.get(child.id, [])))
    return found


def cascade_delete(nodes: Sequence[MindMapNode], node_id: str) -> List[MindMapNode]:
    """Return nodes without node_id and its whole subtree (single filter pass)."""
    doomed = set(descendant_ids(nodes, node_id))
    doomed.add(node_id)
    return [node for node in nodes if node.id not in doomed]


def roots(nodes: Sequence[MindMapNode]) -> List[MindMapNode]:
    return [node for node in nodes if node.parent_id is None]


def orphans(nodes: Sequence[MindMapNode]) -> List[MindMapNode]:
    """Nodes whose parent is missing from the map (unreachable from any root)."""
    ids = {node.id for node in nodes}
    return [node for node in nodes if node.parent_id is not None and node.parent_id not in ids]


def depth_first(nodes: Sequence[MindMapNode]) -> List[tuple]:
    """(depth, node) pairs walking every root's subtree in list order."""
    index = children_index(nodes)
    walked: List[tuple] = []
    seen = set()
    stack = [(0, node) for node in reversed(index.get(None, []))]
    while stack:
        depth, node = stack.pop()
        if node.id in seen:
            continue
        seen.add(node.id)
        walked.append((depth, node))
        stack.extend((depth + 1, child) for child in reversed(index.get(node.id, [])))
    return walked
