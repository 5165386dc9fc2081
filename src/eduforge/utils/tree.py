"""Traversal helpers over outline node forests.

All helpers are cycle-safe: a node whose id is already on the current ancestor path is yielded
but not descended into, so a malformed tree can never cause unbounded recursion.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence

from eduforge.models.outline import NodeType, OutlineNode


def iter_nodes(nodes: Sequence[OutlineNode], *, depth: int = 0) -> Iterator[tuple[OutlineNode, int]]:
    """Yield `(node, depth)` pairs in depth-first pre-order (roots have depth 0)."""

    yield from _iter(nodes, depth, set())


def _iter(nodes: Sequence[OutlineNode], depth: int, path: set[str]) -> Iterator[tuple[OutlineNode, int]]:
    for node in nodes:
        yield node, depth
        if node.id in path:
            continue
        path.add(node.id)
        yield from _iter(node.children, depth + 1, path)
        path.discard(node.id)


def iter_with_parent(
    nodes: Sequence[OutlineNode],
) -> Iterator[tuple[OutlineNode, OutlineNode | None, int]]:
    """Yield `(node, parent, depth)` triples in depth-first pre-order."""

    def walk(items: Sequence[OutlineNode], parent: OutlineNode | None, depth: int, path: set[str]):
        for node in items:
            yield node, parent, depth
            if node.id in path:
                continue
            path.add(node.id)
            yield from walk(node.children, node, depth + 1, path)
            path.discard(node.id)

    yield from walk(nodes, None, 0, set())


def find_node(nodes: Sequence[OutlineNode], node_id: str) -> OutlineNode | None:
    """Return the first node with `node_id`, or None."""

    for node, _depth in iter_nodes(nodes):
        if node.id == node_id:
            return node
    return None


def find_path(nodes: Sequence[OutlineNode], node_id: str) -> list[OutlineNode] | None:
    """Return the chain of nodes from a root down to `node_id` (inclusive), or None."""

    def search(items: Sequence[OutlineNode], trail: list[OutlineNode]) -> list[OutlineNode] | None:
        for node in items:
            if node.id == node_id:
                return [*trail, node]
            if any(n.id == node.id for n in trail):
                continue
            found = search(node.children, [*trail, node])
            if found is not None:
                return found
        return None

    return search(nodes, [])


def map_tree(
    nodes: Sequence[OutlineNode],
    fn: Callable[[OutlineNode], OutlineNode | None],
) -> list[OutlineNode]:
    """Rebuild a forest bottom-up.

    `fn` receives a shallow copy of every node whose children were already rebuilt and returns
    the node to keep, or None to drop it (together with its subtree). The input is not modified.
    """

    def rebuild(items: Sequence[OutlineNode], path: frozenset[str]) -> list[OutlineNode]:
        out: list[OutlineNode] = []
        for node in items:
            if node.id in path:
                children = list(node.children)
            else:
                children = rebuild(node.children, path | {node.id})
            result = fn(node.model_copy(update={"children": children}))
            if result is not None:
                out.append(result)
        return out

    return rebuild(nodes, frozenset())


def node_ids(nodes: Sequence[OutlineNode]) -> set[str]:
    return {node.id for node, _depth in iter_nodes(nodes)}


def count_nodes(nodes: Sequence[OutlineNode]) -> int:
    return sum(1 for _ in iter_nodes(nodes))


def count_nodes_by_type(nodes: Sequence[OutlineNode], node_type: NodeType) -> int:
    return sum(1 for node, _depth in iter_nodes(nodes) if node.type == node_type)


def total_word_count(nodes: Sequence[OutlineNode]) -> int:
    """Sum of `estimated_word_count` over every node in the forest."""

    return sum(node.estimated_word_count for node, _depth in iter_nodes(nodes))


def total_duration(nodes: Sequence[OutlineNode]) -> int:
    """Sum of `estimated_duration` (minutes) over every node in the forest."""

    return sum(node.estimated_duration for node, _depth in iter_nodes(nodes))


def max_depth(nodes: Sequence[OutlineNode]) -> int:
    """Number of levels in the forest (0 when empty, 1 for roots only)."""

    return max((depth + 1 for _node, depth in iter_nodes(nodes)), default=0)


def leaves(nodes: Sequence[OutlineNode]) -> list[OutlineNode]:
    return [node for node, _depth in iter_nodes(nodes) if not node.children]
