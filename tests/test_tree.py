"""Tests for tree traversal helpers."""

from __future__ import annotations

from eduforge.models.outline import OutlineNode
from eduforge.utils.tree import (
    count_nodes,
    count_nodes_by_type,
    find_node,
    find_path,
    iter_nodes,
    iter_with_parent,
    leaves,
    map_tree,
    max_depth,
    total_duration,
    total_word_count,
)


def _forest() -> list[OutlineNode]:
    return [
        OutlineNode(
            id="s1",
            title="S1",
            type="section",
            estimated_word_count=100,
            estimated_duration=10,
            children=[
                OutlineNode(id="t1", title="T1", estimated_word_count=50, estimated_duration=5),
                OutlineNode(
                    id="t2",
                    title="T2",
                    estimated_word_count=50,
                    estimated_duration=5,
                    children=[OutlineNode(id="a1", title="A1", type="activity", estimated_word_count=25)],
                ),
            ],
        ),
        OutlineNode(id="s2", title="S2", type="section"),
    ]


def test_preorder_with_depths() -> None:
    """Nodes come parent first, with root depth 0."""

    assert [(n.id, d) for n, d in iter_nodes(_forest())] == [
        ("s1", 0),
        ("t1", 1),
        ("t2", 1),
        ("a1", 2),
        ("s2", 0),
    ]
    parents = {n.id: (p.id if p else None) for n, p, _d in iter_with_parent(_forest())}
    assert parents["a1"] == "t2"
    assert parents["s2"] is None


def test_lookups() -> None:
    """find_node and find_path locate nodes or return None."""

    forest = _forest()

    assert find_node(forest, "a1").title == "A1"
    assert find_node(forest, "missing") is None
    assert [n.id for n in find_path(forest, "a1")] == ["s1", "t2", "a1"]
    assert find_path(forest, "missing") is None


def test_aggregates() -> None:
    """Counts, totals, depth and leaves over the whole forest."""

    forest = _forest()

    assert count_nodes(forest) == 5
    assert count_nodes_by_type(forest, "section") == 2
    assert total_word_count(forest) == 225
    assert total_duration(forest) == 20
    assert max_depth(forest) == 3
    assert max_depth([]) == 0
    assert [n.id for n in leaves(forest)] == ["t1", "a1", "s2"]


def test_map_tree_drops_and_rewrites_without_touching_input() -> None:
    """Returning None removes a subtree; the original forest is unchanged."""

    forest = _forest()

    def fn(node: OutlineNode) -> OutlineNode | None:
        if node.id == "t2":
            return None
        return node.model_copy(update={"title": node.title.lower()})

    rebuilt = map_tree(forest, fn)

    assert [(n.id, d) for n, d in iter_nodes(rebuilt)] == [("s1", 0), ("t1", 1), ("s2", 0)]
    assert rebuilt[0].title == "s1"
    assert forest[0].title == "S1"
    assert len(forest[0].children) == 2


def test_traversal_survives_cycles() -> None:
    """A node that contains its ancestor is visited once more but not descended into."""

    a = OutlineNode(id="a", title="A")
    b = OutlineNode(id="b", title="B", children=[a])
    a.children = [b]

    assert [n.id for n, _d in iter_nodes([a])] == ["a", "b", "a"]
