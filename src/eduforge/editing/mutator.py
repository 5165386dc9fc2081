"""Tree rewrite operations used by the interactive outline editor.

Every operation takes a root-node list and returns a new one; inputs are never modified. A
target id that does not exist leaves the tree unchanged.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic.alias_generators import to_camel

from eduforge.logging import get_logger
from eduforge.models.outline import OutlineNode
from eduforge.utils.tree import find_node, find_path, map_tree

logger = get_logger(__name__)


def _field_name(field: str) -> str:
    """Accept either the Python or the camelCase wire name of a node field."""

    if field in OutlineNode.model_fields:
        return field
    for name, info in OutlineNode.model_fields.items():
        if field in (info.alias, to_camel(name)):
            return name
    raise ValueError(f"unknown outline node field: {field}")


def update(nodes: Sequence[OutlineNode], node_id: str, field: str, value: Any) -> list[OutlineNode]:
    """Replace one field of the node with `node_id`.

    Raises:
        ValueError: `field` is not an outline node field, or `value` does not validate for it.
    """

    name = _field_name(field)
    if name in ("id", "children"):
        raise ValueError(f"field cannot be edited directly: {field}")

    if find_node(nodes, node_id) is None:
        logger.debug("update: node not found", extra={"node_id": node_id})
        return list(nodes)

    def apply(node: OutlineNode) -> OutlineNode:
        if node.id != node_id:
            return node
        data = node.model_dump()
        data[name] = value
        data["children"] = node.children
        return OutlineNode.model_validate(data)

    return map_tree(nodes, apply)


def insert_child(nodes: Sequence[OutlineNode], parent_id: str, new_node: OutlineNode) -> list[OutlineNode]:
    """Append `new_node` to the children of `parent_id`."""

    if find_node(nodes, parent_id) is None:
        logger.debug("insert_child: parent not found", extra={"node_id": parent_id})
        return list(nodes)

    inserted = False

    def apply(node: OutlineNode) -> OutlineNode:
        nonlocal inserted
        if node.id == parent_id and not inserted:
            inserted = True
            node.children = [*node.children, new_node.model_copy(deep=True)]
        return node

    return map_tree(nodes, apply)


def add_root(nodes: Sequence[OutlineNode], new_node: OutlineNode) -> list[OutlineNode]:
    return [*nodes, new_node.model_copy(deep=True)]


def remove(nodes: Sequence[OutlineNode], node_id: str) -> list[OutlineNode]:
    """Drop the node with `node_id` (and its subtree) wherever it occurs."""

    if find_node(nodes, node_id) is None:
        logger.debug("remove: node not found", extra={"node_id": node_id})
        return list(nodes)
    return map_tree(nodes, lambda node: None if node.id == node_id else node)


def _detach(nodes: Sequence[OutlineNode], path: Sequence[OutlineNode]) -> list[OutlineNode]:
    """Drop exactly the node at the end of `path`, matched by identity so duplicate ids survive."""

    head, rest = path[0], path[1:]
    out: list[OutlineNode] = []
    matched = False
    for node in nodes:
        if matched or node is not head:
            out.append(node)
            continue
        matched = True
        if rest:
            out.append(node.model_copy(update={"children": _detach(node.children, rest)}))
    return out


def move(nodes: Sequence[OutlineNode], source_id: str, target_id: str) -> list[OutlineNode]:
    """Re-parent the subtree rooted at `source_id` as the last child of `target_id`.

    Moving a node onto itself, or into one of its own descendants, is refused and returns the
    tree unchanged. When `target_id` is not in the tree the subtree becomes a new root node.
    """

    if source_id == target_id:
        return list(nodes)

    source_path = find_path(nodes, source_id)
    if source_path is None:
        logger.debug("move: source not found", extra={"node_id": source_id})
        return list(nodes)

    source = source_path[-1]
    if find_node(source.children, target_id) is not None:
        logger.info(
            "move: refusing to move a node into its own subtree",
            extra={"source_id": source_id, "target_id": target_id},
        )
        return list(nodes)

    detached = source.model_copy(deep=True)
    without_source = _detach(nodes, source_path)

    if find_node(without_source, target_id) is None:
        return [*without_source, detached]
    return insert_child(without_source, target_id, detached)


def new_child_node(parent: OutlineNode) -> OutlineNode:
    """Default node created by the editor's "add child" action."""

    return OutlineNode(
        title="New Item",
        type="topic",
        estimated_word_count=200,
        estimated_duration=15,
        standard_ids=list(parent.standard_ids),
        taxonomy_level=parent.taxonomy_level or "understand",
        difficulty_level=parent.difficulty_level or "beginner",
    )


def new_root_node() -> OutlineNode:
    """Default node created by the editor's "add section" action."""

    return OutlineNode(
        title="New Section",
        type="section",
        estimated_word_count=500,
        estimated_duration=30,
    )
