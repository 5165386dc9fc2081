"""Analysis and auto-detection of the relationship graph overlaid on an outline."""

from __future__ import annotations

from collections import defaultdict

from pydantic import BaseModel, Field

from eduforge.logging import get_logger
from eduforge.models.outline import Outline, OutlineNode, Relationship
from eduforge.utils.tree import iter_nodes

logger = get_logger(__name__)


class RelationshipReport(BaseModel):
    orphan_nodes: list[OutlineNode] = Field(default_factory=list)
    terminal_nodes: list[OutlineNode] = Field(default_factory=list)
    isolated_roots: list[OutlineNode] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


def _root_index(outline: Outline) -> dict[str, str]:
    """Node id -> id of the root whose subtree contains it."""

    owner: dict[str, str] = {}
    for root in outline.root_nodes:
        for node, _depth in iter_nodes([root]):
            owner.setdefault(node.id, root.id)
    return owner


def analyze_relationships(outline: Outline) -> RelationshipReport:
    """Find weakly connected parts of the relationship graph.

    * orphans: non-root nodes without an incoming edge;
    * terminal nodes: leaves without an outgoing edge;
    * isolated roots: root branches with no edge to or from another root branch.
    """

    if not outline.relationships:
        return RelationshipReport(
            recommendations=[
                "No relationships defined between nodes. "
                "Consider adding prerequisite, supports, or reference relationships."
            ]
        )

    outgoing = {rel.from_node_id for rel in outline.relationships}
    incoming = {rel.to_node_id for rel in outline.relationships}
    root_ids = {root.id for root in outline.root_nodes}

    entries = [node for node, _depth in iter_nodes(outline.root_nodes)]
    terminal = [node for node in entries if not node.children and node.id not in outgoing]
    orphans = [node for node in entries if node.id not in root_ids and node.id not in incoming]

    owner = _root_index(outline)
    linked_roots: set[str] = set()
    for rel in outline.relationships:
        src, dst = owner.get(rel.from_node_id), owner.get(rel.to_node_id)
        if src and dst and src != dst:
            linked_roots.update((src, dst))
    isolated = [root for root in outline.root_nodes if root.id not in linked_roots]

    recommendations: list[str] = []
    if orphans:
        recommendations.append(
            f"{len(orphans)} nodes aren't referenced by other nodes. Consider adding relationships."
        )
    if terminal:
        recommendations.append(
            f"{len(terminal)} leaf nodes have no outgoing relationships. Consider adding connections."
        )
    if isolated:
        recommendations.append(
            f"{len(isolated)} root sections are isolated from others. Consider adding cross-section relationships."
        )
    return RelationshipReport(
        orphan_nodes=orphans, terminal_nodes=terminal, isolated_roots=isolated, recommendations=recommendations
    )


def detect_relationships(outline: Outline) -> list[Relationship]:
    """Propose new edges for `outline`; existing edges are never duplicated.

    Consecutive children of each root section become `prerequisite` edges. Nodes sharing a
    standard id become `supports` edges unless the pair is already connected in either direction.
    The outline itself is not modified; append the result to `outline.relationships` to keep it.
    """

    existing = list(outline.relationships)
    proposed: list[Relationship] = []

    def connected(a: str, b: str, rel_type: str | None = None) -> bool:
        for rel in (*existing, *proposed):
            if rel_type is not None and rel.type != rel_type:
                continue
            if rel.from_node_id == a and rel.to_node_id == b:
                return True
            if rel_type is None and rel.from_node_id == b and rel.to_node_id == a:
                return True
        return False

    for section in outline.root_nodes:
        for prev, curr in zip(section.children, section.children[1:]):
            if not connected(prev.id, curr.id, "prerequisite"):
                proposed.append(
                    Relationship(
                        from_node_id=prev.id,
                        to_node_id=curr.id,
                        type="prerequisite",
                        description=f"{prev.title} is a prerequisite for {curr.title}",
                    )
                )

    by_standard: dict[str, list[str]] = defaultdict(list)
    for node, _depth in iter_nodes(outline.root_nodes):
        for sid in dict.fromkeys(node.standard_ids):
            by_standard[sid].append(node.id)

    for ids in by_standard.values():
        for i, a in enumerate(ids):
            for b in ids[i + 1 :]:
                if a != b and not connected(a, b):
                    proposed.append(
                        Relationship(
                            from_node_id=a,
                            to_node_id=b,
                            type="supports",
                            description="These topics support each other (same standard)",
                        )
                    )

    logger.debug("Relationships detected", extra={"proposed": len(proposed)})
    return proposed
