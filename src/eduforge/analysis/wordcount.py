"""Word-count distribution analysis and balance remediation."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

from pydantic import BaseModel, Field

from eduforge.logging import get_logger
from eduforge.models.outline import Outline, OutlineNode
from eduforge.utils.tree import iter_nodes, map_tree, total_word_count

logger = get_logger(__name__)

BalanceStrategy = Literal["balance", "relative-depth", "type-based"]

BALANCE_RATIO = 3
LEAF_OUTLIER_FACTOR = 2
PARENT_SHARE_LIMIT = 0.5
DOMINANT_ROOT_PERCENT = 40
SIBLING_PULL = 0.7
MIN_RECOMMENDED_WORDS = 50

# Multipliers applied to the mean node word count.
TYPE_MULTIPLIERS: dict[str, float] = {
    "section": 1.5,
    "subsection": 1.2,
    "topic": 1.0,
    "activity": 0.8,
    "assessment": 0.6,
    "resource": 0.4,
}


class RootShare(BaseModel):
    node_id: str
    title: str
    word_count: int
    percentage: int


class WordCountReport(BaseModel):
    is_balanced: bool = True
    distribution: list[RootShare] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class NodeRecommendation(BaseModel):
    node_id: str
    title: str
    depth: int
    word_count: int
    recommended_word_count: int


class BalancePlan(BaseModel):
    strategy: BalanceStrategy
    recommendations: list[NodeRecommendation] = Field(default_factory=list)

    def changes(self) -> dict[str, int]:
        """Node id -> new word count for nodes whose count would change."""

        return {
            r.node_id: r.recommended_word_count
            for r in self.recommendations
            if r.recommended_word_count != r.word_count
        }


def analyze_word_count_distribution(outline: Outline) -> WordCountReport:
    """Share of the total word count held by each root node, plus imbalance advice.

    The outline is balanced when the largest root share is at most three times the smallest;
    one root or fewer is balanced by definition.
    """

    total = total_word_count(outline.root_nodes)
    if total <= 0:
        return WordCountReport()

    distribution = [
        RootShare(
            node_id=node.id,
            title=node.title,
            word_count=node.estimated_word_count,
            percentage=round(node.estimated_word_count / total * 100),
        )
        for node in outline.root_nodes
    ]

    recommendations: list[str] = []
    is_balanced = True
    if len(distribution) > 1:
        smallest = min(distribution, key=lambda d: d.percentage)
        largest = max(distribution, key=lambda d: d.percentage)
        is_balanced = largest.percentage <= smallest.percentage * BALANCE_RATIO
        if not is_balanced:
            recommendations.append(
                f'"{largest.title}" takes up {largest.percentage}% of content while "{smallest.title}" '
                f"only takes up {smallest.percentage}%. Consider redistributing content."
            )
            if len(distribution) > 2:
                for share in distribution:
                    if share.percentage > DOMINANT_ROOT_PERCENT:
                        recommendations.append(
                            f'"{share.title}" takes up {share.percentage}% of content. '
                            "Consider splitting into multiple sections."
                        )
        else:
            recommendations.append("Content distribution is relatively balanced.")

    recommendations.extend(_leaf_outliers(outline.root_nodes))
    recommendations.extend(_heavy_parents(outline.root_nodes))

    return WordCountReport(is_balanced=is_balanced, distribution=distribution, recommendations=recommendations)


def _leaf_outliers(nodes: Sequence[OutlineNode]) -> list[str]:
    leaf_nodes = [node for node, _depth in iter_nodes(nodes) if not node.children]
    if len(leaf_nodes) < 2:
        return []
    mean = sum(n.estimated_word_count for n in leaf_nodes) / len(leaf_nodes)
    return [
        f'"{n.title}" has {n.estimated_word_count} words, more than twice the average leaf '
        f"({round(mean)}). Consider splitting it."
        for n in leaf_nodes
        if n.estimated_word_count > mean * LEAF_OUTLIER_FACTOR
    ]


def _heavy_parents(nodes: Sequence[OutlineNode]) -> list[str]:
    out: list[str] = []
    for node, _depth in iter_nodes(nodes):
        if len(node.children) <= 1:
            continue
        own = node.estimated_word_count
        combined = own + sum(child.estimated_word_count for child in node.children)
        if combined > 0 and own > combined * PARENT_SHARE_LIMIT:
            out.append(
                f'"{node.title}" holds {round(own / combined * 100)}% of its branch\'s words. '
                "Move detail into its children."
            )
    return out


def _depth_factor(depth: int) -> float:
    return max(0.5, 1.5 - 0.25 * depth)


def plan_balance(outline: Outline, strategy: BalanceStrategy = "balance") -> BalancePlan:
    """Compute a recommended word count for every node.

    Strategies:
        balance: move each node 70% of the way toward the mean of its sibling group.
        relative-depth: mean node word count scaled by a factor shrinking with depth
            (1.5 at the roots, -0.25 per level, floor 0.5).
        type-based: mean node word count scaled by `TYPE_MULTIPLIERS[node.type]`.
    """

    entries = list(iter_nodes(outline.root_nodes))
    if not entries:
        return BalancePlan(strategy=strategy)

    overall_mean = sum(node.estimated_word_count for node, _ in entries) / len(entries)
    sibling_means: dict[str, float] = {}
    if strategy == "balance":
        groups: list[Sequence[OutlineNode]] = [outline.root_nodes]
        groups.extend(node.children for node, _ in entries if node.children)
        for group in groups:
            mean = sum(n.estimated_word_count for n in group) / len(group)
            for n in group:
                sibling_means.setdefault(n.id, mean)

    recommendations: list[NodeRecommendation] = []
    for node, depth in entries:
        current = node.estimated_word_count
        if strategy == "balance":
            target = current + (sibling_means.get(node.id, current) - current) * SIBLING_PULL
        elif strategy == "relative-depth":
            target = overall_mean * _depth_factor(depth)
        else:
            target = overall_mean * TYPE_MULTIPLIERS[node.type]
        recommendations.append(
            NodeRecommendation(
                node_id=node.id,
                title=node.title,
                depth=depth,
                word_count=current,
                recommended_word_count=max(MIN_RECOMMENDED_WORDS, round(target)),
            )
        )
    return BalancePlan(strategy=strategy, recommendations=recommendations)


def apply_word_counts(outline: Outline, word_counts: dict[str, int]) -> Outline:
    """Return a copy of `outline` with new word counts and proportionally scaled durations."""

    def adjust(node: OutlineNode) -> OutlineNode:
        new_count = word_counts.get(node.id)
        if new_count is None or new_count == node.estimated_word_count:
            return node
        duration = node.estimated_duration
        if node.estimated_word_count > 0:
            duration = max(1, round(duration * new_count / node.estimated_word_count))
        return node.model_copy(update={"estimated_word_count": new_count, "estimated_duration": duration})

    updated = outline.model_copy(deep=True)
    updated.root_nodes = map_tree(updated.root_nodes, adjust)
    return updated


def apply_balance(outline: Outline, strategy: BalanceStrategy = "balance") -> Outline:
    plan = plan_balance(outline, strategy)
    changes = plan.changes()
    logger.info("Balance applied", extra={"strategy": strategy, "changed": len(changes)})
    return apply_word_counts(outline, changes)
