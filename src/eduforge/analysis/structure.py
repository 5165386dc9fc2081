"""Whole-outline overview: time allocation, dashboard warnings and structural issues."""

from __future__ import annotations

from collections.abc import Sequence

from eduforge.analysis.standards import analyze_standards_coverage
from eduforge.analysis.taxonomy import (
    CREATE_LIGHT_MESSAGE,
    CREATE_LIGHT_SHARE,
    REMEMBER_HEAVY_MESSAGE,
    REMEMBER_HEAVY_SHARE,
    taxonomy_distribution,
)
from eduforge.models.outline import NODE_TYPES, Outline, OutlineNode
from eduforge.models.project import EducationalStandard
from eduforge.utils.tree import count_nodes_by_type, iter_nodes

MIN_STANDARDS_COVERAGE = 80
TIME_BALANCE_RATIO = 3
SHORT_LEAF_WORDS = 100
LISTED_TITLES = 3


def time_allocation(nodes: Sequence[OutlineNode]) -> dict[str, int]:
    """Minutes per node type, summed over every node."""

    allocation = {node_type: 0 for node_type in NODE_TYPES}
    for node, _depth in iter_nodes(nodes):
        allocation[node.type] += node.estimated_duration
    return allocation


def is_time_balanced(allocation: dict[str, int]) -> bool:
    """True when the largest per-type allocation is under three times the smallest non-zero one."""

    used = [minutes for minutes in allocation.values() if minutes > 0]
    if not used:
        return True
    return max(used) / min(used) < TIME_BALANCE_RATIO


def outline_warnings(outline: Outline, standards: Sequence[EducationalStandard]) -> list[str]:
    warnings: list[str] = []

    coverage = analyze_standards_coverage(outline, standards)
    if coverage < MIN_STANDARDS_COVERAGE:
        warnings.append(f"Only {round(coverage)}% of standards are covered in your outline.")

    taxonomy = taxonomy_distribution(outline.root_nodes)
    if taxonomy.total:
        if taxonomy.percentages["remember"] > REMEMBER_HEAVY_SHARE:
            warnings.append(REMEMBER_HEAVY_MESSAGE)
        if taxonomy.percentages["create"] < CREATE_LIGHT_SHARE:
            warnings.append(CREATE_LIGHT_MESSAGE)

    assessments = count_nodes_by_type(outline.root_nodes, "assessment")
    topics = count_nodes_by_type(outline.root_nodes, "topic")
    if assessments < topics / 3:
        warnings.append("Limited assessment opportunities. Consider adding more assessment points.")

    roots = outline.root_nodes
    if roots:
        mean_children = sum(len(root.children) for root in roots) / len(roots)
        if any(
            len(root.children) > mean_children * 2 or (mean_children > 2 and not root.children) for root in roots
        ):
            warnings.append(
                "Sections have an imbalanced number of subsections. Consider redistributing content more evenly."
            )

    return warnings


def find_structural_issues(nodes: Sequence[OutlineNode]) -> list[str]:
    types_seen: set[str] = set()
    undescribed: list[str] = []
    short_leaves = 0
    childless_containers = 0

    for node, depth in iter_nodes(nodes):
        types_seen.add(node.type)
        if not node.description and node.type in ("section", "subsection", "topic"):
            undescribed.append(node.title)
        if not node.children and node.estimated_word_count < SHORT_LEAF_WORDS:
            short_leaves += 1
        if depth > 0 and not node.children and node.type in ("section", "subsection"):
            childless_containers += 1

    issues: list[str] = []
    if "assessment" not in types_seen:
        issues.append("No assessment nodes found. Consider adding assessments for learning evaluation.")
    if "activity" not in types_seen:
        issues.append("No activity nodes found. Consider adding interactive activities for engagement.")
    if undescribed:
        listed = ", ".join(undescribed[:LISTED_TITLES])
        more = "..." if len(undescribed) > LISTED_TITLES else ""
        issues.append(f"{len(undescribed)} nodes are missing descriptions, including: {listed}{more}")
    if short_leaves:
        issues.append(f"{short_leaves} leaf nodes have minimal content (less than {SHORT_LEAF_WORDS} words).")
    if childless_containers:
        issues.append(f"{childless_containers} section/subsection nodes have no children.")
    return issues
