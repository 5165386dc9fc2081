"""Standards coverage and gap analysis."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence

from pydantic import BaseModel, Field

from eduforge.logging import get_logger
from eduforge.models.outline import Outline, OutlineNode
from eduforge.models.project import EducationalStandard
from eduforge.utils.tree import iter_nodes

logger = get_logger(__name__)

UNCATEGORIZED = "Uncategorized"
LOW_CATEGORY_COVERAGE = 50
CATEGORY_SPREAD_POINTS = 30
PER_STANDARD_DETAIL_LIMIT = 3
_STANDARD_CARRIER_TYPES = ("topic", "subsection", "section")


class StandardsGapReport(BaseModel):
    uncovered_standards: list[EducationalStandard] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    coverage_percentage: int = 100
    coverage_by_category: dict[str, int] = Field(default_factory=dict)


class StandardCoverage(BaseModel):
    standard: EducationalStandard
    covered: bool
    node_ids: list[str] = Field(default_factory=list)


def covered_standard_ids(nodes: Sequence[OutlineNode]) -> set[str]:
    """All standard ids referenced anywhere in the forest."""

    return {sid for node, _depth in iter_nodes(nodes) for sid in node.standard_ids}


def analyze_standards_coverage(outline: Outline, standards: Sequence[EducationalStandard]) -> float:
    """Unrounded percentage of `standards` referenced by the outline (100.0 for an empty list)."""

    if not standards:
        return 100.0
    covered = covered_standard_ids(outline.root_nodes)
    hits = sum(1 for standard in standards if standard.id in covered)
    return hits * 100 / len(standards)


def standard_coverage_map(outline: Outline, standards: Sequence[EducationalStandard]) -> list[StandardCoverage]:
    """For each standard, the ids of the nodes that reference it (in traversal order)."""

    carriers: dict[str, list[str]] = defaultdict(list)
    for node, _depth in iter_nodes(outline.root_nodes):
        for sid in dict.fromkeys(node.standard_ids):
            carriers[sid].append(node.id)
    return [
        StandardCoverage(standard=s, covered=bool(carriers.get(s.id)), node_ids=list(carriers.get(s.id, [])))
        for s in standards
    ]


def suggest_nodes_for_standards(nodes: Sequence[OutlineNode]) -> list[OutlineNode]:
    """Topics and subsections with fewer than two standards, fewest first."""

    candidates = [
        node
        for node, _depth in iter_nodes(nodes)
        if node.type in ("topic", "subsection") and len(node.standard_ids) < 2
    ]
    return sorted(candidates, key=lambda n: len(n.standard_ids))


def _category(standard: EducationalStandard) -> str:
    return standard.category or UNCATEGORIZED


def _truncate(text: str, limit: int = 60) -> str:
    return f"{text[:limit]}..." if len(text) > limit else text


def analyze_standards_gaps(outline: Outline, standards: Sequence[EducationalStandard]) -> StandardsGapReport:
    """Report uncovered standards, per-category coverage and remediation advice.

    Args:
        outline: Outline to inspect (not modified).
        standards: Standards the outline is expected to cover.

    Returns:
        Report whose `coverage_percentage` is the rounded share of covered standards.
    """

    covered = covered_standard_ids(outline.root_nodes)
    uncovered = [s for s in standards if s.id not in covered]

    totals: dict[str, int] = defaultdict(int)
    hits: dict[str, int] = defaultdict(int)
    for standard in standards:
        totals[_category(standard)] += 1
        if standard.id in covered:
            hits[_category(standard)] += 1
    by_category = {cat: round(hits[cat] / total * 100) for cat, total in totals.items()}

    recommendations: list[str] = []
    if uncovered:
        recommendations.append(f"{len(uncovered)} standards are not covered in this outline.")

        groups: dict[str, list[EducationalStandard]] = defaultdict(list)
        for standard in uncovered:
            groups[_category(standard)].append(standard)
        for category, group in groups.items():
            if len(group) > PER_STANDARD_DETAIL_LIMIT:
                recommendations.append(
                    f'Add content to address {len(group)} uncovered standards in "{category}".'
                )
            else:
                for standard in group:
                    recommendations.append(
                        f'Add content for standard {standard.id}: "{_truncate(standard.description)}"'
                    )

        for category, pct in by_category.items():
            if pct < LOW_CATEGORY_COVERAGE:
                recommendations.append(
                    f'Only {pct}% of "{category}" standards are covered. Prioritize content for this category.'
                )

        candidates = suggest_nodes_for_standards(outline.root_nodes)
        if candidates:
            recommendations.append(
                f'Consider adding standards to "{candidates[0].title}" which has related content.'
            )
    else:
        recommendations.append("All standards are covered in the outline.")
        recommendations.extend(_concentration_advice(outline, standards))

    if len(by_category) > 1:
        spread = max(by_category.values()) - min(by_category.values())
        if spread > CATEGORY_SPREAD_POINTS:
            best = max(by_category, key=by_category.__getitem__)
            worst = min(by_category, key=by_category.__getitem__)
            recommendations.append(
                f'Coverage is uneven across categories: "{best}" is at {by_category[best]}% '
                f'while "{worst}" is at {by_category[worst]}%.'
            )

    coverage = round((len(standards) - len(uncovered)) / len(standards) * 100) if standards else 100
    return StandardsGapReport(
        uncovered_standards=uncovered,
        recommendations=recommendations,
        coverage_percentage=coverage,
        coverage_by_category=by_category,
    )


def _concentration_advice(outline: Outline, standards: Sequence[EducationalStandard]) -> list[str]:
    wanted = {s.id for s in standards}
    carriers = [
        node for node, _depth in iter_nodes(outline.root_nodes) if wanted.intersection(node.standard_ids)
    ]
    if len(wanted) > PER_STANDARD_DETAIL_LIMIT and len(carriers) < len(wanted) / 3:
        return [
            f"{len(wanted)} standards are concentrated in only {len(carriers)} nodes. "
            "Consider spreading them across more topics."
        ]
    return []


def auto_fix_standards(outline: Outline, standards: Sequence[EducationalStandard]) -> Outline:
    """Return a copy of `outline` with every uncovered standard attached to some node.

    Uncovered standards are dealt round-robin over section, subsection and topic nodes in
    traversal order. Without such nodes the copy is returned unchanged.
    """

    fixed = outline.model_copy(deep=True)
    covered = covered_standard_ids(fixed.root_nodes)
    uncovered = [s.id for s in standards if s.id not in covered]

    targets = [node for node, _depth in iter_nodes(fixed.root_nodes) if node.type in _STANDARD_CARRIER_TYPES]
    if not uncovered or not targets:
        return fixed

    for i, standard_id in enumerate(uncovered):
        target = targets[i % len(targets)]
        target.standard_ids = [*target.standard_ids, standard_id]

    logger.info("Standards auto-fixed", extra={"assigned": len(uncovered), "targets": len(targets)})
    return fixed
