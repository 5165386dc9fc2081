"""Taxonomy and difficulty histograms."""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, Field

from eduforge.models.outline import DIFFICULTY_LEVELS, TAXONOMY_LEVELS, Outline, OutlineNode, difficulty_rank
from eduforge.utils.tree import iter_nodes

REMEMBER_HEAVY_SHARE = 40
CREATE_LIGHT_SHARE = 10
HIGHER_ORDER_LIGHT_SHARE = 30

REMEMBER_HEAVY_MESSAGE = (
    "Too much focus on basic recall (Remember level). Consider adding higher-order thinking activities."
)
CREATE_LIGHT_MESSAGE = "Limited creative activities. Consider adding more opportunities for creation and innovation."


class LevelHistogram(BaseModel):
    counts: dict[str, int] = Field(default_factory=dict)
    percentages: dict[str, float] = Field(default_factory=dict)
    total: int = 0


class TaxonomyReport(BaseModel):
    taxonomy: LevelHistogram
    difficulty: LevelHistogram
    recommendations: list[str] = Field(default_factory=list)


def _histogram(values: Sequence[str | None], scale: Sequence[str]) -> LevelHistogram:
    counts = {level: 0 for level in scale}
    for value in values:
        if value is not None:
            counts[value] += 1
    total = sum(counts.values())
    percentages = {level: (count / total * 100 if total else 0.0) for level, count in counts.items()}
    return LevelHistogram(counts=counts, percentages=percentages, total=total)


def taxonomy_distribution(nodes: Sequence[OutlineNode]) -> LevelHistogram:
    return _histogram([node.taxonomy_level for node, _ in iter_nodes(nodes)], TAXONOMY_LEVELS)


def difficulty_distribution(nodes: Sequence[OutlineNode]) -> LevelHistogram:
    return _histogram([node.difficulty_level for node, _ in iter_nodes(nodes)], DIFFICULTY_LEVELS)


def difficulty_progression(nodes: Sequence[OutlineNode]) -> list[float]:
    """Mean difficulty (1 = introductory .. 5 = expert) of each root's subtree; 1 when unset."""

    out: list[float] = []
    for root in nodes:
        ranks = [
            rank + 1
            for node, _ in iter_nodes([root])
            if (rank := difficulty_rank(node.difficulty_level)) is not None
        ]
        out.append(sum(ranks) / len(ranks) if ranks else 1.0)
    return out


def taxonomy_warnings(histogram: LevelHistogram) -> list[str]:
    if histogram.total == 0:
        return []
    pct = histogram.percentages
    warnings: list[str] = []
    if pct["remember"] > REMEMBER_HEAVY_SHARE:
        warnings.append(REMEMBER_HEAVY_MESSAGE)
    if pct["create"] < CREATE_LIGHT_SHARE:
        warnings.append(CREATE_LIGHT_MESSAGE)
    higher_order = pct["analyze"] + pct["evaluate"] + pct["create"]
    if higher_order < HIGHER_ORDER_LIGHT_SHARE:
        warnings.append(
            f"Only {round(higher_order)}% of nodes target analyze, evaluate or create. "
            "Consider adding more higher-order thinking."
        )
    return warnings


def analyze_taxonomy(outline: Outline) -> TaxonomyReport:
    taxonomy = taxonomy_distribution(outline.root_nodes)
    difficulty = difficulty_distribution(outline.root_nodes)

    recommendations = taxonomy_warnings(taxonomy)
    progression = difficulty_progression(outline.root_nodes)
    if any(later < earlier for earlier, later in zip(progression, progression[1:])):
        recommendations.append(
            "Difficulty does not increase steadily across sections. Consider reordering them."
        )
    return TaxonomyReport(taxonomy=taxonomy, difficulty=difficulty, recommendations=recommendations)
