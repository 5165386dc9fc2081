"""Outline complexity score.

Four sub-scores on a 0-100 scale, each a linear ramp capped at 100:

* depth: levels in the tree, 5 or more levels scores 100 (20 points per level);
* breadth: mean branching factor of non-leaf nodes, 4 or more children scores 100;
* taxonomy: distinct taxonomy levels used, all 6 scores 100;
* density: mean words per node, 500 or more scores 100.

The overall score is the weighted sum 0.25 depth + 0.25 breadth + 0.30 taxonomy + 0.20 density.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from eduforge.models.outline import TAXONOMY_LEVELS, Outline
from eduforge.utils.tree import iter_nodes, max_depth

WEIGHTS: dict[str, float] = {"depth": 0.25, "breadth": 0.25, "taxonomy": 0.30, "density": 0.20}

DEPTH_FOR_MAX = 5
BRANCHING_FOR_MAX = 4
WORDS_FOR_MAX = 500


class ComplexityReport(BaseModel):
    overall_score: int = 0
    aspect_scores: dict[str, int] = Field(default_factory=dict)
    recommendations: list[str] = Field(default_factory=list)


def _ramp(value: float, full_at: float) -> int:
    return round(min(100.0, value / full_at * 100))


def analyze_complexity(outline: Outline) -> ComplexityReport:
    entries = list(iter_nodes(outline.root_nodes))
    if not entries:
        return ComplexityReport(
            aspect_scores={aspect: 0 for aspect in WEIGHTS},
            recommendations=["Outline is empty. Add sections to evaluate its complexity."],
        )

    parents = [node for node, _ in entries if node.children]
    branching = sum(len(n.children) for n in parents) / len(parents) if parents else 0.0
    levels_used = {node.taxonomy_level for node, _ in entries if node.taxonomy_level is not None}
    mean_words = sum(node.estimated_word_count for node, _ in entries) / len(entries)

    scores = {
        "depth": _ramp(max_depth(outline.root_nodes), DEPTH_FOR_MAX),
        "breadth": _ramp(branching, BRANCHING_FOR_MAX),
        "taxonomy": _ramp(len(levels_used), len(TAXONOMY_LEVELS)),
        "density": _ramp(max(0.0, mean_words), WORDS_FOR_MAX),
    }
    overall = round(sum(scores[aspect] * weight for aspect, weight in WEIGHTS.items()))

    recommendations: list[str] = []
    if scores["depth"] < 40:
        recommendations.append("The outline is shallow. Consider breaking sections into subsections and topics.")
    if scores["breadth"] < 40:
        recommendations.append("Few nodes have multiple children. Consider covering each section more broadly.")
    if scores["taxonomy"] < 50:
        recommendations.append(
            f"Only {len(levels_used)} of {len(TAXONOMY_LEVELS)} taxonomy levels are used. "
            "Consider a wider range of cognitive demands."
        )
    if scores["density"] < 30:
        recommendations.append("Nodes carry little content on average. Consider expanding key topics.")
    if overall > 85:
        recommendations.append("The outline is very complex. Consider simplifying it for the target audience.")

    return ComplexityReport(overall_score=overall, aspect_scores=scores, recommendations=recommendations)
