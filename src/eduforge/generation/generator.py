"""Deterministic outline generator.

Synthesizes a node tree from a project configuration. Apart from freshly generated ids the
output is a pure function of `(config, params)`, which is what makes it usable as the fallback
whenever the AI collaborator cannot produce a tree.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from eduforge.logging import get_logger
from eduforge.models.outline import (
    DIFFICULTY_LEVELS,
    TAXONOMY_LEVELS,
    AssessmentPoint,
    DifficultyLevel,
    NodeType,
    Outline,
    OutlineNode,
    OutlineNote,
    StructureType,
    TaxonomyLevel,
)
from eduforge.models.project import DetailLevel, GenerationParams, ProjectConfig

logger = get_logger(__name__)


MAX_DEPTH_BY_DETAIL: dict[str, int] = {"high-level": 1, "medium": 2, "detailed": 3}
SIBLINGS_BY_DETAIL: dict[str, int] = {"high-level": 2, "medium": 3, "detailed": 5}

BASE_WORD_COUNT: dict[str, int] = {
    "section": 800,
    "subsection": 500,
    "topic": 300,
    "activity": 200,
    "assessment": 150,
    "resource": 100,
}
BASE_DURATION: dict[str, int] = {
    "section": 30,
    "subsection": 20,
    "topic": 15,
    "activity": 10,
    "assessment": 8,
    "resource": 5,
}

_GRADE_BANDS: tuple[tuple[frozenset[str], float, float], ...] = (
    # (grades, word multiplier, duration multiplier)
    (frozenset({"k", "1st", "2nd"}), 0.5, 0.7),
    (frozenset({"3rd", "4th", "5th"}), 0.75, 0.85),
    (frozenset({"6th", "7th", "8th"}), 1.0, 1.0),
    (frozenset({"9th", "10th", "11th", "12th"}), 1.25, 1.15),
)
_HIGHER_ED_MULTIPLIERS = (1.5, 1.3)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def grade_multipliers(grade_level: str) -> tuple[float, float]:
    """Return `(word_multiplier, duration_multiplier)` for a grade level."""

    for grades, words, minutes in _GRADE_BANDS:
        if grade_level in grades:
            return words, minutes
    return _HIGHER_ED_MULTIPLIERS


def estimated_word_count(node_type: NodeType, grade_level: str) -> int:
    return _round_half_up(BASE_WORD_COUNT[node_type] * grade_multipliers(grade_level)[0])


def estimated_duration(node_type: NodeType, grade_level: str) -> int:
    return _round_half_up(BASE_DURATION[node_type] * grade_multipliers(grade_level)[1])


def taxonomy_for_depth(depth: int, *, bump: int = 0) -> TaxonomyLevel:
    return TAXONOMY_LEVELS[min(depth + bump, len(TAXONOMY_LEVELS) - 1)]


def difficulty_for_depth(depth: int, *, bump: int = 0) -> DifficultyLevel:
    return DIFFICULTY_LEVELS[min(depth + bump, len(DIFFICULTY_LEVELS) - 1)]


def partition_standards(standards: list[str], count: int, index: int) -> list[str]:
    """Return the `index`-th contiguous chunk of `standards` split across `count` siblings.

    Chunks use ceil-division so they are disjoint and together cover the pool; trailing
    siblings may receive an empty chunk.
    """

    if not standards or count <= 0:
        return []
    per_node = max(1, math.ceil(len(standards) / count))
    start = index * per_node
    end = min(start + per_node, len(standards))
    return standards[start:end]


@dataclass(frozen=True)
class _Shape:
    """Per-structure-type generation policy."""

    last_level: int
    taxonomy_bump: int
    structure: StructureType
    detail: DetailLevel

    def sibling_count(self, depth: int) -> int:
        base = SIBLINGS_BY_DETAIL[self.detail]
        if self.structure == "hierarchical":
            if depth == 0:
                return base + 1
            if depth == 1:
                return base
            return max(2, base - 1)
        return base


def _shape_for(params: GenerationParams) -> _Shape:
    last_level = MAX_DEPTH_BY_DETAIL[params.detail_level]
    bump = 0
    if params.structure_type == "hierarchical" and params.detail_level != "detailed":
        last_level = min(last_level, 2)
    elif params.structure_type in ("modular", "spiral"):
        last_level = min(last_level, 1)
    if params.structure_type == "spiral":
        bump = 1
    return _Shape(
        last_level=last_level,
        taxonomy_bump=bump,
        structure=params.structure_type,
        detail=params.detail_level,
    )


def _node_type(depth: int, index: int, params: GenerationParams) -> NodeType:
    if depth == 0:
        return "section"
    if depth == 1:
        return "subsection"
    if depth == 2:
        return "topic"
    if params.include_activities and params.include_assessments:
        return "activity" if index % 2 == 0 else "assessment"
    if params.include_assessments:
        return "assessment"
    if params.include_activities:
        return "activity"
    return "resource"


def generate_nodes(config: ProjectConfig, params: GenerationParams) -> list[OutlineNode]:
    """Generate the root nodes of an outline for `config`.

    Args:
        config: Project configuration (grade level, objectives, standards).
        params: Detail level, structure type and inclusion flags.

    Returns:
        Ordered root nodes; each call returns freshly identified nodes.
    """

    shape = _shape_for(params)
    pool = [s.id for s in config.standards]
    nodes = _generate_level(config, params, shape, depth=0, standards=pool)
    logger.debug(
        "Generated outline tree",
        extra={"structure": params.structure_type, "detail": params.detail_level, "roots": len(nodes)},
    )
    return nodes


def _generate_level(
    config: ProjectConfig,
    params: GenerationParams,
    shape: _Shape,
    *,
    depth: int,
    standards: list[str],
) -> list[OutlineNode]:
    if depth > shape.last_level:
        return []

    count = shape.sibling_count(depth)
    objectives = list(config.learning_objectives)
    is_last_level = depth == shape.last_level
    taxonomy = taxonomy_for_depth(depth, bump=shape.taxonomy_bump)
    difficulty = difficulty_for_depth(depth, bump=shape.taxonomy_bump)

    nodes: list[OutlineNode] = []
    for i in range(count):
        title = objectives[i] if i < len(objectives) else f"Topic {i + 1}"
        node_type = _node_type(depth, i, params)
        node = OutlineNode(
            title=title,
            description=f"Description for {title}",
            type=node_type,
            estimated_word_count=estimated_word_count(node_type, config.grade_level),
            estimated_duration=estimated_duration(node_type, config.grade_level),
            standard_ids=partition_standards(standards, count, i),
            taxonomy_level=taxonomy,
            difficulty_level=difficulty,
        )

        if not is_last_level:
            node.children = _generate_level(
                config,
                params,
                shape,
                depth=depth + 1,
                standards=node.standard_ids,
            )

        if depth == 0:
            node.notes = [OutlineNote(text=f"Introduce {title} and connect it to prior knowledge.")]

        if params.include_assessments and (node_type == "assessment" or is_last_level):
            node.assessment_points = [
                AssessmentPoint(
                    description=f"Assessment for {title}",
                    taxonomy_level=taxonomy,
                    standard_ids=list(node.standard_ids),
                    type="formative",
                )
            ]

        nodes.append(node)
    return nodes


def generate_outline(config: ProjectConfig, params: GenerationParams) -> Outline:
    """Generate a complete outline aggregate for `config`."""

    return build_outline(config, params, generate_nodes(config, params))


def build_outline(config: ProjectConfig, params: GenerationParams, nodes: list[OutlineNode]) -> Outline:
    """Wrap generated root nodes into a fresh version-1 outline."""

    fields: dict = {
        "title": f"{config.name} Outline",
        "description": f"Generated outline for {config.name}",
        "root_nodes": nodes,
        "structure_type": params.structure_type,
        "version": 1,
    }
    if config.id:
        fields["project_id"] = config.id
    return Outline(**fields)
