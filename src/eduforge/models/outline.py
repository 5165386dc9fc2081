"""Outline models.

An outline is an ordered forest of `OutlineNode`s owned by an `Outline` aggregate root. Field
names are snake_case in Python and camelCase on the wire (`estimatedWordCount`, `rootNodes`,
...), so documents coming from the editor UI round-trip unchanged.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from eduforge.utils.ids import new_id


NodeType = Literal["section", "subsection", "topic", "activity", "assessment", "resource"]
TaxonomyLevel = Literal["remember", "understand", "apply", "analyze", "evaluate", "create"]
DifficultyLevel = Literal["introductory", "beginner", "intermediate", "advanced", "expert"]
StructureType = Literal["sequential", "hierarchical", "modular", "spiral"]
RelationshipType = Literal["prerequisite", "supports", "extends", "references"]
ReferenceType = Literal["article", "book", "video", "website", "research"]
AssessmentKind = Literal["formative", "summative", "diagnostic"]

NODE_TYPES: tuple[NodeType, ...] = ("section", "subsection", "topic", "activity", "assessment", "resource")
TAXONOMY_LEVELS: tuple[TaxonomyLevel, ...] = ("remember", "understand", "apply", "analyze", "evaluate", "create")
DIFFICULTY_LEVELS: tuple[DifficultyLevel, ...] = ("introductory", "beginner", "intermediate", "advanced", "expert")


def taxonomy_rank(level: TaxonomyLevel | None) -> int | None:
    """Position of a taxonomy level on the ordered scale (remember == 0)."""

    if level is None:
        return None
    return TAXONOMY_LEVELS.index(level)


def difficulty_rank(level: DifficultyLevel | None) -> int | None:
    """Position of a difficulty level on the ordered scale (introductory == 0)."""

    if level is None:
        return None
    return DIFFICULTY_LEVELS.index(level)


class WireModel(BaseModel):
    """Base model accepting both snake_case and camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """Dump to a JSON-compatible dict using camelCase keys."""

        return self.model_dump(mode="json", by_alias=True)


class Prerequisite(WireModel):
    id: str = Field(default_factory=new_id)
    title: str
    description: str | None = None


class AssessmentPoint(WireModel):
    id: str = Field(default_factory=new_id)
    description: str
    taxonomy_level: TaxonomyLevel | None = None
    standard_ids: list[str] = Field(default_factory=list)
    type: AssessmentKind = "formative"


class OutlineNote(WireModel):
    id: str = Field(default_factory=new_id)
    text: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    color: str | None = None


class OutlineNode(WireModel):
    """A node of the outline tree.

    Word count and duration (minutes) are deliberately unbounded here; non-positive values are a
    validation finding, not a parse error.
    """

    id: str = Field(default_factory=new_id)
    title: str = ""
    description: str | None = None
    type: NodeType = "topic"
    estimated_word_count: int = 0
    estimated_duration: int = 0
    children: list["OutlineNode"] = Field(default_factory=list)
    collapsed: bool = False
    standard_ids: list[str] = Field(default_factory=list)
    taxonomy_level: TaxonomyLevel | None = None
    difficulty_level: DifficultyLevel | None = None
    prerequisites: list[Prerequisite] = Field(default_factory=list)
    assessment_points: list[AssessmentPoint] = Field(default_factory=list)
    notes: list[OutlineNote] = Field(default_factory=list)


class Relationship(WireModel):
    """A typed edge of the secondary graph overlaid on the tree."""

    id: str = Field(default_factory=new_id)
    from_node_id: str
    to_node_id: str
    type: RelationshipType = "supports"
    description: str | None = None


class Reference(WireModel):
    id: str = Field(default_factory=new_id)
    title: str
    url: str
    notes: str | None = None
    type: ReferenceType = "article"


class Outline(WireModel):
    """Aggregate root of an outline tree."""

    id: str = Field(default_factory=new_id)
    project_id: str = Field(default_factory=new_id)
    title: str = ""
    description: str | None = None
    root_nodes: list[OutlineNode] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    version: int = Field(default=1, ge=1)
    parent_version_id: str | None = None
    structure_type: StructureType = "sequential"
    relationships: list[Relationship] = Field(default_factory=list)
    references: list[Reference] = Field(default_factory=list)
    node_references: dict[str, list[str]] = Field(default_factory=dict)


class OutlineVersion(WireModel):
    """Immutable snapshot of an outline."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(default_factory=new_id)
    outline_id: str
    version: int = Field(ge=1)
    message: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
    snapshot: Outline


class VersionDiff(WireModel):
    """Coarse node-count difference between two snapshots."""

    added: int = 0
    removed: int = 0
    modified: int = 0
