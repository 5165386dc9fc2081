"""Project configuration and generation parameter models."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from eduforge.models.outline import StructureType, WireModel


ProjectType = Literal["lesson_plan", "course_module", "curriculum", "assessment", "study_guide"]
GradeLevel = Literal[
    "k",
    "1st",
    "2nd",
    "3rd",
    "4th",
    "5th",
    "6th",
    "7th",
    "8th",
    "9th",
    "10th",
    "11th",
    "12th",
    "higher_education",
    "professional",
]
DetailLevel = Literal["high-level", "medium", "detailed"]
Duration = Literal["15_minutes", "30_minutes", "45_minutes", "60_minutes", "90_minutes", "multi_day"]


class EducationalStandard(WireModel):
    """Entry of the external standards catalog (read-only to the core)."""

    id: str
    description: str = ""
    organization: str | None = None
    category: str | None = None


class ProjectConfig(WireModel):
    """Subset of the project wizard output that drives outline generation."""

    id: str | None = None
    name: str = "Untitled Project"
    description: str | None = None
    type: ProjectType = "lesson_plan"
    subject: str = "other"
    grade_level: GradeLevel = "6th"
    standards: list[EducationalStandard] = Field(default_factory=list)
    learning_objectives: list[str] = Field(default_factory=list)
    duration: Duration = "60_minutes"
    content_structure: StructureType | None = None


class GenerationParams(WireModel):
    detail_level: DetailLevel = "medium"
    include_assessments: bool = True
    include_activities: bool = True
    structure_type: StructureType = "sequential"
    focus_areas: list[str] = Field(default_factory=list)
    reference_urls: list[str] = Field(default_factory=list)
