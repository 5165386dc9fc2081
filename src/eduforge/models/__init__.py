"""Pydantic models used across the project."""

from __future__ import annotations

from eduforge.models.outline import (
    AssessmentPoint,
    Outline,
    OutlineNode,
    OutlineNote,
    OutlineVersion,
    Prerequisite,
    Reference,
    Relationship,
    VersionDiff,
)
from eduforge.models.project import EducationalStandard, GenerationParams, ProjectConfig

__all__ = [
    "AssessmentPoint",
    "EducationalStandard",
    "GenerationParams",
    "Outline",
    "OutlineNode",
    "OutlineNote",
    "OutlineVersion",
    "Prerequisite",
    "ProjectConfig",
    "Reference",
    "Relationship",
    "VersionDiff",
]
