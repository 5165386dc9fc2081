"""One-shot bundle of every analysis, as shown on the outline dashboard."""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, Field

from eduforge.analysis.complexity import ComplexityReport, analyze_complexity
from eduforge.analysis.relationships import RelationshipReport, analyze_relationships
from eduforge.analysis.standards import StandardsGapReport, analyze_standards_gaps
from eduforge.analysis.structure import find_structural_issues, is_time_balanced, outline_warnings, time_allocation
from eduforge.analysis.taxonomy import TaxonomyReport, analyze_taxonomy, difficulty_progression
from eduforge.analysis.wordcount import WordCountReport, analyze_word_count_distribution
from eduforge.models.outline import Outline
from eduforge.models.project import EducationalStandard
from eduforge.utils.tree import count_nodes, total_duration, total_word_count
from eduforge.validation.validator import ValidationIssue, validate_issues


class OutlineTotals(BaseModel):
    nodes: int
    word_count: int
    duration_minutes: int


class OutlineAnalysis(BaseModel):
    totals: OutlineTotals
    issues: list[str] = Field(default_factory=list)
    issue_rules: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    structural_issues: list[str] = Field(default_factory=list)
    standards: StandardsGapReport
    word_count: WordCountReport
    taxonomy: TaxonomyReport
    complexity: ComplexityReport
    relationships: RelationshipReport
    time_allocation: dict[str, int] = Field(default_factory=dict)
    time_balanced: bool = True
    difficulty_progression: list[float] = Field(default_factory=list)


def analyze_outline(outline: Outline, standards: Sequence[EducationalStandard] = ()) -> OutlineAnalysis:
    issues: list[ValidationIssue] = validate_issues(outline)
    allocation = time_allocation(outline.root_nodes)
    return OutlineAnalysis(
        totals=OutlineTotals(
            nodes=count_nodes(outline.root_nodes),
            word_count=total_word_count(outline.root_nodes),
            duration_minutes=total_duration(outline.root_nodes),
        ),
        issues=[issue.message for issue in issues],
        issue_rules=[issue.rule.value for issue in issues],
        warnings=outline_warnings(outline, standards),
        structural_issues=find_structural_issues(outline.root_nodes),
        standards=analyze_standards_gaps(outline, standards),
        word_count=analyze_word_count_distribution(outline),
        taxonomy=analyze_taxonomy(outline),
        complexity=analyze_complexity(outline),
        relationships=analyze_relationships(outline),
        time_allocation=allocation,
        time_balanced=is_time_balanced(allocation),
        difficulty_progression=difficulty_progression(outline.root_nodes),
    )
