"""Read-only analyses over outline trees."""

from __future__ import annotations

from eduforge.analysis.complexity import ComplexityReport, analyze_complexity
from eduforge.analysis.report import OutlineAnalysis, analyze_outline
from eduforge.analysis.relationships import RelationshipReport, analyze_relationships, detect_relationships
from eduforge.analysis.standards import (
    StandardsGapReport,
    analyze_standards_coverage,
    analyze_standards_gaps,
    auto_fix_standards,
    standard_coverage_map,
    suggest_nodes_for_standards,
)
from eduforge.analysis.structure import find_structural_issues, is_time_balanced, outline_warnings, time_allocation
from eduforge.analysis.taxonomy import (
    TaxonomyReport,
    analyze_taxonomy,
    difficulty_distribution,
    difficulty_progression,
    taxonomy_distribution,
)
from eduforge.analysis.wordcount import (
    BalancePlan,
    WordCountReport,
    analyze_word_count_distribution,
    apply_balance,
    plan_balance,
)

__all__ = [
    "BalancePlan",
    "ComplexityReport",
    "RelationshipReport",
    "StandardsGapReport",
    "OutlineAnalysis",
    "TaxonomyReport",
    "WordCountReport",
    "analyze_complexity",
    "analyze_outline",
    "analyze_relationships",
    "analyze_standards_coverage",
    "analyze_standards_gaps",
    "analyze_taxonomy",
    "analyze_word_count_distribution",
    "apply_balance",
    "auto_fix_standards",
    "detect_relationships",
    "difficulty_distribution",
    "difficulty_progression",
    "find_structural_issues",
    "is_time_balanced",
    "outline_warnings",
    "plan_balance",
    "standard_coverage_map",
    "suggest_nodes_for_standards",
    "taxonomy_distribution",
    "time_allocation",
]
