"""Tests for taxonomy histograms and the complexity score."""

from __future__ import annotations

import pytest

from eduforge.analysis.complexity import analyze_complexity
from eduforge.analysis.taxonomy import (
    CREATE_LIGHT_MESSAGE,
    REMEMBER_HEAVY_MESSAGE,
    analyze_taxonomy,
    difficulty_distribution,
    difficulty_progression,
    taxonomy_distribution,
)
from eduforge.models.outline import Outline, OutlineNode


def _flat(levels: list[str | None]) -> list[OutlineNode]:
    return [OutlineNode(title=f"N{i}", taxonomy_level=level) for i, level in enumerate(levels)]


def test_taxonomy_distribution_counts_and_percentages() -> None:
    """Counts cover every level; unset levels are not counted."""

    hist = taxonomy_distribution(_flat(["remember", "remember", "apply", "create", None]))

    assert hist.total == 4
    assert hist.counts["remember"] == 2
    assert hist.counts["evaluate"] == 0
    assert hist.percentages["remember"] == pytest.approx(50.0)
    assert hist.percentages["create"] == pytest.approx(25.0)


def test_recall_heavy_outline_gets_both_warnings() -> None:
    """Mostly remember and no create triggers both messages."""

    report = analyze_taxonomy(Outline(root_nodes=_flat(["remember", "remember", "understand"])))

    assert REMEMBER_HEAVY_MESSAGE in report.recommendations
    assert CREATE_LIGHT_MESSAGE in report.recommendations


def test_no_taxonomy_levels_means_no_taxonomy_warnings() -> None:
    """An outline without levels produces no histogram warnings."""

    report = analyze_taxonomy(Outline(root_nodes=_flat([None, None])))

    assert REMEMBER_HEAVY_MESSAGE not in report.recommendations
    assert report.taxonomy.total == 0


def test_difficulty_progression_per_root() -> None:
    """Mean difficulty of each root subtree, defaulting to 1."""

    first = OutlineNode(
        title="A",
        difficulty_level="beginner",
        children=[OutlineNode(title="A1", difficulty_level="advanced")],
    )
    second = OutlineNode(title="B")

    assert difficulty_progression([first, second]) == [3.0, 1.0]
    assert difficulty_distribution([first, second]).counts["advanced"] == 1


def test_decreasing_difficulty_is_reported() -> None:
    """Sections getting easier toward the end are flagged."""

    roots = [OutlineNode(title="A", difficulty_level="advanced"), OutlineNode(title="B", difficulty_level="beginner")]
    report = analyze_taxonomy(Outline(root_nodes=roots))

    assert any("Difficulty does not increase" in r for r in report.recommendations)


def test_complexity_of_empty_outline() -> None:
    """An empty outline scores zero."""

    report = analyze_complexity(Outline())

    assert report.overall_score == 0
    assert set(report.aspect_scores) == {"depth", "breadth", "taxonomy", "density"}


def test_complexity_weighted_score() -> None:
    """One 500-word root: depth 20, breadth 0, taxonomy 17, density 100."""

    outline = Outline(root_nodes=[OutlineNode(title="S", type="section", estimated_word_count=500, taxonomy_level="remember")])
    report = analyze_complexity(outline)

    assert report.aspect_scores == {"depth": 20, "breadth": 0, "taxonomy": 17, "density": 100}
    assert report.overall_score == 30
    assert any("shallow" in r for r in report.recommendations)


def test_complexity_sub_scores_cap_at_100() -> None:
    """A six-level chain using every taxonomy level saturates depth, taxonomy and density."""

    levels = ["remember", "understand", "apply", "analyze", "evaluate", "create"]
    node = OutlineNode(title="D5", estimated_word_count=800, taxonomy_level=levels[5])
    for depth in range(4, -1, -1):
        node = OutlineNode(title=f"D{depth}", estimated_word_count=800, taxonomy_level=levels[depth], children=[node])

    report = analyze_complexity(Outline(root_nodes=[node]))

    assert report.aspect_scores == {"depth": 100, "breadth": 25, "taxonomy": 100, "density": 100}
    assert report.overall_score == 81
