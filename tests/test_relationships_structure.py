"""Tests for relationship analysis and outline-level warnings."""

from __future__ import annotations

from eduforge.analysis.relationships import analyze_relationships, detect_relationships
from eduforge.analysis.structure import (
    find_structural_issues,
    is_time_balanced,
    outline_warnings,
    time_allocation,
)
from eduforge.models.outline import Outline, OutlineNode, Relationship
from eduforge.models.project import EducationalStandard


def _outline() -> Outline:
    return Outline(
        root_nodes=[
            OutlineNode(
                id="A",
                title="Section A",
                type="section",
                children=[
                    OutlineNode(id="a1", title="A one", standard_ids=["S1"]),
                    OutlineNode(id="a2", title="A two"),
                    OutlineNode(id="a3", title="A three"),
                ],
            ),
            OutlineNode(
                id="B",
                title="Section B",
                type="section",
                children=[OutlineNode(id="b1", title="B one", standard_ids=["S1"])],
            ),
        ]
    )


def test_no_relationships_gives_a_single_recommendation() -> None:
    """Without edges only the general advice is returned."""

    report = analyze_relationships(_outline())

    assert report.orphan_nodes == []
    assert len(report.recommendations) == 1
    assert report.recommendations[0].startswith("No relationships defined")


def test_orphans_terminals_and_isolated_roots() -> None:
    """Edges inside one section leave both sections isolated."""

    outline = _outline()
    outline.relationships = [Relationship(from_node_id="a1", to_node_id="a2", type="prerequisite")]

    report = analyze_relationships(outline)

    assert [n.id for n in report.orphan_nodes] == ["a1", "a3", "b1"]
    assert [n.id for n in report.terminal_nodes] == ["a2", "a3", "b1"]
    assert [n.id for n in report.isolated_roots] == ["A", "B"]
    assert len(report.recommendations) == 3


def test_cross_section_edge_connects_roots() -> None:
    """An edge between two root branches removes both from the isolated list."""

    outline = _outline()
    outline.relationships = [Relationship(from_node_id="a3", to_node_id="b1", type="supports")]

    assert analyze_relationships(outline).isolated_roots == []


def test_detect_relationships_proposes_prerequisites_and_supports() -> None:
    """Consecutive children become prerequisites; shared standards become supports."""

    proposed = detect_relationships(_outline())
    edges = {(r.from_node_id, r.to_node_id, r.type) for r in proposed}

    assert edges == {
        ("a1", "a2", "prerequisite"),
        ("a2", "a3", "prerequisite"),
        ("a1", "b1", "supports"),
    }


def test_detect_relationships_skips_existing_edges() -> None:
    """Existing edges are not proposed again, in either direction for supports."""

    outline = _outline()
    outline.relationships = [
        Relationship(from_node_id="a1", to_node_id="a2", type="prerequisite"),
        Relationship(from_node_id="b1", to_node_id="a1", type="extends"),
    ]

    edges = {(r.from_node_id, r.to_node_id, r.type) for r in detect_relationships(outline)}

    assert edges == {("a2", "a3", "prerequisite")}


def test_time_allocation_by_type() -> None:
    """Minutes are summed per node type."""

    nodes = [
        OutlineNode(title="S", type="section", estimated_duration=30, children=[
            OutlineNode(title="T", type="topic", estimated_duration=15),
            OutlineNode(title="A", type="activity", estimated_duration=12),
        ])
    ]
    allocation = time_allocation(nodes)

    assert allocation["section"] == 30
    assert allocation["topic"] == 15
    assert allocation["activity"] == 12
    assert allocation["resource"] == 0
    assert is_time_balanced(allocation) is True
    assert is_time_balanced({"section": 90, "topic": 10}) is False


def test_outline_warnings() -> None:
    """Coverage, assessment and child-count imbalance warnings."""

    crowded = OutlineNode(
        title="Crowded",
        type="section",
        children=[OutlineNode(title=f"T{i}", type="topic") for i in range(6)],
    )
    outline = Outline(root_nodes=[crowded, OutlineNode(title="Empty 1", type="section"), OutlineNode(title="Empty 2", type="section")])
    standards = [EducationalStandard(id="S1"), EducationalStandard(id="S2")]

    warnings = outline_warnings(outline, standards)

    assert "Only 0% of standards are covered in your outline." in warnings
    assert "Limited assessment opportunities. Consider adding more assessment points." in warnings
    assert any(w.startswith("Sections have an imbalanced number of subsections") for w in warnings)


def test_find_structural_issues() -> None:
    """Missing kinds, descriptions, short leaves and empty containers are listed."""

    nodes = [
        OutlineNode(
            title="Root",
            type="section",
            description="Intro",
            estimated_word_count=500,
            children=[
                OutlineNode(title="Sub", type="subsection", estimated_word_count=400),
                OutlineNode(title="T1", type="topic", estimated_word_count=50),
                OutlineNode(title="T2", type="topic", estimated_word_count=150),
                OutlineNode(title="T3", type="topic", estimated_word_count=150),
            ],
        )
    ]

    issues = find_structural_issues(nodes)

    assert "No assessment nodes found. Consider adding assessments for learning evaluation." in issues
    assert "No activity nodes found. Consider adding interactive activities for engagement." in issues
    assert "4 nodes are missing descriptions, including: Sub, T1, T2..." in issues
    assert "1 leaf nodes have minimal content (less than 100 words)." in issues
    assert "1 section/subsection nodes have no children." in issues
