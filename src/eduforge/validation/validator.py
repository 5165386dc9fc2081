"""Structural validation of outline trees.

The validator performs a single depth-first walk and reports advisory issues as data. Nothing
here raises on a malformed tree; callers decide whether an issue should block a save.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from eduforge.logging import get_logger
from eduforge.models.outline import TAXONOMY_LEVELS, Outline, OutlineNode, taxonomy_rank

logger = get_logger(__name__)


class Rule(str, Enum):
    """Machine-readable identifiers for validation findings."""

    EMPTY_OUTLINE = "empty_outline"
    DUPLICATE_ID = "duplicate_id"
    CYCLE = "cycle"
    MISSING_TITLE = "missing_title"
    INVALID_WORD_COUNT = "invalid_word_count"
    INVALID_DURATION = "invalid_duration"
    HIERARCHY_VIOLATION = "hierarchy_violation"
    TAXONOMY_REGRESSION = "taxonomy_regression"
    TAXONOMY_INCONSISTENCY = "taxonomy_inconsistency"
    MISSING_STANDARDS = "missing_standards"
    TOO_MANY_STANDARDS = "too_many_standards"
    SECTION_TOO_DENSE = "section_too_dense"
    ACTIVITY_TOO_SHORT = "activity_too_short"
    DURATION_TOO_LONG = "duration_too_long"
    CONTENT_IN_PARENT = "content_in_parent"
    ROOT_IMBALANCE = "root_imbalance"
    TAXONOMY_PROGRESSION = "taxonomy_progression"
    RELATIONSHIP_DANGLING = "relationship_dangling"
    RELATIONSHIP_SELF_LOOP = "relationship_self_loop"
    RELATIONSHIP_DUPLICATE = "relationship_duplicate"


@dataclass(frozen=True)
class ValidationIssue:
    rule: Rule
    message: str
    node_id: str | None = None


MAX_STANDARDS_PER_NODE = 5
SECTION_MAX_WORDS_WITH_CHILDREN = 800
ACTIVITY_MIN_WORDS = 200
LEAF_MAX_DURATION = 120
CHILD_CONTENT_MIN_RATIO = 0.7
ROOT_BALANCE_LOW = 0.5
ROOT_BALANCE_HIGH = 1.5

_ALLOWED_PARENTS: dict[str, tuple[str, ...]] = {
    "subsection": ("section",),
    "topic": ("section", "subsection"),
    "activity": ("topic", "subsection"),
    "assessment": ("topic", "subsection", "section"),
}

_PLACEMENT_HINTS: dict[str, str] = {
    "subsection": "Subsections should be inside sections.",
    "topic": "Topics should be inside sections or subsections.",
    "activity": "Activities should be nested inside topics or subsections.",
    "assessment": "Assessments should be nested inside topics, subsections or sections.",
}


def _label(node: OutlineNode) -> str:
    return node.title.strip() or node.id


class _Walker:
    def __init__(self) -> None:
        self.issues: list[ValidationIssue] = []
        self.seen: set[str] = set()
        self.path: list[str] = []

    def add(self, rule: Rule, message: str, node: OutlineNode | None = None) -> None:
        self.issues.append(ValidationIssue(rule=rule, message=message, node_id=node.id if node else None))

    def visit(
        self,
        node: OutlineNode,
        depth: int,
        parent: OutlineNode | None,
        taxonomy_trail: tuple[int, ...],
    ) -> None:
        label = _label(node)

        if node.id in self.path:
            self.add(Rule.CYCLE, f'Cycle detected: "{label}" appears inside its own subtree.', node)
            return

        if node.id in self.seen:
            self.add(Rule.DUPLICATE_ID, f"Duplicate node ID found: {node.id}. This may cause unexpected behavior.", node)
        else:
            self.seen.add(node.id)

        self._check_fields(node, label)
        self._check_hierarchy(node, label, depth, parent)
        self._check_taxonomy(node, label, parent)
        self._check_standards(node, label, depth)
        self._check_content(node, label)

        rank = taxonomy_rank(node.taxonomy_level)
        trail = taxonomy_trail if rank is None else (*taxonomy_trail, rank)

        if not node.children:
            self._check_progression(node, label, trail)
            return

        self.path.append(node.id)
        for child in node.children:
            self.visit(child, depth + 1, node, trail)
        self.path.pop()

    def _check_fields(self, node: OutlineNode, label: str) -> None:
        if not node.title.strip():
            self.add(Rule.MISSING_TITLE, f"Node {node.id} has no title.", node)
        if node.estimated_word_count <= 0:
            self.add(Rule.INVALID_WORD_COUNT, f'"{label}" has invalid word count (must be greater than 0).', node)
        if node.estimated_duration <= 0:
            self.add(Rule.INVALID_DURATION, f'"{label}" has invalid duration (must be greater than 0).', node)

    def _check_hierarchy(self, node: OutlineNode, label: str, depth: int, parent: OutlineNode | None) -> None:
        if node.type == "section":
            if depth > 0 and parent is not None:
                self.add(
                    Rule.HIERARCHY_VIOLATION,
                    f'"{label}" is a section inside a {parent.type}. Sections should be top-level nodes.',
                    node,
                )
            return

        allowed = _ALLOWED_PARENTS.get(node.type)
        if allowed is None:
            return
        hint = _PLACEMENT_HINTS[node.type]
        if depth == 0 or parent is None:
            self.add(Rule.HIERARCHY_VIOLATION, f'"{label}" is a {node.type} at root level. {hint}', node)
        elif parent.type not in allowed:
            self.add(Rule.HIERARCHY_VIOLATION, f'"{label}" is a {node.type} inside a {parent.type}. {hint}', node)

    def _check_taxonomy(self, node: OutlineNode, label: str, parent: OutlineNode | None) -> None:
        rank = taxonomy_rank(node.taxonomy_level)
        if rank is None:
            return

        parent_rank = taxonomy_rank(parent.taxonomy_level) if parent is not None else None
        if parent_rank is not None and parent_rank - rank > 1 and node.children:
            self.add(
                Rule.TAXONOMY_REGRESSION,
                f'"{label}" drops from \'{parent.taxonomy_level}\' to \'{node.taxonomy_level}\' '
                "but has nested content. Consider raising its taxonomy level.",
                node,
            )

        if rank < 2:
            for child in node.children:
                child_rank = taxonomy_rank(child.taxonomy_level)
                if child_rank is not None and child_rank - rank > 2:
                    self.add(
                        Rule.TAXONOMY_INCONSISTENCY,
                        f'"{label}" is at \'{node.taxonomy_level}\' level but contains "{_label(child)}" at '
                        f"'{child.taxonomy_level}' level. Add intermediate steps between them.",
                        node,
                    )
                    break

    def _check_standards(self, node: OutlineNode, label: str, depth: int) -> None:
        if node.type in ("section", "subsection", "topic") and depth < 2 and not node.standard_ids:
            self.add(
                Rule.MISSING_STANDARDS,
                f'"{label}" is not aligned to any standards. Consider mapping at least one standard.',
                node,
            )
        if len(node.standard_ids) > MAX_STANDARDS_PER_NODE:
            self.add(
                Rule.TOO_MANY_STANDARDS,
                f'"{label}" references {len(node.standard_ids)} standards. '
                "Consider redistributing them across child nodes.",
                node,
            )

    def _check_content(self, node: OutlineNode, label: str) -> None:
        words = node.estimated_word_count
        if node.type == "section" and words > SECTION_MAX_WORDS_WITH_CHILDREN and node.children:
            self.add(
                Rule.SECTION_TOO_DENSE,
                f'"{label}" is a section with {words} words of its own. '
                "Sections should summarize; move detailed content into their children.",
                node,
            )
        if node.type == "activity" and words < ACTIVITY_MIN_WORDS:
            self.add(
                Rule.ACTIVITY_TOO_SHORT,
                f'"{label}" is an activity with only {words} words. Activities need enough detail to run.',
                node,
            )
        if node.estimated_duration > LEAF_MAX_DURATION and not node.children:
            self.add(
                Rule.DURATION_TOO_LONG,
                f'"{label}" is estimated at {node.estimated_duration} minutes. '
                "Consider breaking it into smaller parts.",
                node,
            )
        if node.children:
            child_words = sum(child.estimated_word_count for child in node.children)
            if child_words < words * CHILD_CONTENT_MIN_RATIO:
                self.add(
                    Rule.CONTENT_IN_PARENT,
                    f'"{label}" holds {words} words but its children only {child_words}. '
                    "Most content should live in the child nodes.",
                    node,
                )

    def _check_progression(self, node: OutlineNode, label: str, trail: tuple[int, ...]) -> None:
        if len(trail) < 3:
            return
        if all(later < earlier for earlier, later in zip(trail, trail[1:])):
            levels = " > ".join(TAXONOMY_LEVELS[r] for r in trail)
            self.add(
                Rule.TAXONOMY_PROGRESSION,
                f'The path to "{label}" moves from higher to lower-order thinking ({levels}). '
                "Consider building from lower to higher taxonomy levels.",
                node,
            )


def _check_root_balance(roots: Sequence[OutlineNode]) -> ValidationIssue | None:
    if len(roots) <= 1:
        return None
    counts = [node.estimated_word_count for node in roots]
    mean = sum(counts) / len(counts)
    outliers = [c for c in counts if c < mean * ROOT_BALANCE_LOW or c > mean * ROOT_BALANCE_HIGH]
    if not outliers:
        return None
    direction = "smaller" if outliers[0] < mean * ROOT_BALANCE_LOW else "larger"
    return ValidationIssue(
        rule=Rule.ROOT_IMBALANCE,
        message=f"Content distribution is uneven. Some sections are significantly {direction} than others.",
    )


def _check_relationships(outline: Outline, known_ids: set[str]) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    seen: set[tuple[str, str, str]] = set()
    for rel in outline.relationships:
        for end in (rel.from_node_id, rel.to_node_id):
            if end not in known_ids:
                issues.append(
                    ValidationIssue(
                        rule=Rule.RELATIONSHIP_DANGLING,
                        message=f"Relationship {rel.id} references missing node {end}.",
                    )
                )
        if rel.from_node_id == rel.to_node_id:
            issues.append(
                ValidationIssue(
                    rule=Rule.RELATIONSHIP_SELF_LOOP,
                    message=f"Relationship {rel.id} connects node {rel.from_node_id} to itself.",
                    node_id=rel.from_node_id,
                )
            )
        triple = (rel.from_node_id, rel.to_node_id, rel.type)
        if triple in seen:
            issues.append(
                ValidationIssue(
                    rule=Rule.RELATIONSHIP_DUPLICATE,
                    message=f"Duplicate {rel.type} relationship from {rel.from_node_id} to {rel.to_node_id}.",
                )
            )
        seen.add(triple)
    return issues


def validate_issues(outline: Outline) -> list[ValidationIssue]:
    """Validate `outline` and return tagged issues in discovery order."""

    if not outline.root_nodes:
        return [ValidationIssue(rule=Rule.EMPTY_OUTLINE, message="Outline has no content. Add at least one section.")]

    walker = _Walker()
    for root in outline.root_nodes:
        walker.visit(root, 0, None, ())

    issues = walker.issues
    balance = _check_root_balance(outline.root_nodes)
    if balance is not None:
        issues.append(balance)
    issues.extend(_check_relationships(outline, walker.seen))

    logger.debug("Outline validated", extra={"issue_count": len(issues)})
    return issues


def validate(outline: Outline) -> list[str]:
    """Validate `outline` and return human-readable issues (empty when nothing was found)."""

    return [issue.message for issue in validate_issues(outline)]
