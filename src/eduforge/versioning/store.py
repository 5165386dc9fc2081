"""Outline version store.

Versions are append-only: a saved `OutlineVersion` is frozen and is never edited or removed.
The store keeps every record in memory and, when given a path, mirrors it to a JSONL file that
is reloaded on start.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from eduforge.errors import VersionNotFoundError
from eduforge.logging import get_logger, outline_context
from eduforge.models.outline import Outline, OutlineNode, OutlineVersion, VersionDiff
from eduforge.utils.ids import format_version_label, new_id
from eduforge.utils.tree import iter_nodes

logger = get_logger(__name__)


def _node_index(nodes: Iterable[OutlineNode]) -> dict[str, OutlineNode]:
    index: dict[str, OutlineNode] = {}
    for node, _depth in iter_nodes(list(nodes)):
        index[node.id] = node
    return index


def diff_snapshots(before: Outline, after: Outline) -> VersionDiff:
    """Count nodes added, removed and modified (title or description changed) between snapshots."""

    old = _node_index(before.root_nodes)
    new = _node_index(after.root_nodes)
    added = sum(1 for node_id in new if node_id not in old)
    removed = sum(1 for node_id in old if node_id not in new)
    modified = sum(
        1
        for node_id, node in new.items()
        if node_id in old and (old[node_id].title != node.title or old[node_id].description != node.description)
    )
    return VersionDiff(added=added, removed=removed, modified=modified)


def branch_outline(outline: Outline, name: str) -> Outline:
    """Independent copy of `outline` with a fresh identity, starting its own history at version 1."""

    now = datetime.utcnow()
    return outline.model_copy(
        deep=True,
        update={
            "id": new_id(),
            "project_id": new_id(),
            "title": f"{outline.title} ({name})",
            "version": 1,
            "created_at": now,
            "updated_at": now,
            "parent_version_id": outline.id,
        },
    )


class VersionStore:
    """In-memory version store with optional append-only JSONL persistence."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._versions: list[OutlineVersion] = []
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._load_existing(path)

    def _load_existing(self, path: Path) -> None:
        if not path.exists():
            return
        for line in path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line:
                continue
            self._versions.append(OutlineVersion.model_validate_json(line))
        logger.info("Loaded %d versions from %s", len(self._versions), path)

    def _records(self, outline_id: str | None = None) -> list[OutlineVersion]:
        if outline_id is None:
            return list(self._versions)
        return [v for v in self._versions if v.outline_id == outline_id]

    def _append(self, version: OutlineVersion) -> None:
        self._versions.append(version)
        if self._path is None:
            return
        line = json.dumps(version.model_dump(mode="json", by_alias=True), ensure_ascii=False)
        with self._path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")

    def save(self, outline: Outline, message: str | None = None) -> OutlineVersion:
        """Snapshot `outline` as a new version.

        The version number is one past the newest saved version of this outline, or the
        outline's own `version` when that is higher. `outline.version` is updated to match.
        """

        existing = self._records(outline.id)
        latest = max((v.version for v in existing), default=0)
        number = max(outline.version, latest + 1)
        outline.version = number

        version = OutlineVersion(
            outline_id=outline.id,
            version=number,
            message=message or format_version_label(number),
            snapshot=outline.model_copy(deep=True),
        )
        self._append(version)
        with outline_context(outline_id=outline.id, op="save"):
            logger.info("Version saved", extra={"version": number, "version_id": version.id})
        return version.model_copy(deep=True)

    def list(self, outline_id: str) -> list[OutlineVersion]:  # noqa: A003
        """Versions of `outline_id`, newest first.

        Returned versions are copies; changing their snapshots does not alter the saved history.
        """

        versions = sorted(self._records(outline_id), key=lambda v: v.version, reverse=True)
        return [v.model_copy(deep=True) for v in versions]

    def latest(self, outline_id: str) -> OutlineVersion | None:
        versions = self.list(outline_id)
        return versions[0] if versions else None

    def find(self, version_id: str) -> OutlineVersion | None:
        for version in self._records():
            if version.id == version_id:
                return version.model_copy(deep=True)
        return None

    def get(self, version_id: str) -> OutlineVersion:
        """Return a version by id or raise `VersionNotFoundError`."""

        version = self.find(version_id)
        if version is None:
            raise VersionNotFoundError(version_id)
        return version

    def restore(self, outline: Outline, version_id: str) -> Outline | None:
        """Editable copy of a saved snapshot, numbered after `outline`; None for an unknown id.

        Nothing is saved; callers save the returned outline to record the restore.
        """

        version = self.find(version_id)
        if version is None:
            logger.debug("Restore target not found", extra={"version_id": version_id})
            return None
        return version.snapshot.model_copy(
            deep=True,
            update={
                "version": outline.version + 1,
                "updated_at": datetime.utcnow(),
                "parent_version_id": version.id,
            },
        )

    def branch(self, outline: Outline, name: str) -> Outline:
        return branch_outline(outline, name)

    def compare(self, version_id_a: str, version_id_b: str) -> VersionDiff:
        """Node-count diff from version A to version B; all zeros when either id is unknown."""

        a = self.find(version_id_a)
        b = self.find(version_id_b)
        if a is None or b is None:
            return VersionDiff()
        return diff_snapshots(a.snapshot, b.snapshot)
