"""Tests for the outline version store."""

from __future__ import annotations

from collections import defaultdict
from pathlib import Path

import pytest

from eduforge.errors import VersionNotFoundError
from eduforge.models.outline import Outline, OutlineNode
from eduforge.versioning import RedisVersionStore, VersionStore, branch_outline, diff_snapshots


def _outline() -> Outline:
    return Outline(
        title="Algebra",
        root_nodes=[
            OutlineNode(id="s1", title="Linear equations", type="section"),
            OutlineNode(id="s2", title="Quadratics", type="section"),
        ],
    )


class FakePipeline:
    def __init__(self, client: "FakeRedis") -> None:
        self._client = client
        self._ops: list[tuple] = []

    def rpush(self, key: str, value: str) -> None:
        self._ops.append(("rpush", key, value))

    def hset(self, key: str, field: str, value: str) -> None:
        self._ops.append(("hset", key, field, value))

    def execute(self) -> None:
        for op, *args in self._ops:
            getattr(self._client, op)(*args)
        self._ops.clear()


class FakeRedis:
    """Just the list and hash commands the store uses."""

    def __init__(self) -> None:
        self.lists: dict[str, list[str]] = defaultdict(list)
        self.hashes: dict[str, dict[str, str]] = defaultdict(dict)

    def pipeline(self) -> FakePipeline:
        return FakePipeline(self)

    def rpush(self, key: str, value: str) -> None:
        self.lists[key].append(value)

    def hset(self, key: str, field: str, value: str) -> None:
        self.hashes[key][field] = value

    def hget(self, key: str, field: str) -> str | None:
        return self.hashes[key].get(field)

    def hvals(self, key: str) -> list[str]:
        return list(self.hashes[key].values())

    def lrange(self, key: str, start: int, end: int) -> list[str]:
        return list(self.lists[key])


def test_saves_are_numbered_and_listed_newest_first() -> None:
    """Three saves give versions 3, 2, 1 with frozen snapshots."""

    store = VersionStore()
    outline = _outline()

    first = store.save(outline)
    outline.root_nodes[0].title = "Linear systems"
    store.save(outline, "Rename")
    store.save(outline)

    assert [v.version for v in store.list(outline.id)] == [3, 2, 1]
    assert outline.version == 3
    assert first.message == "Version 1"
    assert first.snapshot.root_nodes[0].title == "Linear equations"
    assert store.latest(outline.id).version == 3


def test_outline_version_higher_than_history_is_kept() -> None:
    """An outline already at version 5 saves as version 5."""

    outline = _outline()
    outline.version = 5

    assert VersionStore().save(outline).version == 5


def test_jsonl_history_survives_reload(tmp_path: Path) -> None:
    """A second store on the same file sees earlier versions."""

    path = tmp_path / "versions.jsonl"
    outline = _outline()
    saved = VersionStore(path).save(outline, "Initial")

    reloaded = VersionStore(path)

    assert reloaded.get(saved.id).message == "Initial"
    assert reloaded.save(outline).version == 2


def test_unknown_version_lookups() -> None:
    """get raises, find and restore return None, compare is all zeros."""

    store = VersionStore()
    outline = _outline()
    saved = store.save(outline)

    with pytest.raises(VersionNotFoundError):
        store.get("missing")
    assert store.find("missing") is None
    assert store.restore(outline, "missing") is None
    assert store.compare(saved.id, "missing").model_dump() == {"added": 0, "removed": 0, "modified": 0}


def test_restore_returns_renumbered_copy() -> None:
    """Restoring numbers the copy after the current outline and links the source version."""

    store = VersionStore()
    outline = _outline()
    v1 = store.save(outline)
    outline.root_nodes.pop()
    store.save(outline)

    restored = store.restore(outline, v1.id)

    assert restored is not None
    assert restored.version == 3
    assert restored.parent_version_id == v1.id
    assert len(restored.root_nodes) == 2
    assert len(outline.root_nodes) == 1


def test_branch_gets_new_identity() -> None:
    """A branch is an independent outline starting at version 1."""

    outline = _outline()
    outline.version = 4

    branch = branch_outline(outline, "draft")

    assert branch.id != outline.id
    assert branch.project_id != outline.project_id
    assert branch.title == "Algebra (draft)"
    assert branch.version == 1
    assert branch.parent_version_id == outline.id

    branch.root_nodes[0].title = "Changed"
    assert outline.root_nodes[0].title == "Linear equations"


def test_compare_counts_added_removed_and_modified() -> None:
    """Nodes are matched by id; title or description changes count as modified."""

    store = VersionStore()
    outline = _outline()
    a = store.save(outline)
    outline.root_nodes[0].description = "Now described"
    outline.root_nodes.pop()
    outline.root_nodes.append(OutlineNode(id="s3", title="Functions", type="section"))
    outline.root_nodes.append(OutlineNode(id="s4", title="Graphs", type="section"))
    b = store.save(outline)

    diff = store.compare(a.id, b.id)

    assert (diff.added, diff.removed, diff.modified) == (2, 1, 1)
    assert diff_snapshots(a.snapshot, a.snapshot).model_dump() == {"added": 0, "removed": 0, "modified": 0}


def test_redis_store_shares_the_contract() -> None:
    """The Redis store numbers, lists and finds versions like the in-memory one."""

    client = FakeRedis()
    store = RedisVersionStore("redis://unused", key_prefix="test", client=client)
    outline = _outline()

    v1 = store.save(outline, "First")
    store.save(outline)

    assert [v.version for v in store.list(outline.id)] == [2, 1]
    assert len(client.lists[f"test:outline:{outline.id}:versions"]) == 2
    assert client.hashes["test:versions:index"][v1.id] == outline.id

    other = RedisVersionStore("redis://unused", key_prefix="test", client=client)
    assert other.get(v1.id).message == "First"
    assert other.find("missing") is None


def test_returned_versions_cannot_alter_history() -> None:
    """Editing a snapshot obtained from the store leaves the saved version intact."""

    store = VersionStore()
    outline = _outline()
    saved = store.save(outline)

    saved.snapshot.title = "Edited via save result"
    store.list(outline.id)[0].snapshot.title = "Edited via list"
    store.get(saved.id).snapshot.root_nodes.clear()

    kept = store.get(saved.id).snapshot
    assert kept.title == "Algebra"
    assert len(kept.root_nodes) == 2
