"""Append-only outline version history."""

from __future__ import annotations

from eduforge.versioning.factory import open_version_store
from eduforge.versioning.redis_store import RedisVersionStore
from eduforge.versioning.store import VersionStore, branch_outline, diff_snapshots

__all__ = ["RedisVersionStore", "VersionStore", "branch_outline", "diff_snapshots", "open_version_store"]
