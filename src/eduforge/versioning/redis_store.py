"""Redis-backed version store.

Same contract as `VersionStore`, but records live in Redis lists so several API instances can
share one history without reading local disk.
"""

from __future__ import annotations

import json
from typing import Any

import redis

from eduforge.models.outline import OutlineVersion
from eduforge.versioning.store import VersionStore


class RedisVersionStore(VersionStore):
    """Append-only store keeping one Redis list of versions per outline."""

    def __init__(self, redis_url: str, key_prefix: str = "eduforge", *, client: Any | None = None) -> None:
        super().__init__(path=None)
        self._client = client if client is not None else redis.Redis.from_url(redis_url, decode_responses=True)
        self._key_prefix = key_prefix
        self._index_key = f"{key_prefix}:versions:index"

    def _versions_key(self, outline_id: str) -> str:
        return f"{self._key_prefix}:outline:{outline_id}:versions"

    def _records(self, outline_id: str | None = None) -> list[OutlineVersion]:
        if outline_id is None:
            outline_ids = set(self._client.hvals(self._index_key))
        else:
            outline_ids = {outline_id}
        records: list[OutlineVersion] = []
        for oid in outline_ids:
            for line in self._client.lrange(self._versions_key(oid), 0, -1):
                records.append(OutlineVersion.model_validate_json(line))
        return records

    def _append(self, version: OutlineVersion) -> None:
        line = json.dumps(version.model_dump(mode="json", by_alias=True), ensure_ascii=False)
        pipe = self._client.pipeline()
        pipe.rpush(self._versions_key(version.outline_id), line)
        pipe.hset(self._index_key, version.id, version.outline_id)
        pipe.execute()

    def find(self, version_id: str) -> OutlineVersion | None:
        outline_id = self._client.hget(self._index_key, version_id)
        if outline_id is None:
            return None
        for version in self._records(outline_id):
            if version.id == version_id:
                return version
        return None
