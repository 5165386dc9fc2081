"""Pick the version store backend from settings."""

from __future__ import annotations

from eduforge.config import Settings
from eduforge.logging import get_logger
from eduforge.versioning.redis_store import RedisVersionStore
from eduforge.versioning.store import VersionStore

logger = get_logger(__name__)

VERSIONS_FILE = "versions.jsonl"


def open_version_store(settings: Settings) -> VersionStore:
    if settings.redis_enabled:
        logger.info("Using Redis version store", extra={"key_prefix": settings.redis_key_prefix})
        return RedisVersionStore(settings.redis_url, settings.redis_key_prefix)
    return VersionStore(settings.versions_dir / VERSIONS_FILE)
