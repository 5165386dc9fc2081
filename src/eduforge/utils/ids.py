"""ID utilities."""

from __future__ import annotations

import uuid


def new_id() -> str:
    """Return a fresh opaque identifier for nodes, outlines and versions."""

    return str(uuid.uuid4())


def format_version_label(n: int, prefix: str = "Version ") -> str:
    """Format a version number as the default save message (e.g. ``Version 3``)."""

    return f"{prefix}{n}"
