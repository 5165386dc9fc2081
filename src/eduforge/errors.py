"""Exception types raised at the package boundaries.

Core tree operations never raise for unusual input; these are reserved for lookups by unknown
identifiers and for failures of the external AI collaborator.
"""

from __future__ import annotations


class EduForgeError(RuntimeError):
    pass


class VersionNotFoundError(EduForgeError):
    """Raised when a version id is not present in the store."""

    def __init__(self, version_id: str) -> None:
        super().__init__(f"version not found: {version_id}")
        self.version_id = version_id


class AIServiceError(EduForgeError):
    pass


class AIRateLimitedError(AIServiceError):
    """The AI collaborator refused the call; try again after `retry_after_s`."""

    def __init__(self, message: str, *, retry_after_s: float | None = None) -> None:
        super().__init__(message)
        self.retry_after_s = retry_after_s


class AIResponseError(AIServiceError):
    """The AI collaborator answered, but no outline node array could be extracted."""
