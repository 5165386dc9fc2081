"""Application configuration.

Configuration is loaded from environment variables. For local development, you can provide a
`.env` file and set `EDUFORGE_ENV_FILE` to point to it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """EduForge settings.

    All fields are environment-configurable. Prefix is `EDUFORGE_`.
    """

    model_config = SettingsConfigDict(
        env_prefix="EDUFORGE_",
        env_file=None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    app_env: Literal["dev", "prod"] = Field(default="dev")
    log_level: str = Field(default="INFO")

    # LLM
    openai_api_key: str | None = Field(default=None)
    openai_base_url: str | None = Field(default=None)
    openai_model: str = Field(default="gpt-4o-mini")
    openai_timeout_s: float = Field(default=60.0)
    ai_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    ai_max_tokens: int = Field(default=4000, ge=256, le=32000)

    # AI collaborator policy
    ai_min_request_interval_s: float = Field(default=2.0, ge=0.0, le=600.0)
    ai_cache_ttl_s: float = Field(default=3600.0, ge=0.0)
    ai_cache_max_entries: int = Field(default=128, ge=1, le=10000)

    # Generation defaults
    default_detail_level: Literal["high-level", "medium", "detailed"] = Field(default="medium")
    default_structure_type: Literal["sequential", "hierarchical", "modular", "spiral"] = Field(
        default="sequential"
    )

    # Version history
    versions_dir: Path = Field(default=Path("artifacts") / "versions")

    # Redis (optional)
    redis_enabled: bool = Field(default=False)
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_key_prefix: str = Field(default="eduforge")


def load_settings() -> Settings:
    """Load settings from env.

    Returns:
        Settings: Parsed settings.
    """

    env_file_override = os.getenv("EDUFORGE_ENV_FILE")
    if env_file_override:
        env_path = Path(env_file_override)
        return Settings(_env_file=env_path)

    default_env = Path.cwd() / ".env"
    if default_env.exists():
        return Settings(_env_file=default_env)

    return Settings()
