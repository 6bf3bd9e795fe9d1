"""Environment-driven defaults for forkable's collaborators.

    FORKABLE_LOG_LEVEL     logging level for setup_logging() (default: INFO)
    FORKABLE_LOG_FORMAT    "text" or "json" (default: text)
    FORKABLE_HTTP_TIMEOUT  seconds before an HTTP request gives up (default: 30)
    FORKABLE_MAX_WORKERS   thread count of default_executor() (default: 4)

Settings() is re-read on every call so collaborators built later pick up
environment changes; it is cheap enough that no caching is done.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Literal, Optional

from pydantic import PositiveFloat, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings from FORKABLE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FORKABLE_",
        case_sensitive=False,
        env_ignore_empty=True,
    )

    # Observability
    log_level: str = "INFO"
    log_format: Literal["text", "json"] = "text"

    # Collaborators
    http_timeout: PositiveFloat = 30.0
    max_workers: PositiveInt = 4

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator("log_format", mode="before")
    @classmethod
    def normalize_format(cls, v):
        return v.lower() if isinstance(v, str) else v


def default_executor(settings: Optional[Settings] = None) -> ThreadPoolExecutor:
    """Thread pool for running collaborator I/O off the forking thread."""
    settings = settings or Settings()
    return ThreadPoolExecutor(max_workers=settings.max_workers, thread_name_prefix="forkable")
