"""Queue Annotator application configuration using Pydantic Settings."""

import logging
from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_LANGFUSE_HOST = "https://cloud.langfuse.com"


class Settings(BaseSettings):
    """Queue Annotator application settings.

    Langfuse credentials are read from ``LANGFUSE_*`` variables (the
    ``NEXT_PUBLIC_*`` spellings are accepted too).  Everything else can be
    overridden via environment variables with the ANNOTATOR_ prefix
    (e.g., ANNOTATOR_PAGE_LIMIT).
    """

    langfuse_host: str = Field(
        default=DEFAULT_LANGFUSE_HOST,
        validation_alias=AliasChoices("LANGFUSE_HOST", "NEXT_PUBLIC_LANGFUSE_HOST"),
    )
    langfuse_public_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "LANGFUSE_PUBLIC_KEY", "NEXT_PUBLIC_LANGFUSE_PUBLIC_KEY"
        ),
    )
    langfuse_secret_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("LANGFUSE_SECRET_KEY"),
    )
    request_timeout: float = 30.0
    page_limit: int = 100
    fence_detail_fetches: bool = True
    host: str = "0.0.0.0"
    port: int = 8000
    behind_proxy: bool = False  # Set ANNOTATOR_BEHIND_PROXY=true in Docker

    model_config = {
        "env_prefix": "ANNOTATOR_",
        "env_file": ".env",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @property
    def has_credentials(self) -> bool:
        return bool(self.langfuse_public_key and self.langfuse_secret_key)


def warn_if_missing_credentials(settings: Settings) -> bool:
    """Log a warning when Langfuse credentials are absent.

    Startup is never blocked; upstream calls fail at request time instead.
    Returns ``True`` when the warning was emitted.
    """
    if settings.has_credentials:
        return False
    logger.warning("Langfuse credentials not found in environment variables")
    return True


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()
