"""
Settings module for environment-aware configuration.

Manages API keys for the completion and search backends, the MongoDB
connection, retry and pacing knobs, and generation defaults.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Completion API
    openai_api_key: str = ""
    openai_model: str = "gpt-5-mini"
    completion_max_tokens: int = 8000
    json_max_tokens: int = 4000
    json_max_tokens_ceiling: int = 16000

    # Trend search backends (ranked: Brave > Serper > NewsAPI)
    brave_api_key: str = ""
    serper_api_key: str = ""
    news_api_key: str = ""
    search_timeout: float = 20.0

    # Document store
    mongodb_uri: str = ""
    mongodb_database: str = "blog"

    # Environment Configuration
    environment: Literal["dev", "test", "prod"] = "dev"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Rate Limiting & Retries
    max_retries: int = 3
    retry_delay: float = 2.0
    batch_delay: float = 5.0
    cron_delay: float = 10.0

    # Content Generation Settings
    default_language: str = "en"
    default_author: str = "Editorial Team"
    default_tone: str = "professional and approachable"
    target_length: str = "1800-2200"

    # File Paths
    output_dir: Path = Path("outputs")

    def __init__(self, **kwargs):
        """Initialize settings and create the drafts directory."""
        super().__init__(**kwargs)
        (self.output_dir / "drafts").mkdir(exist_ok=True, parents=True)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings
    """
    return Settings()
