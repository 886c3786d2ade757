"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite+aiosqlite:///./knowledge.db"

    # File storage
    upload_dir: str = "uploads"
    max_upload_bytes: int = 10 * 1024 * 1024

    # LLM provider
    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o-mini"
    llm_timeout_seconds: float = 60.0

    # Generation batching (rate-limit friendly defaults)
    generation_batch_size: int = 3
    generation_batch_delay_seconds: float = 5.0
    default_questions_per_category: int = 3

    # Categorization bounds
    category_name_max_length: int = 100
    category_content_min_length: int = 10

    # Result normalization
    explanation_max_length: int = 500

    # Distractor material caps
    distractor_name_limit: int = 30
    distractor_keyword_limit: int = 50

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
