# api/app/config.py
from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application configuration.

    Loads environment variables from `.env` and provides
    typed access across the API, scripts, and services.
    """

    # ─────────────────────────────────────────────
    # Pydantic Settings Config
    # ─────────────────────────────────────────────
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ─────────────────────────────────────────────
    # Database
    # ─────────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./companion.db"
    database_echo: bool = False

    # ─────────────────────────────────────────────
    # OpenAI (memory extraction)
    # ─────────────────────────────────────────────
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o"

    # ─────────────────────────────────────────────
    # Memory layer
    # ─────────────────────────────────────────────
    memory_context_limit: int = 15
    extraction_min_confidence: float = 0.6
    track_memory_access: bool = True

    # ─────────────────────────────────────────────
    # Prompt assembly
    # ─────────────────────────────────────────────
    system_prompt_path: str | None = None

    # ─────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────
    log_level: str = "INFO"


# ─────────────────────────────────────────────
# Cached Settings Instance
# ─────────────────────────────────────────────
@lru_cache
def get_settings() -> Settings:
    """
    Returns a cached Settings instance so config
    is only loaded once per process.
    """
    return Settings()
