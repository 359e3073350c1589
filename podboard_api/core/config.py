from functools import lru_cache
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

    # API Configuration
    api_v1_prefix: str = "/api/v1"
    project_name: str = "PodBoard API"
    version: str = "0.1.0"
    debug: bool = False

    # CORS Configuration
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Trial/quota Configuration
    guest_trial_limit: int = 1
    user_trial_limit: int = 3

    # Processing Pipeline Configuration
    metadata_provider: Literal["stub", "oembed"] = "stub"
    transcript_provider: Literal["stub", "youtube"] = "stub"
    segmenter_provider: Literal["stub", "llm"] = "stub"
    segmenter_model: str = "OPENAI_GPT4O_MINI"
    stage_timeout_seconds: float = 30.0
    # Artificial delays of the stub collaborators
    metadata_delay_seconds: float = 1.0
    transcript_delay_seconds: float = 1.5
    segmenter_delay_seconds: float = 2.0

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "info"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
