# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for credentials, cache backend selection, call
policy (retry, rate limit, timeouts), model selection and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from salesintel.core.errors import ConfigurationError

__all__ = ["ConfigurationError", "Settings", "load_settings"]

DEFAULT_SOURCES = "organic,news,jobs,linkedin,youtube"


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Environment ===
    environment: Literal["development", "production"] = "development"

    # === Cache ===
    cache_backend: Literal["memory", "json", "sqlite", "redis"] = "memory"
    cache_root: Path = Path("~/.salesintel/cache")
    cache_redis_url: str = ""

    # === SerpAPI (organic, news, jobs, linkedin, youtube) ===
    serpapi_api_key: str = ""
    serpapi_base_url: str = "https://serpapi.com/search"
    serpapi_timeout_s: float = 10.0
    serpapi_location: str = "United States"
    serpapi_language: str = "en"
    serpapi_country: str = "us"
    serpapi_num_results: int = 10

    # === Snov.io (contacts) ===
    snov_client_id: str = ""
    snov_client_secret: str = ""
    snov_base_url: str = "https://api.snov.io/v1"
    snov_timeout_s: float = 30.0
    snov_rate_limit_per_minute: int = 60

    # === Collection ===
    enabled_sources: str = DEFAULT_SOURCES

    # === Call policy ===
    source_rate_limit_per_minute: int = 600
    retry_max_attempts: int = 3
    retry_base_delay_s: float = 1.0
    retry_max_delay_s: float = 10.0

    # === LLM ===
    llm_default_provider: str = "anthropic"
    llm_default_model: str = "claude-sonnet-4-20250514"
    llm_temperature: float = 0.2
    llm_max_tokens: int = 2048
    anthropic_api_key: str = ""
    openai_api_key: str = ""

    # === Pipeline ===
    require_persistence: bool = True

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: str = ""
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("retry_max_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("retry_max_attempts must be >= 1")
        return v

    @field_validator("retry_base_delay_s", "retry_max_delay_s")
    @classmethod
    def validate_delays(cls, v: float) -> float:
        if v < 0:
            raise ValueError("retry delays must be >= 0")
        return v

    @field_validator("source_rate_limit_per_minute", "snov_rate_limit_per_minute")
    @classmethod
    def validate_rate_limit(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("rate limits must be > 0 calls per minute")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.cache_backend == "redis" and not self.cache_redis_url:
            errors.append("CACHE_REDIS_URL must be set when CACHE_BACKEND=redis")

        if self.retry_max_delay_s < self.retry_base_delay_s:
            errors.append("RETRY_MAX_DELAY_S must be >= RETRY_BASE_DELAY_S")

        unknown = set(self.enabled_sources_list) - {
            "organic", "news", "jobs", "linkedin", "youtube", "contacts",
        }
        if unknown:
            errors.append(f"Unknown ENABLED_SOURCES: {', '.join(sorted(unknown))}")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def enabled_sources_list(self) -> list[str]:
        """Parse comma-separated source list."""
        return [s.strip() for s in self.enabled_sources.split(",") if s.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-request config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
