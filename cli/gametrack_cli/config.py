"""Configuration management for the GameTrack client."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GAMETRACK_",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Backend Configuration
    # ==========================================================================
    api_base_url: str = Field(
        default="http://localhost:8080/api",
        description="Base URL of the release tracker backend",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP request timeout in seconds",
    )

    # ==========================================================================
    # Assisted Entry Configuration
    # ==========================================================================
    search_debounce_ms: int = Field(
        default=400,
        ge=0,
        le=5000,
        description="Quiet period before a title search is issued",
    )
    min_query_length: int = Field(
        default=2,
        ge=1,
        le=20,
        description="Minimum trimmed title length that triggers a search",
    )

    # ==========================================================================
    # Logging & Paths
    # ==========================================================================
    log_level: str = Field(default="INFO", description="Logging level")
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".gametrack",
        description="Data directory for logs and local state",
    )

    @property
    def logs_dir(self) -> Path:
        """Logs directory."""
        return self.data_dir / "logs"

    @property
    def log_file(self) -> Path:
        """Log file used while the full-screen form is running."""
        return self.logs_dir / "gametrack.log"

    @property
    def debounce_seconds(self) -> float:
        return self.search_debounce_ms / 1000

    # ==========================================================================
    # Validators
    # ==========================================================================
    @field_validator("data_dir", mode="after")
    @classmethod
    def ensure_data_dir_exists(cls, v: Path) -> Path:
        """Ensure data directory exists."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v

    @field_validator("api_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience function to reload settings (clears cache)
def reload_settings() -> Settings:
    """Reload settings (useful after env changes)."""
    get_settings.cache_clear()
    return get_settings()
