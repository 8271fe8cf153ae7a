"""
Centralized configuration management.

Runtime knobs only. Scoring weights and thresholds are fixed in the
services and are not configurable.
"""
import os
import logging
from typing import Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from lumina.core.errors import LuminaError

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    """Application settings with validation."""

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="'text' or 'json'")

    # Column profiling
    profile_workers: int = Field(default=1, ge=1, le=64, description="Threads used to profile columns")

    # Chart materialization
    max_chart_rows: int = Field(default=5000, ge=100, le=1000000, description="Rows sampled for chart data")

    # Classification cache
    classification_cache_ttl: int = Field(default=3600, ge=1, le=86400, description="Cache TTL in seconds")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got '{v}'")
        return v.upper()

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in ("text", "json"):
            raise ValueError(f"LOG_FORMAT must be 'text' or 'json', got '{v}'")
        return v.lower()

    @property
    def parallel_profiling(self) -> bool:
        return self.profile_workers > 1

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables (and a .env file if present)."""
        load_dotenv()
        try:
            return cls(
                log_level=os.getenv("LUMINA_LOG_LEVEL", "INFO"),
                log_format=os.getenv("LUMINA_LOG_FORMAT", "text"),
                profile_workers=int(os.getenv("LUMINA_PROFILE_WORKERS", "1")),
                max_chart_rows=int(os.getenv("LUMINA_MAX_CHART_ROWS", "5000")),
                classification_cache_ttl=int(os.getenv("LUMINA_CLASSIFICATION_CACHE_TTL", "3600")),
            )
        except (ValueError, ValidationError) as e:
            raise LuminaError(f"Invalid configuration: {e}") from e


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        logger.info("Configuration loaded and validated successfully")
    return _settings


def reload_settings() -> Settings:
    """Reload settings (useful for testing)."""
    global _settings
    _settings = None
    return get_settings()
