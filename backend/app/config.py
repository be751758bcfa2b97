"""
Application Configuration

Uses Pydantic Settings for type-safe configuration.
"""

from pathlib import Path
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, ConfigDict

# Project root: run-tracker/
PROJECT_ROOT = Path(__file__).parent.parent.parent


class Settings(BaseSettings):
    """Application settings with validation."""

    # === Core ===
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # === Database ===
    database_url: str = Field(
        default="sqlite:///./app.db",
        description="Database connection URL"
    )

    # === CORS ===
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:8081", "http://localhost:19006"],
        description="Allowed CORS origins"
    )

    # === Run Tracking ===
    body_weight_kg: float = Field(
        default=70.0,
        gt=0,
        description="Body weight used by the calorie estimate"
    )
    tick_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        description="How often live stats are recomputed"
    )
    location_time_interval_ms: int = Field(default=1000, gt=0)
    location_distance_interval_m: float = Field(default=5.0, ge=0)
    current_pace_window_minutes: float = Field(default=5.0, gt=0)
    current_pace_window_km: float = Field(default=1.0, gt=0)

    @field_validator('database_url')
    @classmethod
    def fix_postgres_url(cls, v: str) -> str:
        """Fix Render/Railway postgres:// URL to postgresql://"""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    @field_validator('cors_origins', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',')]
        return v

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
