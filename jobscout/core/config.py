"""
Configuration management for JobScout.

Loads settings from environment variables with sensible defaults.
Uses pydantic-settings for validation.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class DatabaseSettings(BaseSettings):
    """Database connection settings."""

    url: str = Field(
        default="sqlite:///./jobscout.db",
        description="SQLAlchemy database URL for resumes, jobs and profiles"
    )
    echo: bool = Field(
        default=False,
        description="Log every SQL statement (debugging only)"
    )

    class Config:
        env_prefix = "DB_"


class ResumeSettings(BaseSettings):
    """Resume upload limits."""

    max_size_bytes: int = Field(
        default=50 * 1024,
        description="Largest accepted resume, measured in UTF-8 bytes"
    )

    class Config:
        env_prefix = "RESUME_"


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    # Application
    app_name: str = "JobScout"
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # Sub-settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    resume: ResumeSettings = Field(default_factory=ResumeSettings)

    class Config:
        env_prefix = "JOBSCOUT_"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings. Useful for dependency injection."""
    return settings
