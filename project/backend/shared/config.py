"""
Configuration management.

Centralized environment variable management and validation.
"""

from pathlib import Path
from typing import Literal, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from shared.errors import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # Allow case-insensitive env var matching
        extra="ignore"
    )

    # Base directory for per-job frame folders
    output_dir: Path = Path("output")

    # FFmpeg binary used by the streaming encoder
    ffmpeg_path: str = "ffmpeg"

    # Environment
    environment: Literal["development", "staging", "production"] = "development"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    # LOG_DIR: Directory for the rotating log file; unset logs to stdout only
    log_dir: Optional[Path] = None

    # Slideshow configuration
    # SLIDESHOW_FPS: Input frame rate handed to ffmpeg (one merged pair per frame)
    slideshow_fps: int = 24

    # SLIDESHOW_CLEANUP: Delete the frame folder once encoding has finished
    slideshow_cleanup: bool = False

    # SLIDESHOW_MAX_CONCURRENCY: Pairs decoded and composited at once.
    # 0 disables the limit (every pair starts immediately).
    slideshow_max_concurrency: int = 8

    @field_validator("output_dir")
    @classmethod
    def validate_output_dir(cls, v: Path) -> Path:
        """Validate output directory."""
        if not str(v).strip():
            raise ConfigError("OUTPUT_DIR is required")
        return v

    @field_validator("ffmpeg_path")
    @classmethod
    def validate_ffmpeg_path(cls, v: str) -> str:
        """Validate ffmpeg binary path."""
        if not v or not v.strip():
            raise ConfigError("FFMPEG_PATH must not be empty")
        return v.strip()

    @field_validator("slideshow_fps")
    @classmethod
    def validate_slideshow_fps(cls, v: int) -> int:
        """Validate frame rate."""
        if v <= 0:
            raise ConfigError("SLIDESHOW_FPS must be a positive integer")
        return v

    @field_validator("slideshow_max_concurrency")
    @classmethod
    def validate_slideshow_max_concurrency(cls, v: int) -> int:
        """Validate concurrency limit."""
        if v < 0:
            raise ConfigError("SLIDESHOW_MAX_CONCURRENCY must be 0 (unbounded) or positive")
        return v


# Singleton instance
try:
    settings = Settings()
except Exception as e:
    # Re-raise as ConfigError for consistency
    if isinstance(e, ConfigError):
        raise
    raise ConfigError(f"Failed to load configuration: {str(e)}") from e
