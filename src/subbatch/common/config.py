"""Configuration management for the subtitle batch translator."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Find .env file relative to project root (this file is in src/subbatch/common/)
_PROJECT_ROOT = Path(__file__).parent.parent.parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        case_sensitive=False,
        extra="ignore",
    )

    # Ollama Backend Configuration
    ollama_host: str = Field(
        default="http://127.0.0.1:11434",
        description="Raw Ollama address, normalized at call time",
    )
    ollama_model: str = Field(
        default="", description="Model name; first listed model is used when empty"
    )
    ollama_probe_timeout: float = Field(
        default=5.0
    )  # Seconds for /api/tags reachability and model listing
    ollama_request_timeout: float = Field(
        default=120.0
    )  # Seconds for a single /api/generate call

    # Translation Configuration
    translation_batch_size: int = Field(
        default=10
    )  # Subtitle entries per backend call
    translation_temperature: float = Field(
        default=0.3
    )  # Lower for consistent translations
    translation_source_language: str = Field(default="Japanese")
    translation_target_language: str = Field(default="Simplified Chinese")
    translation_output_suffix: str = Field(
        default=".cn"
    )  # movie.srt -> movie.cn.srt

    # Progress reporting
    recent_activity_limit: int = Field(default=5)
    preview_limit: int = Field(
        default=3, ge=0
    )  # Translated lines shown after each batch; 0 disables

    # Logging
    log_level: str = Field(default="INFO")
    log_file_enabled: bool = Field(default=False)

    @field_validator("translation_batch_size", "recent_activity_limit")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """
        Ensure count-like settings are at least 1.

        Args:
            v: Configured value

        Returns:
            The value unchanged

        Raises:
            ValueError: If the value is less than 1
        """
        if v < 1:
            raise ValueError(f"must be at least 1, got {v}")
        return v

    @field_validator("translation_temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        """Temperature must stay within the range Ollama accepts."""
        if not 0.0 <= v <= 2.0:
            raise ValueError(f"temperature must be between 0.0 and 2.0, got {v}")
        return v

    @field_validator("ollama_probe_timeout", "ollama_request_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout must be positive, got {v}")
        return v


# Global settings instance
settings = Settings()
