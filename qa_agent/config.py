"""Configuration loading for the QA agent.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Reasoning backend configuration
    reasoning_backend: Literal["openai", "claude_code"] = Field(
        default="openai",
        description="Reasoning backend type",
    )
    openai_api_key: str = Field(
        default="",
        description="OpenAI API key for reasoning",
    )
    openai_model: str = Field(
        default="gpt-4.1-mini",
        description="OpenAI model to use for reasoning",
    )
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of an OpenAI-compatible Chat Completions API",
    )
    openai_temperature: float = Field(
        default=0.1,
        description="Sampling temperature for reasoning calls",
    )
    claude_code_model: str = Field(
        default="sonnet",
        description="Claude model to use with the Claude Code CLI",
    )
    reasoning_timeout_seconds: float = Field(
        default=60.0,
        description="Timeout for a single reasoning call in seconds",
    )

    # Execution backend configuration
    execution_backend: Literal["mock", "daytona"] = Field(
        default="mock",
        description="Sandbox execution backend type",
    )
    daytona_api_key: str = Field(
        default="",
        description="Daytona API key",
    )
    daytona_api_url: str = Field(
        default="https://app.daytona.io/api",
        description="Daytona API endpoint URL",
    )
    daytona_language: str = Field(
        default="javascript",
        description="Toolbox language of created Daytona sandboxes",
    )
    daytona_ready_timeout_seconds: float = Field(
        default=60.0,
        description="Maximum wait for a sandbox to start in seconds",
    )
    daytona_poll_interval_seconds: float = Field(
        default=2.0,
        description="Delay between sandbox state checks in seconds",
    )
    daytona_request_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for each Daytona API request in seconds",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    @field_validator("openai_temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        """Ensure temperature is within the API's accepted range."""
        if v < 0 or v > 2:
            raise ValueError("openai_temperature must be between 0 and 2")
        return v

    @field_validator(
        "reasoning_timeout_seconds",
        "daytona_ready_timeout_seconds",
        "daytona_poll_interval_seconds",
        "daytona_request_timeout_seconds",
    )
    @classmethod
    def validate_positive_duration(cls, v: float) -> float:
        """Ensure timeouts and intervals are positive."""
        if v <= 0:
            raise ValueError("timeouts and intervals must be positive")
        return v


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
