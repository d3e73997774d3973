"""Environment-bound process settings.

Settings that govern the runtime (loop bounds, timeouts, logging) load from
environment variables and an optional ``.env`` file. The task/server catalog
itself lives in the config file read by ``delegateAgent.config.loader``.

Example:
    from delegateAgent.config.settings import get_settings

    settings = get_settings()  # Cached singleton
    max_steps = settings.execution.max_steps
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


load_dotenv()


class ExecutionSettings(BaseSettings):
    """Bounds for the delegated agent loop and downstream startup.

    - max_steps: model calls per loop run (default: 10)
    - execution_timeout: wall-clock deadline per loop run in seconds (default: 60)
    - session_ring_size: number of recyclable pause session ids (default: 1000)
    - startup_timeout: per-server connect + discovery timeout in seconds (default: 30)
    """

    max_steps: int = Field(
        default=10,
        ge=1,
        le=100,
        validation_alias=AliasChoices("DELEGATE_MAX_STEPS", "MAX_STEPS"),
    )
    execution_timeout: float = Field(
        default=60.0,
        gt=0,
        validation_alias=AliasChoices("DELEGATE_EXECUTION_TIMEOUT", "EXECUTION_TIMEOUT"),
    )
    session_ring_size: int = Field(
        default=1000,
        ge=1,
        validation_alias=AliasChoices("DELEGATE_SESSION_RING_SIZE"),
    )
    startup_timeout: float = Field(
        default=30.0,
        gt=0,
        validation_alias=AliasChoices("DELEGATE_STARTUP_TIMEOUT", "MCP_STARTUP_TIMEOUT"),
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("DELEGATE_LOG_LEVEL", "LOG_LEVEL"),
    )
    log_file: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DELEGATE_LOG_FILE", "LOG_FILE"),
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class Settings(BaseSettings):
    """Root process settings.

    - config_path: path of the JSON/YAML config file (DELEGATE_CONFIG)
    - execution: loop and startup bounds (ExecutionSettings)
    - observability: logging (ObservabilitySettings)
    """

    config_path: Optional[str] = Field(default=None, alias="DELEGATE_CONFIG")
    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
        case_sensitive=False,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton Settings instance."""
    return Settings()
