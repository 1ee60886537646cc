"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from datetime import timedelta
from enum import Enum
from functools import lru_cache
from typing import List

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from invoice_desk.core.exceptions import ConfigurationException


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="invoice-desk", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Upstream Invoicing API ==========
    api_base_url: str = Field(
        default="http://albaranes-api:3000/api/v1",
        description="Base URL of the upstream invoicing API"
    )
    api_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for upstream API calls",
        ge=0.1,
        le=300
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production", "test"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and check the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """
    Returns cached Settings instance.

    Raises:
        ConfigurationException: If the environment holds invalid values
    """
    try:
        return Settings()
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise ConfigurationException("Invalid application settings", {"errors": errors}) from e


# Global settings instance
settings = get_settings()


# ========== Constants ==========

# Lead time before a deadline during which a workflow is flagged as at risk.
SLA_WARNING_WINDOW = timedelta(hours=2)


class SLAClassification(str, Enum):
    """SLA health of a workflow state."""
    NONE = "none"
    NORMAL = "normal"
    WARNING = "warning"
    OVERDUE = "overdue"


class DisplayHint(str, Enum):
    """Colour category used by badges and progress bars."""
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    GRAY = "gray"
