"""
Application Configuration

Uses pydantic-settings for environment variable loading with validation.
Process-wide defaults live here; per-instance overrides come from the
options passed to hookido.register().
"""

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Hookido settings loaded from environment variables.

    Environment variables can be set directly or via .env file.
    AWS credentials should be provided via environment variables (or the
    standard botocore credential chain) in production.
    """

    model_config = SettingsConfigDict(
        env_prefix="HOOKIDO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: Literal["development", "testing", "production"] = Field(
        default="development",
        description="Runtime environment"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug logging"
    )

    # ==========================================================================
    # Webhook route
    # ==========================================================================
    default_route_path: str = Field(
        default="/hookido",
        description="Path of the SNS webhook route when no route override is given"
    )

    # ==========================================================================
    # AWS / SNS
    # ==========================================================================
    aws_region: str = Field(
        default="us-east-1",
        description="AWS region for the SNS client"
    )

    aws_endpoint_url: str | None = Field(
        default=None,
        description="Custom SNS endpoint URL (e.g. LocalStack)"
    )

    aws_access_key_id: str | None = Field(
        default=None,
        description="AWS access key ID (falls back to the botocore credential chain)"
    )

    aws_secret_access_key: str | None = Field(
        default=None,
        description="AWS secret access key"
    )

    # ==========================================================================
    # Outbound HTTP
    # ==========================================================================
    confirmation_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for the SubscribeURL confirmation request"
    )

    certificate_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for fetching SNS signing certificates"
    )

    certificate_cache_ttl_seconds: int = Field(
        default=3600,
        description="How long a fetched signing certificate is reused"
    )

    # ==========================================================================
    # Computed Properties
    # ==========================================================================
    @computed_field
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @computed_field
    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"

    def sns_client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for session.create_client("sns", ...)."""
        kwargs: dict[str, Any] = {"region_name": self.aws_region}
        if self.aws_endpoint_url:
            kwargs["endpoint_url"] = self.aws_endpoint_url
        if self.aws_access_key_id and self.aws_secret_access_key:
            kwargs["aws_access_key_id"] = self.aws_access_key_id
            kwargs["aws_secret_access_key"] = self.aws_secret_access_key
        return kwargs


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
