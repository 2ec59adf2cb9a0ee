"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables (or a .env file) with
sensible defaults. The sync target list is the only structured value:
it is a JSON list of {"bucketName": ..., "localDir": ...} objects in
SYNC_TARGETS.

Mock mode enables local development without AWS credentials.
"""

import json
from functools import lru_cache
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like api_keys), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "Bucket Sync API"
    api_version: str = "v1"
    api_keys: str = Field(
        default="dev-key-1,dev-key-2",
        description="Comma-separated API keys accepted on the trigger endpoints."
    )

    # Sync Configuration
    sync_targets: Optional[Any] = Field(
        default=None,
        description=(
            "JSON list of {bucketName, localDir} objects. "
            "Anything that isn't a list means 'no sync configuration'."
        )
    )
    strict_empty: bool = Field(
        default=False,
        description="Fail when a bucket to be emptied does not exist instead of treating it as empty."
    )

    # AWS Configuration
    aws_region: str = Field(
        default="us-east-1",
        description="Region for the S3 client"
    )
    aws_profile: Optional[str] = Field(
        default=None,
        description="Named profile from the shared AWS credentials file (optional)"
    )
    ca_bundle_path: Optional[str] = Field(
        default=None,
        description="Path to a custom CA certificate bundle for TLS (optional)"
    )
    s3_endpoint_url: Optional[str] = Field(
        default=None,
        description="Override endpoint for S3-compatible storage (optional)"
    )
    storage_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of real S3. Enables local dev without credentials."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("sync_targets", mode="before")
    @classmethod
    def decode_sync_targets(cls, value: Any) -> Any:
        """
        Decode SYNC_TARGETS from JSON.

        Undecodable strings are kept as-is: the orchestrator treats any
        non-list as "no configuration" rather than an error.
        """
        if isinstance(value, str):
            try:
                return json.loads(value)
            except ValueError:
                return value
        return value

    @property
    def api_keys_list(self) -> list[str]:
        """Parse comma-separated API keys into a list."""
        return [key.strip() for key in self.api_keys.split(",") if key.strip()]

    @property
    def has_sync_targets(self) -> bool:
        return isinstance(self.sync_targets, list)

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields.
        """
        missing = []

        if not self.api_keys_list:
            missing.append("API_KEYS")

        # Region only required when talking to real S3
        if not self.storage_mock_mode and not self.aws_region:
            missing.append("AWS_REGION")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once per process.
    For tests, call get_settings.cache_clear() to reset.
    """
    return Settings()
