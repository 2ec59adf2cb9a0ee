"""
Application configuration using Pydantic settings.

Sync targets, AWS region/profile/CA bundle and API keys come from
environment variables. Supports a mock storage mode for local development.
"""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
