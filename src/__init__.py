"""
Bucket Sync - mirrors local directories into object storage buckets.

This package contains the complete application:
- core: Framework-agnostic walk/sync/empty logic
- infrastructure: Object storage clients
- api: FastAPI trigger endpoints and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
