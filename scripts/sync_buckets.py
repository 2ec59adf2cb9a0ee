#!/usr/bin/env python3
"""
Run a bucket sync lifecycle event from a checkout.

Usage:
    python scripts/sync_buckets.py deploy-complete --config sync.json
    python scripts/sync_buckets.py before-remove --config sync.json --strict

Requires:
    - AWS credentials (environment, shared profile, or instance role)
    - .env file or environment variables for anything not passed as a flag
"""

import sys
from pathlib import Path

# Add project root to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.cli import main


if __name__ == '__main__':
    sys.exit(main())
