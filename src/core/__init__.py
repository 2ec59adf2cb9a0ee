"""
Core synchronization logic.

This package is framework-agnostic: it doesn't import FastAPI, boto3,
or settings. Storage clients are passed in, so the sync logic can be
tested against an in-memory store.
"""
