"""
HTTP surface: FastAPI routes and dependencies for the sync triggers.
"""
