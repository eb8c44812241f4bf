"""
Module: handlers
Description: Package initialization for collector endpoint handlers.

This package contains FastAPI route handlers for the collector:
- actions: action log ingestion and recent-activity endpoints
"""

__all__ = []
