"""
Module: storage
Description: Package initialization for the local persistence layer.

This package contains durable storage for the offline queue:
- local: key/value storage backed by files or memory
"""

__all__ = []
