"""
Package: actionlog
Description: Action log shipping for the CYB Guide learning platform.

Provides the client-side DeliveryQueue that ships user action logs to a
collector with retry, fallback and offline persistence, plus the stub
collector service itself.
"""

__version__ = "0.3.0"
