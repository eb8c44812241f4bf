"""
Package: delivery
Description: Log delivery mechanisms for the action log shipper.

Provides push delivery to collectors, the retry policy, the offline
delivery queue and the connectivity monitor that drives it.
"""

from .errors import DeliveryError, FallbackDeliveryError, FallbackNotConfiguredError
from .queue import DeliveryQueue

__all__ = [
    "DeliveryQueue",
    "DeliveryError",
    "FallbackDeliveryError",
    "FallbackNotConfiguredError",
]
