"""
Module: models
Description: Package initialization for Pydantic data models.

This package contains all data models used by the action log shipper:
- LogEntry: one user action destined for a collector
- DeliveryResult / QueueStatus / DrainReport: queue outcomes
- LogActionRequest / LogAcceptanceRequest: collector request bodies

All models are exported here for convenient importing.
"""

from .entry import DeliveryResult, DrainReport, LogEntry, QueueEndpoints, QueueStatus
from .request import LogAcceptanceRequest, LogActionRequest

__all__ = [
    "LogEntry",
    "DeliveryResult",
    "DrainReport",
    "QueueEndpoints",
    "QueueStatus",
    "LogActionRequest",
    "LogAcceptanceRequest",
]
