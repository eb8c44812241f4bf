"""
Module: entry.py
Description: Log entry data models for the action log shipper.

Defines the LogEntry unit of work shipped to the collector, the outcome
returned by a delivery attempt and the read-only queue status snapshot.

Key Components:
- LogEntry: one user action destined for a remote collector
- DeliveryResult: delivered / delivered via fallback / queued outcome
- QueueStatus: introspection of the delivery queue
- DrainReport: summary of one drain pass

Dependencies: pydantic, structlog, datetime, json, typing
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from actionlog.utils.logger import get_logger

logger = get_logger(__name__)

ANONYMOUS = "anonymous"


def utc_timestamp() -> str:
    """Current UTC time as an ISO 8601 string with a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def serialize_extra_info(extra_info: Any) -> str:
    """
    Freeze an arbitrary payload into a JSON string.

    Strings are kept verbatim so callers can pass pre-serialized data.
    Values json cannot encode natively (datetimes, sets) fall back to str().
    Payloads json rejects outright (circular references, non-scalar dict
    keys) are stored as their repr() encoded as a JSON string.
    """
    if isinstance(extra_info, str):
        return extra_info
    if extra_info is None:
        extra_info = {}
    try:
        return json.dumps(extra_info, default=str)
    except (TypeError, ValueError) as e:
        logger.warning(
            "Payload not JSON encodable, storing repr",
            payload_type=type(extra_info).__name__,
            error=str(e)
        )
        return json.dumps(repr(extra_info))


class LogEntry(BaseModel):
    """
    One user action record.

    The payload is stored pre-serialized, so mutating the caller's object
    after the entry is built cannot change what gets delivered.

    Attributes:
        timestamp: ISO 8601 creation time
        user_identity: User identifier, "anonymous" when unknown
        action: Free-form event type tag (e.g. 'page_visit')
        extra_info: JSON-encoded payload
    """

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True
    )

    timestamp: str = Field(
        default_factory=utc_timestamp,
        description="ISO 8601 creation timestamp"
    )
    user_identity: str = Field(
        default=ANONYMOUS,
        alias="userIdentity",
        description="User identifier"
    )
    action: str = Field(
        ...,
        description="Event type tag"
    )
    extra_info: str = Field(
        default="{}",
        alias="extraInfo",
        description="Pre-serialized JSON payload"
    )

    @field_validator('user_identity', mode='before')
    @classmethod
    def default_identity(cls, v: Any) -> str:
        """Fall back to the anonymous sentinel for missing identities."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return ANONYMOUS
        return str(v)

    @field_validator('extra_info', mode='before')
    @classmethod
    def freeze_extra_info(cls, v: Any) -> str:
        return serialize_extra_info(v)

    @classmethod
    def create(
        cls,
        user_identity: Optional[str],
        action: str,
        extra_info: Any = None
    ) -> "LogEntry":
        """Build an entry stamped with the current time."""
        return cls(user_identity=user_identity, action=action, extra_info=extra_info)

    def to_wire(self) -> Dict[str, str]:
        """Request body / storage shape: camelCase keys."""
        return self.model_dump(by_alias=True)


class DeliveryResult(BaseModel):
    """
    Outcome of record() or a single send.

    Exactly one of the three shapes occurs: delivered, delivered via the
    fallback endpoint, or queued for later delivery.
    """

    delivered: bool = Field(default=False)
    via_fallback: bool = Field(default=False)
    queued: bool = Field(default=False)
    entry: LogEntry

    @classmethod
    def primary(cls, entry: LogEntry) -> "DeliveryResult":
        return cls(delivered=True, entry=entry)

    @classmethod
    def fallback(cls, entry: LogEntry) -> "DeliveryResult":
        return cls(delivered=True, via_fallback=True, entry=entry)

    @classmethod
    def pending(cls, entry: LogEntry) -> "DeliveryResult":
        return cls(queued=True, entry=entry)


class QueueEndpoints(BaseModel):
    primary: str
    fallback: Optional[str] = None


class QueueStatus(BaseModel):
    """Read-only snapshot of the delivery queue."""

    online: bool
    draining: bool
    queued_count: int = Field(..., ge=0)
    endpoints: QueueEndpoints


class DrainReport(BaseModel):
    """Counts from one drain pass."""

    attempted: int = Field(default=0, ge=0)
    delivered: int = Field(default=0, ge=0)
    still_failed: int = Field(default=0, ge=0)
    remaining: int = Field(default=0, ge=0)
