"""
Module: request.py
Description: API request models for the collector service.

These models validate bodies posted by the delivery queue (and by older
browser clients that still send userEmail instead of userIdentity).

Key Components:
- LogActionRequest: Model for POST /api/log-action requests
- LogAcceptanceRequest: Model for POST /api/log-acceptance requests

Dependencies: pydantic, typing
"""

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from actionlog.models.entry import ANONYMOUS, LogEntry, serialize_extra_info


class LogActionRequest(BaseModel):
    """
    Request model for logging a user action.

    Every field is optional; the collector fills the same defaults the
    Sheets backend applies (generated timestamp, anonymous user,
    'unknown' action).

    Attributes:
        timestamp: Client-side creation time
        user_identity: userIdentity or legacy userEmail
        action: Event type tag
        extra_info: JSON string or raw JSON value
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra="ignore"
    )

    timestamp: Optional[str] = Field(default=None)
    user_identity: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("userIdentity", "userEmail", "user_identity")
    )
    action: Optional[str] = None
    extra_info: Any = Field(
        default=None,
        validation_alias=AliasChoices("extraInfo", "extra_info")
    )

    def to_entry(self) -> LogEntry:
        """Normalize the request into a LogEntry."""
        fields = {
            'user_identity': self.user_identity or ANONYMOUS,
            'action': self.action or "unknown",
            'extra_info': "" if self.extra_info is None else serialize_extra_info(self.extra_info),
        }
        if self.timestamp:
            fields['timestamp'] = self.timestamp
        return LogEntry(**fields)


class LogAcceptanceRequest(BaseModel):
    """Request model for recording that a user accepted the usage terms."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra="ignore"
    )

    user_identity: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("userIdentity", "userEmail", "user_identity")
    )
