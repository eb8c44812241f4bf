"""
Module: actions.py
Description: Collector endpoints receiving user action logs.

Stub backend for the delivery queue: every accepted action is written to
the structured log and kept in a bounded in-memory window so operators
can inspect recent activity. Nothing is persisted.

Key Components:
- log_action(): POST /api/log-action
- log_acceptance(): POST /api/log-acceptance
- list_actions(): GET /api/logs (most recent first)
- ActionWindow: bounded in-memory recent-actions buffer

Dependencies: FastAPI, collections, models, config, utils
"""

from collections import deque
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi import status as status_codes

from actionlog.config.settings import settings
from actionlog.models.entry import ANONYMOUS, LogEntry, serialize_extra_info, utc_timestamp
from actionlog.models.request import LogAcceptanceRequest, LogActionRequest
from actionlog.utils.logger import get_logger

router = APIRouter(prefix="/api", tags=["actions"])
logger = get_logger(__name__)


class ActionWindow:
    """Most recent collected entries, oldest evicted first."""

    def __init__(self, size: int):
        if size < 1:
            raise ValueError("size must be >= 1")
        self._entries = deque(maxlen=size)

    def append(self, entry: LogEntry) -> None:
        self._entries.append(entry)

    def recent(self, limit: Optional[int] = None) -> List[LogEntry]:
        entries = list(reversed(self._entries))
        return entries if limit is None else entries[:limit]

    def __len__(self) -> int:
        return len(self._entries)


_window = ActionWindow(settings.collector_window)


def get_action_window() -> ActionWindow:
    """Dependency to get the process-wide action window."""
    return _window


def _collect(window: ActionWindow, entry: LogEntry) -> None:
    window.append(entry)
    logger.info(
        "User action log",
        timestamp=entry.timestamp,
        user_identity=entry.user_identity,
        action=entry.action,
        extra_info=entry.extra_info
    )


@router.post("/log-action")
async def log_action(
    request: LogActionRequest,
    window: ActionWindow = Depends(get_action_window)
) -> Dict[str, bool]:
    """
    Record a general user action.

    Example:
        POST /api/log-action
        {"timestamp": "2024-01-15T10:30:00.000Z", "userIdentity": "user@example.com",
         "action": "page_visit", "extraInfo": "{\\"page\\": \\"/learning-guide\\"}"}

        Response (200):
        {"success": true}
    """
    _collect(window, request.to_entry())
    return {"success": True}


@router.post("/log-acceptance")
async def log_acceptance(
    body: LogAcceptanceRequest,
    http_request: Request,
    window: ActionWindow = Depends(get_action_window)
) -> Dict[str, Any]:
    """Record that a user accepted the responsible-use terms."""
    timestamp = utc_timestamp()
    entry = LogEntry(
        timestamp=timestamp,
        user_identity=body.user_identity or ANONYMOUS,
        action="responsibility_accepted",
        extra_info=serialize_extra_info({
            'timestamp': timestamp,
            'userAgent': http_request.headers.get('user-agent'),
        })
    )
    _collect(window, entry)
    return {"success": True, "timestamp": timestamp}


@router.get("/logs")
async def list_actions(
    limit: int = 100,
    window: ActionWindow = Depends(get_action_window)
) -> Dict[str, List[Dict[str, str]]]:
    """
    Return collected actions, most recent first.

    Raises:
        HTTPException: 400 if limit is outside 1-1000
    """
    if limit < 1 or limit > 1000:
        raise HTTPException(
            status_code=status_codes.HTTP_400_BAD_REQUEST,
            detail="limit must be between 1 and 1000"
        )
    return {"logs": [entry.to_wire() for entry in window.recent(limit)]}
