"""
Module: push.py
Description: Push delivery of log entries to a collector endpoint.

Implements a single HTTP POST attempt with timeout handling. Retry and
fallback decisions are made by the caller.
"""

from typing import Optional

import httpx

from actionlog.models.entry import LogEntry
from actionlog.utils.logger import get_logger

logger = get_logger(__name__)


class PushDeliveryClient:
    """
    HTTP client for pushing log entries to one collector.

    Handles a delivery attempt with proper timeout and error handling
    for network issues. Non-2xx responses and network failures both
    count as a failed attempt.
    """

    def __init__(
        self,
        endpoint_url: str,
        timeout_seconds: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize push delivery client.

        Args:
            endpoint_url: Collector URL receiving the POST
            timeout_seconds: HTTP timeout in seconds
            http_client: Shared AsyncClient; a short-lived client is
                opened per attempt when omitted

        Raises:
            ValueError: If endpoint_url is invalid
        """
        if not endpoint_url or not isinstance(endpoint_url, str):
            raise ValueError("endpoint_url must be a non-empty string")
        if not endpoint_url.startswith(('http://', 'https://')):
            raise ValueError("endpoint_url must be a valid HTTP/HTTPS URL")

        self.endpoint_url = endpoint_url
        self.timeout = httpx.Timeout(timeout_seconds, connect=timeout_seconds)
        self._http_client = http_client

        logger.debug(
            "Push delivery client initialized",
            endpoint_url=endpoint_url,
            timeout_seconds=timeout_seconds
        )

    async def deliver_entry(self, entry: LogEntry) -> bool:
        """
        Deliver a log entry via HTTP POST.

        Args:
            entry: LogEntry to deliver

        Returns:
            True if the collector answered with a 2xx status, False otherwise
        """
        if not isinstance(entry, LogEntry):
            raise ValueError("entry must be a LogEntry instance")

        if self._http_client is not None:
            return await self._post(self._http_client, entry)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._post(client, entry)

    async def _post(self, client: httpx.AsyncClient, entry: LogEntry) -> bool:
        try:
            logger.debug(
                "Attempting log delivery",
                action=entry.action,
                endpoint_url=self.endpoint_url
            )

            response = await client.post(
                self.endpoint_url,
                json=entry.to_wire(),
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout
            )

            response.raise_for_status()

            logger.debug(
                "Log entry delivered",
                action=entry.action,
                endpoint_url=self.endpoint_url,
                status_code=response.status_code
            )

            return True

        except httpx.TimeoutException:
            logger.warning(
                "Log delivery timeout",
                action=entry.action,
                endpoint_url=self.endpoint_url
            )
            return False

        except httpx.HTTPStatusError as e:
            logger.warning(
                "Log delivery HTTP error",
                action=entry.action,
                endpoint_url=self.endpoint_url,
                status_code=e.response.status_code,
                response=e.response.text[:500]
            )
            return False

        except httpx.HTTPError as e:
            logger.warning(
                "Log delivery network error",
                action=entry.action,
                endpoint_url=self.endpoint_url,
                error=str(e)
            )
            return False
