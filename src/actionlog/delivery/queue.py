"""
Module: delivery/queue.py
Description: At-least-once delivery queue for user action logs.

Attempts immediate delivery of each log entry to the primary collector,
falls back once to a secondary collector, retries with exponential
backoff, and persists whatever could not be delivered for replay when
connectivity returns.

Key Components:
- DeliveryQueue.record(): producer entry point
- DeliveryQueue.send(): retry/fallback protocol, queues on exhaustion
- DeliveryQueue.drain_queue(): replay of persisted entries
- notify_online()/notify_offline(): connectivity hooks for the host

Dependencies: httpx, tenacity, pydantic, asyncio, json
"""

import asyncio
import json
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from actionlog.config.settings import settings
from actionlog.delivery.errors import (
    DeliveryError,
    FallbackDeliveryError,
    FallbackNotConfiguredError,
)
from actionlog.delivery.push import PushDeliveryClient
from actionlog.delivery.retry import SleepFn, build_retrying
from actionlog.models.entry import (
    DeliveryResult,
    DrainReport,
    LogEntry,
    QueueEndpoints,
    QueueStatus,
)
from actionlog.storage.local import FileStorage, StorageError
from actionlog.utils.logger import get_logger

logger = get_logger(__name__)


class DeliveryQueue:
    """
    Client-side log shipping queue.

    One instance is created per process and handed to every producer.
    All state lives on the instance; the persisted snapshot under
    storage_key is rewritten in full after every mutation.

    Attributes:
        log_endpoint: Primary collector URL
        fallback_endpoint: Optional secondary collector URL
        max_retries: Primary retries after the first attempt
        retry_delay: Base backoff delay in seconds
        drain_pacing: Pause between entries during a drain
        storage_key: Key of the persisted queue

    Example:
        >>> async with DeliveryQueue("https://collector.example/api/log-action") as queue:
        ...     await queue.record("user@example.com", "page_visit", {"page": "/learning-guide"})
    """

    def __init__(
        self,
        log_endpoint: Optional[str] = None,
        fallback_endpoint: Optional[str] = None,
        *,
        storage=None,
        storage_key: Optional[str] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        drain_pacing: Optional[float] = None,
        startup_drain_delay: Optional[float] = None,
        timeout_seconds: Optional[float] = None,
        online: bool = True,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[SleepFn] = None
    ):
        """
        Initialize the queue and load any persisted entries.

        Unset arguments fall back to the values in settings.

        Raises:
            ValueError: If an endpoint URL is invalid
        """
        self.log_endpoint = log_endpoint or settings.log_endpoint
        self.fallback_endpoint = fallback_endpoint
        self.storage_key = storage_key or settings.queue_key
        self.max_retries = settings.max_retries if max_retries is None else max_retries
        self.retry_delay = settings.retry_delay if retry_delay is None else retry_delay
        self.drain_pacing = settings.drain_pacing if drain_pacing is None else drain_pacing
        self.startup_drain_delay = (
            settings.startup_drain_delay if startup_drain_delay is None else startup_drain_delay
        )
        timeout = settings.delivery_timeout if timeout_seconds is None else timeout_seconds

        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        for url in filter(None, (self.log_endpoint, self.fallback_endpoint)):
            if not url.startswith(('http://', 'https://')):
                raise ValueError(f"{url!r} is not a valid HTTP/HTTPS URL")

        self._storage = storage if storage is not None else FileStorage(settings.queue_dir)
        self._sleep = sleep or asyncio.sleep
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=timeout)
        )

        self._primary = PushDeliveryClient(self.log_endpoint, timeout, self._http_client)
        self._fallback = (
            PushDeliveryClient(self.fallback_endpoint, timeout, self._http_client)
            if self.fallback_endpoint else None
        )

        self._online = online
        self._draining = False
        self._generation = 0
        self._startup_task: Optional[asyncio.Task] = None
        self._queue: List[LogEntry] = self._load_queue()

        logger.info(
            "Delivery queue initialized",
            log_endpoint=self.log_endpoint,
            fallback_endpoint=self.fallback_endpoint,
            queued_count=len(self._queue),
            online=online
        )

    async def __aenter__(self) -> "DeliveryQueue":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # Producer interface

    async def record(
        self,
        user_identity: Optional[str],
        action: str,
        extra_info: Any = None
    ) -> DeliveryResult:
        """
        Log a user action with retry and offline queueing.

        Args:
            user_identity: User identifier, "anonymous" when None or empty
            action: Event type tag
            extra_info: JSON-serializable payload, frozen immediately

        Returns:
            DeliveryResult: delivered, delivered via fallback, or queued
        """
        entry = LogEntry.create(
            user_identity,
            "unknown" if action is None else str(action),
            extra_info
        )

        if self._online:
            return await self.send(entry)
        return self._enqueue(entry)

    async def send(self, entry: LogEntry) -> DeliveryResult:
        """
        Deliver one entry, queueing it when every attempt fails.

        Returns:
            DeliveryResult; never raises for delivery problems
        """
        result = await self._deliver(entry)
        if result is None:
            return self._enqueue(entry)
        return result

    async def send_to_fallback(self, entry: LogEntry) -> DeliveryResult:
        """
        Deliver one entry straight to the fallback collector.

        Raises:
            FallbackNotConfiguredError: If no fallback endpoint is set
            FallbackDeliveryError: If the fallback collector rejects the entry
        """
        if self._fallback is None:
            raise FallbackNotConfiguredError("Fallback endpoint not configured")

        if await self._fallback.deliver_entry(entry):
            logger.info(
                "Log sent to fallback endpoint",
                action=entry.action,
                fallback_endpoint=self.fallback_endpoint
            )
            return DeliveryResult.fallback(entry)

        raise FallbackDeliveryError(
            f"Fallback endpoint {self.fallback_endpoint} did not accept the entry"
        )

    async def _attempt(self, entry: LogEntry, attempt_index: int) -> DeliveryResult:
        if await self._primary.deliver_entry(entry):
            return DeliveryResult.primary(entry)

        # The fallback is only consulted after the very first primary failure.
        if attempt_index == 0 and self._fallback is not None:
            try:
                return await self.send_to_fallback(entry)
            except DeliveryError as e:
                logger.warning(
                    "Fallback logging failed",
                    action=entry.action,
                    error=str(e)
                )
                raise

        raise DeliveryError(
            f"Primary endpoint attempt {attempt_index + 1} failed"
        )

    async def _deliver(self, entry: LogEntry) -> Optional[DeliveryResult]:
        """Run the retry policy for one entry; None when it was not delivered."""
        retrying = build_retrying(self.max_retries, self.retry_delay, self._sleep)
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._attempt(entry, attempt.retry_state.attempt_number - 1)
        except DeliveryError as e:
            logger.warning(
                "Log delivery attempts exhausted",
                action=entry.action,
                attempts=self.max_retries + 1,
                error=str(e)
            )
        except Exception as e:
            logger.error(
                "Unexpected error delivering log entry",
                action=entry.action,
                error=str(e),
                error_type=type(e).__name__
            )
        return None

    def _enqueue(self, entry: LogEntry) -> DeliveryResult:
        self._queue.append(entry)
        self._save_queue()
        logger.info(
            "Log entry queued for offline processing",
            action=entry.action,
            queued_count=len(self._queue)
        )
        return DeliveryResult.pending(entry)

    # Replay

    async def drain_queue(self) -> Optional[DrainReport]:
        """
        Attempt delivery of every queued entry, in order.

        Ignored (returns None) while another drain runs, when the queue is
        empty, or while offline. Entries that still fail keep their relative
        order, ahead of entries queued while the drain was running.

        Returns:
            DrainReport for the pass, or None when nothing ran
        """
        if self._draining or not self._queue or not self._online:
            return None

        self._draining = True
        generation = self._generation
        snapshot = list(self._queue)
        still_failed: List[LogEntry] = []

        logger.info("Processing queued log entries", queued_count=len(snapshot))

        try:
            for index, entry in enumerate(snapshot):
                if index and self.drain_pacing:
                    await self._sleep(self.drain_pacing)

                if await self._deliver(entry) is None:
                    still_failed.append(entry)

            if generation == self._generation:
                self._queue = still_failed + self._queue[len(snapshot):]
                self._save_queue()
            else:
                logger.info("Queue cleared during drain, keeping cleared state")
        finally:
            self._draining = False

        report = DrainReport(
            attempted=len(snapshot),
            delivered=len(snapshot) - len(still_failed),
            still_failed=len(still_failed),
            remaining=len(self._queue)
        )
        logger.info(
            "Processed queued log entries",
            delivered=report.delivered,
            still_failed=report.still_failed,
            remaining=report.remaining
        )
        return report

    # Connectivity hooks

    async def notify_online(self) -> Optional[DrainReport]:
        """Mark the client reachable and replay the queue."""
        if not self._online:
            logger.info("Connection restored, processing queued logs")
        self._online = True
        return await self.drain_queue()

    def notify_offline(self) -> None:
        """Mark the client unreachable; new entries go straight to the queue."""
        if self._online:
            logger.info("Connection lost, queueing logs for later")
        self._online = False

    def start(self) -> Optional[asyncio.Task]:
        """
        Schedule one drain for entries loaded from storage.

        Must be called from a running event loop.
        """
        if self._startup_task is not None or not self._online or not self._queue:
            return None
        self._startup_task = asyncio.get_running_loop().create_task(self._startup_drain())
        return self._startup_task

    async def _startup_drain(self) -> None:
        await self._sleep(self.startup_drain_delay)
        await self.drain_queue()

    async def close(self) -> None:
        """Cancel a pending startup drain and release the HTTP client."""
        task, self._startup_task = self._startup_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if self._owns_http_client:
            await self._http_client.aclose()

    # Introspection and operator actions

    @property
    def entries(self) -> List[LogEntry]:
        """Copy of the queued entries, oldest first."""
        return list(self._queue)

    def get_status(self) -> QueueStatus:
        return QueueStatus(
            online=self._online,
            draining=self._draining,
            queued_count=len(self._queue),
            endpoints=QueueEndpoints(
                primary=self.log_endpoint,
                fallback=self.fallback_endpoint
            )
        )

    def clear_queue(self) -> None:
        """Drop every queued entry (operator reset)."""
        self._queue = []
        self._generation += 1
        self._save_queue()
        logger.info("Log queue cleared")

    # Persistence

    def _save_queue(self) -> None:
        try:
            payload = json.dumps([entry.to_wire() for entry in self._queue])
            self._storage.set_item(self.storage_key, payload)
        except (StorageError, TypeError, ValueError) as e:
            logger.warning(
                "Failed to save log queue",
                storage_key=self.storage_key,
                queued_count=len(self._queue),
                error=str(e)
            )

    def _load_queue(self) -> List[LogEntry]:
        try:
            saved = self._storage.get_item(self.storage_key)
            if not saved:
                return []

            data = json.loads(saved)
            if not isinstance(data, list):
                raise ValueError("persisted queue is not a JSON array")

            queue = [LogEntry.model_validate(item) for item in data]
            logger.info(
                "Loaded queued log entries from storage",
                queued_count=len(queue),
                storage_key=self.storage_key
            )
            return queue

        except (StorageError, ValidationError, ValueError) as e:
            logger.warning(
                "Failed to load log queue, starting empty",
                storage_key=self.storage_key,
                error=str(e)
            )
            return []
