"""
Module: delivery/connectivity.py
Description: Connectivity monitor driving the queue's online/offline hooks.

Polls a probe URL and calls DeliveryQueue.notify_online() or
notify_offline() on state transitions only.
"""

import asyncio
from typing import Optional

import httpx

from actionlog.config.settings import settings
from actionlog.delivery.queue import DeliveryQueue
from actionlog.delivery.retry import SleepFn
from actionlog.utils.logger import get_logger

logger = get_logger(__name__)


class ConnectivityMonitor:
    """
    Periodic reachability probe for a DeliveryQueue.

    Attributes:
        probe_url: URL that answers 2xx while the collector is reachable
        interval: Seconds between probes
    """

    def __init__(
        self,
        queue: DeliveryQueue,
        probe_url: Optional[str] = None,
        interval: Optional[float] = None,
        timeout_seconds: float = 5.0,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[SleepFn] = None
    ):
        probe_url = probe_url or settings.connectivity_probe_url
        interval = settings.connectivity_interval if interval is None else interval
        if not probe_url or not probe_url.startswith(('http://', 'https://')):
            raise ValueError("probe_url must be a valid HTTP/HTTPS URL")
        if interval <= 0:
            raise ValueError("interval must be positive")

        self.queue = queue
        self.probe_url = probe_url
        self.interval = interval
        self._timeout = httpx.Timeout(timeout_seconds)
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=self._timeout)
        self._sleep = sleep or asyncio.sleep
        self._online = queue.get_status().online
        self._task: Optional[asyncio.Task] = None

    async def probe(self) -> bool:
        """True when the probe URL answers with a 2xx status."""
        try:
            response = await self._http_client.get(self.probe_url, timeout=self._timeout)
            return response.is_success
        except httpx.HTTPError as e:
            logger.debug("Connectivity probe failed", probe_url=self.probe_url, error=str(e))
            return False

    async def check(self) -> bool:
        """
        Probe once and forward a state change to the queue.

        Returns:
            Current reachability
        """
        reachable = await self.probe()
        if reachable != self._online:
            self._online = reachable
            logger.info("Connectivity changed", online=reachable, probe_url=self.probe_url)
            if reachable:
                await self.queue.notify_online()
            else:
                self.queue.notify_offline()
        return reachable

    async def run(self) -> None:
        """Probe forever; cancel the task to stop."""
        while True:
            await self.check()
            await self._sleep(self.interval)

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run())
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if self._owns_http_client:
            await self._http_client.aclose()
