"""
Module: conftest.py
Description: Shared pytest fixtures for action log shipper tests.

Provides in-memory storage, a recording sleep replacement so backoff
and pacing never actually wait, and a factory for DeliveryQueue
instances wired to mocked collector URLs (pytest-httpx).
"""

import json
from typing import List

import pytest

from actionlog.delivery.queue import DeliveryQueue
from actionlog.models.entry import LogEntry
from actionlog.storage.local import MemoryStorage
from actionlog.utils.logger import configure_logging

PRIMARY_URL = "https://collector.test/api/log-action"
FALLBACK_URL = "https://sheets.test/macros/exec"
QUEUE_KEY = "cyb_log_queue"


class SleepRecorder:
    """Async stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []
        self.hook = None

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self.hook is not None:
            await self.hook(delay)

    @property
    def total(self) -> float:
        return sum(self.delays)


@pytest.fixture(autouse=True)
def uncached_logging():
    """Resolve sys.stdout on every log call so captured streams never go stale."""
    configure_logging(cache=False)


@pytest.fixture
def storage():
    """Provide empty in-memory queue storage."""
    return MemoryStorage()


@pytest.fixture
def sleeper():
    """Provide a recording sleep so tests never wait on backoff."""
    return SleepRecorder()


@pytest.fixture
async def make_queue(storage, sleeper):
    """
    Provide a DeliveryQueue factory.

    Queues share the storage and sleeper fixtures unless overridden and
    are closed at teardown.
    """
    created = []

    def factory(**overrides) -> DeliveryQueue:
        options = {
            'log_endpoint': PRIMARY_URL,
            'storage': storage,
            'storage_key': QUEUE_KEY,
            'max_retries': 3,
            'retry_delay': 1.0,
            'drain_pacing': 0.1,
            'startup_drain_delay': 1.0,
            'sleep': sleeper,
        }
        options.update(overrides)
        queue = DeliveryQueue(**options)
        created.append(queue)
        return queue

    yield factory

    for queue in created:
        await queue.close()


@pytest.fixture
def sample_entries():
    """Three distinct entries in creation order."""
    return [
        LogEntry.create("alice@example.com", "page_visit", {"page": "/learning-guide"}),
        LogEntry.create("bob@example.com", "ai_query", {"query": "What is nmap?"}),
        LogEntry.create(None, "responsibility_accepted", {}),
    ]


def persisted(storage: MemoryStorage) -> list:
    """Decode the persisted queue snapshot."""
    raw = storage.get_item(QUEUE_KEY)
    return [] if raw is None else json.loads(raw)
