"""Tests for post-commit event publishers."""

import asyncio
import logging
import time
from unittest.mock import AsyncMock, patch

from core.events import (
    CeleryEventPublisher,
    InlineEventPublisher,
    build_publisher,
)


class TestInlinePublisher:

    async def test_runs_handler(self):
        handler = AsyncMock()
        publisher = InlineEventPublisher(handler)

        await publisher.publish(7)
        await publisher.drain()

        handler.assert_awaited_once_with(7)
        assert publisher.pending == 0

    async def test_publish_does_not_wait_for_handler(self):
        release = asyncio.Event()

        async def slow_handler(event_id):
            await release.wait()

        publisher = InlineEventPublisher(slow_handler)
        started = time.monotonic()
        await publisher.publish(7)

        assert time.monotonic() - started < 0.5
        assert publisher.pending == 1
        release.set()
        await publisher.drain()
        assert publisher.pending == 0

    async def test_handler_failure_is_logged(self, caplog):
        handler = AsyncMock(side_effect=RuntimeError("smtp down"))
        publisher = InlineEventPublisher(handler)

        with caplog.at_level(logging.ERROR, logger="core.events"):
            await publisher.publish(7)
            await publisher.drain()

        handler.assert_awaited_once()
        [record] = [r for r in caplog.records if r.name == "core.events"]
        assert "smtp down" in record.getMessage()
        assert record.event_id == 7


class TestCeleryPublisher:

    async def test_enqueues_task(self):
        with patch("workers.tasks.status_events.process_status_event.delay") as delay:
            await CeleryEventPublisher().publish(11)
        delay.assert_called_once_with(11)

    async def test_broker_failure_is_absorbed(self):
        with patch(
            "workers.tasks.status_events.process_status_event.delay",
            side_effect=ConnectionError("broker down"),
        ):
            await CeleryEventPublisher().publish(11)


def test_build_publisher():
    handler = AsyncMock()
    assert isinstance(build_publisher("inline", handler), InlineEventPublisher)
    assert isinstance(build_publisher("celery", handler), CeleryEventPublisher)
