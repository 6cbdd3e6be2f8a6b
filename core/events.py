"""
Post-commit domain event publishing.

The workflow engine writes an outbox row in the same transaction as the
status change and, after commit, passes the row id to a publisher. The
publisher decides where the consumers run.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Literal, Set

logger = logging.getLogger(__name__)

STATUS_CHANGED = "candidate.status_changed"

EventHandler = Callable[[int], Awaitable[object]]


class EventPublisher(ABC):
    """Hands a committed outbox event to its consumers."""

    @abstractmethod
    async def publish(self, event_id: int) -> None:
        """Publish one event. Implementations must not raise."""


class InlineEventPublisher(EventPublisher):
    """
    Run the consumers in-process after commit, in a background task.

    ``publish`` returns as soon as the task is scheduled, so a slow mail
    server or ATS never holds up the status change that emitted the event.
    """

    def __init__(self, handler: EventHandler):
        self.handler = handler
        # Strong references; the event loop only keeps weak ones
        self._tasks: Set[asyncio.Task] = set()

    async def publish(self, event_id: int) -> None:
        task = asyncio.create_task(self._run(event_id), name=f"status-event-{event_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, event_id: int) -> None:
        try:
            await self.handler(event_id)
        except Exception as e:
            # The event row keeps its failed state for a later retry
            logger.error(
                f"Inline dispatch of event {event_id} failed: {e}",
                exc_info=True,
                extra={"event_id": event_id},
            )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every scheduled dispatch to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class CeleryEventPublisher(EventPublisher):
    """Enqueue the event for a Celery worker."""

    async def publish(self, event_id: int) -> None:
        from workers.tasks.status_events import process_status_event

        try:
            process_status_event.delay(event_id)
        except Exception as e:
            logger.error(
                f"Could not enqueue event {event_id}: {e}",
                extra={"event_id": event_id},
            )


def build_publisher(
    mode: Literal["inline", "celery"], handler: EventHandler
) -> EventPublisher:
    """Pick the publisher for the configured dispatch mode."""
    if mode == "celery":
        return CeleryEventPublisher()
    return InlineEventPublisher(handler)
