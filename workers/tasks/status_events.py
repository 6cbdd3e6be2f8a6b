"""Outbox event tasks for candidate status changes."""

import logging

from celery import Task

from api.services.event_dispatch import (
    EventDispatchError,
    dispatch_status_event,
    list_retryable_events,
)
from core.config import settings
from workers.celery_app import celery_app, run_async

logger = logging.getLogger(__name__)


@celery_app.task(name="workers.tasks.status_events.process_status_event", bind=True)
def process_status_event(self: Task, event_id: int) -> dict:
    """Run the consumers of one status event.

    Args:
        event_id: Outbox row id

    Returns:
        Dictionary with the event's final status
    """
    try:
        status = run_async(dispatch_status_event(event_id))
    except EventDispatchError as e:
        # Retry with exponential backoff; consumers that succeeded are skipped
        raise self.retry(
            exc=e,
            countdown=2 ** self.request.retries * 60,
            max_retries=settings.event_max_attempts - 1,
        )
    return {"event_id": event_id, "status": status.value}


@celery_app.task(name="workers.tasks.status_events.redispatch_pending_events")
def redispatch_pending_events() -> dict:
    """Requeue quiet events that never ran, failed, or lost their dispatcher.

    Returns:
        Number of events queued
    """
    event_ids = run_async(list_retryable_events(settings.event_max_attempts))
    for event_id in event_ids:
        process_status_event.delay(event_id)
    if event_ids:
        logger.info(f"Requeued {len(event_ids)} status events")
    return {"queued": len(event_ids)}
