"""Consumers of ``candidate.status_changed`` outbox events.

``dispatch_status_event`` runs each consumer once per event: a consumer that
already succeeded is recorded on the event row and skipped when the event is
retried.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional
import logging

import httpx
from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from api.services import ats as ats_service
from core.config import settings
from core.notifications import StatusNotifier
from database.engine import AsyncSessionLocal
from database.models.workflow import DomainEvent, DomainEventStatus

logger = logging.getLogger(__name__)

Consumer = Callable[[Dict[str, Any]], Awaitable[Any]]

NOTIFY = "notify"
ATS_SYNC = "ats_sync"


class EventDispatchError(Exception):
    """At least one consumer failed; the event stays retryable."""

    def __init__(self, event_id: int, failures: Dict[str, str]):
        super().__init__(
            f"Event {event_id} failed in {', '.join(sorted(failures))}"
        )
        self.event_id = event_id
        self.failures = failures


def default_consumers(
    notifier: Optional[StatusNotifier] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[tuple[str, Consumer]]:
    """Consumers in the order they run: notifications first, then ATS sync."""
    notifier = notifier or StatusNotifier()

    async def sync_status(payload: Dict[str, Any]) -> None:
        # Provider failures land in the sync log, they are not consumer failures
        await ats_service.sync_status_change(
            payload["response_id"], payload["to_status"], transport=transport
        )

    return [(NOTIFY, notifier.notify), (ATS_SYNC, sync_status)]


async def _claim(session: AsyncSession, event: DomainEvent) -> bool:
    """
    Take the event for this dispatcher.

    Compare-and-swap on ``attempts``: of two dispatchers that read the same
    row only one moves it to ``processing``. A claim older than
    ``event_redispatch_after`` is treated as abandoned and can be taken over.
    """
    now = datetime.now(timezone.utc)
    stale_before = now - timedelta(seconds=settings.event_redispatch_after)
    seen = event.attempts or 0
    result = await session.execute(
        update(DomainEvent)
        .where(
            DomainEvent.id == event.id,
            DomainEvent.attempts == seen,
            or_(
                DomainEvent.status.in_(
                    [DomainEventStatus.PENDING, DomainEventStatus.FAILED]
                ),
                and_(
                    DomainEvent.status == DomainEventStatus.PROCESSING,
                    DomainEvent.claimed_at < stale_before,
                ),
            ),
        )
        .values(status=DomainEventStatus.PROCESSING, attempts=seen + 1, claimed_at=now)
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    if result.rowcount != 1:
        return False
    await session.refresh(event)
    return True


async def dispatch_status_event(
    event_id: int,
    consumers: Optional[List[tuple[str, Consumer]]] = None,
) -> DomainEventStatus:
    """
    Run the consumers of one status event and record the outcome.

    Returns:
        The event's new status. Already processed events are left alone, and
        ``PROCESSING`` comes back when another dispatcher holds the event.

    Raises:
        EventDispatchError: a consumer failed; the event is marked failed
    """
    consumers = consumers if consumers is not None else default_consumers()

    async with AsyncSessionLocal() as session:
        event = await session.get(DomainEvent, event_id)
        if event is None:
            logger.warning(f"Domain event {event_id} not found")
            return DomainEventStatus.FAILED
        if event.status == DomainEventStatus.PROCESSED:
            return event.status
        if not await _claim(session, event):
            logger.info(
                f"Event {event_id} is being dispatched elsewhere, skipping",
                extra={"event_id": event_id},
            )
            return DomainEventStatus.PROCESSING

        payload = dict(event.payload)
        completed = list(event.completed_handlers or [])
        failures: Dict[str, str] = {}

        for name, consumer in consumers:
            if name in completed:
                continue
            try:
                await consumer(payload)
            except Exception as e:
                logger.error(
                    f"Consumer {name} failed for event {event_id}: {e}",
                    exc_info=True,
                    extra={"event_id": event_id},
                )
                failures[name] = str(e) or e.__class__.__name__
            else:
                completed.append(name)

        event.completed_handlers = completed
        if failures:
            event.status = DomainEventStatus.FAILED
            event.last_error = "; ".join(f"{k}: {v}" for k, v in sorted(failures.items()))
        else:
            event.status = DomainEventStatus.PROCESSED
            event.last_error = None
            event.processed_at = datetime.now(timezone.utc)
        await session.commit()
        status = event.status

    if failures:
        raise EventDispatchError(event_id, failures)

    logger.info(f"Event {event_id} processed", extra={"event_id": event_id})
    return status


async def list_retryable_events(
    max_attempts: int,
    redispatch_after: Optional[int] = None,
    limit: int = 100,
) -> List[int]:
    """
    Ids of events to hand out again, oldest first.

    Only events with attempts left that have been quiet for
    ``redispatch_after`` seconds: pending ones since creation, failed or
    claimed ones since their last claim. Younger events are still owned by
    the publisher or by a scheduled task retry.
    """
    if redispatch_after is None:
        redispatch_after = settings.event_redispatch_after
    cutoff = datetime.now(timezone.utc) - timedelta(seconds=redispatch_after)

    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(DomainEvent.id)
            .where(
                DomainEvent.attempts < max_attempts,
                or_(
                    and_(
                        DomainEvent.status == DomainEventStatus.PENDING,
                        DomainEvent.created_at < cutoff,
                    ),
                    and_(
                        DomainEvent.status.in_(
                            [DomainEventStatus.FAILED, DomainEventStatus.PROCESSING]
                        ),
                        DomainEvent.claimed_at < cutoff,
                    ),
                ),
            )
            .order_by(DomainEvent.created_at, DomainEvent.id)
            .limit(limit)
        )
        return list(result.scalars().all())
