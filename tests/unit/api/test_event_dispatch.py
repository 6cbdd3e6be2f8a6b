"""Tests for outbox event dispatch."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from api.services.event_dispatch import (
    ATS_SYNC,
    NOTIFY,
    EventDispatchError,
    default_consumers,
    dispatch_status_event,
    list_retryable_events,
)
from core.events import STATUS_CHANGED
from database.models.workflow import DomainEvent, DomainEventStatus


class Consumer:
    """Records payloads and fails the first ``failures`` calls."""

    def __init__(self, failures=0):
        self.failures = failures
        self.payloads = []

    async def __call__(self, payload):
        self.payloads.append(payload)
        if self.failures:
            self.failures -= 1
            raise RuntimeError("SMTP unavailable")


@pytest.fixture
def make_event(add, make_response):
    async def _make(**fields):
        response = await make_response()
        fields.setdefault("payload", {"response_id": response.id, "to_status": "in_review"})
        return await add(
            DomainEvent(event_type=STATUS_CHANGED, aggregate_id=response.id, **fields)
        )

    return _make


async def reload_event(session_factory, event_id):
    async with session_factory() as session:
        return await session.get(DomainEvent, event_id)


async def test_all_consumers_succeed(make_event, session_factory):
    event = await make_event()
    notify, sync = Consumer(), Consumer()

    status = await dispatch_status_event(event.id, [(NOTIFY, notify), (ATS_SYNC, sync)])

    assert status == DomainEventStatus.PROCESSED
    assert notify.payloads == [event.payload]
    assert sync.payloads == [event.payload]
    stored = await reload_event(session_factory, event.id)
    assert stored.status == DomainEventStatus.PROCESSED
    assert stored.attempts == 1
    assert stored.completed_handlers == [NOTIFY, ATS_SYNC]
    assert stored.processed_at is not None
    assert stored.claimed_at is not None
    assert stored.last_error is None


async def test_retry_skips_completed_consumers(make_event, session_factory):
    event = await make_event()
    notify, sync = Consumer(), Consumer(failures=1)
    consumers = [(NOTIFY, notify), (ATS_SYNC, sync)]

    with pytest.raises(EventDispatchError) as exc:
        await dispatch_status_event(event.id, consumers)

    assert exc.value.failures == {ATS_SYNC: "SMTP unavailable"}
    failed = await reload_event(session_factory, event.id)
    assert failed.status == DomainEventStatus.FAILED
    assert failed.completed_handlers == [NOTIFY]
    assert failed.last_error == "ats_sync: SMTP unavailable"

    status = await dispatch_status_event(event.id, consumers)

    assert status == DomainEventStatus.PROCESSED
    assert len(notify.payloads) == 1
    assert len(sync.payloads) == 2
    stored = await reload_event(session_factory, event.id)
    assert stored.attempts == 2
    assert stored.completed_handlers == [NOTIFY, ATS_SYNC]


async def test_processed_event_is_left_alone(make_event, session_factory):
    event = await make_event(status=DomainEventStatus.PROCESSED, attempts=1)
    consumer = Consumer()

    status = await dispatch_status_event(event.id, [(NOTIFY, consumer)])

    assert status == DomainEventStatus.PROCESSED
    assert consumer.payloads == []
    assert (await reload_event(session_factory, event.id)).attempts == 1


async def test_concurrent_dispatch_runs_consumers_once(make_event, session_factory):
    event = await make_event()
    release = asyncio.Event()
    calls = []

    async def notify(payload):
        calls.append(payload)
        await release.wait()

    first = asyncio.create_task(dispatch_status_event(event.id, [(NOTIFY, notify)]))
    await asyncio.sleep(0.05)
    second = await dispatch_status_event(event.id, [(NOTIFY, notify)])
    release.set()

    assert second == DomainEventStatus.PROCESSING
    assert await first == DomainEventStatus.PROCESSED
    assert len(calls) == 1
    assert (await reload_event(session_factory, event.id)).attempts == 1


async def test_stale_claim_is_taken_over(make_event, session_factory):
    event = await make_event(
        status=DomainEventStatus.PROCESSING,
        attempts=1,
        claimed_at=datetime.now(timezone.utc) - timedelta(hours=2),
    )
    consumer = Consumer()

    status = await dispatch_status_event(event.id, [(NOTIFY, consumer)])

    assert status == DomainEventStatus.PROCESSED
    assert len(consumer.payloads) == 1
    assert (await reload_event(session_factory, event.id)).attempts == 2


async def test_fresh_claim_is_respected(make_event, session_factory):
    event = await make_event(
        status=DomainEventStatus.PROCESSING,
        attempts=1,
        claimed_at=datetime.now(timezone.utc),
    )
    consumer = Consumer()

    assert await dispatch_status_event(event.id, [(NOTIFY, consumer)]) == (
        DomainEventStatus.PROCESSING
    )
    assert consumer.payloads == []


async def test_missing_event(session_factory):
    assert await dispatch_status_event(4242, []) == DomainEventStatus.FAILED


async def test_list_retryable_events(make_event, session_factory):
    long_ago = datetime(2026, 1, 1, tzinfo=timezone.utc)
    stale_pending = await make_event(created_at=long_ago)
    stale_failed = await make_event(
        status=DomainEventStatus.FAILED, attempts=2, created_at=long_ago, claimed_at=long_ago
    )
    stuck = await make_event(
        status=DomainEventStatus.PROCESSING, attempts=1, created_at=long_ago, claimed_at=long_ago
    )
    # Too young: the publisher or a scheduled retry still owns these
    await make_event()
    await make_event(
        status=DomainEventStatus.FAILED,
        attempts=1,
        created_at=long_ago,
        claimed_at=datetime.now(timezone.utc),
    )
    # Out of attempts, or done
    await make_event(
        status=DomainEventStatus.FAILED, attempts=5, created_at=long_ago, claimed_at=long_ago
    )
    await make_event(status=DomainEventStatus.PROCESSED, attempts=1, created_at=long_ago)

    retryable = await list_retryable_events(max_attempts=5, redispatch_after=900)

    assert sorted(retryable) == sorted([stale_pending.id, stale_failed.id, stuck.id])
    assert len(await list_retryable_events(max_attempts=5, redispatch_after=900, limit=1)) == 1


def test_default_consumer_order():
    assert [name for name, _ in default_consumers()] == [NOTIFY, ATS_SYNC]
