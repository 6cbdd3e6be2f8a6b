"""Tests for Celery tasks with the async work stubbed out."""

from unittest.mock import Mock

from api.services.event_dispatch import EventDispatchError
from database.models.workflow import DomainEventStatus
from workers.tasks import status_automation, status_events


class FakeRunner:
    """Stand-in for ``run_async`` returning or raising a fixed outcome."""

    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = 0

    def __call__(self, coro):
        coro.close()
        self.calls += 1
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def test_process_status_event(monkeypatch):
    monkeypatch.setattr(status_events, "run_async", FakeRunner(DomainEventStatus.PROCESSED))

    result = status_events.process_status_event.apply(args=[7])

    assert result.successful()
    assert result.get() == {"event_id": 7, "status": "processed"}


def test_failed_event_is_retried(monkeypatch):
    runner = FakeRunner(EventDispatchError(7, {"notify": "SMTP unavailable"}))
    monkeypatch.setattr(status_events, "run_async", runner)

    result = status_events.process_status_event.apply(args=[7])

    assert result.failed()
    assert runner.calls > 1


def test_redispatch_pending_events(monkeypatch):
    monkeypatch.setattr(status_events, "run_async", FakeRunner([3, 4]))
    delay = Mock()
    monkeypatch.setattr(status_events.process_status_event, "delay", delay)

    assert status_events.redispatch_pending_events() == {"queued": 2}
    assert [c.args for c in delay.call_args_list] == [(3,), (4,)]


def test_auto_update_task(monkeypatch):
    summary = {"checked": 4, "updated": 1, "failed": 0}
    monkeypatch.setattr(status_automation, "run_async", FakeRunner(summary))

    assert status_automation.auto_update_candidate_statuses() == summary


def test_beat_schedule_registers_tasks():
    from workers.celery_app import celery_app

    scheduled = {entry["task"] for entry in celery_app.conf.beat_schedule.values()}
    assert scheduled <= set(celery_app.tasks)
