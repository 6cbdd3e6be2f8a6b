"""Periodic automatic status transitions."""

from api.services.candidate_status import StatusWorkflowEngine
from api.services.event_dispatch import dispatch_status_event
from core.config import settings
from core.events import build_publisher
from core.workflow.transitions import build_default_transition_table
from workers.celery_app import celery_app, run_async


@celery_app.task(name="workers.tasks.status_automation.auto_update_candidate_statuses")
def auto_update_candidate_statuses() -> dict:
    """Move analysed pending candidates to review.

    Returns:
        Counts of checked, updated and failed candidates
    """
    engine = StatusWorkflowEngine(
        transitions=build_default_transition_table(),
        publisher=build_publisher(settings.event_dispatch_mode, dispatch_status_event),
    )
    return run_async(engine.auto_update_candidate_statuses())
