"""Celery configuration for candidate workflow background tasks."""

from kombu import Exchange, Queue

from core.config import settings

# Broker configuration (Redis)
broker_url = str(settings.celery_broker_url)
result_backend = str(settings.celery_result_backend)

# Serialization
task_serializer = "json"
accept_content = ["json"]
result_serializer = "json"
timezone = "UTC"
enable_utc = True

# Task execution settings
task_track_started = True
task_acks_late = True
task_time_limit = 5 * 60  # 5 minutes hard limit
task_soft_time_limit = 4 * 60  # 4 minutes soft limit

# Worker settings
worker_prefetch_multiplier = 1
worker_max_tasks_per_child = 1000

# Queue configuration with routing
default_exchange = Exchange("futuristic_hr", type="direct")
task_default_queue = "default"
task_queues = (
    Queue("default", exchange=default_exchange, routing_key="default"),
    Queue("status_events", exchange=default_exchange, routing_key="status_events"),
)

task_routes = {
    "workers.tasks.status_events.*": {"queue": "status_events"},
}

# Periodic work
beat_schedule = {
    "redispatch-status-events": {
        "task": "workers.tasks.status_events.redispatch_pending_events",
        "schedule": 300.0,
    },
    "auto-update-candidate-statuses": {
        "task": "workers.tasks.status_automation.auto_update_candidate_statuses",
        "schedule": 900.0,
    },
}

# Result backend settings
result_expires = 3600  # Results expire after 1 hour
