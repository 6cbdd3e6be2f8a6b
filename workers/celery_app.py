"""Celery app factory."""

import asyncio
from typing import Any, Awaitable

from celery import Celery

from database.engine import db_engine

celery_app = Celery("futuristic_hr")
celery_app.config_from_object("workers.celery_config")


def run_async(coro: Awaitable[Any]) -> Any:
    """Run a coroutine from a task. Pooled connections are tied to the loop,
    so the pool is released before the loop closes."""

    async def runner():
        try:
            return await coro
        finally:
            await db_engine.dispose()

    return asyncio.run(runner())


# Register tasks when the app is imported
import workers.tasks.status_events  # noqa: E402, F401
import workers.tasks.status_automation  # noqa: E402, F401
