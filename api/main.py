"""
FastAPI application initialization and configuration.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import health
from api.routes.v1 import (
    ats_integrations,
    candidate_assessments,
    candidate_profile,
    candidate_status,
    candidates,
    insights,
    responses,
    skill_assessments,
)
from api.services.candidate_status import StatusWorkflowEngine
from api.services.event_dispatch import dispatch_status_event
from core.config import settings
from core.events import InlineEventPublisher, build_publisher
from core.middleware import (
    ErrorHandlingMiddleware,
    StructuredLoggingMiddleware,
    setup_error_handlers,
    setup_logging,
)
from core.workflow.transitions import build_default_transition_table
from database.engine import AsyncSessionLocal, close_db

# Setup structured logging (do this first, before anything else)
setup_logging(
    log_level=settings.log_level,
    json_logs=settings.json_logs,
)

logger = logging.getLogger(__name__)


def build_workflow_engine() -> StatusWorkflowEngine:
    """Engine around the default rule table with the configured event publisher."""
    return StatusWorkflowEngine(
        transitions=build_default_transition_table(),
        session_factory=AsyncSessionLocal,
        publisher=build_publisher(settings.event_dispatch_mode, dispatch_status_event),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    logger.info(f"Starting {settings.app_name} in {settings.app_env} environment")
    app.state.workflow_engine = build_workflow_engine()
    logger.info(
        f"Workflow engine ready with {len(app.state.workflow_engine.transitions)} "
        f"transition rules, {settings.event_dispatch_mode} event dispatch"
    )

    yield

    logger.info(f"Shutting down {settings.app_name}")
    publisher = app.state.workflow_engine.publisher
    if isinstance(publisher, InlineEventPublisher):
        # Let in-flight side effects finish before the pool closes
        await publisher.drain()
    await close_db()


app = FastAPI(
    title=settings.app_name,
    description="Candidate workflow: status transitions, scoring, filtering and ATS sync",
    version="0.1.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Setup error handlers (before middleware)
setup_error_handlers(app, debug=settings.debug)

# Middleware executes in reverse order of registration
# 1. Error handling (outermost, catches everything)
app.add_middleware(ErrorHandlingMiddleware, debug=settings.debug)

# 2. Structured request logging
app.add_middleware(
    StructuredLoggingMiddleware,
    log_request_body=settings.log_request_body,
    max_body_size=settings.log_max_body_size,
)

# 3. CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Health check routes
app.include_router(health.router, tags=["Health"])

# API v1 routes
for router in (
    candidate_status.router,
    candidates.router,
    candidate_assessments.router,
    skill_assessments.router,
    candidate_profile.router,
    responses.router,
    ats_integrations.router,
    ats_integrations.sync_router,
    insights.router,
):
    app.include_router(router, prefix=settings.api_v1_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
