"""
Candidate status workflow endpoints.

Status changes, the approval queue, history, pipeline metrics and AI status
recommendations.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Request
from fastapi.responses import JSONResponse

from api.dependencies import get_current_user, get_workflow_engine, require_organization
from api.schemas.workflow import (
    ApprovalRequest,
    AutoUpdateSummary,
    RejectionRequest,
    StatusChangeResponse,
    StatusHistoryEntry,
    StatusMetrics,
    StatusRecommendation,
    StatusUpdateRequest,
)
from api.services.candidate_status import StatusChangeResult, StatusWorkflowEngine
from core.exceptions import http_status_for
from core.middleware.error_handling import error_envelope
from core.security import AuditAction, CurrentUser, ResourceType, audit_log

router = APIRouter(prefix="/candidate-status", tags=["candidate-status"])


def _result_response(request: Request, result: StatusChangeResult) -> JSONResponse:
    """200 when applied, 202 when waiting for approval, mapped error otherwise."""
    if result.success:
        return JSONResponse(
            status_code=202 if result.requires_approval else 200,
            content=StatusChangeResponse(
                success=True,
                message=result.message,
                requires_approval=result.requires_approval,
                request_id=result.request_id,
            ).model_dump(),
        )
    return JSONResponse(
        status_code=http_status_for(result.error_code),
        content=error_envelope(
            result.error_code or "WORKFLOW_ERROR",
            result.message or "Status change failed",
            str(request.url.path),
            request.method,
        ),
    )


@router.put(
    "",
    summary="Update Candidate Status",
    description="Apply a status transition, or file it for approval when the rule requires one.",
    response_model=StatusChangeResponse,
    responses={202: {"model": StatusChangeResponse}},
)
@audit_log(AuditAction.STATUS_CHANGE, ResourceType.CANDIDATE)
async def update_candidate_status(
    request: Request,
    body: StatusUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    engine: StatusWorkflowEngine = Depends(get_workflow_engine),
):
    result = await engine.update_candidate_status(
        body.response_id,
        body.new_status,
        changed_by=current_user.user_id,
        reason=body.reason,
    )
    return _result_response(request, result)


@router.post(
    "/requests/{request_id}/approve",
    summary="Approve Status Change",
    response_model=StatusChangeResponse,
)
@audit_log(AuditAction.APPROVE, ResourceType.STATUS_CHANGE_REQUEST, "request_id")
async def approve_status_change(
    request: Request,
    body: ApprovalRequest,
    request_id: int = Path(..., ge=1, description="Status change request ID"),
    current_user: CurrentUser = Depends(require_organization),
    engine: StatusWorkflowEngine = Depends(get_workflow_engine),
):
    """Approve a pending request; the transition is re-validated against the current status."""
    result = await engine.approve_status_change(
        request_id,
        approved_by=current_user.user_id,
        comments=body.comments,
        organization_id=current_user.organization_id,
    )
    return _result_response(request, result)


@router.post(
    "/requests/{request_id}/reject",
    summary="Reject Status Change",
    response_model=StatusChangeResponse,
)
@audit_log(AuditAction.REJECT, ResourceType.STATUS_CHANGE_REQUEST, "request_id")
async def reject_status_change(
    request: Request,
    body: RejectionRequest,
    request_id: int = Path(..., ge=1, description="Status change request ID"),
    current_user: CurrentUser = Depends(require_organization),
    engine: StatusWorkflowEngine = Depends(get_workflow_engine),
):
    result = await engine.reject_status_change(
        request_id,
        rejected_by=current_user.user_id,
        reason=body.reason,
        organization_id=current_user.organization_id,
    )
    return _result_response(request, result)


@router.get(
    "/history/{response_id}",
    summary="Status History",
    response_model=list[StatusHistoryEntry],
)
async def get_status_history(
    response_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
    engine: StatusWorkflowEngine = Depends(get_workflow_engine),
):
    """Applied transitions of a candidate, newest first."""
    return await engine.get_status_history(response_id)


@router.get("/pending", summary="Pending Approvals")
async def get_pending_status_changes(
    current_user: CurrentUser = Depends(require_organization),
    engine: StatusWorkflowEngine = Depends(get_workflow_engine),
):
    """Approval queue of the caller's organization."""
    return await engine.get_pending_status_changes(current_user.organization_id)


@router.get("/metrics", summary="Status Metrics", response_model=StatusMetrics)
async def get_status_metrics(
    interview_id: Optional[int] = Query(None, ge=1),
    current_user: CurrentUser = Depends(get_current_user),
    engine: StatusWorkflowEngine = Depends(get_workflow_engine),
):
    return await engine.get_status_metrics(interview_id)


@router.get(
    "/recommendation/{response_id}",
    summary="Recommended Status",
    response_model=StatusRecommendation,
)
async def get_recommended_status(
    response_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
    engine: StatusWorkflowEngine = Depends(get_workflow_engine),
):
    """Advisory AI recommendation; never applied automatically."""
    return await engine.get_recommended_status(response_id)


@router.post("/auto-update", summary="Run Automatic Transitions", response_model=AutoUpdateSummary)
async def auto_update_candidate_statuses(
    current_user: CurrentUser = Depends(get_current_user),
    engine: StatusWorkflowEngine = Depends(get_workflow_engine),
):
    return await engine.auto_update_candidate_statuses()
