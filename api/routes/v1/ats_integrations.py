"""
ATS integration endpoints.

Configure provider integrations for an organization, check their
credentials and manually push candidates, statuses and assessment results.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from api.dependencies import get_current_user, require_organization
from api.schemas.integrations import (
    ATSIntegrationCreate,
    ATSIntegrationOut,
    ATSSyncResult,
    SyncToATSRequest,
)
from api.services import ats as ats_service
from core.security import AuditAction, CurrentUser, ResourceType, audit_log
from database.models.integrations import SyncType

router = APIRouter(prefix="/ats-integrations", tags=["ats-integrations"])
sync_router = APIRouter(prefix="/sync-to-ats", tags=["sync-to-ats"])


@router.post(
    "",
    summary="Create ATS Integration",
    status_code=status.HTTP_201_CREATED,
    response_model=ATSIntegrationOut,
)
@audit_log(AuditAction.CREATE, ResourceType.ATS_INTEGRATION)
async def create_integration(
    body: ATSIntegrationCreate,
    current_user: CurrentUser = Depends(require_organization),
):
    return await ats_service.create_integration(
        organization_id=current_user.organization_id,
        **body.model_dump(),
    )


@router.get("", summary="List ATS Integrations", response_model=list[ATSIntegrationOut])
async def list_integrations(
    current_user: CurrentUser = Depends(require_organization),
):
    return await ats_service.list_integrations(current_user.organization_id)


@router.post("/{integration_id}/validate", summary="Validate ATS Connection")
async def validate_integration(
    integration_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await ats_service.validate_integration(integration_id)


@router.get("/sync-logs", summary="ATS Sync Logs")
async def get_sync_logs(
    integration_id: Optional[int] = Query(None, ge=1),
    response_id: Optional[int] = Query(None, ge=1),
    limit: int = Query(50, ge=1, le=200),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Sync attempts, newest first."""
    return await ats_service.get_sync_logs(integration_id, response_id, limit)


@sync_router.post("", summary="Sync To ATS", response_model=ATSSyncResult)
@audit_log(AuditAction.ATS_SYNC, ResourceType.CANDIDATE)
async def sync_to_ats(
    body: SyncToATSRequest,
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Provider failures are reported in the body with ``success: false``; they
    are logged, not raised.
    """
    if body.type == SyncType.CANDIDATE_CREATE:
        result = await ats_service.sync_candidate_to_ats(body.integration_id, body.response_id)
    elif body.type == SyncType.STATUS_UPDATE:
        if not body.provider_candidate_id or body.status is None:
            raise HTTPException(
                status_code=400,
                detail="provider_candidate_id and status are required for status updates",
            )
        result = await ats_service.update_candidate_status_in_ats(
            body.integration_id,
            body.response_id,
            body.provider_candidate_id,
            body.status.value,
        )
    else:
        result = await ats_service.sync_assessment_results_to_ats(
            body.integration_id, body.response_id, body.provider_candidate_id
        )
    return result.to_dict()
