"""Candidate profile endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Path

from api.dependencies import get_current_user
from api.schemas.profiles import CandidateProfileUpsert
from api.services import candidate_profiles as profile_service
from core.security import AuditAction, CurrentUser, ResourceType, audit_log

router = APIRouter(prefix="/candidate-profile", tags=["candidate-profile"])


@router.get("/{response_id}", summary="Get Candidate Profile")
@audit_log(AuditAction.VIEW, ResourceType.CANDIDATE, "response_id", contains_pii=True)
async def get_candidate_profile(
    response_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
):
    result = await profile_service.get_candidate_profile(response_id)
    if not result:
        raise HTTPException(status_code=404, detail="Candidate profile not found")
    return result


@router.put("/{response_id}", summary="Create or Update Candidate Profile")
@audit_log(AuditAction.UPDATE, ResourceType.CANDIDATE, "response_id", contains_pii=True)
async def upsert_candidate_profile(
    body: CandidateProfileUpsert,
    response_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
):
    data = body.model_dump(exclude_unset=True, exclude={"generate_summary"})
    return await profile_service.upsert_candidate_profile(
        response_id, data, generate_summary=body.generate_summary
    )
