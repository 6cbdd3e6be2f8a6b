"""
Candidate assessment endpoints.

A candidate gets one attempt per skill assessment: starting a second one is
a 409, as is completing an attempt twice.
"""

from fastapi import APIRouter, Depends, Path, Query, status

from api.dependencies import get_current_user
from api.schemas.assessments import CandidateAssessmentComplete, CandidateAssessmentStart
from api.services import skill_assessments as assessment_service
from core.security import AuditAction, CurrentUser, ResourceType, audit_log

router = APIRouter(prefix="/candidate-assessments", tags=["candidate-assessments"])


@router.post("", summary="Start Candidate Assessment", status_code=status.HTTP_201_CREATED)
async def start_candidate_assessment(
    body: CandidateAssessmentStart,
    current_user: CurrentUser = Depends(get_current_user),
):
    return await assessment_service.start_candidate_assessment(
        body.skill_assessment_id, body.response_id, body.submission_data
    )


@router.post("/{candidate_assessment_id}/complete", summary="Complete Candidate Assessment")
@audit_log(AuditAction.UPDATE, ResourceType.ASSESSMENT, "candidate_assessment_id")
async def complete_candidate_assessment(
    body: CandidateAssessmentComplete,
    candidate_assessment_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await assessment_service.complete_candidate_assessment(
        candidate_assessment_id, **body.model_dump()
    )


@router.get("", summary="List Candidate Assessments")
async def list_candidate_assessments(
    response_id: int = Query(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Attempts of a candidate with their assessment templates."""
    return await assessment_service.list_candidate_assessments(response_id)


@router.get("/overall/{response_id}", summary="Overall Assessment Result")
async def get_overall_assessment_result(
    response_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Pooled score over completed assessments with AI feedback."""
    return await assessment_service.generate_overall_assessment_result(response_id)
