"""Skill assessment template endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from api.dependencies import get_current_user
from api.schemas.assessments import SkillAssessmentCreate, SkillAssessmentUpdate
from api.schemas.common import MessageResponse
from api.services import skill_assessments as assessment_service
from core.security import CurrentUser

router = APIRouter(prefix="/skill-assessments", tags=["skill-assessments"])


@router.post("", summary="Create Skill Assessment", status_code=status.HTTP_201_CREATED)
async def create_skill_assessment(
    body: SkillAssessmentCreate,
    current_user: CurrentUser = Depends(get_current_user),
):
    return await assessment_service.create_skill_assessment(**body.model_dump())


@router.get("", summary="List Skill Assessments")
async def list_skill_assessments(
    interview_id: int = Query(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Active assessments of an interview, newest first."""
    return await assessment_service.list_skill_assessments(interview_id)


@router.get("/{assessment_id}", summary="Get Skill Assessment")
async def get_skill_assessment(
    assessment_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
):
    result = await assessment_service.get_skill_assessment(assessment_id)
    if not result:
        raise HTTPException(status_code=404, detail="Skill assessment not found")
    return result


@router.patch("/{assessment_id}", summary="Update Skill Assessment")
async def update_skill_assessment(
    body: SkillAssessmentUpdate,
    assessment_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await assessment_service.update_skill_assessment(
        assessment_id, body.model_dump(exclude_unset=True)
    )


@router.delete("/{assessment_id}", summary="Delete Skill Assessment", response_model=MessageResponse)
async def delete_skill_assessment(
    assessment_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
):
    await assessment_service.delete_skill_assessment(assessment_id)
    return MessageResponse(message="Skill assessment deleted")
