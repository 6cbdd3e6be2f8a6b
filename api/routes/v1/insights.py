"""AI candidate insight endpoints."""

from fastapi import APIRouter, Depends, Path

from api.dependencies import get_current_user
from api.services import candidate_filtering as filtering_service
from core.filtering import CandidateInsight
from core.security import CurrentUser

router = APIRouter(prefix="/insights", tags=["insights"])


@router.post(
    "/{response_id}",
    summary="Generate Candidate Insight",
    description="Strengths, weaknesses, risks and a match score. Empty when the AI service is unavailable.",
    response_model=CandidateInsight,
)
async def generate_candidate_insight(
    response_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await filtering_service.generate_candidate_insight(response_id)
