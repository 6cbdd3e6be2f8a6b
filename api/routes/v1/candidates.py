"""
Candidate filtering endpoints.

Filter and rank the candidates of an interview, export them and list the
best candidates still in play.
"""

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import Response

from api.dependencies import get_current_user
from api.schemas.candidates import CandidateExportRequest, CandidateFilterRequest
from api.services import candidate_filtering as filtering_service
from core.filtering import EnhancedCandidate, FilteredCandidatesResult
from core.security import AuditAction, CurrentUser, ResourceType, audit_log

router = APIRouter(prefix="/candidates", tags=["candidates"])


@router.post(
    "/filter",
    summary="Filter Candidates",
    description="Filter, rank by AI match score and paginate the candidates of an interview.",
    response_model=FilteredCandidatesResult,
)
async def filter_candidates(
    body: CandidateFilterRequest,
    current_user: CurrentUser = Depends(get_current_user),
):
    return await filtering_service.filter_interview_candidates(
        body.interview_id, body.criteria, page=body.page, limit=body.limit
    )


@router.post("/export", summary="Export Candidates")
@audit_log(AuditAction.EXPORT, ResourceType.CANDIDATE, contains_pii=True)
async def export_candidates(
    body: CandidateExportRequest,
    current_user: CurrentUser = Depends(get_current_user),
):
    """Filtered candidates as a JSON or CSV attachment, at most 1000 rows."""
    content, media_type = await filtering_service.export_candidates(
        body.interview_id, body.format, body.criteria
    )
    filename = f"candidates-{body.interview_id}.{body.format}"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get(
    "/recommendations/{interview_id}",
    summary="Candidate Recommendations",
    response_model=list[EnhancedCandidate],
)
async def get_candidate_recommendations(
    interview_id: int = Path(..., ge=1),
    count: int = Query(5, ge=1, le=50),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Pending or in-review candidates scoring at least 70, best match first."""
    return await filtering_service.get_candidate_recommendations(interview_id, count)
