"""Candidate response endpoints."""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query

from api.dependencies import get_current_user
from api.schemas.common import MessageResponse
from api.services import responses as response_service
from core.security import CurrentUser
from database.models.responses import CandidateStatus

router = APIRouter(prefix="/responses", tags=["responses"])


@router.get("", summary="List Responses")
async def list_responses(
    interview_id: int = Query(..., ge=1),
    status: Optional[CandidateStatus] = Query(None, description="Filter by candidate status"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await response_service.list_responses(
        interview_id, status=status, limit=limit, offset=offset
    )


@router.get("/{response_id}", summary="Get Response")
async def get_response(
    response_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
):
    result = await response_service.get_response(response_id)
    if not result:
        raise HTTPException(status_code=404, detail="Candidate response not found")
    return result


@router.post("/{response_id}/viewed", summary="Mark Response Viewed", response_model=MessageResponse)
async def mark_response_viewed(
    response_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
):
    await response_service.mark_response_viewed(response_id)
    return MessageResponse(message="Response marked as viewed")


@router.post("/{response_id}/analysis", summary="Record Interview Analysis")
async def record_analysis(
    response_id: int = Path(..., ge=1),
    analytics: dict[str, Any] = Body(..., embed=True),
    duration: Optional[int] = Body(None, ge=0, embed=True),
    tab_switch_count: Optional[int] = Body(None, ge=0, embed=True),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Store the analysis of a finished interview; the response becomes eligible for review."""
    return await response_service.record_analysis(
        response_id, analytics, duration=duration, tab_switch_count=tab_switch_count
    )
