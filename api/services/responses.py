"""Candidate response service functions."""

from typing import Any, Dict, Optional
import logging

from sqlalchemy import func, select, update
from sqlalchemy.orm import selectinload

from core.exceptions import NotFoundError
from database.engine import AsyncSessionLocal
from database.models.responses import CandidateStatus, Response

logger = logging.getLogger(__name__)


def serialize_response(response: Response) -> Dict[str, Any]:
    return {
        "id": response.id,
        "interview_id": response.interview_id,
        "name": response.name,
        "email": response.email,
        "candidate_status": response.candidate_status.value,
        "duration": response.duration,
        "tab_switch_count": response.tab_switch_count,
        "analytics": response.analytics,
        "is_analysed": response.is_analysed,
        "is_ended": response.is_ended,
        "is_viewed": response.is_viewed,
        "created_at": response.created_at.isoformat() if response.created_at else None,
    }


async def get_response(response_id: int) -> Optional[Dict[str, Any]]:
    """Response with its interview name."""
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(Response)
            .options(selectinload(Response.interview))
            .where(Response.id == response_id)
        )
        response = result.scalar_one_or_none()
        if response is None:
            return None
        data = serialize_response(response)
        data["interview_name"] = response.interview.name if response.interview else None
        return data


async def list_responses(
    interview_id: int,
    status: Optional[CandidateStatus] = None,
    limit: int = 50,
    offset: int = 0,
) -> Dict[str, Any]:
    """Responses of an interview, newest first."""
    async with AsyncSessionLocal() as session:
        query = select(Response).where(Response.interview_id == interview_id)
        if status is not None:
            query = query.where(Response.candidate_status == CandidateStatus(status))

        total = (
            await session.execute(select(func.count()).select_from(query.subquery()))
        ).scalar() or 0

        result = await session.execute(
            query.order_by(Response.created_at.desc(), Response.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return {
            "responses": [serialize_response(r) for r in result.scalars().all()],
            "total": total,
            "limit": limit,
            "offset": offset,
        }


async def mark_response_viewed(response_id: int) -> None:
    """
    Raises:
        NotFoundError: no such response
    """
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            update(Response)
            .where(Response.id == response_id)
            .values(is_viewed=True)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise NotFoundError("Candidate response", response_id)
        await session.commit()


async def record_analysis(
    response_id: int,
    analytics: Dict[str, Any],
    duration: Optional[int] = None,
    tab_switch_count: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Store the interview analysis of a response and flag it analysed, which
    makes it eligible for the automatic move to review.

    Raises:
        NotFoundError: no such response
    """
    async with AsyncSessionLocal() as session:
        response = await session.get(Response, response_id)
        if response is None:
            raise NotFoundError("Candidate response", response_id)

        response.analytics = analytics
        response.is_analysed = True
        response.is_ended = True
        if duration is not None:
            response.duration = duration
        if tab_switch_count is not None:
            response.tab_switch_count = tab_switch_count

        await session.commit()
        await session.refresh(response)
        logger.info(f"Recorded analysis for response {response_id}")
        return serialize_response(response)
