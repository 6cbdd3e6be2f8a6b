"""Candidate profile service functions."""

from typing import Any, Dict, Optional
import logging

from sqlalchemy import select

from agents.registry import registry
from core.exceptions import NotFoundError
from database.engine import AsyncSessionLocal
from database.models.responses import CandidateProfile, Response

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "resume_url",
    "linkedin_url",
    "github_url",
    "portfolio_url",
    "phone",
    "expected_salary",
    "notice_period",
    "skills",
    "experience_years",
    "location",
    "education",
    "work_experience",
)


def _serialize_profile(profile: CandidateProfile) -> Dict[str, Any]:
    data = {field: getattr(profile, field) for field in PROFILE_FIELDS}
    data.update(
        {
            "id": profile.id,
            "response_id": profile.response_id,
            "skills": profile.skills or [],
            "education": profile.education or [],
            "work_experience": profile.work_experience or [],
            "ai_generated_summary": profile.ai_generated_summary,
            "updated_at": profile.updated_at.isoformat() if profile.updated_at else None,
        }
    )
    return data


async def get_candidate_profile(response_id: int) -> Optional[Dict[str, Any]]:
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(CandidateProfile).where(CandidateProfile.response_id == response_id)
        )
        profile = result.scalar_one_or_none()
        return _serialize_profile(profile) if profile else None


async def upsert_candidate_profile(
    response_id: int,
    data: Dict[str, Any],
    generate_summary: bool = False,
) -> Dict[str, Any]:
    """
    Create or update the profile of a response. Fields absent from ``data``
    keep their stored value.

    Args:
        response_id: Owning response
        data: Profile fields to write
        generate_summary: Ask the profile agent for a fresh summary

    Raises:
        NotFoundError: the response does not exist
    """
    async with AsyncSessionLocal() as session:
        if await session.get(Response, response_id) is None:
            raise NotFoundError("Candidate response", response_id)

        result = await session.execute(
            select(CandidateProfile).where(CandidateProfile.response_id == response_id)
        )
        profile = result.scalar_one_or_none()
        created = profile is None
        if created:
            profile = CandidateProfile(response_id=response_id)
            session.add(profile)

        for field in PROFILE_FIELDS:
            if field in data:
                setattr(profile, field, data[field])

        if generate_summary:
            agent = registry.get("profile_summary")
            profile.ai_generated_summary = await agent.process(
                {field: getattr(profile, field) for field in PROFILE_FIELDS}
            )

        await session.commit()
        await session.refresh(profile)

        logger.info(
            f"{'Created' if created else 'Updated'} profile for response {response_id}"
        )
        return _serialize_profile(profile)
