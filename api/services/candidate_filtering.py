"""Candidate filtering, recommendation and export service functions.

Loads the candidates of an interview, enhances them with profile,
assessments, overall score, AI insight and ATS sync state, then hands them to
the in-memory filter engine in ``core.filtering``.
"""

import csv
import io
import json
from typing import Any, Dict, List, Optional, Tuple
import logging

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from agents.registry import registry
from core.exceptions import NotFoundError, UnsupportedExportFormatError
from core.filtering import (
    AssessmentData,
    ATSSyncStatus,
    CandidateInsight,
    CandidateProfileData,
    EnhancedCandidate,
    FilterCriteria,
    FilteredCandidatesResult,
    filter_candidates,
)
from core.scoring import calculate_overall_score
from database.engine import AsyncSessionLocal
from database.models.integrations import ATSSyncLog, SyncLogStatus
from database.models.responses import CandidateStatus, Response

logger = logging.getLogger(__name__)

EXPORT_LIMIT = 1000
RECOMMENDATION_MIN_SCORE = 70

CSV_COLUMNS = [
    "Name",
    "Email",
    "Status",
    "Overall Score",
    "Match Score",
    "Experience Years",
    "Location",
    "Skills",
    "Assessments Completed",
    "Tab Switch Count",
    "Duration",
    "Created At",
]


def _base_candidate(response: Response) -> EnhancedCandidate:
    profile = response.profile
    return EnhancedCandidate(
        id=response.id,
        interview_id=response.interview_id,
        name=response.name,
        email=response.email,
        candidate_status=response.candidate_status,
        duration=response.duration,
        tab_switch_count=response.tab_switch_count,
        analytics=response.analytics,
        is_analysed=response.is_analysed,
        is_viewed=response.is_viewed,
        created_at=response.created_at,
        candidate_profile=CandidateProfileData(
            skills=profile.skills or [],
            experience_years=profile.experience_years,
            location=profile.location,
            education=profile.education,
            work_experience=profile.work_experience,
            ai_generated_summary=profile.ai_generated_summary,
        )
        if profile
        else None,
        candidate_assessments=[
            AssessmentData(
                id=a.id,
                skill_assessment_id=a.skill_assessment_id,
                score=a.score,
                max_score=a.max_score,
                passed=a.passed,
                time_spent=a.time_spent,
                evaluation_details=a.evaluation_details,
                completed_at=a.completed_at,
            )
            for a in sorted(response.assessments, key=lambda a: a.id)
        ],
    )


async def _enhance(
    candidate: EnhancedCandidate, sync_log: Optional[ATSSyncLog], with_insights: bool
) -> EnhancedCandidate:
    completed = [a for a in candidate.candidate_assessments or [] if a.completed_at]
    overall_score = calculate_overall_score(completed)

    insight = None
    if with_insights:
        agent = registry.get("candidate_insights")
        insight = await agent.process(
            {
                "candidate": candidate.model_dump(
                    mode="json",
                    include={
                        "id",
                        "name",
                        "email",
                        "duration",
                        "tab_switch_count",
                        "candidate_status",
                        "analytics",
                    },
                ),
                "profile": candidate.candidate_profile.model_dump(mode="json")
                if candidate.candidate_profile
                else None,
                "assessments": [a.model_dump(mode="json") for a in completed],
            }
        )

    return candidate.model_copy(
        update={
            "overall_score": overall_score,
            "match_score": insight.match_score if insight else None,
            "ai_insights": insight,
            "ats_sync_status": ATSSyncStatus(
                synced=sync_log is not None,
                integration_id=sync_log.ats_integration_id if sync_log else None,
                last_sync=sync_log.created_at if sync_log else None,
            ),
        }
    )


async def enhance_candidates(
    interview_id: int, with_insights: bool = True
) -> List[EnhancedCandidate]:
    """
    Every response of an interview, enhanced. A candidate whose enhancement
    fails is returned bare, without score or insight.
    """
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(Response)
            .options(selectinload(Response.profile), selectinload(Response.assessments))
            .where(Response.interview_id == interview_id)
            .order_by(Response.created_at.desc(), Response.id.desc())
        )
        responses = list(result.scalars().all())

        latest_sync: Dict[int, ATSSyncLog] = {}
        if responses:
            logs = await session.execute(
                select(ATSSyncLog)
                .where(
                    ATSSyncLog.response_id.in_([r.id for r in responses]),
                    ATSSyncLog.status == SyncLogStatus.SUCCESS,
                )
                .order_by(ATSSyncLog.created_at.desc(), ATSSyncLog.id.desc())
            )
            for log in logs.scalars().all():
                latest_sync.setdefault(log.response_id, log)

        bare = [_base_candidate(r) for r in responses]

    enhanced = []
    for candidate in bare:
        try:
            enhanced.append(
                await _enhance(candidate, latest_sync.get(candidate.id), with_insights)
            )
        except Exception as e:
            logger.warning(f"Could not enhance candidate {candidate.id}: {e}")
            enhanced.append(candidate)
    return enhanced


async def filter_interview_candidates(
    interview_id: int,
    criteria: FilterCriteria,
    page: int = 1,
    limit: int = 20,
) -> FilteredCandidatesResult:
    candidates = await enhance_candidates(interview_id)
    return filter_candidates(candidates, criteria, page=page, limit=limit)


async def get_candidate_recommendations(
    interview_id: int, count: int = 5
) -> List[EnhancedCandidate]:
    """Best scoring candidates still in play, by AI match score."""
    criteria = FilterCriteria(
        min_score=RECOMMENDATION_MIN_SCORE,
        status=[CandidateStatus.PENDING, CandidateStatus.IN_REVIEW],
    )
    result = await filter_interview_candidates(interview_id, criteria, page=1, limit=count)
    return result.candidates


async def generate_candidate_insight(response_id: int) -> CandidateInsight:
    """
    Raises:
        NotFoundError: no such response
    """
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(Response)
            .options(selectinload(Response.profile), selectinload(Response.assessments))
            .where(Response.id == response_id)
        )
        response = result.scalar_one_or_none()
        if response is None:
            raise NotFoundError("Candidate response", response_id)
        candidate = _base_candidate(response)

    enhanced = await _enhance(candidate, None, with_insights=True)
    return enhanced.ai_insights or CandidateInsight.empty(response_id)


def _csv_row(candidate: EnhancedCandidate) -> List[Any]:
    profile = candidate.candidate_profile
    completed = [a for a in candidate.candidate_assessments or [] if a.completed_at]
    return [
        candidate.name or "",
        candidate.email or "",
        candidate.candidate_status.value,
        candidate.overall_score if candidate.overall_score is not None else "",
        candidate.match_score if candidate.match_score is not None else "",
        profile.experience_years if profile and profile.experience_years is not None else "",
        (profile.location if profile else None) or "",
        "; ".join(profile.skills) if profile else "",
        len(completed),
        candidate.tab_switch_count if candidate.tab_switch_count is not None else "",
        candidate.duration if candidate.duration is not None else "",
        candidate.created_at.isoformat() if candidate.created_at else "",
    ]


def render_export(
    candidates: List[EnhancedCandidate], export_format: str
) -> Tuple[str, str]:
    """
    Returns:
        (content, media type)

    Raises:
        UnsupportedExportFormatError: anything but json or csv
    """
    if export_format == "json":
        content = json.dumps(
            [c.model_dump(mode="json") for c in candidates], indent=2
        )
        return content, "application/json"

    if export_format == "csv":
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(CSV_COLUMNS)
        for candidate in candidates:
            writer.writerow(_csv_row(candidate))
        return buffer.getvalue(), "text/csv"

    raise UnsupportedExportFormatError(export_format)


async def export_candidates(
    interview_id: int,
    export_format: str,
    criteria: Optional[FilterCriteria] = None,
) -> Tuple[str, str]:
    """Filtered candidates of an interview, ranked, at most ``EXPORT_LIMIT`` rows."""
    if export_format not in ("json", "csv"):
        raise UnsupportedExportFormatError(export_format)

    result = await filter_interview_candidates(
        interview_id, criteria or FilterCriteria(), page=1, limit=EXPORT_LIMIT
    )
    return render_export(result.candidates, export_format)
