"""Skill assessment and candidate assessment service functions."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from agents.registry import registry
from core.exceptions import (
    AssessmentAlreadyCompletedError,
    DuplicateAssessmentError,
    NotFoundError,
)
from core.scoring import normalized_percentage, summarize_assessments
from database.engine import AsyncSessionLocal
from database.models.assessments import (
    AssessmentType,
    CandidateAssessment,
    DifficultyLevel,
    SkillAssessment,
)
from database.models.responses import Interview, Response

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {
    "title",
    "description",
    "assessment_type",
    "difficulty_level",
    "time_limit",
    "passing_score",
    "instructions",
    "evaluation_criteria",
    "is_active",
}


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _serialize_skill_assessment(assessment: SkillAssessment) -> Dict[str, Any]:
    return {
        "id": assessment.id,
        "interview_id": assessment.interview_id,
        "title": assessment.title,
        "description": assessment.description,
        "assessment_type": assessment.assessment_type.value,
        "difficulty_level": assessment.difficulty_level.value,
        "time_limit": assessment.time_limit,
        "passing_score": assessment.passing_score,
        "instructions": assessment.instructions,
        "evaluation_criteria": assessment.evaluation_criteria or {},
        "is_active": assessment.is_active,
        "created_at": _iso(assessment.created_at),
        "updated_at": _iso(assessment.updated_at),
    }


def _serialize_candidate_assessment(
    attempt: CandidateAssessment, include_template: bool = False
) -> Dict[str, Any]:
    data = {
        "id": attempt.id,
        "response_id": attempt.response_id,
        "skill_assessment_id": attempt.skill_assessment_id,
        "started_at": _iso(attempt.started_at),
        "completed_at": _iso(attempt.completed_at),
        "score": attempt.score,
        "max_score": attempt.max_score,
        "passed": attempt.passed,
        "time_spent": attempt.time_spent,
        "evaluation_details": attempt.evaluation_details,
        "submission_data": attempt.submission_data,
    }
    if include_template:
        data["skill_assessment"] = (
            _serialize_skill_assessment(attempt.skill_assessment)
            if attempt.skill_assessment
            else None
        )
    return data


# ==================== Skill assessments ===================== #

async def create_skill_assessment(
    interview_id: int,
    title: str,
    assessment_type: AssessmentType,
    difficulty_level: DifficultyLevel,
    description: Optional[str] = None,
    time_limit: Optional[int] = None,
    passing_score: float = 70,
    instructions: Optional[str] = None,
    evaluation_criteria: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Raises:
        NotFoundError: the interview does not exist
    """
    async with AsyncSessionLocal() as session:
        if await session.get(Interview, interview_id) is None:
            raise NotFoundError("Interview", interview_id)

        assessment = SkillAssessment(
            interview_id=interview_id,
            title=title,
            description=description,
            assessment_type=AssessmentType(assessment_type),
            difficulty_level=DifficultyLevel(difficulty_level),
            time_limit=time_limit,
            passing_score=passing_score,
            instructions=instructions,
            evaluation_criteria=evaluation_criteria or {},
            is_active=True,
        )
        session.add(assessment)
        await session.commit()
        await session.refresh(assessment)

        logger.info(f"Created skill assessment {assessment.id} for interview {interview_id}")
        return _serialize_skill_assessment(assessment)


async def list_skill_assessments(interview_id: int) -> List[Dict[str, Any]]:
    """Active assessments of an interview, newest first."""
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(SkillAssessment)
            .where(
                SkillAssessment.interview_id == interview_id,
                SkillAssessment.is_active.is_(True),
            )
            .order_by(SkillAssessment.created_at.desc(), SkillAssessment.id.desc())
        )
        return [_serialize_skill_assessment(a) for a in result.scalars().all()]


async def get_skill_assessment(assessment_id: int) -> Optional[Dict[str, Any]]:
    async with AsyncSessionLocal() as session:
        assessment = await session.get(SkillAssessment, assessment_id)
        return _serialize_skill_assessment(assessment) if assessment else None


async def update_skill_assessment(
    assessment_id: int, updates: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Apply a partial update. Unknown fields are ignored.

    Raises:
        NotFoundError: no such assessment
    """
    async with AsyncSessionLocal() as session:
        assessment = await session.get(SkillAssessment, assessment_id)
        if assessment is None:
            raise NotFoundError("Skill assessment", assessment_id)

        for field, value in updates.items():
            if field not in EDITABLE_FIELDS:
                continue
            if field == "assessment_type" and value is not None:
                value = AssessmentType(value)
            elif field == "difficulty_level" and value is not None:
                value = DifficultyLevel(value)
            setattr(assessment, field, value)

        await session.commit()
        await session.refresh(assessment)
        return _serialize_skill_assessment(assessment)


async def delete_skill_assessment(assessment_id: int) -> None:
    """
    Raises:
        NotFoundError: no such assessment
    """
    async with AsyncSessionLocal() as session:
        assessment = await session.get(SkillAssessment, assessment_id)
        if assessment is None:
            raise NotFoundError("Skill assessment", assessment_id)
        await session.delete(assessment)
        await session.commit()
        logger.info(f"Deleted skill assessment {assessment_id}")


# ==================== Candidate assessments ===================== #

async def start_candidate_assessment(
    skill_assessment_id: int,
    response_id: int,
    submission_data: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Open the single attempt a candidate gets at an assessment.

    Raises:
        NotFoundError: unknown assessment or response
        DuplicateAssessmentError: the candidate already has an attempt
    """
    async with AsyncSessionLocal() as session:
        if await session.get(SkillAssessment, skill_assessment_id) is None:
            raise NotFoundError("Skill assessment", skill_assessment_id)
        if await session.get(Response, response_id) is None:
            raise NotFoundError("Candidate response", response_id)

        attempt = CandidateAssessment(
            skill_assessment_id=skill_assessment_id,
            response_id=response_id,
            started_at=datetime.now(timezone.utc),
            submission_data=submission_data,
        )
        session.add(attempt)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise DuplicateAssessmentError(skill_assessment_id, response_id) from None
        await session.refresh(attempt)
        return _serialize_candidate_assessment(attempt)


async def complete_candidate_assessment(
    candidate_assessment_id: int,
    score: float,
    max_score: float,
    passed: Optional[bool] = None,
    evaluation_details: Optional[Dict[str, Any]] = None,
    submission_data: Optional[Dict[str, Any]] = None,
    time_spent: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Record the result of an attempt. ``passed`` defaults to comparing the
    percentage against the template's passing score.

    Raises:
        NotFoundError: no such attempt
        AssessmentAlreadyCompletedError: the attempt was already completed
    """
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(CandidateAssessment)
            .options(selectinload(CandidateAssessment.skill_assessment))
            .where(CandidateAssessment.id == candidate_assessment_id)
        )
        attempt = result.scalar_one_or_none()
        if attempt is None:
            raise NotFoundError("Candidate assessment", candidate_assessment_id)
        if attempt.completed_at is not None:
            raise AssessmentAlreadyCompletedError(candidate_assessment_id)

        if passed is None:
            threshold = attempt.skill_assessment.passing_score
            passed = normalized_percentage(score, max_score) >= threshold

        values: Dict[str, Any] = {
            "score": score,
            "max_score": max_score,
            "passed": passed,
            "evaluation_details": evaluation_details,
            "time_spent": time_spent,
            "completed_at": datetime.now(timezone.utc),
        }
        if submission_data is not None:
            values["submission_data"] = submission_data

        # Guarded so two concurrent completions cannot both win
        claimed = await session.execute(
            update(CandidateAssessment)
            .where(
                CandidateAssessment.id == candidate_assessment_id,
                CandidateAssessment.completed_at.is_(None),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount != 1:
            await session.rollback()
            raise AssessmentAlreadyCompletedError(candidate_assessment_id)
        await session.commit()
        await session.refresh(attempt)

        logger.info(
            f"Candidate assessment {candidate_assessment_id} completed "
            f"({score}/{max_score}, passed={passed})"
        )
        return _serialize_candidate_assessment(attempt)


async def list_candidate_assessments(response_id: int) -> List[Dict[str, Any]]:
    """Attempts of one candidate with their templates, newest first."""
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(CandidateAssessment)
            .options(selectinload(CandidateAssessment.skill_assessment))
            .where(CandidateAssessment.response_id == response_id)
            .order_by(CandidateAssessment.created_at.desc(), CandidateAssessment.id.desc())
        )
        return [
            _serialize_candidate_assessment(a, include_template=True)
            for a in result.scalars().all()
        ]


async def generate_overall_assessment_result(response_id: int) -> Dict[str, Any]:
    """
    Pooled result over a candidate's completed assessments with AI feedback.

    Returns:
        ``overall_score``, ``max_score``, ``passed``, ``assessment_count`` plus
        ``detailed_feedback``, ``recommendations`` and ``skill_scores``
    """
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(CandidateAssessment)
            .where(
                CandidateAssessment.response_id == response_id,
                CandidateAssessment.completed_at.is_not(None),
            )
            .order_by(CandidateAssessment.id)
        )
        completed = [
            _serialize_candidate_assessment(a) for a in result.scalars().all()
        ]

    summary = summarize_assessments(completed)
    agent = registry.get("assessment_feedback")
    feedback = await agent.process({"assessments": completed})
    return {"response_id": response_id, **summary, **feedback}
