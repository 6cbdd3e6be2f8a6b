"""Skill assessment and candidate assessment schemas."""

from typing import Any, Optional
from pydantic import BaseModel, Field

from database.models.assessments import AssessmentType, DifficultyLevel


class SkillAssessmentCreate(BaseModel):
    """Schema for creating a skill assessment template."""

    interview_id: int = Field(ge=1)
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    assessment_type: AssessmentType
    difficulty_level: DifficultyLevel
    time_limit: Optional[int] = Field(None, ge=1, description="Minutes")
    passing_score: float = Field(default=70, ge=0, le=100)
    instructions: Optional[str] = None
    evaluation_criteria: dict[str, Any] = Field(default_factory=dict)


class SkillAssessmentUpdate(BaseModel):
    """Schema for partially updating a skill assessment template."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    assessment_type: Optional[AssessmentType] = None
    difficulty_level: Optional[DifficultyLevel] = None
    time_limit: Optional[int] = Field(None, ge=1)
    passing_score: Optional[float] = Field(None, ge=0, le=100)
    instructions: Optional[str] = None
    evaluation_criteria: Optional[dict[str, Any]] = None
    is_active: Optional[bool] = None


class CandidateAssessmentStart(BaseModel):
    skill_assessment_id: int = Field(ge=1)
    response_id: int = Field(ge=1)
    submission_data: Optional[dict[str, Any]] = None


class CandidateAssessmentComplete(BaseModel):
    """Result of a candidate's attempt."""

    score: float = Field(ge=0)
    max_score: float = Field(gt=0)
    passed: Optional[bool] = Field(
        None, description="Defaults to comparing against the passing score"
    )
    evaluation_details: Optional[dict[str, Any]] = None
    submission_data: Optional[dict[str, Any]] = None
    time_spent: Optional[int] = Field(None, ge=0, description="Seconds")
