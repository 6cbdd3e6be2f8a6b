"""
Skill Assessments Module

Assessment templates attached to an interview and the per-candidate attempts
scored against them.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    Integer,
    Float,
    DateTime,
    func,
    Text,
    JSON,
    Enum as SQLEnum,
    UniqueConstraint,
)
from database.engine import Base, BigIntegerType
from datetime import datetime
from enum import Enum as PyEnum
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.responses import Response


# ==================== Enums ===================== #
class AssessmentType(str, PyEnum):
    """Kind of skill assessment."""

    CODING = "coding"
    TECHNICAL = "technical"
    BEHAVIORAL = "behavioral"
    MIXED = "mixed"


class DifficultyLevel(str, PyEnum):
    """Declared difficulty of a skill assessment."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


# ==================== Skill Assessment Model ===================== #
class SkillAssessment(Base):
    """
    Assessment template. Many candidate assessments reference one template.
    """

    __tablename__ = "skill_assessments"

    id: Mapped[int] = mapped_column(
        BigIntegerType, primary_key=True, nullable=False, autoincrement=True
    )
    interview_id: Mapped[int] = mapped_column(
        BigIntegerType,
        ForeignKey("interviews.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    assessment_type: Mapped[AssessmentType] = mapped_column(
        SQLEnum(AssessmentType, native_enum=False, length=50),
        nullable=False,
    )
    difficulty_level: Mapped[DifficultyLevel] = mapped_column(
        SQLEnum(DifficultyLevel, native_enum=False, length=50),
        nullable=False,
        default=DifficultyLevel.INTERMEDIATE,
    )
    time_limit: Mapped[int | None] = mapped_column(Integer)  # minutes
    passing_score: Mapped[float] = mapped_column(Float, nullable=False, default=70)
    instructions: Mapped[str | None] = mapped_column(Text)
    evaluation_criteria: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    candidate_assessments: Mapped[list["CandidateAssessment"]] = relationship(
        "CandidateAssessment",
        back_populates="skill_assessment",
        cascade="all, delete-orphan",
    )


# ==================== Candidate Assessment Model ===================== #
class CandidateAssessment(Base):
    """
    A candidate's single attempt at a skill assessment. No re-attempts:
    the (assessment, response) pair is unique.
    """

    __tablename__ = "candidate_assessments"

    id: Mapped[int] = mapped_column(
        BigIntegerType, primary_key=True, nullable=False, autoincrement=True
    )
    response_id: Mapped[int] = mapped_column(
        BigIntegerType,
        ForeignKey("responses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    skill_assessment_id: Mapped[int] = mapped_column(
        BigIntegerType,
        ForeignKey("skill_assessments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    score: Mapped[float | None] = mapped_column(Float)
    max_score: Mapped[float | None] = mapped_column(Float)
    passed: Mapped[bool | None] = mapped_column(Boolean)
    submission_data: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    evaluation_details: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    time_spent: Mapped[int | None] = mapped_column(Integer)  # seconds

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    response: Mapped["Response"] = relationship(
        "Response", back_populates="assessments"
    )
    skill_assessment: Mapped["SkillAssessment"] = relationship(
        "SkillAssessment", back_populates="candidate_assessments"
    )

    __table_args__ = (
        UniqueConstraint(
            "skill_assessment_id",
            "response_id",
            name="uq_candidate_assessment_pair",
        ),
    )
