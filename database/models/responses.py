"""
Candidate Responses Module

Interviews, the candidate responses collected for them and the optional
candidate profile enrichment. Candidate identity fields carry PII markers.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    Integer,
    DateTime,
    func,
    Text,
    JSON,
    Enum as SQLEnum,
    Index,
)
from database.engine import Base, BigIntegerType
from database.security import ComplianceMixin, compliance_column, GDPRDataCategory
from datetime import datetime
from enum import Enum as PyEnum
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.assessments import CandidateAssessment
    from database.models.workflow import CandidateStatusHistory


# ==================== Enums ===================== #
class CandidateStatus(str, PyEnum):
    """Workflow status of a candidate response."""

    PENDING = "pending"
    IN_REVIEW = "in_review"
    SELECTED = "selected"
    REJECTED = "rejected"
    ON_HOLD = "on_hold"
    WITHDRAWN = "withdrawn"


# ==================== Interview Model ===================== #
class Interview(Base):
    """
    Interview owned by a hiring manager. Only the fields the candidate
    workflow reads are mapped here.
    """

    __tablename__ = "interviews"

    id: Mapped[int] = mapped_column(
        BigIntegerType, primary_key=True, nullable=False, autoincrement=True
    )
    organization_id: Mapped[str | None] = mapped_column(String(64), index=True)
    user_id: Mapped[str | None] = mapped_column(String(64))  # hiring manager
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    responses: Mapped[list["Response"]] = relationship(
        "Response", back_populates="interview"
    )


# ==================== Response Model ===================== #
class Response(Base, ComplianceMixin):
    """
    One candidate's response to an interview.

    ``status_version`` is bumped on every applied status transition and is the
    compare-and-swap token for concurrent status changes.
    """

    __tablename__ = "responses"

    id: Mapped[int] = mapped_column(
        BigIntegerType, primary_key=True, nullable=False, autoincrement=True
    )
    interview_id: Mapped[int] = mapped_column(
        BigIntegerType,
        ForeignKey("interviews.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Candidate identity
    name: Mapped[str | None] = mapped_column(
        String(255),
        info=compliance_column(pii=True, gdpr_category=GDPRDataCategory.IDENTITY),
    )
    email: Mapped[str | None] = mapped_column(
        String(255),
        index=True,
        info=compliance_column(pii=True, gdpr_category=GDPRDataCategory.IDENTITY),
    )

    # Workflow status
    candidate_status: Mapped[CandidateStatus] = mapped_column(
        SQLEnum(CandidateStatus, native_enum=False, length=50),
        nullable=False,
        default=CandidateStatus.PENDING,
        index=True,
    )
    status_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Interaction metrics
    duration: Mapped[int | None] = mapped_column(Integer)  # seconds
    tab_switch_count: Mapped[int | None] = mapped_column(
        Integer,
        info=compliance_column(
            gdpr_category=GDPRDataCategory.BEHAVIORAL, mask_in_logs=False
        ),
    )
    analytics: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    details: Mapped[dict[str, Any] | None] = mapped_column(JSON)

    # Soft state
    is_analysed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_ended: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_viewed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    interview: Mapped["Interview"] = relationship(
        "Interview", back_populates="responses"
    )
    profile: Mapped["CandidateProfile"] = relationship(
        "CandidateProfile",
        back_populates="response",
        uselist=False,
        cascade="all, delete-orphan",
    )
    assessments: Mapped[list["CandidateAssessment"]] = relationship(
        "CandidateAssessment",
        back_populates="response",
        cascade="all, delete-orphan",
    )
    status_history: Mapped[list["CandidateStatusHistory"]] = relationship(
        "CandidateStatusHistory",
        back_populates="response",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_responses_interview_status", "interview_id", "candidate_status"),
    )


# ==================== Candidate Profile Model ===================== #
class CandidateProfile(Base, ComplianceMixin):
    """
    Optional enrichment for a response. One-to-one, upserted on response_id.
    """

    __tablename__ = "candidate_profiles"

    id: Mapped[int] = mapped_column(
        BigIntegerType, primary_key=True, nullable=False, autoincrement=True
    )
    response_id: Mapped[int] = mapped_column(
        BigIntegerType,
        ForeignKey("responses.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    resume_url: Mapped[str | None] = mapped_column(String(1024))
    linkedin_url: Mapped[str | None] = mapped_column(String(1024))
    github_url: Mapped[str | None] = mapped_column(String(1024))
    portfolio_url: Mapped[str | None] = mapped_column(String(1024))
    phone: Mapped[str | None] = mapped_column(
        String(50),
        info=compliance_column(pii=True, gdpr_category=GDPRDataCategory.CONTACT),
    )
    expected_salary: Mapped[str | None] = mapped_column(String(100))
    notice_period: Mapped[str | None] = mapped_column(String(100))

    skills: Mapped[list[str] | None] = mapped_column(
        JSON,
        info=compliance_column(
            gdpr_category=GDPRDataCategory.PROFESSIONAL, mask_in_logs=False
        ),
    )
    experience_years: Mapped[int | None] = mapped_column(Integer)
    location: Mapped[str | None] = mapped_column(
        String(255),
        info=compliance_column(pii=True, gdpr_category=GDPRDataCategory.CONTACT),
    )
    education: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON)
    work_experience: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON)
    ai_generated_summary: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    response: Mapped["Response"] = relationship("Response", back_populates="profile")
