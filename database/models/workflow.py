"""
Candidate Workflow Module

Status history, approval requests and the outbox of domain events emitted by
status transitions.
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
from database.models.responses import CandidateStatus
from datetime import datetime
from enum import Enum as PyEnum
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.responses import Response


# ==================== Enums ===================== #
class StatusChangeRequestStatus(str, PyEnum):
    """Lifecycle of an approval request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DomainEventStatus(str, PyEnum):
    """Processing state of an outbox event."""

    PENDING = "pending"
    PROCESSING = "processing"
    PROCESSED = "processed"
    FAILED = "failed"


# ==================== Status History Model ===================== #
class CandidateStatusHistory(Base):
    """
    Immutable record of an applied status transition.
    """

    __tablename__ = "candidate_status_history"

    id: Mapped[int] = mapped_column(
        BigIntegerType, primary_key=True, nullable=False, autoincrement=True
    )
    response_id: Mapped[int] = mapped_column(
        BigIntegerType,
        ForeignKey("responses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    previous_status: Mapped[CandidateStatus | None] = mapped_column(
        SQLEnum(CandidateStatus, native_enum=False, length=50)
    )
    new_status: Mapped[CandidateStatus] = mapped_column(
        SQLEnum(CandidateStatus, native_enum=False, length=50),
        nullable=False,
    )
    changed_by: Mapped[str] = mapped_column(String(64), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text)
    is_automatic: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    response: Mapped["Response"] = relationship(
        "Response", back_populates="status_history"
    )

    __table_args__ = (
        Index("idx_status_history_response_changed", "response_id", "changed_at"),
    )


# ==================== Approval Request Models ===================== #
class StatusChangeRequest(Base):
    """
    A status transition waiting for a human approval. The candidate's status
    is untouched until the request is approved.
    """

    __tablename__ = "status_change_requests"

    id: Mapped[int] = mapped_column(
        BigIntegerType, primary_key=True, nullable=False, autoincrement=True
    )
    response_id: Mapped[int] = mapped_column(
        BigIntegerType,
        ForeignKey("responses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    from_status: Mapped[CandidateStatus] = mapped_column(
        SQLEnum(CandidateStatus, native_enum=False, length=50),
        nullable=False,
    )
    to_status: Mapped[CandidateStatus] = mapped_column(
        SQLEnum(CandidateStatus, native_enum=False, length=50),
        nullable=False,
    )
    requested_by: Mapped[str] = mapped_column(String(64), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text)
    status: Mapped[StatusChangeRequestStatus] = mapped_column(
        SQLEnum(StatusChangeRequestStatus, native_enum=False, length=50),
        nullable=False,
        default=StatusChangeRequestStatus.PENDING,
        index=True,
    )
    reviewed_by: Mapped[str | None] = mapped_column(String(64))
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    review_comments: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    response: Mapped["Response"] = relationship("Response")
    approvals: Mapped[list["StatusChangeApproval"]] = relationship(
        "StatusChangeApproval",
        back_populates="request",
        cascade="all, delete-orphan",
    )


class StatusChangeApproval(Base):
    """Sign-off recorded when a status change request is approved."""

    __tablename__ = "status_change_approvals"

    id: Mapped[int] = mapped_column(
        BigIntegerType, primary_key=True, nullable=False, autoincrement=True
    )
    request_id: Mapped[int] = mapped_column(
        BigIntegerType,
        ForeignKey("status_change_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    approved_by: Mapped[str] = mapped_column(String(64), nullable=False)
    comments: Mapped[str | None] = mapped_column(Text)
    approved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    request: Mapped["StatusChangeRequest"] = relationship(
        "StatusChangeRequest", back_populates="approvals"
    )


# ==================== Outbox Model ===================== #
class DomainEvent(Base):
    """
    Outbox row written in the same transaction as the change it describes.
    Consumers pick it up after commit.
    """

    __tablename__ = "domain_events"

    id: Mapped[int] = mapped_column(
        BigIntegerType, primary_key=True, nullable=False, autoincrement=True
    )
    event_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    aggregate_id: Mapped[int] = mapped_column(BigIntegerType, nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    status: Mapped[DomainEventStatus] = mapped_column(
        SQLEnum(DomainEventStatus, native_enum=False, length=50),
        nullable=False,
        default=DomainEventStatus.PENDING,
        index=True,
    )
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_error: Mapped[str | None] = mapped_column(Text)
    # Consumers that already succeeded; a retry skips them
    completed_handlers: Mapped[list[str] | None] = mapped_column(JSON)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    # Set when a dispatcher claims the event; a stale claim can be taken over
    claimed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
