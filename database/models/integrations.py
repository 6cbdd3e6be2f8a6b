"""
ATS Integration Models

Per-organization applicant tracking system configuration and the append-only
log of sync attempts. Provider credentials are encrypted at rest.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    DateTime,
    func,
    Text,
    JSON,
    Enum as SQLEnum,
    Index,
)
from database.engine import Base, BigIntegerType
from database.security import (
    ComplianceMixin,
    compliance_column,
    DataSensitivity,
    EncryptionType,
)
from datetime import datetime
from enum import Enum as PyEnum
from typing import Any


# ==================== Integration Enums ===================== #
class ATSProvider(str, PyEnum):
    """Supported applicant tracking systems."""

    GREENHOUSE = "greenhouse"
    LEVER = "lever"
    WORKDAY = "workday"
    CUSTOM = "custom"


class SyncType(str, PyEnum):
    """Kinds of outbound sync operations."""

    CANDIDATE_CREATE = "candidate_create"
    STATUS_UPDATE = "status_update"
    ASSESSMENT_RESULT = "assessment_result"


class SyncLogStatus(str, PyEnum):
    """Outcome of a sync attempt."""

    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"


# ==================== ATS Integration Model ===================== #
class ATSIntegration(Base, ComplianceMixin):
    """
    Stores ATS credentials and configuration for an organization.
    """

    __tablename__ = "ats_integrations"

    id: Mapped[int] = mapped_column(
        BigIntegerType, primary_key=True, nullable=False, autoincrement=True
    )
    organization_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    provider: Mapped[ATSProvider] = mapped_column(
        SQLEnum(ATSProvider, native_enum=False, length=50),
        nullable=False,
        index=True,
    )

    # Credentials (encrypted)
    api_key: Mapped[str | None] = mapped_column(
        Text,
        info=compliance_column(
            sensitivity=DataSensitivity.RESTRICTED,
            encryption=EncryptionType.AT_REST,
        ),
    )
    api_secret: Mapped[str | None] = mapped_column(
        Text,
        info=compliance_column(
            sensitivity=DataSensitivity.RESTRICTED,
            encryption=EncryptionType.AT_REST,
        ),
    )

    api_url: Mapped[str | None] = mapped_column(String(1024))
    webhook_url: Mapped[str | None] = mapped_column(String(1024))
    configuration: Mapped[dict[str, Any] | None] = mapped_column(JSON)
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

    sync_logs: Mapped[list["ATSSyncLog"]] = relationship(
        "ATSSyncLog",
        back_populates="integration",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_ats_integrations_org_active", "organization_id", "is_active"),
    )


# ==================== ATS Sync Log Model ===================== #
class ATSSyncLog(Base):
    """
    Append-only record of one sync attempt. Rows are inserted, never updated.
    """

    __tablename__ = "ats_sync_logs"

    id: Mapped[int] = mapped_column(
        BigIntegerType, primary_key=True, nullable=False, autoincrement=True
    )
    ats_integration_id: Mapped[int] = mapped_column(
        BigIntegerType,
        ForeignKey("ats_integrations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    response_id: Mapped[int] = mapped_column(
        BigIntegerType,
        ForeignKey("responses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sync_type: Mapped[SyncType] = mapped_column(
        SQLEnum(SyncType, native_enum=False, length=50),
        nullable=False,
    )
    status: Mapped[SyncLogStatus] = mapped_column(
        SQLEnum(SyncLogStatus, native_enum=False, length=50),
        nullable=False,
        index=True,
    )
    request_data: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    response_data: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    error_message: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    integration: Mapped["ATSIntegration"] = relationship(
        "ATSIntegration", back_populates="sync_logs"
    )
