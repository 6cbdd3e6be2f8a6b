"""Candidate status workflow schemas."""

from typing import Optional
from pydantic import BaseModel, Field

from database.models.responses import CandidateStatus


class StatusUpdateRequest(BaseModel):
    """Request to move a candidate to another status."""

    response_id: int = Field(ge=1, description="Candidate response id")
    new_status: CandidateStatus = Field(description="Target status")
    reason: Optional[str] = Field(None, max_length=2000, description="Why the status changes")


class ApprovalRequest(BaseModel):
    comments: Optional[str] = Field(None, max_length=2000)


class RejectionRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=2000)


class StatusChangeResponse(BaseModel):
    """Outcome of a status change, approval or rejection."""

    success: bool
    message: Optional[str] = None
    requires_approval: bool = False
    request_id: Optional[int] = None


class StatusHistoryEntry(BaseModel):
    id: int
    response_id: int
    previous_status: Optional[CandidateStatus] = None
    new_status: CandidateStatus
    changed_by: str
    reason: Optional[str] = None
    is_automatic: bool
    changed_at: Optional[str] = None


class StatusRecommendation(BaseModel):
    recommended_status: CandidateStatus
    confidence: float = Field(ge=0, le=100)
    reasoning: str


class DropoffPoint(BaseModel):
    status: CandidateStatus
    count: int
    percentage: float


class StatusMetrics(BaseModel):
    total_candidates: int
    status_distribution: dict[str, int]
    average_time_in_status: dict[str, float] = Field(
        description="Mean hours spent in each status before leaving it"
    )
    conversion_rates: dict[str, dict[str, float]]
    dropoff_points: list[DropoffPoint]


class AutoUpdateSummary(BaseModel):
    checked: int
    updated: int
    failed: int
