"""Candidate filtering and export schemas."""

from typing import Optional
from pydantic import BaseModel, Field

from core.filtering import FilterCriteria


class CandidateFilterRequest(BaseModel):
    """Filter query over the candidates of an interview."""

    interview_id: int = Field(ge=1)
    criteria: FilterCriteria = Field(default_factory=FilterCriteria)
    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    limit: int = Field(default=20, ge=1, le=100, description="Candidates per page")


class CandidateExportRequest(BaseModel):
    """Export of the filtered candidates of an interview."""

    interview_id: int = Field(ge=1)
    format: str = Field(default="csv", description="json or csv")
    criteria: Optional[FilterCriteria] = None
