"""Candidate profile schemas."""

from typing import Any, Optional
from pydantic import BaseModel, Field


class CandidateProfileUpsert(BaseModel):
    """Fields to write on a candidate profile. Unset fields are left as stored."""

    resume_url: Optional[str] = Field(None, max_length=1024)
    linkedin_url: Optional[str] = Field(None, max_length=1024)
    github_url: Optional[str] = Field(None, max_length=1024)
    portfolio_url: Optional[str] = Field(None, max_length=1024)
    phone: Optional[str] = Field(None, max_length=50)
    expected_salary: Optional[str] = Field(None, max_length=100)
    notice_period: Optional[str] = Field(None, max_length=100)
    skills: Optional[list[str]] = None
    experience_years: Optional[int] = Field(None, ge=0, le=80)
    location: Optional[str] = Field(None, max_length=255)
    education: Optional[list[dict[str, Any]]] = None
    work_experience: Optional[list[dict[str, Any]]] = None
    generate_summary: bool = Field(
        default=False, description="Generate an AI professional summary"
    )
