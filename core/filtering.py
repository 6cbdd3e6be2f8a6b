"""
Candidate filter engine.

Works on already enhanced candidates held in memory: applies the filter
criteria, ranks by AI match score, paginates and computes aggregate insights
over the filtered set.
"""

from collections import Counter
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.scoring import round_half_up
from database.models.responses import CandidateStatus

TOP_PERFORMER_MIN_SCORE = 80
TOP_PERFORMER_LIMIT = 5
NEEDS_REVIEW_MAX_SCORE = 60
NEEDS_REVIEW_TAB_SWITCHES = 10
NEEDS_REVIEW_RISK_FACTORS = 2


class RangeFilter(BaseModel):
    """Inclusive bounds; a bound of None imposes nothing."""

    min: Optional[float] = None
    max: Optional[float] = None

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True

    @property
    def is_bounded(self) -> bool:
        return self.min is not None or self.max is not None


class FilterCriteria(BaseModel):
    """
    Declarative query over enhanced candidates. Every criterion is optional
    and all provided criteria must hold.

    Accepts both snake_case and camelCase keys (``minScore``).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    min_score: Optional[float] = None
    max_score: Optional[float] = None
    skills: Optional[list[str]] = None
    experience_years: Optional[RangeFilter] = None
    location: Optional[list[str]] = None
    status: Optional[list[CandidateStatus]] = None
    time_spent: Optional[RangeFilter] = None
    # Accepted for compatibility, not applied
    assessment_type: Optional[list[str]] = None
    difficulty_level: Optional[list[str]] = None


class CandidateInsight(BaseModel):
    """Structured AI judgement about one candidate."""

    candidate_id: Optional[int] = None
    match_score: float = 0
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)
    potential_role_fit: list[str] = Field(default_factory=list)

    @classmethod
    def empty(cls, candidate_id: Optional[int] = None) -> "CandidateInsight":
        return cls(candidate_id=candidate_id)


class CandidateProfileData(BaseModel):
    skills: list[str] = Field(default_factory=list)
    experience_years: Optional[int] = None
    location: Optional[str] = None
    education: Optional[list[dict[str, Any]]] = None
    work_experience: Optional[list[dict[str, Any]]] = None
    ai_generated_summary: Optional[str] = None


class AssessmentData(BaseModel):
    id: Optional[int] = None
    skill_assessment_id: Optional[int] = None
    score: Optional[float] = None
    max_score: Optional[float] = None
    passed: Optional[bool] = None
    time_spent: Optional[int] = None
    evaluation_details: Optional[dict[str, Any]] = None
    completed_at: Optional[datetime] = None


class ATSSyncStatus(BaseModel):
    synced: bool = False
    integration_id: Optional[int] = None
    last_sync: Optional[datetime] = None


class EnhancedCandidate(BaseModel):
    """A response joined with its profile, assessments, score and insight."""

    id: int
    interview_id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None
    candidate_status: CandidateStatus = CandidateStatus.PENDING
    duration: Optional[int] = None
    tab_switch_count: Optional[int] = None
    analytics: Optional[dict[str, Any]] = None
    is_analysed: bool = False
    is_viewed: bool = False
    created_at: Optional[datetime] = None

    candidate_profile: Optional[CandidateProfileData] = None
    candidate_assessments: Optional[list[AssessmentData]] = None
    overall_score: Optional[int] = None
    match_score: Optional[float] = None
    ai_insights: Optional[CandidateInsight] = None
    ats_sync_status: Optional[ATSSyncStatus] = None


class FilterInsights(BaseModel):
    average_score: int = 0
    skill_distribution: dict[str, int] = Field(default_factory=dict)
    status_distribution: dict[str, int] = Field(default_factory=dict)
    top_performers: list[EnhancedCandidate] = Field(default_factory=list)
    needs_review: list[EnhancedCandidate] = Field(default_factory=list)


class FilteredCandidatesResult(BaseModel):
    candidates: list[EnhancedCandidate]
    total_count: int
    insights: FilterInsights


def _contains_any(haystack: str, needles: list[str]) -> bool:
    haystack = haystack.lower()
    return any(needle.lower() in haystack for needle in needles)


def matches_criteria(candidate: EnhancedCandidate, criteria: FilterCriteria) -> bool:
    """True when the candidate satisfies every provided criterion."""
    score = candidate.overall_score or 0
    if criteria.min_score is not None and score < criteria.min_score:
        return False
    if criteria.max_score is not None and score > criteria.max_score:
        return False

    if criteria.status and candidate.candidate_status not in criteria.status:
        return False

    profile = candidate.candidate_profile

    if criteria.skills:
        skills = profile.skills if profile else []
        if not any(_contains_any(skill, criteria.skills) for skill in skills):
            return False

    if criteria.experience_years and criteria.experience_years.is_bounded:
        experience = profile.experience_years if profile else None
        if experience is None or not criteria.experience_years.contains(experience):
            return False

    if criteria.location:
        location = (profile.location if profile else None) or ""
        if not _contains_any(location, criteria.location):
            return False

    if criteria.time_spent and criteria.time_spent.is_bounded:
        total_time = sum(a.time_spent or 0 for a in candidate.candidate_assessments or [])
        if not criteria.time_spent.contains(total_time):
            return False

    return True


def apply_filters(
    candidates: list[EnhancedCandidate], criteria: FilterCriteria
) -> list[EnhancedCandidate]:
    return [c for c in candidates if matches_criteria(c, criteria)]


def rank_candidates(candidates: list[EnhancedCandidate]) -> list[EnhancedCandidate]:
    """Highest AI match score first; ties keep their input order."""
    return sorted(candidates, key=lambda c: c.match_score or 0, reverse=True)


def paginate(items: list, page: int, limit: int) -> list:
    """Slice a 1-indexed page out of ``items``."""
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be >= 1")
    start = (page - 1) * limit
    return items[start : start + limit]


def needs_review(candidate: EnhancedCandidate) -> bool:
    risk_factors = candidate.ai_insights.risk_factors if candidate.ai_insights else []
    return (
        (candidate.overall_score or 0) < NEEDS_REVIEW_MAX_SCORE
        or (candidate.tab_switch_count or 0) > NEEDS_REVIEW_TAB_SWITCHES
        or len(risk_factors) > NEEDS_REVIEW_RISK_FACTORS
    )


def compute_insights(candidates: list[EnhancedCandidate]) -> FilterInsights:
    """
    Aggregate view of a filtered candidate set.

    The top performer and needs review buckets are computed independently, so
    one candidate may appear in both.
    """
    if not candidates:
        return FilterInsights()

    scores = [c.overall_score or 0 for c in candidates]
    average = sum(scores) / len(scores)

    skill_counts: Counter[str] = Counter()
    for candidate in candidates:
        if candidate.candidate_profile:
            skill_counts.update(candidate.candidate_profile.skills)

    status_counts = Counter(c.candidate_status.value for c in candidates)

    top_performers = sorted(
        (c for c in candidates if (c.overall_score or 0) >= TOP_PERFORMER_MIN_SCORE),
        key=lambda c: c.overall_score or 0,
        reverse=True,
    )[:TOP_PERFORMER_LIMIT]

    return FilterInsights(
        average_score=round_half_up(average),
        skill_distribution=dict(skill_counts),
        status_distribution=dict(status_counts),
        top_performers=top_performers,
        needs_review=[c for c in candidates if needs_review(c)],
    )


def filter_candidates(
    all_candidates: list[EnhancedCandidate],
    criteria: FilterCriteria,
    page: int = 1,
    limit: int = 20,
) -> FilteredCandidatesResult:
    """
    Filter, rank and paginate candidates.

    Insights are computed over the whole filtered set, before pagination.
    """
    filtered = rank_candidates(apply_filters(all_candidates, criteria))
    return FilteredCandidatesResult(
        candidates=paginate(filtered, page, limit),
        total_count=len(filtered),
        insights=compute_insights(filtered),
    )
