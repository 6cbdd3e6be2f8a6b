"""Tests for the in-memory candidate filter engine."""

import pytest

from core.filtering import (
    AssessmentData,
    CandidateInsight,
    CandidateProfileData,
    EnhancedCandidate,
    FilterCriteria,
    apply_filters,
    compute_insights,
    filter_candidates,
    paginate,
)
from database.models.responses import CandidateStatus


def candidate(
    id,
    score=None,
    skills=None,
    match=None,
    status=CandidateStatus.PENDING,
    experience=None,
    location=None,
    tab_switches=None,
    risks=None,
    time_spent=None,
):
    return EnhancedCandidate(
        id=id,
        candidate_status=status,
        overall_score=score,
        match_score=match,
        tab_switch_count=tab_switches,
        candidate_profile=CandidateProfileData(
            skills=skills or [], experience_years=experience, location=location
        ),
        candidate_assessments=[AssessmentData(time_spent=t) for t in time_spent or []],
        ai_insights=CandidateInsight(candidate_id=id, risk_factors=risks or []),
    )


class TestCriteria:

    def test_criteria_compose_with_and(self):
        a = candidate(1, score=90, skills=["react"])
        b = candidate(2, score=40, skills=["react"])
        criteria = FilterCriteria.model_validate({"minScore": 70, "skills": ["react"]})

        assert [c.id for c in apply_filters([a, b], criteria)] == [1]

    def test_empty_criteria_keeps_everyone(self):
        candidates = [candidate(i, score=i * 10) for i in range(1, 4)]
        assert apply_filters(candidates, FilterCriteria()) == candidates

    def test_skill_match_is_case_insensitive_substring(self):
        c = candidate(1, skills=["ReactJS", "Node"])
        assert apply_filters([c], FilterCriteria(skills=["react"])) == [c]
        assert apply_filters([c], FilterCriteria(skills=["python"])) == []

    def test_missing_score_counts_as_zero(self):
        c = candidate(1, score=None)
        assert apply_filters([c], FilterCriteria(max_score=0)) == [c]
        assert apply_filters([c], FilterCriteria(min_score=1)) == []

    def test_zero_experience_bound_is_applied(self):
        junior = candidate(1, experience=0)
        unknown = candidate(2, experience=None)
        criteria = FilterCriteria.model_validate({"experienceYears": {"min": 0, "max": 2}})

        assert apply_filters([junior, unknown], criteria) == [junior]

    def test_location_and_status(self):
        berlin = candidate(1, location="Berlin, Germany", status=CandidateStatus.IN_REVIEW)
        paris = candidate(2, location="Paris", status=CandidateStatus.IN_REVIEW)
        criteria = FilterCriteria(location=["berlin"], status=[CandidateStatus.IN_REVIEW])

        assert apply_filters([berlin, paris], criteria) == [berlin]

    def test_time_spent_sums_assessments(self):
        c = candidate(1, time_spent=[600, 900])
        assert apply_filters([c], FilterCriteria.model_validate({"timeSpent": {"min": 1500}})) == [c]
        assert apply_filters([c], FilterCriteria.model_validate({"timeSpent": {"max": 1000}})) == []

    def test_assessment_type_is_accepted_but_not_applied(self):
        c = candidate(1)
        assert apply_filters([c], FilterCriteria(assessment_type=["coding"])) == [c]


class TestPagination:

    def test_pages_are_disjoint_and_sorted_by_match_score(self):
        candidates = [candidate(i, score=80, match=float(i)) for i in range(1, 26)]

        first = filter_candidates(candidates, FilterCriteria(), page=1, limit=20)
        second = filter_candidates(candidates, FilterCriteria(), page=2, limit=20)

        first_ids = [c.id for c in first.candidates]
        second_ids = [c.id for c in second.candidates]
        assert len(first_ids) == 20
        assert len(second_ids) == 5
        assert set(first_ids).isdisjoint(second_ids)
        assert set(first_ids) | set(second_ids) == set(range(1, 26))
        assert first_ids + second_ids == list(range(25, 0, -1))
        assert first.total_count == second.total_count == 25

    def test_page_past_the_end_is_empty(self):
        assert paginate(list(range(5)), page=3, limit=5) == []

    def test_invalid_page_rejected(self):
        with pytest.raises(ValueError):
            paginate([1], page=0, limit=10)


class TestInsights:

    def test_empty_set(self):
        insights = compute_insights([])
        assert insights.average_score == 0
        assert insights.top_performers == []
        assert insights.needs_review == []

    def test_aggregates(self):
        candidates = [
            candidate(1, score=95, skills=["python", "sql"]),
            candidate(2, score=85, skills=["python"], status=CandidateStatus.IN_REVIEW),
            candidate(3, score=50, skills=["go"]),
        ]
        insights = compute_insights(candidates)

        assert insights.average_score == 77
        assert insights.skill_distribution == {"python": 2, "sql": 1, "go": 1}
        assert insights.status_distribution == {"pending": 2, "in_review": 1}
        assert [c.id for c in insights.top_performers] == [1, 2]
        assert [c.id for c in insights.needs_review] == [3]

    def test_top_performers_capped_at_five(self):
        candidates = [candidate(i, score=80 + i) for i in range(8)]
        top = compute_insights(candidates).top_performers
        assert [c.id for c in top] == [7, 6, 5, 4, 3]

    def test_buckets_may_overlap(self):
        # High score but many tab switches
        c = candidate(1, score=92, tab_switches=15)
        insights = compute_insights([c])
        assert insights.top_performers == [c]
        assert insights.needs_review == [c]

    def test_risk_factors_flag_review(self):
        c = candidate(1, score=85, risks=["a", "b", "c"])
        assert compute_insights([c]).needs_review == [c]

    def test_insights_cover_whole_filtered_set(self):
        candidates = [candidate(i, score=90, match=float(i)) for i in range(1, 8)]
        result = filter_candidates(candidates, FilterCriteria(), page=1, limit=2)
        assert len(result.candidates) == 2
        assert len(result.insights.top_performers) == 5
