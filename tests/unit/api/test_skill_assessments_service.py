"""Tests for skill assessment service functions."""

import pytest

from api.services import skill_assessments as assessment_service
from core.exceptions import (
    AssessmentAlreadyCompletedError,
    DuplicateAssessmentError,
    NotFoundError,
)


@pytest.fixture
def create_assessment(interview):
    async def _create(**fields):
        fields.setdefault("title", "Python Fundamentals")
        fields.setdefault("assessment_type", "coding")
        fields.setdefault("difficulty_level", "intermediate")
        return await assessment_service.create_skill_assessment(interview.id, **fields)

    return _create


class TestSkillAssessments:

    async def test_create_and_get(self, create_assessment):
        created = await create_assessment(time_limit=45, passing_score=60)

        assert created["assessment_type"] == "coding"
        assert created["difficulty_level"] == "intermediate"
        assert created["passing_score"] == 60
        assert created["is_active"] is True
        assert await assessment_service.get_skill_assessment(created["id"]) == created

    async def test_create_for_unknown_interview(self, session_factory):
        with pytest.raises(NotFoundError):
            await assessment_service.create_skill_assessment(
                999, "SQL", "technical", "beginner"
            )

    async def test_update_ignores_unknown_fields(self, create_assessment):
        created = await create_assessment()

        updated = await assessment_service.update_skill_assessment(
            created["id"],
            {"title": "Advanced Python", "difficulty_level": "expert", "interview_id": 77},
        )

        assert updated["title"] == "Advanced Python"
        assert updated["difficulty_level"] == "expert"
        assert updated["interview_id"] == created["interview_id"]

    async def test_list_skips_inactive(self, create_assessment, interview):
        active = await create_assessment()
        retired = await create_assessment(title="Legacy")
        await assessment_service.update_skill_assessment(retired["id"], {"is_active": False})

        listed = await assessment_service.list_skill_assessments(interview.id)

        assert [a["id"] for a in listed] == [active["id"]]

    async def test_delete(self, create_assessment):
        created = await create_assessment()
        await assessment_service.delete_skill_assessment(created["id"])
        assert await assessment_service.get_skill_assessment(created["id"]) is None
        with pytest.raises(NotFoundError):
            await assessment_service.delete_skill_assessment(created["id"])


class TestCandidateAssessments:

    async def test_single_attempt_per_candidate(self, create_assessment, make_response):
        assessment = await create_assessment()
        response = await make_response()
        attempt = await assessment_service.start_candidate_assessment(
            assessment["id"], response.id
        )

        assert attempt["started_at"] is not None
        assert attempt["completed_at"] is None
        with pytest.raises(DuplicateAssessmentError):
            await assessment_service.start_candidate_assessment(assessment["id"], response.id)

    async def test_start_for_unknown_response(self, create_assessment):
        assessment = await create_assessment()
        with pytest.raises(NotFoundError):
            await assessment_service.start_candidate_assessment(assessment["id"], 999)

    @pytest.mark.parametrize("score,passed", [(14, True), (13, False)])
    async def test_passed_derived_from_passing_score(
        self, create_assessment, make_response, score, passed
    ):
        assessment = await create_assessment(passing_score=70)
        response = await make_response()
        attempt = await assessment_service.start_candidate_assessment(
            assessment["id"], response.id
        )

        completed = await assessment_service.complete_candidate_assessment(
            attempt["id"], score=score, max_score=20, time_spent=600
        )

        assert completed["passed"] is passed
        assert completed["completed_at"] is not None
        assert completed["time_spent"] == 600

    async def test_explicit_passed_wins(self, create_assessment, make_response):
        assessment = await create_assessment()
        response = await make_response()
        attempt = await assessment_service.start_candidate_assessment(
            assessment["id"], response.id
        )
        completed = await assessment_service.complete_candidate_assessment(
            attempt["id"], score=1, max_score=100, passed=True
        )
        assert completed["passed"] is True

    async def test_complete_twice(self, create_assessment, make_response):
        assessment = await create_assessment()
        response = await make_response()
        attempt = await assessment_service.start_candidate_assessment(
            assessment["id"], response.id
        )
        await assessment_service.complete_candidate_assessment(attempt["id"], 8, 10)

        with pytest.raises(AssessmentAlreadyCompletedError):
            await assessment_service.complete_candidate_assessment(attempt["id"], 10, 10)

    async def test_complete_unknown(self, session_factory):
        with pytest.raises(NotFoundError):
            await assessment_service.complete_candidate_assessment(404, 1, 1)

    async def test_list_includes_template(self, create_assessment, make_response):
        assessment = await create_assessment()
        response = await make_response()
        await assessment_service.start_candidate_assessment(assessment["id"], response.id)

        attempts = await assessment_service.list_candidate_assessments(response.id)

        assert attempts[0]["skill_assessment"]["title"] == "Python Fundamentals"


class TestOverallResult:

    async def test_pooled_over_completed_attempts(
        self, create_assessment, make_response, fake_agent
    ):
        agent = fake_agent(
            "assessment_feedback",
            {"detailed_feedback": "Solid", "recommendations": ["Keep going"], "skill_scores": {}},
        )
        response = await make_response()
        python = await create_assessment()
        sql = await create_assessment(title="SQL", assessment_type="technical")
        design = await create_assessment(title="Design", assessment_type="mixed")
        for template, score, max_score in ((python, 18, 20), (sql, 6, 10)):
            attempt = await assessment_service.start_candidate_assessment(
                template["id"], response.id
            )
            await assessment_service.complete_candidate_assessment(
                attempt["id"], score=score, max_score=max_score
            )
        await assessment_service.start_candidate_assessment(design["id"], response.id)

        result = await assessment_service.generate_overall_assessment_result(response.id)

        assert result["overall_score"] == 80
        assert result["max_score"] == 30
        assert result["passed"] is False
        assert result["assessment_count"] == 2
        assert result["detailed_feedback"] == "Solid"
        assert len(agent.calls[0]["assessments"]) == 2

    async def test_no_completed_attempts(self, make_response, fake_agent):
        fake_agent(
            "assessment_feedback",
            {"detailed_feedback": "n/a", "recommendations": [], "skill_scores": {}},
        )
        response = await make_response()

        result = await assessment_service.generate_overall_assessment_result(response.id)

        assert result["overall_score"] == 0
        assert result["passed"] is False
        assert result["assessment_count"] == 0
