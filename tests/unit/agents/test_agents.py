"""Tests for the Gemini backed agents with a fake client."""

import json

import pytest
from google.genai import errors

from agents.assessment.agent import FALLBACK_FEEDBACK, AssessmentFeedbackAgent
from agents.common.utils import bounded_number, format_agent_context, parse_json_response
from agents.insights.agent import CandidateInsightAgent, build_insight_prompt
from agents.profile.agent import FALLBACK_SUMMARY, ProfileSummaryAgent
from agents.registry import registry
from agents.status.agent import FALLBACK_REASONING, StatusRecommendationAgent
from conftest import fake_genai_client


def rate_limited():
    return errors.ClientError(
        429, {"error": {"code": 429, "message": "Quota exceeded", "status": "RESOURCE_EXHAUSTED"}}
    )


def bad_request():
    return errors.ClientError(
        400, {"error": {"code": 400, "message": "Invalid prompt", "status": "INVALID_ARGUMENT"}}
    )


INSIGHT_JSON = json.dumps({
    "match_score": 87,
    "strengths": ["Clear communication"],
    "weaknesses": ["Limited SQL"],
    "recommendations": ["Pair with a senior"],
    "risk_factors": [],
    "potential_role_fit": ["Backend Engineer"],
})


class TestUtils:

    def test_parse_code_block(self):
        assert parse_json_response('```json\n{"a": 1}\n```') == {"a": 1}

    @pytest.mark.parametrize("text", [None, "", "not json", "{broken"])
    def test_parse_garbage(self, text):
        assert parse_json_response(text) is None

    @pytest.mark.parametrize("value,expected", [
        (50, 50.0), ("75", 75.0), (150, 100.0), (-3, 0.0), ("high", 0.0), (None, 0.0), (True, 0.0),
    ])
    def test_bounded_number(self, value, expected):
        assert bounded_number(value) == expected

    def test_context_is_deterministic(self):
        first = format_agent_context({"skills": {"b": 1, "a": 2}, "name": None})
        second = format_agent_context({"skills": {"a": 2, "b": 1}, "name": None})
        assert first == second
        assert "Name: Not specified" in first


class TestRetry:

    async def test_rate_limit_retried_until_success(self):
        client = fake_genai_client(rate_limited(), rate_limited(), INSIGHT_JSON)
        agent = CandidateInsightAgent(client=client)
        agent.retry_base_delay = 0

        insight = await agent.process({"candidate": {"id": 4, "name": "Ada"}})

        assert client.aio.models.generate_content.await_count == 3
        assert insight.candidate_id == 4
        assert insight.match_score == 87
        assert insight.strengths == ["Clear communication"]

    async def test_gives_up_after_max_attempts(self):
        client = fake_genai_client(rate_limited(), rate_limited(), rate_limited(), INSIGHT_JSON)
        agent = CandidateInsightAgent(client=client)
        agent.retry_base_delay = 0

        insight = await agent.process({"candidate": {"id": 4}})

        assert client.aio.models.generate_content.await_count == 3
        assert insight.match_score == 0
        assert insight.strengths == []

    async def test_other_errors_not_retried(self):
        client = fake_genai_client(bad_request(), INSIGHT_JSON)
        agent = CandidateInsightAgent(client=client)
        agent.retry_base_delay = 0

        insight = await agent.process({"candidate": {"id": 4}})

        assert client.aio.models.generate_content.await_count == 1
        assert insight.match_score == 0


class TestCandidateInsightAgent:

    async def test_malformed_json_gives_empty_insight(self):
        agent = CandidateInsightAgent(client=fake_genai_client("I think they are great"))
        insight = await agent.process({"candidate": {"id": 9}})
        assert insight.candidate_id == 9
        assert insight.match_score == 0
        assert insight.risk_factors == []

    async def test_malformed_fields_dropped(self):
        reply = json.dumps({"match_score": "n/a", "strengths": "many", "risk_factors": ["late", None]})
        insight = await CandidateInsightAgent(client=fake_genai_client(reply)).process(
            {"candidate": {"id": 1}}
        )
        assert insight.match_score == 0
        assert insight.strengths == []
        assert insight.risk_factors == ["late"]

    def test_prompt_is_deterministic(self):
        candidate = {"id": 1, "name": "Ada", "analytics": {"b": 2, "a": 1}}
        assessments = [
            {"skill_assessment_id": 2, "score": 5, "max_score": 10},
            {"skill_assessment_id": 1, "score": 9, "max_score": 10},
        ]
        assert build_insight_prompt(candidate, None, assessments) == build_insight_prompt(
            dict(candidate), None, list(reversed(assessments))
        )


class TestStatusRecommendationAgent:

    async def test_recommendation(self):
        reply = json.dumps({"recommended_status": "In_Review", "confidence": 82, "reasoning": "Strong"})
        result = await StatusRecommendationAgent(client=fake_genai_client(reply)).process(
            {"current_status": "pending"}
        )
        assert result == {"recommended_status": "in_review", "confidence": 82.0, "reasoning": "Strong"}

    async def test_unknown_status_coerced_to_pending(self):
        reply = json.dumps({"recommended_status": "hire_now", "confidence": 200, "reasoning": "x"})
        result = await StatusRecommendationAgent(client=fake_genai_client(reply)).process({})
        assert result["recommended_status"] == "pending"
        assert result["confidence"] == 100.0

    async def test_failure_degrades(self):
        agent = StatusRecommendationAgent(client=fake_genai_client(bad_request()))
        result = await agent.process({})
        assert result == {
            "recommended_status": "pending",
            "confidence": 0,
            "reasoning": FALLBACK_REASONING,
        }


class TestAssessmentFeedbackAgent:

    async def test_feedback(self):
        reply = json.dumps({
            "detailed_feedback": "Solid fundamentals",
            "recommendations": ["Practice system design"],
            "skill_scores": {"python": 91, "sql": "bad"},
        })
        result = await AssessmentFeedbackAgent(client=fake_genai_client(reply)).process(
            {"assessments": [{"score": 9, "max_score": 10, "passed": True}]}
        )
        assert result["detailed_feedback"] == "Solid fundamentals"
        assert result["skill_scores"] == {"python": 91.0, "sql": 0.0}

    async def test_failure_degrades(self):
        result = await AssessmentFeedbackAgent(client=fake_genai_client("nope")).process(
            {"assessments": []}
        )
        assert result == {
            "detailed_feedback": FALLBACK_FEEDBACK,
            "recommendations": [],
            "skill_scores": {},
        }


class TestProfileSummaryAgent:

    async def test_summary_text(self):
        agent = ProfileSummaryAgent(client=fake_genai_client("  Seasoned engineer.  "))
        assert await agent.process({"skills": ["python"]}) == "Seasoned engineer."

    async def test_failure_degrades(self):
        agent = ProfileSummaryAgent(client=fake_genai_client(bad_request()))
        assert await agent.process({}) == FALLBACK_SUMMARY


def test_registry_lists_all_agents():
    assert set(registry.list_agents()) >= {
        "candidate_insights",
        "status_recommendation",
        "assessment_feedback",
        "profile_summary",
    }


def test_unknown_agent():
    with pytest.raises(KeyError):
        registry.get("resume_parser")
