"""Tests for candidate enhancement, recommendations and export."""

import csv
import io
import json
from datetime import datetime, timezone

import pytest

from agents.registry import registry
from api.services import candidate_filtering as filtering_service
from core.exceptions import NotFoundError, UnsupportedExportFormatError
from core.filtering import CandidateInsight, FilterCriteria
from database.models.assessments import AssessmentType, CandidateAssessment, SkillAssessment
from database.models.integrations import (
    ATSIntegration,
    ATSProvider,
    ATSSyncLog,
    SyncLogStatus,
    SyncType,
)
from database.models.responses import CandidateProfile, CandidateStatus


class InsightByName:
    """Insight agent stand-in scoring candidates from a name lookup."""

    def __init__(self, scores, fail_for=()):
        self.scores = scores
        self.fail_for = set(fail_for)
        self.calls = []

    async def process(self, input_data):
        candidate = input_data["candidate"]
        self.calls.append(input_data)
        if candidate["name"] in self.fail_for:
            raise RuntimeError("insight backend down")
        return CandidateInsight(
            candidate_id=candidate["id"],
            match_score=self.scores.get(candidate["name"], 0),
            risk_factors=["late submission"] if candidate["name"] == "Grace" else [],
        )


@pytest.fixture
def insights():
    def _install(scores, fail_for=()):
        agent = InsightByName(scores, fail_for)
        registry.override("candidate_insights", agent)
        return agent

    return _install


@pytest.fixture
async def skill(add, interview):
    return await add(
        SkillAssessment(
            interview_id=interview.id, title="Python", assessment_type=AssessmentType.CODING
        )
    )


@pytest.fixture
def scored_response(add, make_response, skill):
    """Response with a profile and one completed assessment out of 100."""

    async def _make(name, score, completed=True, **fields):
        response = await make_response(name=name, email=f"{name.lower()}@example.com", **fields)
        await add(
            CandidateProfile(
                response_id=response.id,
                skills=["Python", "SQL"],
                experience_years=4,
                location="Berlin",
            ),
            CandidateAssessment(
                response_id=response.id,
                skill_assessment_id=skill.id,
                score=score,
                max_score=100,
                passed=score >= 70,
                time_spent=900,
                completed_at=datetime(2026, 3, 1, tzinfo=timezone.utc) if completed else None,
            ),
        )
        return response

    return _make


class TestEnhance:

    async def test_enhanced_fields(self, scored_response, insights, interview, add):
        agent = insights({"Ada": 91})
        response = await scored_response("Ada", 85)
        integration = await add(ATSIntegration(organization_id="org_1", provider=ATSProvider.LEVER))
        await add(
            ATSSyncLog(
                ats_integration_id=integration.id,
                response_id=response.id,
                sync_type=SyncType.CANDIDATE_CREATE,
                status=SyncLogStatus.SUCCESS,
            )
        )

        [candidate] = await filtering_service.enhance_candidates(interview.id)

        assert candidate.overall_score == 85
        assert candidate.match_score == 91
        assert candidate.candidate_profile.skills == ["Python", "SQL"]
        assert candidate.ats_sync_status.synced is True
        assert candidate.ats_sync_status.integration_id == integration.id
        assert agent.calls[0]["profile"]["location"] == "Berlin"

    async def test_only_completed_assessments_score(self, scored_response, insights, interview):
        insights({})
        await scored_response("Ada", 90, completed=False)

        [candidate] = await filtering_service.enhance_candidates(interview.id)

        assert candidate.overall_score == 0
        assert candidate.ats_sync_status.synced is False

    async def test_failed_enhancement_returns_bare_candidate(
        self, scored_response, insights, interview
    ):
        insights({"Ada": 80}, fail_for={"Grace"})
        await scored_response("Ada", 80)
        await scored_response("Grace", 60)

        candidates = await filtering_service.enhance_candidates(interview.id)

        by_name = {c.name: c for c in candidates}
        assert by_name["Ada"].overall_score == 80
        assert by_name["Grace"].overall_score is None
        assert by_name["Grace"].ai_insights is None

    async def test_without_insights(self, scored_response, interview):
        await scored_response("Ada", 75)
        [candidate] = await filtering_service.enhance_candidates(interview.id, with_insights=False)
        assert candidate.overall_score == 75
        assert candidate.match_score is None


class TestFilterAndRecommend:

    async def test_filter_ranks_by_match_score(self, scored_response, insights, interview):
        insights({"Ada": 60, "Grace": 95, "Linus": 80})
        await scored_response("Ada", 90)
        await scored_response("Grace", 85, tab_switch_count=12)
        await scored_response("Linus", 40)

        result = await filtering_service.filter_interview_candidates(
            interview.id, FilterCriteria(min_score=50, skills=["python"]), page=1, limit=1
        )

        assert result.total_count == 2
        assert [c.name for c in result.candidates] == ["Grace"]
        assert [c.name for c in result.insights.top_performers] == ["Ada", "Grace"]
        # Grace is a top performer and needs review for tab switching
        assert [c.name for c in result.insights.needs_review] == ["Grace"]

    async def test_recommendations(self, scored_response, insights, interview):
        insights({"Ada": 70, "Grace": 99, "Linus": 85})
        await scored_response("Ada", 88)
        await scored_response("Grace", 92, candidate_status=CandidateStatus.REJECTED)
        await scored_response("Linus", 71, candidate_status=CandidateStatus.IN_REVIEW)
        await scored_response("Mary", 50)

        recommended = await filtering_service.get_candidate_recommendations(interview.id, count=5)

        assert [c.name for c in recommended] == ["Linus", "Ada"]

    async def test_single_insight(self, scored_response, insights):
        insights({"Ada": 77})
        response = await scored_response("Ada", 80)

        insight = await filtering_service.generate_candidate_insight(response.id)

        assert insight.candidate_id == response.id
        assert insight.match_score == 77

    async def test_single_insight_unknown_response(self, session_factory):
        with pytest.raises(NotFoundError):
            await filtering_service.generate_candidate_insight(999)


class TestExport:

    async def test_csv(self, scored_response, insights, interview):
        insights({"Ada": 88})
        await scored_response("Ada", 81)

        content, media_type = await filtering_service.export_candidates(interview.id, "csv")

        assert media_type == "text/csv"
        rows = list(csv.reader(io.StringIO(content)))
        assert rows[0] == filtering_service.CSV_COLUMNS
        header = dict(zip(rows[0], rows[1]))
        assert header["Name"] == "Ada"
        assert header["Status"] == "pending"
        assert header["Overall Score"] == "81"
        assert header["Skills"] == "Python; SQL"
        assert header["Assessments Completed"] == "1"

    async def test_json(self, scored_response, insights, interview):
        insights({"Ada": 88})
        await scored_response("Ada", 81)

        content, media_type = await filtering_service.export_candidates(interview.id, "json")

        assert media_type == "application/json"
        [exported] = json.loads(content)
        assert exported["email"] == "ada@example.com"
        assert exported["ai_insights"]["match_score"] == 88

    async def test_unsupported_format(self, interview, session_factory):
        with pytest.raises(UnsupportedExportFormatError):
            await filtering_service.export_candidates(interview.id, "excel")
