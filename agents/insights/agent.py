"""Candidate insight agent."""

import logging
from typing import Any, Dict, List, Optional

from agents.base import BaseAgent
from agents.registry import register_agent
from agents.common.utils import bounded_number, format_agent_context, string_list
from agents.insights.prompts import INSIGHT_INSTRUCTIONS, INSIGHT_PROMPT
from core.filtering import CandidateInsight

logger = logging.getLogger(__name__)


def build_candidate_context(
    candidate: Dict[str, Any],
    profile: Optional[Dict[str, Any]] = None,
    assessments: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Assemble the model context from candidate fields in a fixed order."""
    context: Dict[str, Any] = {
        "name": candidate.get("name") or "Unknown",
        "email": candidate.get("email"),
        "duration_seconds": candidate.get("duration"),
        "tab_switches": candidate.get("tab_switch_count"),
        "status": candidate.get("candidate_status"),
    }
    if profile:
        context.update(
            {
                "experience_years": profile.get("experience_years"),
                "location": profile.get("location"),
                "skills": ", ".join(profile.get("skills") or []) or None,
                "education": profile.get("education") or [],
                "work_experience": profile.get("work_experience") or [],
                "ai_summary": profile.get("ai_generated_summary") or "Not available",
            }
        )
    if assessments:
        context["assessment_results"] = [
            {
                "assessment": a.get("skill_assessment_id"),
                "score": a.get("score"),
                "max_score": a.get("max_score"),
                "passed": a.get("passed"),
                "time_spent_seconds": a.get("time_spent"),
            }
            for a in sorted(assessments, key=lambda a: a.get("skill_assessment_id") or 0)
        ]
    context["interview_analytics"] = candidate.get("analytics") or {}
    return context


def build_insight_prompt(
    candidate: Dict[str, Any],
    profile: Optional[Dict[str, Any]] = None,
    assessments: Optional[List[Dict[str, Any]]] = None,
) -> str:
    """Deterministic prompt: equal candidate state gives an identical string."""
    context = build_candidate_context(candidate, profile, assessments)
    return INSIGHT_PROMPT.format(context=format_agent_context(context))


def parse_insight(data: Dict[str, Any], candidate_id: Optional[int]) -> CandidateInsight:
    """Read the model's JSON defensively, dropping malformed fields."""
    return CandidateInsight(
        candidate_id=candidate_id,
        match_score=bounded_number(data.get("match_score")),
        strengths=string_list(data.get("strengths")),
        weaknesses=string_list(data.get("weaknesses")),
        recommendations=string_list(data.get("recommendations")),
        risk_factors=string_list(data.get("risk_factors")),
        potential_role_fit=string_list(data.get("potential_role_fit")),
    )


@register_agent("candidate_insights")
class CandidateInsightAgent(BaseAgent):
    """Agent producing strengths, weaknesses, risks and a match score."""

    def __init__(self, client: Any = None):
        super().__init__(
            name="candidate_insights",
            instructions=INSIGHT_INSTRUCTIONS,
            client=client,
        )

    async def process(self, input_data: Dict[str, Any]) -> CandidateInsight:
        """Generate insights for one candidate.

        Args:
            input_data: Dictionary with ``candidate`` and optional ``profile``
                and ``assessments``

        Returns:
            CandidateInsight, zeroed when the service fails or replies with
            malformed JSON
        """
        candidate = input_data.get("candidate", {})
        candidate_id = candidate.get("id")
        prompt = build_insight_prompt(
            candidate, input_data.get("profile"), input_data.get("assessments")
        )

        try:
            data = await self.run_json(prompt)
        except Exception as e:
            logger.warning(
                f"Insight generation failed for candidate {candidate_id}: {e}"
            )
            return CandidateInsight.empty(candidate_id)

        return parse_insight(data, candidate_id)
