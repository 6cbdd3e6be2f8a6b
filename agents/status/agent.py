"""Status recommendation agent."""

import logging
from typing import Any, Dict

from agents.base import BaseAgent
from agents.registry import register_agent
from agents.common.utils import bounded_number, format_agent_context
from agents.status.prompts import STATUS_INSTRUCTIONS, STATUS_PROMPT
from database.models.responses import CandidateStatus

logger = logging.getLogger(__name__)

FALLBACK_REASONING = "Error generating recommendation"


def build_status_prompt(context: Dict[str, Any]) -> str:
    statuses = ", ".join(status.value for status in CandidateStatus)
    return STATUS_PROMPT.format(context=format_agent_context(context), statuses=statuses)


def coerce_status(value: Any) -> CandidateStatus:
    """Unknown statuses from the model fall back to ``pending``."""
    try:
        return CandidateStatus(str(value).strip().lower())
    except ValueError:
        return CandidateStatus.PENDING


@register_agent("status_recommendation")
class StatusRecommendationAgent(BaseAgent):
    """Agent recommending the next workflow status for a candidate."""

    def __init__(self, client: Any = None):
        super().__init__(
            name="status_recommendation",
            instructions=STATUS_INSTRUCTIONS,
            client=client,
        )

    async def process(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        """Recommend a status.

        Args:
            input_data: Candidate context (current status, metrics, overall
                score, assessments, analytics, profile)

        Returns:
            ``{recommended_status, confidence, reasoning}``
        """
        try:
            data = await self.run_json(build_status_prompt(input_data))
        except Exception as e:
            logger.warning(f"Status recommendation failed: {e}")
            return {
                "recommended_status": CandidateStatus.PENDING.value,
                "confidence": 0,
                "reasoning": FALLBACK_REASONING,
            }

        return {
            "recommended_status": coerce_status(data.get("recommended_status")).value,
            "confidence": bounded_number(data.get("confidence")),
            "reasoning": str(
                data.get("reasoning") or "Unable to generate recommendation"
            ),
        }
