"""Assessment feedback agent."""

import json
import logging
from typing import Any, Dict, List

from agents.base import BaseAgent
from agents.registry import register_agent
from agents.common.utils import bounded_number, string_list
from agents.assessment.prompts import FEEDBACK_INSTRUCTIONS, FEEDBACK_PROMPT

logger = logging.getLogger(__name__)

FALLBACK_FEEDBACK = "Unable to generate feedback at this time."


@register_agent("assessment_feedback")
class AssessmentFeedbackAgent(BaseAgent):
    """Agent writing overall feedback across a candidate's assessments."""

    def __init__(self, client: Any = None):
        super().__init__(
            name="assessment_feedback",
            instructions=FEEDBACK_INSTRUCTIONS,
            client=client,
        )

    async def process(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        """Generate feedback.

        Args:
            input_data: Dictionary with ``assessments`` (score, max_score,
                passed, evaluation_details per item)

        Returns:
            ``{detailed_feedback, recommendations, skill_scores}``
        """
        assessments: List[Dict[str, Any]] = input_data.get("assessments", [])
        results = json.dumps(
            [
                {
                    "score": a.get("score"),
                    "max_score": a.get("max_score"),
                    "passed": a.get("passed"),
                    "evaluation": a.get("evaluation_details"),
                }
                for a in assessments
            ],
            indent=2,
            sort_keys=True,
            default=str,
        )
        prompt = FEEDBACK_PROMPT.format(count=len(assessments), results=results)

        try:
            data = await self.run_json(prompt)
        except Exception as e:
            logger.warning(f"Assessment feedback generation failed: {e}")
            return {
                "detailed_feedback": FALLBACK_FEEDBACK,
                "recommendations": [],
                "skill_scores": {},
            }

        raw_scores = data.get("skill_scores")
        skill_scores = (
            {str(k): bounded_number(v) for k, v in raw_scores.items()}
            if isinstance(raw_scores, dict)
            else {}
        )
        return {
            "detailed_feedback": str(data.get("detailed_feedback") or FALLBACK_FEEDBACK),
            "recommendations": string_list(data.get("recommendations")),
            "skill_scores": skill_scores,
        }
