"""Profile summary agent."""

import logging
from typing import Any, Dict

from agents.base import BaseAgent
from agents.registry import register_agent
from agents.common.utils import format_agent_context
from agents.profile.prompts import SUMMARY_INSTRUCTIONS, SUMMARY_PROMPT

logger = logging.getLogger(__name__)

FALLBACK_SUMMARY = "Professional summary not available."


@register_agent("profile_summary")
class ProfileSummaryAgent(BaseAgent):
    """Agent writing a short professional summary from a candidate profile."""

    def __init__(self, client: Any = None):
        super().__init__(
            name="profile_summary",
            instructions=SUMMARY_INSTRUCTIONS,
            client=client,
        )

    async def process(self, input_data: Dict[str, Any]) -> str:
        context = {
            "experience_years": input_data.get("experience_years"),
            "skills": ", ".join(input_data.get("skills") or []) or None,
            "location": input_data.get("location"),
            "expected_salary": input_data.get("expected_salary"),
            "education": input_data.get("education") or [],
            "work_experience": input_data.get("work_experience") or [],
        }
        try:
            text = await self.run(SUMMARY_PROMPT.format(context=format_agent_context(context)))
        except Exception as e:
            logger.warning(f"Profile summary generation failed: {e}")
            return FALLBACK_SUMMARY
        return text.strip() or FALLBACK_SUMMARY
