"""Prompts for the candidate insight agent."""

from agents.common.prompts import HIRING_MANAGER_ROLE, JSON_OUTPUT, SCORING_GUIDELINES

INSIGHT_INSTRUCTIONS = f"""{HIRING_MANAGER_ROLE}

{SCORING_GUIDELINES}

{JSON_OUTPUT}"""

INSIGHT_PROMPT = """Analyze this candidate and provide comprehensive insights:

{context}

Please provide analysis in this JSON format:
{{
  "match_score": number (0-100),
  "strengths": ["string"],
  "weaknesses": ["string"],
  "recommendations": ["string"],
  "risk_factors": ["string"],
  "potential_role_fit": ["string"]
}}

Consider:
1. Technical skills and assessment performance
2. Communication skills from interview analytics
3. Experience level and role compatibility
4. Potential red flags or concerns
5. Overall fit for typical tech roles"""
