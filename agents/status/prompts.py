"""Prompts for the status recommendation agent."""

from agents.common.prompts import HIRING_MANAGER_ROLE, JSON_OUTPUT

STATUS_INSTRUCTIONS = f"""{HIRING_MANAGER_ROLE}
Analyze candidate data and recommend the most appropriate status with confidence
and reasoning.

{JSON_OUTPUT}"""

STATUS_PROMPT = """Analyze this candidate and recommend the most appropriate status:

{context}

Please recommend one of these statuses: {statuses}

Respond in this JSON format:
{{
  "recommended_status": "status",
  "confidence": number (0-100),
  "reasoning": "detailed explanation for the recommendation"
}}

Consider:
1. Assessment performance and scores
2. Communication skills and engagement
3. Technical competency
4. Overall fit for the role
5. Any red flags or concerns"""
