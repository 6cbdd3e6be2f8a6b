"""Prompts for the assessment feedback agent."""

from agents.common.prompts import INTERVIEWER_ROLE, JSON_OUTPUT

FEEDBACK_INSTRUCTIONS = f"""{INTERVIEWER_ROLE}

{JSON_OUTPUT}"""

FEEDBACK_PROMPT = """Generate comprehensive feedback for a candidate who completed {count} assessments:

Assessment Results:
{results}

Please provide:
1. Detailed overall feedback
2. Specific recommendations for improvement
3. Skill area scores (problem_solving, code_quality, technical_knowledge, communication)

Respond in JSON format:
{{
  "detailed_feedback": "string",
  "recommendations": ["string"],
  "skill_scores": {{
    "problem_solving": number,
    "code_quality": number,
    "technical_knowledge": number,
    "communication": number
  }}
}}"""
