"""Prompts for the profile summary agent."""

from agents.common.prompts import RECRUITER_ROLE

SUMMARY_INSTRUCTIONS = f"""{RECRUITER_ROLE}
Generate professional, concise candidate summaries. Reply with the summary text only."""

SUMMARY_PROMPT = """Generate a concise professional summary for this candidate based on their profile:

{context}

Please generate a 2-3 sentence professional summary that highlights:
1. Key experience and skills
2. Career level and expertise areas
3. Notable achievements or background

Keep it professional and concise."""
