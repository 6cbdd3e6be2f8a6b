"""
Agents package for Gemini based AI agents.

This package contains the advisory AI agents of the candidate workflow,
organized by function. Each agent follows a consistent structure with
agent.py and prompts.py. Agents never raise for external failures; callers
get a degraded result instead.
"""

from agents.registry import registry, register_agent
from agents.base import BaseAgent

# Import all agents to register them
from agents.insights.agent import CandidateInsightAgent
from agents.status.agent import StatusRecommendationAgent
from agents.assessment.agent import AssessmentFeedbackAgent
from agents.profile.agent import ProfileSummaryAgent

__all__ = [
    "registry",
    "register_agent",
    "BaseAgent",
    "CandidateInsightAgent",
    "StatusRecommendationAgent",
    "AssessmentFeedbackAgent",
    "ProfileSummaryAgent",
]
