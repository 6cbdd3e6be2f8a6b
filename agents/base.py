"""Base agent class for all Gemini backed agents."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from google.genai import types

from agents.common.utils import (
    is_rate_limited,
    parse_json_response,
    retry_with_backoff,
)
from core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class BaseAgent(ABC):
    """Base class for text-generation agents using the Gemini API."""

    def __init__(
        self,
        name: str,
        instructions: str,
        model: Optional[str] = None,
        client: Any = None,
    ):
        """Initialize the agent.

        Args:
            name: Agent name
            instructions: System instructions for the agent
            model: Gemini model to use, defaults to ``settings.ai_model``
            client: Pre-built ``genai.Client``, mostly for tests
        """
        from core.config import settings

        self.name = name
        self.instructions = instructions
        self.model = model or settings.ai_model
        self.max_attempts = settings.ai_max_attempts
        self.retry_base_delay = settings.ai_retry_base_delay
        self._client = client

    def _get_client(self):
        """Get or create the Gemini client."""
        if self._client is None:
            from google import genai
            from core.config import settings

            if not settings.google_api_key:
                raise ExternalServiceError("gemini", "GOOGLE_API_KEY is not configured")
            self._client = genai.Client(api_key=settings.google_api_key)
        return self._client

    @abstractmethod
    async def process(self, input_data: Dict[str, Any]) -> Any:
        """Process input data and return results.

        Implementations never raise for external failures; they return a
        degraded result instead.
        """

    async def _generate(self, prompt: str, json_output: bool) -> str:
        client = self._get_client()
        config = types.GenerateContentConfig(
            system_instruction=self.instructions,
            response_mime_type="application/json" if json_output else None,
        )
        response = await client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=config,
        )
        return response.text or ""

    async def run(self, prompt: str, json_output: bool = False) -> str:
        """Run the agent with a prompt.

        Rate limited calls (HTTP 429) are retried with exponential backoff up
        to ``max_attempts`` total attempts. Other errors surface immediately.

        Args:
            prompt: User prompt
            json_output: Ask the model for a JSON object

        Returns:
            Agent response text
        """
        generate = retry_with_backoff(
            max_retries=self.max_attempts - 1,
            initial_delay=self.retry_base_delay,
            should_retry=is_rate_limited,
        )(self._generate)
        return await generate(prompt, json_output)

    async def run_json(self, prompt: str) -> Dict[str, Any]:
        """Run the agent and parse its reply as a JSON object.

        Raises:
            ExternalServiceError: the reply is not a JSON object
        """
        text = await self.run(prompt, json_output=True)
        parsed = parse_json_response(text)
        if not isinstance(parsed, dict):
            raise ExternalServiceError("gemini", f"{self.name} returned malformed JSON")
        return parsed
