"""Shared utility functions for agents."""

import asyncio
import json
import logging
from functools import wraps
from typing import Any, Callable, Dict, List, Optional, TypeVar

from google.genai import errors as genai_errors

logger = logging.getLogger(__name__)

T = TypeVar('T')


def parse_json_response(response: Optional[str]) -> Optional[Any]:
    """Safely parse JSON from agent response.

    Args:
        response: Agent response text that may contain JSON

    Returns:
        Parsed JSON value or None if parsing fails
    """
    if not response:
        return None

    # Try to extract JSON from markdown code blocks
    if "```json" in response:
        start = response.find("```json") + 7
        end = response.find("```", start)
        try:
            return json.loads(response[start:end].strip())
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse JSON from code block: {e}")

    try:
        return json.loads(response)
    except json.JSONDecodeError:
        logger.warning("Response is not valid JSON")
        return None


def format_agent_context(context: Dict[str, Any]) -> str:
    """Format context dictionary for agent consumption.

    Keys keep their insertion order and nested values are dumped with sorted
    keys, so equal input always yields the same text.

    Args:
        context: Context data to format

    Returns:
        Formatted context string
    """
    lines = []
    for key, value in context.items():
        label = key.replace('_', ' ').title()
        if isinstance(value, (list, dict)):
            lines.append(f"{label}:")
            lines.append(json.dumps(value, indent=2, sort_keys=True, default=str))
        else:
            lines.append(f"{label}: {value if value is not None else 'Not specified'}")

    return "\n".join(lines)


def string_list(value: Any) -> List[str]:
    """Coerce a model-provided value into a list of strings."""
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def bounded_number(value: Any, low: float = 0, high: float = 100) -> float:
    """Coerce a model-provided number into ``[low, high]``; garbage becomes ``low``."""
    if isinstance(value, bool):
        return low
    try:
        number = float(value)
    except (TypeError, ValueError):
        return low
    if number != number:  # NaN
        return low
    return max(low, min(high, number))


def is_rate_limited(exc: BaseException) -> bool:
    """True for Gemini API errors carrying HTTP 429."""
    return isinstance(exc, genai_errors.APIError) and getattr(exc, "code", None) == 429


def retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    should_retry: Callable[[BaseException], bool] = lambda exc: True,
):
    """Decorator to retry async functions with exponential backoff.

    Args:
        max_retries: Maximum number of retries after the first attempt
        initial_delay: Initial delay in seconds
        backoff_factor: Multiplier for delay after each retry
        should_retry: Predicate deciding whether an exception is retryable
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            delay = initial_delay

            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    if attempt >= max_retries or not should_retry(e):
                        if attempt > 0:
                            logger.error(f"All {attempt + 1} attempts failed")
                        raise
                    logger.warning(
                        f"Attempt {attempt + 1} failed: {e}. "
                        f"Retrying in {delay}s..."
                    )
                    await asyncio.sleep(delay)
                    delay *= backoff_factor

        return wrapper
    return decorator
