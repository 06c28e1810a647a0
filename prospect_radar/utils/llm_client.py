"""Unified LLM client using LiteLLM.

Provides a single async interface for the oracle, whatever the provider
(Anthropic, Google, OpenAI, ...).
"""

import logging
from typing import Any, Optional, Union

import litellm

# Suppress verbose LiteLLM logging
litellm.set_verbose = False
logging.getLogger("LiteLLM").setLevel(logging.WARNING)


async def get_completion_async(
    model: str,
    messages: list[dict],
    max_tokens: int = 4096,
    temperature: float = 0.3,
    timeout: Optional[float] = None,
    response_format: Optional[dict] = None,
    return_full_response: bool = False,
) -> Union[str, tuple[str, Any]]:
    """
    Get a completion from any supported model via LiteLLM.

    Args:
        model: Model identifier. Examples:
            - "claude-sonnet-4-20250514" (Anthropic)
            - "gemini/gemini-2.5-flash" (Google)
            - "gpt-4o" (OpenAI)
        messages: List of message dicts with role and content
        max_tokens: Maximum response tokens
        temperature: Sampling temperature
        timeout: Request timeout in seconds (provider-side)
        response_format: Optional response format (e.g., {"type": "json_object"})
        return_full_response: If True, return (text, response) tuple for cost tracking

    Returns:
        Response text content, or (text, response) tuple if return_full_response=True

    Raises:
        Exception: If API call fails
    """
    kwargs: dict[str, Any] = {
        "model": model,
        "messages": messages,
        "max_tokens": max_tokens,
        "temperature": temperature,
    }

    if timeout is not None:
        kwargs["timeout"] = timeout
    if response_format:
        kwargs["response_format"] = response_format

    response = await litellm.acompletion(**kwargs)
    text = response.choices[0].message.content or ""

    if return_full_response:
        return text, response
    return text
