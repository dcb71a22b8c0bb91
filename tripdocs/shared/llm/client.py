"""
OpenAI client with retry logic.

Provides a cached async client instance and wrappers for LLM calls with
automatic transport retries using tenacity.
"""

import os
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from openai import (
    APIConnectionError,
    APITimeoutError,
    AsyncOpenAI,
    InternalServerError,
    RateLimitError,
)
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

load_dotenv()

# Transport failures worth retrying; anything else surfaces immediately
_TRANSIENT_ERRORS = (
    APIConnectionError,
    APITimeoutError,
    InternalServerError,
    RateLimitError,
)

# Module-level cache for the OpenAI client
_client: Optional[AsyncOpenAI] = None


def get_cached_client() -> AsyncOpenAI:
    """
    Returns a cached instance of the async OpenAI client.

    Uses the OPENAI_API_KEY environment variable for authentication.
    The client is created once and reused for all subsequent calls.
    """
    global _client
    if _client is None:
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError(
                "OPENAI_API_KEY environment variable is not set. "
                "Please set it to your OpenAI API key."
            )
        _client = AsyncOpenAI(api_key=api_key)
    return _client


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(_TRANSIENT_ERRORS),
    reraise=True,
)
async def call_llm(
    messages: List[Dict[str, Any]],
    model: str = "gpt-4o-mini",
    client: Optional[AsyncOpenAI] = None,
    json_mode: bool = False,
) -> str:
    """
    Call the OpenAI Chat Completion API with automatic retries.

    Args:
        messages: List of message dicts with 'role' and 'content' keys
        model: Model identifier to use (default: gpt-4o-mini)
        client: Optional client instance. If not provided, uses cached client.
        json_mode: Ask the model for a JSON object response

    Returns:
        The assistant's response content as a string.

    Raises:
        Exception: If all retry attempts fail.
    """
    if client is None:
        client = get_cached_client()

    kwargs: Dict[str, Any] = {"model": model, "messages": messages}
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    response = await client.chat.completions.create(**kwargs)

    content = response.choices[0].message.content or ""
    return content.strip()


async def get_llm_response(
    user_prompt: str,
    system_prompt: str,
    model: str = "gpt-4o-mini",
    client: Optional[AsyncOpenAI] = None,
    json_mode: bool = True,
) -> str:
    """
    Convenience wrapper for a single system + user prompt exchange.

    Args:
        user_prompt: The user message content
        system_prompt: The system message content
        model: Model identifier to use
        client: Optional client instance
        json_mode: Ask the model for a JSON object response

    Returns:
        The assistant's response content as a string.
    """
    messages = [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]
    return await call_llm(messages, model=model, client=client, json_mode=json_mode)
