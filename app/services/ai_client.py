"""OpenAI wrapper for the two-step analyze → parse process.

Step 1 (``analyze``) produces free-form prose from a prompt.
Step 2 (``parse``) forces a function call so the prose comes back as JSON
matching a schema. Both raise ``AIClientError`` with a readable message;
callers decide what that means for their record.
"""

import json
import logging
import time
from functools import lru_cache
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from app.config import get_settings
from app.core.circuit_breaker import CircuitBreakerOpen, openai_breaker
from app.core.metrics import OPENAI_LATENCY, OPENAI_REQUESTS

logger = logging.getLogger("cleverkit.ai_client")

ANALYZE_MAX_TOKENS = 2000
ANALYZE_TEMPERATURE = 0.7
PARSE_MAX_TOKENS = 1500
PARSE_TEMPERATURE = 0.1

STRUCTURED_FORMAT_ERROR = "GPT did not return structured data in the expected format"
INVALID_JSON_ERROR = "Failed to parse GPT response as JSON"


class AIClientError(Exception):
    """A failed or unusable completion."""


@lru_cache(maxsize=1)
def get_openai_client() -> AsyncOpenAI:
    settings = get_settings()
    if not settings.openai_api_key:
        raise AIClientError("OpenAI API key is not configured")
    return AsyncOpenAI(api_key=settings.openai_api_key, timeout=settings.openai_timeout_seconds)


async def _complete(stage: str, **kwargs) -> Any:
    client = get_openai_client()
    start = time.monotonic()
    try:
        response = await openai_breaker.call(client.chat.completions.create, **kwargs)
    except CircuitBreakerOpen:
        OPENAI_REQUESTS.labels(stage=stage, status="blocked").inc()
        raise AIClientError("AI service is temporarily unavailable. Please try again shortly.")
    except OpenAIError as e:
        OPENAI_REQUESTS.labels(stage=stage, status="error").inc()
        raise AIClientError(f"GPT {stage} failed: {e}") from e
    finally:
        OPENAI_LATENCY.labels(stage=stage).observe(time.monotonic() - start)

    OPENAI_REQUESTS.labels(stage=stage, status="ok").inc()
    return response


async def analyze(
    prompt: str,
    max_tokens: int = ANALYZE_MAX_TOKENS,
    temperature: float = ANALYZE_TEMPERATURE,
    model: str | None = None,
) -> str:
    """Run a natural-language analysis prompt and return the text."""
    model = model or get_settings().openai_model
    logger.debug("Starting GPT analysis (model=%s, max_tokens=%s)", model, max_tokens)

    response = await _complete(
        "analysis",
        model=model,
        messages=[{"role": "user", "content": prompt}],
        max_tokens=max_tokens,
        temperature=temperature,
    )

    content = response.choices[0].message.content if response.choices else None
    if not content:
        raise AIClientError("GPT returned an empty response")

    usage = response.usage
    logger.debug("GPT analysis complete (%s tokens)", usage.total_tokens if usage else "?")
    return content


async def parse(
    analysis: str,
    system_prompt: str,
    function_name: str,
    function_description: str,
    schema: dict,
    max_tokens: int = PARSE_MAX_TOKENS,
    temperature: float = PARSE_TEMPERATURE,
    model: str | None = None,
) -> dict:
    """Extract structured data from ``analysis`` via a forced function call."""
    model = model or get_settings().openai_model
    logger.debug("Starting GPT parsing (function=%s, model=%s)", function_name, model)

    response = await _complete(
        "parsing",
        model=model,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": f"Extract the structured data from this analysis:\n\n{analysis}"},
        ],
        tools=[{
            "type": "function",
            "function": {
                "name": function_name,
                "description": function_description,
                "parameters": schema,
            },
        }],
        tool_choice={"type": "function", "function": {"name": function_name}},
        max_tokens=max_tokens,
        temperature=temperature,
    )

    message = response.choices[0].message if response.choices else None
    tool_calls = (message.tool_calls or []) if message else []
    if not tool_calls or tool_calls[0].function.name != function_name:
        raise AIClientError(STRUCTURED_FORMAT_ERROR)

    try:
        data = json.loads(tool_calls[0].function.arguments)
    except (TypeError, ValueError) as e:
        raise AIClientError(INVALID_JSON_ERROR) from e

    if not isinstance(data, dict):
        raise AIClientError(STRUCTURED_FORMAT_ERROR)
    return data
