"""
IdeaScope Backend — LLM Interactions

All LLM calls go through litellm: one completion per call, no internal
retries, provider failures mapped onto the pipeline error taxonomy.
"""

import re
import time
import warnings

import litellm

from ideascope.config import log
from ideascope.errors import ProviderError, ProviderTimeout, redact

# ── Suppress noisy litellm output ────────────────────────────────────────────
warnings.filterwarnings(
    "ignore",
    message="coroutine 'VertexLLM.async_completion' was never awaited",
)
litellm.suppress_debug_info = True
litellm.drop_params = True  # Prevent unsupported-param errors across providers


def _is_timeout_error(error: Exception) -> bool:
    """Check if an error is a timeout raised by litellm or the underlying client."""
    if isinstance(error, (litellm.exceptions.Timeout, TimeoutError)):
        return True
    error_str = str(error).lower()
    return "timed out" in error_str or "timeout" in error_str


async def call_llm(
    messages: list[dict],
    *,
    model: str,
    api_key: str,
    temperature: float,
    max_tokens: int,
    timeout: float,
    json_mode: bool = False,
) -> str:
    """
    Send one chat completion request and return the raw content string.

    Args:
        messages: Full message list, system prompt included.
        model: litellm model string, e.g. "openai/gpt-4o-mini".
        api_key: Credential passed explicitly (never read from the environment here).
        temperature, max_tokens: Request shape.
        timeout: Per-call timeout in seconds.
        json_mode: Ask the provider for a JSON object response where supported.

    Returns:
        The completion text.

    Raises:
        ProviderTimeout: The call exceeded `timeout`.
        ProviderError: Any other provider failure, or empty content.
    """
    completion_kwargs = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
        "timeout": timeout,
        "api_key": api_key,
        "num_retries": 0,
    }
    if json_mode:
        completion_kwargs["response_format"] = {"type": "json_object"}

    log("INFO", "llm call started", provider=model, json_mode=json_mode)
    start = time.perf_counter()

    try:
        response = await litellm.acompletion(**completion_kwargs)
    except Exception as e:
        duration_ms = int((time.perf_counter() - start) * 1000)
        if _is_timeout_error(e):
            log("ERROR", "llm call timed out", provider=model, duration_ms=duration_ms)
            raise ProviderTimeout(model, timeout) from e
        status = getattr(e, "status_code", None)
        body = redact(str(e), api_key)
        log("ERROR", "llm call failed", provider=model, status=status, error=body, duration_ms=duration_ms)
        raise ProviderError(f"{model} request failed", status=status, body=body) from e

    duration_ms = int((time.perf_counter() - start) * 1000)

    content = ""
    if response.choices:
        msg = response.choices[0].message
        if msg.content:
            content = msg.content

    tokens_used = None
    if hasattr(response, "usage") and response.usage:
        tokens_used = getattr(response.usage, "total_tokens", None)

    if not content:
        log("WARN", "llm returned empty content", provider=model, duration_ms=duration_ms)
        raise ProviderError(f"{model} returned empty content")

    log("INFO", "llm call succeeded", provider=model, duration_ms=duration_ms, tokens_used=tokens_used)
    return content


def strip_code_fences(text: str) -> str:
    """
    Remove markdown code fences from LLM output.
    Handles: ```json\\n...\\n```, ```\\n...\\n```, a lone leading or trailing fence, and plain text.
    """
    if not text or not isinstance(text, str):
        return text
    stripped = text.strip()
    match = re.match(r"^```(?:json|JSON)?\s*\n?(.*?)\n?```\s*$", stripped, re.DOTALL)
    if match:
        return match.group(1).strip()
    stripped = re.sub(r"^```(?:json|JSON)?\s*", "", stripped)
    stripped = re.sub(r"\s*```$", "", stripped)
    return stripped.strip()
