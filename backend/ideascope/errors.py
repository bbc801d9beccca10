"""
IdeaScope Backend — Pipeline Error Taxonomy

Every error a pipeline stage can raise. The orchestrator catches all of them
and converts them into a fallback plus a `fallbackFlags` annotation.
"""

from typing import Optional

MAX_BODY_CHARS = 300


def redact(text: str, *secrets: str) -> str:
    """Replace every non-empty secret in `text` and cap its length."""
    for secret in secrets:
        if secret:
            text = text.replace(secret, "***")
    if len(text) > MAX_BODY_CHARS:
        text = text[:MAX_BODY_CHARS] + "..."
    return text


class PipelineError(Exception):
    """Base class for recoverable pipeline failures."""

    pass


class ProviderError(PipelineError):
    """An external call returned a non-2xx status or a malformed envelope."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        self.status = status
        self.body = body
        detail = f"{message} (status {status})" if status is not None else message
        super().__init__(detail)


class ProviderTimeout(ProviderError):
    """An external call did not answer within its timeout."""

    def __init__(self, provider: str, timeout: float):
        self.timeout = timeout
        super().__init__(f"{provider} did not respond within {timeout:g}s")


class ConfigurationError(ProviderError):
    """A credential required by a pipeline stage is not configured."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"{field_name.upper()} is not configured")


class ParseError(PipelineError):
    """Raw provider output could not be decomposed into any competitor."""

    pass


class SynthesisFormatError(PipelineError):
    """LLM output was not valid JSON, or lacked the required arrays, after cleanup."""

    def __init__(self, message: str, raw_output: str = ""):
        self.raw_output = raw_output
        super().__init__(message)
