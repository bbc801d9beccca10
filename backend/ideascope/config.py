"""
IdeaScope Backend — Central Configuration

All environment variables and pipeline settings live here.
Import `settings`, `Settings`, `log`, and `generate_error_code` from this module.
Do not read `os.environ` anywhere else. The pipeline itself never touches the
`settings` singleton; it receives a `Settings` instance at construction.
"""

import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All environment variables. Loaded from .env or the process environment."""

    # Competitor discovery: exactly one provider is active per deployment
    competitor_provider: Literal["web_search", "structured_qa", "product_listing"] = "web_search"
    web_search_engine: Literal["serpapi", "duckduckgo"] = "serpapi"  # duckduckgo needs no key

    # Credentials (empty = not configured)
    serpapi_api_key: str = ""
    perplexity_api_key: str = ""
    producthunt_token: str = ""
    openai_api_key: str = ""

    # Models (litellm provider/model strings)
    qa_model: str = "perplexity/sonar"
    synthesis_model: str = "openai/gpt-4o-mini"

    # Outbound call limits
    provider_timeout_seconds: float = 12.0
    llm_timeout_seconds: float = 15.0

    # Raise ConfigurationError at Orchestrator construction instead of degrading to fallbacks
    strict_config: bool = False

    # App
    environment: str = "development"  # "development" | "production" | "test"
    cors_origins: str = "http://localhost:5173"  # Comma-separated for multiple origins
    analyze_rate_limit: str = "20/minute"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


# Singleton, used by the HTTP layer only
settings = Settings()


# ──────────────────────────────────────────────────────
# Logging Utilities
# ──────────────────────────────────────────────────────

def generate_error_code() -> str:
    """Generate a short, user-friendly error reference code.

    Format: 'IS-' followed by 6 uppercase hex characters.
    Example: 'IS-3F8A2C'

    Attached to every fallback flag and every error response. The same code is
    logged on the backend, so a user-facing warning can be traced to its log line.
    """
    return f"IS-{uuid.uuid4().hex[:6].upper()}"


def log(level: str, message: str, **context) -> None:
    """Structured print-based logger.

    Every log line follows the format:
        [ISO_TIMESTAMP] [LEVEL] message | key1=value1 key2=value2

    Args:
        level: One of "INFO", "WARN", "ERROR".
        message: Human-readable description of what happened.
        **context: Arbitrary key-value pairs. Never pass credentials here.

    Usage:
        log("INFO", "stage started", stage="searching_competitors", provider="serpapi")
        log("WARN", "stage fell back", stage="synthesizing", error_code="IS-3F8A2C", error=str(e))
    """
    ts = datetime.now(timezone.utc).isoformat()
    ctx = " ".join(f"{k}={v}" for k, v in context.items())
    print(f"[{ts}] [{level}] {message} | {ctx}", flush=True)


# ──────────────────────────────────────────────────────
# Credential Validation
# ──────────────────────────────────────────────────────

# Field names per provider variant; duckduckgo web search is keyless.
_PROVIDER_CREDENTIALS = {
    "web_search": {"serpapi": ["serpapi_api_key"], "duckduckgo": []},
    "structured_qa": ["perplexity_api_key"],
    "product_listing": ["producthunt_token"],
}

SYNTHESIS_CREDENTIAL = "openai_api_key"


def provider_credentials(config: Settings) -> list[str]:
    """Credential field names the selected competitor provider needs."""
    required = _PROVIDER_CREDENTIALS[config.competitor_provider]
    if isinstance(required, dict):
        required = required[config.web_search_engine]
    return list(required)


def required_credentials(config: Settings) -> list[str]:
    """Credential field names the selected provider + synthesizer need."""
    return provider_credentials(config) + [SYNTHESIS_CREDENTIAL]


def missing_credentials(config: Settings) -> list[str]:
    """Subset of required_credentials() that is empty. Returns names, never values."""
    return [name for name in required_credentials(config) if not getattr(config, name, "")]

