"""
IdeaScope Backend — Gap / Positioning Synthesis

One LLM call with a strict JSON-only contract, then defensive cleanup:
strip code fences, parse, validate both arrays, coerce entries to strings,
pad/truncate to exactly GAP_COUNT / SUGGESTION_COUNT.
"""

import json

from ideascope import llm
from ideascope.config import Settings, log
from ideascope.errors import ConfigurationError, SynthesisFormatError
from ideascope.models import Competitor, SynthesisResult
from ideascope.prompts import build_synthesis_prompt

GAP_COUNT = 3
SUGGESTION_COUNT = 3

GAP_FILLER = "Further market research is needed to identify additional opportunities in this space."
SUGGESTION_FILLER = "Develop a unique value proposition that differentiates from existing competitors."


def _coerce_entries(values: list) -> list[str]:
    entries = []
    for value in values:
        if isinstance(value, str):
            text = value.strip()
        elif isinstance(value, dict):
            # Some models answer [{"gap": "..."}] instead of ["..."]
            text = " ".join(str(v).strip() for v in value.values() if isinstance(v, (str, int, float)))
        elif isinstance(value, (int, float)):
            text = str(value)
        else:
            text = ""
        if text:
            entries.append(text)
    return entries


def _fit(entries: list[str], count: int, filler: str) -> list[str]:
    fitted = entries[:count]
    while len(fitted) < count:
        fitted.append(filler)
    return fitted


def parse_synthesis_response(raw: str) -> SynthesisResult:
    """
    Parse and normalize a synthesis completion.

    Raises:
        SynthesisFormatError: Not JSON after fence stripping, not an object,
            or `marketGaps` / `positioningSuggestions` missing or not arrays.
    """
    cleaned = llm.strip_code_fences(raw or "")
    try:
        parsed = json.loads(cleaned)
    except (json.JSONDecodeError, TypeError) as e:
        raise SynthesisFormatError(f"Synthesis response is not valid JSON: {e}", raw_output=raw or "") from e

    if not isinstance(parsed, dict):
        raise SynthesisFormatError("Synthesis response is not a JSON object", raw_output=raw)

    gaps = parsed.get("marketGaps")
    suggestions = parsed.get("positioningSuggestions")
    if not isinstance(gaps, list) or not isinstance(suggestions, list):
        raise SynthesisFormatError(
            "Synthesis response missing marketGaps or positioningSuggestions arrays",
            raw_output=raw,
        )

    market_gaps = _fit(_coerce_entries(gaps), GAP_COUNT, GAP_FILLER)
    return SynthesisResult(
        market_gaps=market_gaps,
        positioning_suggestions=_fit(_coerce_entries(suggestions), SUGGESTION_COUNT, SUGGESTION_FILLER),
        gap_analysis=" ".join(market_gaps),
    )


class Synthesizer:
    """LLM-backed gap/positioning synthesizer."""

    temperature = 0.5
    max_tokens = 1200

    def __init__(self, config: Settings):
        self.api_key = config.openai_api_key
        self.model = config.synthesis_model
        self.timeout = config.llm_timeout_seconds

    async def synthesize(self, idea: str, competitors: list[Competitor]) -> SynthesisResult:
        if not self.api_key:
            raise ConfigurationError("openai_api_key")

        messages = build_synthesis_prompt(idea, competitors)
        log("INFO", "synthesis started", provider=self.model, competitors=len(competitors), prompt_length=len(messages[-1]["content"]))
        raw = await llm.call_llm(
            messages,
            model=self.model,
            api_key=self.api_key,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout=self.timeout,
            json_mode=True,
        )
        try:
            return parse_synthesis_response(raw)
        except SynthesisFormatError as e:
            log(
                "ERROR",
                "synthesis output validation failed",
                provider=self.model,
                raw_output=raw[:500] + "..." if len(raw) > 500 else raw,
                error=str(e),
            )
            raise
