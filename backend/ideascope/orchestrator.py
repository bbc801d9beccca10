"""
IdeaScope Backend — Pipeline Orchestrator

Sequences the competitor-discovery and market-gap pipeline:

    IDLE → EXTRACTING_KEYWORDS → SEARCHING_COMPETITORS → PARSING_RESULTS
         → FILTERING → SYNTHESIZING → DONE

Competitor discovery and synthesis each fall back independently
(FALLBACK stage) and both may fire in one run. run() always ends in DONE with
a fully populated AnalysisResult; only cancellation escapes it.
"""

import enum
import time
from typing import Optional

from ideascope import fallbacks, parsers
from ideascope.config import (
    SYNTHESIS_CREDENTIAL,
    Settings,
    generate_error_code,
    log,
    missing_credentials,
    provider_credentials,
)
from ideascope.errors import ConfigurationError, PipelineError
from ideascope.filtering import MAX_COMPETITORS, filter_and_dedupe
from ideascope.keywords import extract_keywords
from ideascope.models import AnalysisResult, AnalysisType, Competitor, FallbackFlags, SynthesisResult
from ideascope.providers import CompetitorProvider, build_provider
from ideascope.queries import build_queries
from ideascope.scoring import score_idea
from ideascope.synthesis import Synthesizer

MIN_COMPETITORS = 3


class PipelineStage(enum.Enum):
    IDLE = "idle"
    EXTRACTING_KEYWORDS = "extracting_keywords"
    SEARCHING_COMPETITORS = "searching_competitors"
    PARSING_RESULTS = "parsing_results"
    FILTERING = "filtering"
    SYNTHESIZING = "synthesizing"
    FALLBACK = "fallback"
    DONE = "done"


class Orchestrator:
    """
    Runs one idea through the pipeline per run() call.

    Each run records its stages in its own list and publishes it to `trace`
    when it completes, so one instance may serve concurrent requests; `trace`
    always holds one complete run.

    Args:
        config: Explicit settings; environment variables are never read here.
        provider: Competitor provider. Built from config when omitted.
        synthesizer: Object with `async synthesize(idea, competitors)`. Built from config when omitted.
        strict: Raise ConfigurationError at construction when a credential is
            missing. Defaults to `config.strict_config`.
    """

    def __init__(
        self,
        config: Settings,
        provider: Optional[CompetitorProvider] = None,
        synthesizer: Optional[Synthesizer] = None,
        strict: Optional[bool] = None,
    ):
        self.config = config
        strict = config.strict_config if strict is None else strict

        missing = missing_credentials(config)
        if provider is not None:
            missing = [m for m in missing if m not in provider_credentials(config)]
        if synthesizer is not None:
            missing = [m for m in missing if m != SYNTHESIS_CREDENTIAL]
        self.missing_credentials = missing

        if missing:
            if strict:
                raise ConfigurationError(missing[0])
            log(
                "WARN",
                "pipeline configured with missing credentials, affected stages will fall back",
                missing=",".join(missing),
                provider=config.competitor_provider,
            )

        self.provider = provider or build_provider(config)
        self.synthesizer = synthesizer or Synthesizer(config)
        self.trace: list[PipelineStage] = [PipelineStage.IDLE]

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    async def run(self, idea: str, analysis_type: AnalysisType = "full") -> AnalysisResult:
        """Analyse one idea. Never raises except on cancellation."""
        trace = [PipelineStage.IDLE]
        start = time.perf_counter()
        flags = FallbackFlags()
        log("INFO", "pipeline started", provider=self.provider.name, analysis_type=analysis_type, idea=idea[:50])

        trace.append(PipelineStage.EXTRACTING_KEYWORDS)
        keywords = extract_keywords(idea)
        log("INFO", "keywords extracted", keywords=",".join(keywords) or "-")

        competitors, search_query = await self._competitor_stage(idea, keywords, flags, trace)

        if analysis_type == "competitors-only":
            trace.append(PipelineStage.DONE)
            self.trace = trace
            log("INFO", "pipeline completed", analysis_type=analysis_type, competitors=len(competitors), duration_ms=int((time.perf_counter() - start) * 1000))
            return AnalysisResult(competitors=competitors, fallback_flags=flags, search_query=search_query)

        synthesis = await self._synthesis_stage(idea, competitors, flags, trace)

        result = AnalysisResult(
            competitors=competitors,
            market_gaps=synthesis.market_gaps,
            gap_analysis=synthesis.gap_analysis or " ".join(synthesis.market_gaps),
            positioning_suggestions=synthesis.positioning_suggestions,
            fallback_flags=flags,
            search_query=search_query,
        )

        if analysis_type == "full":
            score = score_idea(idea, competitors, result.market_gaps, result.positioning_suggestions, flags)
            result.validation_score = score.validation_score
            result.score_breakdown = score.breakdown
            result.strengths = score.strengths
            result.weaknesses = score.weaknesses

        trace.append(PipelineStage.DONE)
        self.trace = trace
        log(
            "INFO",
            "pipeline completed",
            analysis_type=analysis_type,
            competitors=len(competitors),
            fell_back=flags.triggered(),
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        return result

    # -------------------------------------------------------------------------
    # Competitor discovery
    # -------------------------------------------------------------------------

    async def _competitor_stage(
        self, idea: str, keywords: list[str], flags: FallbackFlags, trace: list[PipelineStage]
    ) -> tuple[list[Competitor], Optional[str]]:
        queries = build_queries(idea, keywords, self.provider.kind)
        try:
            competitors = await self._discover(idea, queries.primary, trace)
            if len(competitors) < MIN_COMPETITORS and queries.alternative:
                competitors = await self._retry_with_alternative(idea, queries.alternative, competitors, trace)
            if not competitors:
                raise PipelineError("No relevant competitors found")
            return competitors[:MAX_COMPETITORS], queries.primary
        except PipelineError as e:
            reason = str(e)
        except Exception as e:
            code = generate_error_code()
            log("ERROR", "unexpected competitor search error", error=str(e), error_code=code)
            reason = "Unexpected error during competitor search"

        flags.competitor_search_failed = self._fall_back("competitor_search", reason, trace)
        return fallbacks.fallback_competitors(idea), queries.primary

    async def _discover(self, idea: str, query: str, trace: list[PipelineStage]) -> list[Competitor]:
        trace.append(PipelineStage.SEARCHING_COMPETITORS)
        raw = await self.provider.search(query)

        trace.append(PipelineStage.PARSING_RESULTS)
        parsed = parsers.parse(raw, self.provider.kind)

        trace.append(PipelineStage.FILTERING)
        kept = filter_and_dedupe(parsed, idea)
        log("INFO", "competitors filtered", raw_count=len(raw), parsed_count=len(parsed), kept_count=len(kept))
        return kept

    async def _retry_with_alternative(
        self, idea: str, query: str, competitors: list[Competitor], trace: list[PipelineStage]
    ) -> list[Competitor]:
        """One sequential attempt with the narrower query; merged with what we already have."""
        log("WARN", "primary search under-returned, trying alternative query", kept_count=len(competitors))
        try:
            more = await self._discover(idea, query, trace)
        except PipelineError as e:
            if not competitors:
                raise
            log("WARN", "alternative query failed, keeping primary results", error=str(e))
            return competitors
        trace.append(PipelineStage.FILTERING)
        return filter_and_dedupe(competitors + more, idea)

    # -------------------------------------------------------------------------
    # Synthesis
    # -------------------------------------------------------------------------

    async def _synthesis_stage(
        self,
        idea: str,
        competitors: list[Competitor],
        flags: FallbackFlags,
        trace: list[PipelineStage],
    ) -> SynthesisResult:
        trace.append(PipelineStage.SYNTHESIZING)
        try:
            return await self.synthesizer.synthesize(idea, competitors)
        except PipelineError as e:
            reason = str(e)
        except Exception as e:
            code = generate_error_code()
            log("ERROR", "unexpected synthesis error", error=str(e), error_code=code)
            reason = "Unexpected error during market gap analysis"

        flags.synthesis_failed = self._fall_back("synthesis", reason, trace)
        return fallbacks.fallback_analysis(idea, competitors)

    def _fall_back(self, stage: str, reason: str, trace: list[PipelineStage]) -> str:
        """Record a FALLBACK transition; returns the user-facing flag text."""
        trace.append(PipelineStage.FALLBACK)
        code = generate_error_code()
        log("WARN", "stage fell back", stage=stage, reason=reason, error_code=code)
        return f"{reason} ({code})"
