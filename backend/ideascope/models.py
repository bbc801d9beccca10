"""
Single source of truth for all Pydantic models (requests, responses, pipeline types).
The wizard frontend reads the camelCase aliases; Python code uses the snake_case names.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    """Base for models serialized to the frontend with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)


# -----------------------------------------------------------------------------
# Request Models
# -----------------------------------------------------------------------------


AnalysisType = Literal["full", "competitors-only", "differentiation-suggestions"]


class IdeaForm(CamelModel):
    """Structured idea form. Concatenated into one text for the pipeline."""

    problem: str = ""
    target_market: str = Field("", alias="targetMarket")
    unique_value: str = Field("", alias="uniqueValue")
    customer_acquisition: str = Field("", alias="customerAcquisition")

    def to_idea_text(self) -> str:
        parts = [
            self.problem,
            self.target_market,
            self.unique_value,
            self.customer_acquisition,
        ]
        return " ".join(p.strip() for p in parts if p and p.strip())


class AnalyzeRequest(CamelModel):
    idea: Optional[str] = Field(None, max_length=2000, description="Free-text idea description")
    form: Optional[IdeaForm] = Field(None, description="Structured idea; used when `idea` is empty")
    analysis_type: AnalysisType = Field("full", alias="analysisType")

    def idea_text(self) -> str:
        """Resolve the single idea string fed into the pipeline ('' when absent)."""
        if self.idea and self.idea.strip():
            return self.idea.strip()
        if self.form:
            return self.form.to_idea_text()
        return ""


# -----------------------------------------------------------------------------
# Pipeline Models
# -----------------------------------------------------------------------------


class Competitor(BaseModel):
    name: str
    description: str = ""
    website: str = ""  # absolute URL, or "#"/"" meaning unknown


class EnumeratedGaps(BaseModel):
    kind: Literal["enumerated"] = "enumerated"
    gaps: list[str]

    def as_list(self) -> list[str]:
        return list(self.gaps)

    def as_text(self) -> str:
        return " ".join(self.gaps)


class ProseGaps(BaseModel):
    kind: Literal["prose"] = "prose"
    text: str

    def as_list(self) -> list[str]:
        return [self.text] if self.text else []

    def as_text(self) -> str:
        return self.text


GapSummary = Annotated[Union[EnumeratedGaps, ProseGaps], Field(discriminator="kind")]


class SynthesisResult(BaseModel):
    """Output of the gap/positioning synthesizer (or its fallback)."""

    market_gaps: list[str]
    positioning_suggestions: list[str]
    gap_analysis: str = ""

    def gap_summary(self) -> EnumeratedGaps:
        return EnumeratedGaps(gaps=self.market_gaps)


class ScoreBreakdown(CamelModel):
    problem_clarity: int = Field(0, alias="problemClarity")
    market_opportunity: int = Field(0, alias="marketOpportunity")
    competitive_landscape: int = Field(0, alias="competitiveLandscape")
    differentiation: int = Field(0, alias="differentiation")
    problem_clarity_max: int = Field(25, alias="problemClarityMax")
    market_opportunity_max: int = Field(25, alias="marketOpportunityMax")
    competitive_landscape_max: int = Field(25, alias="competitiveLandscapeMax")
    differentiation_max: int = Field(25, alias="differentiationMax")

    def total(self) -> int:
        return (
            self.problem_clarity
            + self.market_opportunity
            + self.competitive_landscape
            + self.differentiation
        )

    def max_total(self) -> int:
        return (
            self.problem_clarity_max
            + self.market_opportunity_max
            + self.competitive_landscape_max
            + self.differentiation_max
        )


class FallbackFlags(CamelModel):
    competitor_search_failed: Optional[str] = Field(None, alias="competitorSearchFailed")
    synthesis_failed: Optional[str] = Field(None, alias="synthesisFailed")

    def triggered(self) -> bool:
        return bool(self.competitor_search_failed or self.synthesis_failed)


class AnalysisResult(CamelModel):
    competitors: list[Competitor] = []
    market_gaps: list[str] = Field(default_factory=list, alias="marketGaps")
    gap_analysis: str = Field("", alias="gapAnalysis")
    positioning_suggestions: list[str] = Field(default_factory=list, alias="positioningSuggestions")
    validation_score: Optional[int] = Field(None, alias="validationScore")
    score_breakdown: Optional[ScoreBreakdown] = Field(None, alias="scoreBreakdown")
    strengths: list[str] = []
    weaknesses: list[str] = []
    fallback_flags: FallbackFlags = Field(default_factory=FallbackFlags, alias="fallbackFlags")
    search_query: Optional[str] = Field(None, alias="searchQuery")

    @property
    def gap_summary(self) -> GapSummary:
        """Enumerated gaps when present, otherwise the legacy prose rendering."""
        if self.market_gaps:
            return EnumeratedGaps(gaps=self.market_gaps)
        return ProseGaps(text=self.gap_analysis)

    def to_response(self, analysis_type: AnalysisType = "full") -> dict:
        """Serialize for the frontend, trimmed to what the analysis type asks for."""
        data = self.model_dump(by_alias=True)
        if analysis_type == "competitors-only":
            return {k: data[k] for k in ("competitors", "fallbackFlags", "searchQuery")}
        if analysis_type == "differentiation-suggestions":
            return {k: data[k] for k in ("positioningSuggestions", "fallbackFlags")}
        return data


# -----------------------------------------------------------------------------
# Summary Models
# -----------------------------------------------------------------------------


class SummaryRequest(CamelModel):
    idea: str = Field(..., min_length=1, max_length=2000)
    competitors: list[Competitor] = []
    market_gaps: list[str] = Field(default_factory=list, alias="marketGaps")
    differentiation: str = ""
    validation_plan: str = Field("", alias="validationPlan")


class SummaryResponse(BaseModel):
    markdown: str
    html: str
