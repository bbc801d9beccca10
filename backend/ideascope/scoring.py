"""Deterministic Validation Scoring.

Scores an analysed idea against four rubric categories, each 0-25:

  problem clarity        — how specific the idea description is
  market opportunity     — identifiable industry + substantive gaps found
  competitive landscape  — a validated but not saturated market
  differentiation        — concrete positioning + explicit uniqueness claims

Rules
-----
- NO API calls
- NO LLMs
- NO randomness
- Pure arithmetic over the pipeline output, clamped per category
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ideascope.keywords import DEFAULT_INDUSTRY, detect_industry, extract_keywords
from ideascope.models import Competitor, FallbackFlags, ScoreBreakdown
from ideascope.synthesis import GAP_FILLER, SUGGESTION_FILLER

CATEGORY_MAX = 25
STRENGTH_RATIO = 0.7
WEAKNESS_RATIO = 0.4

UNIQUENESS_MARKERS = (
    "unique", "only", "first", "personalized", "personalised", "based on",
    "without", "instead of", "automatically", "ai", "niche",
)

_FEEDBACK = {
    "problem_clarity": (
        "The idea is described with a clear, specific problem and audience.",
        "The idea description is vague; name the user, the problem and the setting more precisely.",
    ),
    "market_opportunity": (
        "There are identifiable gaps in a recognisable market.",
        "Market gaps are unclear; research underserved segments before building.",
    ),
    "competitive_landscape": (
        "Existing competitors confirm demand without saturating the market.",
        "The competitive landscape is either unproven or crowded; validate demand directly with customers.",
    ),
    "differentiation": (
        "The idea has concrete angles to stand out from competitors.",
        "Differentiation is weak; define what you will do that competitors do not.",
    ),
}


@dataclass
class ScoreResult:
    validation_score: int
    breakdown: ScoreBreakdown
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)


def _clamp(value: float, lo: int = 0, hi: int = CATEGORY_MAX) -> int:
    """Clamp *value* to [lo, hi] and round to an int."""
    return int(round(max(lo, min(hi, value))))


def _problem_clarity(idea: str) -> int:
    words = len(idea.split())
    keywords = extract_keywords(idea, limit=5)
    return _clamp(min(15, words) + 2 * len(keywords))


def _market_opportunity(idea: str, market_gaps: list[str], flags: FallbackFlags) -> int:
    score = 0.0 if detect_industry(idea) == DEFAULT_INDUSTRY else 8.0
    real_gaps = [g for g in market_gaps if g and g != GAP_FILLER]
    score += 4 * min(3, len(real_gaps))
    if not flags.synthesis_failed:
        score += 5
    return _clamp(score)


def _competitive_landscape(competitors: list[Competitor], flags: FallbackFlags) -> int:
    if flags.competitor_search_failed:
        return _clamp(8)
    found = [c for c in competitors if c.website and c.website != "#"]
    if not found:
        return _clamp(10)
    if len(found) <= 3:
        return _clamp(25)
    if len(found) == 4:
        return _clamp(20)
    return _clamp(15)


def _differentiation(idea: str, positioning: list[str]) -> int:
    real = [p for p in positioning if p and p != SUGGESTION_FILLER]
    idea_lower = f" {idea.lower()} "
    markers = sum(1 for m in UNIQUENESS_MARKERS if f" {m} " in idea_lower or f" {m}," in idea_lower)
    return _clamp(5 * min(3, len(real)) + 2 * min(5, markers))


def score_idea(
    idea: str,
    competitors: list[Competitor],
    market_gaps: list[str],
    positioning_suggestions: list[str],
    flags: FallbackFlags | None = None,
) -> ScoreResult:
    """Compute the validation score, its breakdown, and strengths/weaknesses."""
    flags = flags or FallbackFlags()
    idea = idea or ""

    breakdown = ScoreBreakdown(
        problem_clarity=_problem_clarity(idea),
        market_opportunity=_market_opportunity(idea, market_gaps, flags),
        competitive_landscape=_competitive_landscape(competitors, flags),
        differentiation=_differentiation(idea, positioning_suggestions),
    )

    strengths, weaknesses = [], []
    for category, (strength, weakness) in _FEEDBACK.items():
        ratio = getattr(breakdown, category) / getattr(breakdown, f"{category}_max")
        if ratio >= STRENGTH_RATIO:
            strengths.append(strength)
        elif ratio < WEAKNESS_RATIO:
            weaknesses.append(weakness)

    total = round(100 * breakdown.total() / breakdown.max_total())
    return ScoreResult(
        validation_score=int(total),
        breakdown=breakdown,
        strengths=strengths,
        weaknesses=weaknesses,
    )
