"""
IdeaScope Backend — Fallback Generation

Deterministic, network-free stand-ins for competitors and gap analysis, used
whenever a live stage fails or under-delivers. Never raises; always returns
non-empty, correctly sized results.

Keyword choice rotates by position (plus an optional seed) instead of picking
at random, so the same idea always yields the same fallback text.
"""

from ideascope.keywords import detect_industry, extract_keywords
from ideascope.models import Competitor, SynthesisResult

FALLBACK_COMPETITOR_COUNT = 4
NAME_SUFFIXES = ["Pro", "Go", "Now", "Plus", "Tech"]
UNKNOWN_WEBSITE = "#"

_DEFAULT_FRAGMENTS = ["market", "smart", "global", "bright"]


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:] if word else ""


def _pick(words: list[str], index: int, default: str, seed: int = 0) -> str:
    if not words:
        return default
    return words[(index + seed) % len(words)]


def _keywords(idea: str) -> list[str]:
    return extract_keywords(idea or "", limit=5)


def fallback_competitors(idea: str, seed: int = 0) -> list[Competitor]:
    """Plausible-looking placeholder competitors built from the idea's keywords."""
    keywords = _keywords(idea)
    industry = detect_industry(idea or "")
    fragments = keywords or _DEFAULT_FRAGMENTS

    templates = [
        "Established player in the {industry} space with comprehensive {kw} features and strong brand recognition.",
        "Growing competitor focused on {kw} approaches to {industry} challenges.",
        "Large enterprise solution targeting {industry} professionals with extensive {kw} integrations.",
        "Startup focused on {kw} solutions for {industry} problems.",
    ]

    competitors = []
    for index in range(FALLBACK_COMPETITOR_COUNT):
        first = _pick(fragments, index, "market", seed)
        second = _pick(fragments, index + 1, "smart", seed)
        base = _capitalize(first) if first == second else _capitalize(first) + _capitalize(second)
        name = f"{base} {NAME_SUFFIXES[(index + seed) % len(NAME_SUFFIXES)]}"
        description = templates[index % len(templates)].format(
            industry=industry,
            kw=_pick(keywords, index + 2, "innovative", seed),
        )
        competitors.append(Competitor(name=name, description=description, website=UNKNOWN_WEBSITE))
    return competitors


def fallback_analysis(idea: str, competitors: list[Competitor], seed: int = 0) -> SynthesisResult:
    """Template gap analysis + positioning suggestions for the idea."""
    keywords = _keywords(idea)
    industry = detect_industry(idea or "")
    first = _pick(keywords, 0, "user", seed)
    second = _pick(keywords, 1, "business", seed)
    third = _pick(keywords, 2, "workflow", seed)
    rival = competitors[0].name if competitors else f"established {industry} providers"

    market_gaps = [
        f"Lack of affordable solutions for small businesses and individuals in the {industry} space.",
        f"No comprehensive mobile-first approach focusing on the {first} experience.",
        f"Insufficient integration with existing {second} tools and workflows.",
    ]
    positioning_suggestions = [
        f"Focus on solving the specific {first} pain point with an intuitive, opinionated interface.",
        f"Differentiate from {rival} with more transparent pricing in the {industry} market.",
        f"Emphasize ease of integration with the {third} tools your customers already use.",
    ]
    gap_analysis = (
        f"Based on analysis of existing solutions, there is an opportunity to differentiate by focusing on "
        f"{first} combined with {second} features. Most existing platforms do not fully address the "
        f"{third} aspect of the {industry} market."
    )
    return SynthesisResult(
        market_gaps=market_gaps,
        positioning_suggestions=positioning_suggestions,
        gap_analysis=gap_analysis,
    )
