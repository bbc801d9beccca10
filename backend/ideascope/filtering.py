"""
IdeaScope Backend — Result Filtering & Deduplication

Pipeline:
  1. Drop entries without a name or a website ("#" placeholder allowed)
  2. Drop reference / aggregator / social / news domains and listicle titles
  3. Require a keyword or product-term match in name + description
  4. Deduplicate by hostname (fallback: whitespace-free lowercased name)
  5. Stable sort by keyword relevance

Pure and idempotent: filter_and_dedupe(filter_and_dedupe(x)) == filter_and_dedupe(x).
"""

import re
from typing import Optional
from urllib.parse import urlparse

from ideascope.keywords import extract_keywords
from ideascope.models import Competitor

MAX_COMPETITORS = 5

# ── Reference / aggregator / social / news domains (suffix match) ─────────
BLOCKED_DOMAINS: frozenset[str] = frozenset({
    # Encyclopedias / Q&A / forums
    "wikipedia.org", "wikihow.com", "quora.com", "reddit.com",
    "stackoverflow.com", "stackexchange.com", "news.ycombinator.com",
    # Professional network / social / video
    "linkedin.com", "facebook.com", "instagram.com", "twitter.com", "x.com",
    "tiktok.com", "pinterest.com", "youtube.com", "vimeo.com",
    # Code hosting
    "github.com", "gitlab.com",
    # Blogs / media / news
    "medium.com", "substack.com", "wordpress.com", "blogspot.com",
    "forbes.com", "techcrunch.com", "businessinsider.com", "cnbc.com",
    "theverge.com", "wired.com", "nytimes.com", "bbc.com", "reuters.com",
    "bloomberg.com", "cnet.com", "zdnet.com", "pcmag.com", "healthline.com",
    # Review directories
    "g2.com", "capterra.com", "getapp.com", "trustradius.com",
    "alternativeto.net", "softwareadvice.com", "crunchbase.com",
})

# ── Title patterns that indicate listicles / comparisons / reviews ────────
BLOCKED_TITLE_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"\bbest\b", re.IGNORECASE),
    re.compile(r"\btop\s+\d+\b", re.IGNORECASE),
    re.compile(r"\bcomparison\b", re.IGNORECASE),
    re.compile(r"\breviews?\b", re.IGNORECASE),
    re.compile(r"\bvs\.?\b|\bversus\b", re.IGNORECASE),
    re.compile(r"\balternatives?\s+to\b", re.IGNORECASE),
)

# Explicit product-indicating terms accepted in lieu of a keyword match.
PRODUCT_TERMS: tuple[str, ...] = ("app", "tool", "platform", "software", "solution", "product")

_PRODUCT_TERM = re.compile(r"\b(?:" + "|".join(PRODUCT_TERMS) + r")s?\b", re.IGNORECASE)


def extract_hostname(website: str) -> Optional[str]:
    """Lowercased hostname without a leading 'www.', or None when not a URL."""
    if not website or website == "#":
        return None
    candidate = website if re.match(r"^[a-z][a-z0-9+.-]*://", website, re.IGNORECASE) else f"https://{website}"
    try:
        host = urlparse(candidate).hostname
    except ValueError:
        return None
    if not host or "." not in host:
        return None
    return host[4:] if host.startswith("www.") else host


def _is_blocked_domain(host: str) -> bool:
    return any(host == d or host.endswith("." + d) for d in BLOCKED_DOMAINS)


def _is_blocked_title(name: str) -> bool:
    return any(p.search(name) for p in BLOCKED_TITLE_PATTERNS)


def normalize_key(competitor: Competitor) -> str:
    """Dedup key: hostname when the website parses as a URL, else the squashed name."""
    host = extract_hostname(competitor.website)
    if host:
        return host
    return re.sub(r"\s+", "", competitor.name.lower())


def relevance_score(competitor: Competitor, keywords: list[str]) -> int:
    """Number of keywords present in name or description (case-insensitive)."""
    haystack = f"{competitor.name} {competitor.description}".lower()
    return sum(1 for kw in keywords if kw in haystack)


def is_plausible_competitor(competitor: Competitor, keywords: list[str]) -> bool:
    if not competitor.name.strip() or not competitor.website.strip():
        return False
    host = extract_hostname(competitor.website)
    if host is not None and _is_blocked_domain(host):
        return False
    if _is_blocked_title(competitor.name):
        return False
    haystack = f"{competitor.name} {competitor.description}".lower()
    return any(kw in haystack for kw in keywords) or bool(_PRODUCT_TERM.search(haystack))


def filter_and_dedupe(competitors: list[Competitor], idea: str) -> list[Competitor]:
    """Keep plausible company/product entries, dedupe, rank by keyword overlap."""
    keywords = extract_keywords(idea)

    seen: set[str] = set()
    kept: list[Competitor] = []
    for competitor in competitors:
        if not is_plausible_competitor(competitor, keywords):
            continue
        key = normalize_key(competitor)
        if key in seen:
            continue
        seen.add(key)
        kept.append(competitor)

    # sorted() is stable: ties keep their first-seen order
    return sorted(kept, key=lambda c: relevance_score(c, keywords), reverse=True)
