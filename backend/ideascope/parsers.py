"""
IdeaScope Backend — Competitor Parsing

Turns raw provider output into Competitor records. One parser per raw shape:

    AnswerText     → parse_answer_text()      (regex extraction from free text)
    SearchHit      → parse_search_hits()      (title cleanup, snippet/link verbatim)
    ProductListing → parse_product_listings() (direct field mapping)

Free-text fields are extracted with ordered extractor chains: each chain is a
list of small functions tried in order, first non-empty result wins.
"""

import re
from typing import Callable, Optional

from ideascope.config import log
from ideascope.errors import ParseError
from ideascope.models import Competitor
from ideascope.providers import AnswerText, ProductListing, ProviderKind, RawResult, SearchHit

MAX_NAME_LENGTH = 50
MAX_PARSED_COMPETITORS = 5
UNKNOWN_WEBSITE = "#"
NO_DESCRIPTION = "No description available"

HEADER_PHRASES = ("here are", "direct competitor")

Extractor = Callable[[str], Optional[str]]

_SECTION_SPLIT = re.compile(r"\n\s*\n+|\n(?=\s*\d+\.\s)")
_URL = re.compile(r"https?://[^\s,)\"'<>\]]+")
_BARE_DOMAIN = re.compile(r"\b((?:[a-z0-9-]+\.)+[a-z]{2,})\b", re.IGNORECASE)
_CITATION = re.compile(r"[ \t]*\[\d+\]")  # sonar-style source markers: Tempo[1]


def _first_match(text: str, extractors: list[Extractor]) -> str:
    for extract in extractors:
        value = extract(text)
        if value:
            return value.strip()
    return ""


def _regex(pattern: str, flags: int = re.IGNORECASE | re.MULTILINE) -> Extractor:
    compiled = re.compile(pattern, flags)

    def extract(text: str) -> Optional[str]:
        match = compiled.search(text)
        return match.group(1) if match else None

    return extract


def _clean_name(name: str) -> str:
    name = name.replace("**", "").replace("__", "")
    name = re.sub(r"^\s*(?:[-*•]\s*)?(?:\d+\.\s*)?", "", name)
    name = re.sub(r"^#+\s*", "", name)
    return name.strip(" \t-–:*[]")


def _clean_url(url: str) -> str:
    return url.strip().rstrip(".,;:)]")


# -----------------------------------------------------------------------------
# Q&A free text
# -----------------------------------------------------------------------------

NAME_EXTRACTORS: list[Extractor] = [
    _regex(r"Name:\**\s*([^\n]+)"),
    _regex(r"^\s*(?:\d+\.\s*)?\*\*([^*\n]+?)\*\*"),            # **Acme** ...
    _regex(r"^\s*\d+\.\s+([^:(\n]+?)(?:\s*\(|:|\n|$)"),        # 1. Acme: ...
    _regex(r"^\s*#+\s*([^\n]+)"),                                # ### Acme
    _regex(r"^\s*(?:[-*•]\s*)?([^:\n]{2,60}?)\s*:"),             # Acme: ...
]


def _labelled_website(text: str) -> Optional[str]:
    match = re.search(r"(?:Website|URL|Domain):\**\s*(\S+)", text, re.IGNORECASE)
    if not match:
        return None
    value = match.group(1).strip("[]()<>*")
    url = _URL.search(value)
    if url:
        return _clean_url(url.group(0))
    domain = _BARE_DOMAIN.search(value)
    return f"https://{domain.group(1)}" if domain else None


def _any_url(text: str) -> Optional[str]:
    match = _URL.search(text)
    return _clean_url(match.group(0)) if match else None


def _bare_domain(text: str) -> Optional[str]:
    match = _BARE_DOMAIN.search(text)
    return f"https://{match.group(1).lower()}" if match else None


WEBSITE_EXTRACTORS: list[Extractor] = [_labelled_website, _any_url, _bare_domain]


def _labelled_description(text: str) -> Optional[str]:
    match = re.search(r"Description:\**\s*([^\n]+(?:\n(?!\s*\n)(?!\s*[-*•]*\s*\**\s*(?:Name|Website|URL):)[^\n]+)*)", text, re.IGNORECASE)
    return match.group(1) if match else None


def _remainder(name: str, website: str) -> Extractor:
    def extract(text: str) -> Optional[str]:
        rest = re.sub(r"(?:[-*]\s*)?Name:[^\n]*", "", text, flags=re.IGNORECASE)
        rest = re.sub(r"(?:[-*]\s*)?(?:Website|URL):[^\n]*", "", rest, flags=re.IGNORECASE)
        rest = rest.replace("**", "")
        if name:
            rest = rest.replace(name, "", 1)
        if website and website != UNKNOWN_WEBSITE:
            rest = rest.replace(website, "")
        rest = re.sub(r"\(\s*\)", "", rest)
        rest = re.sub(r"^\s*\d+\.\s*", "", rest)
        rest = re.sub(r"^[\s:\-–]+", "", rest)
        return " ".join(rest.split()) or None

    return extract


def _is_header_text(name: str) -> bool:
    lowered = name.lower()
    return any(phrase in lowered for phrase in HEADER_PHRASES) or len(name) >= MAX_NAME_LENGTH


def _parse_section(section: str) -> Optional[Competitor]:
    section = _CITATION.sub("", section)
    name = _clean_name(_first_match(section, NAME_EXTRACTORS))
    if not name:
        return None
    website = _first_match(section, WEBSITE_EXTRACTORS) or UNKNOWN_WEBSITE
    description = _first_match(section, [_labelled_description, _remainder(name, website)])
    return Competitor(
        name=name,
        website=website,
        description=description or f"Competitor in the {name} space.",
    )


def parse_answer_text(text: str) -> list[Competitor]:
    """Split a free-text answer into per-competitor sections and parse each."""
    competitors = []
    for section in _SECTION_SPLIT.split(text or ""):
        if not section.strip():
            continue
        competitor = _parse_section(section)
        if competitor is None or _is_header_text(competitor.name):
            continue
        competitors.append(competitor)
    return competitors[:MAX_PARSED_COMPETITORS]


# -----------------------------------------------------------------------------
# Web search hits
# -----------------------------------------------------------------------------

_TITLE_SUFFIX = re.compile(r"\s+(?:-|–|—|\|)\s+.*$|:\s+.*$")
_DOMAIN_SUFFIX = re.compile(r"^([a-z0-9-]+)\.(?:com|io|ai)$", re.IGNORECASE)


def clean_title(title: str) -> str:
    """'Acme - Workout Tracker' → 'Acme'; 'acme.io' → 'acme'."""
    name = _TITLE_SUFFIX.sub("", title.strip()).strip()
    bare = _DOMAIN_SUFFIX.match(name)
    if bare:
        name = bare.group(1)
    return name


def parse_search_hits(hits: list[SearchHit]) -> list[Competitor]:
    competitors = []
    for hit in hits:
        if not hit.title or not hit.link:
            continue
        name = clean_title(hit.title)
        if not name or _is_header_text(name):
            continue
        competitors.append(
            Competitor(name=name, description=hit.snippet or NO_DESCRIPTION, website=hit.link)
        )
    return competitors


# -----------------------------------------------------------------------------
# Product listings
# -----------------------------------------------------------------------------


def parse_product_listings(items: list[ProductListing]) -> list[Competitor]:
    competitors = []
    for item in items:
        name = (item.name or "").strip()
        if not name or _is_header_text(name):
            continue
        competitors.append(
            Competitor(
                name=name,
                description=item.tagline or item.description or NO_DESCRIPTION,
                website=item.url or item.website or UNKNOWN_WEBSITE,
            )
        )
    return competitors


# -----------------------------------------------------------------------------
# Dispatch
# -----------------------------------------------------------------------------


def parse(raw: list[RawResult], kind: ProviderKind) -> list[Competitor]:
    """
    Parse raw provider results of the given kind.

    Returns [] for empty input (the provider simply found nothing).

    Raises:
        ParseError: Input was non-empty but no competitor could be extracted.
    """
    if not raw:
        return []

    if kind is ProviderKind.STRUCTURED_QA:
        competitors = []
        for item in raw:
            if isinstance(item, AnswerText):
                competitors.extend(parse_answer_text(item.text))
    elif kind is ProviderKind.WEB_SEARCH:
        competitors = parse_search_hits([r for r in raw if isinstance(r, SearchHit)])
    else:
        competitors = parse_product_listings([r for r in raw if isinstance(r, ProductListing)])

    log("INFO", "raw results parsed", kind=kind.value, raw_count=len(raw), parsed_count=len(competitors))
    if not competitors:
        raise ParseError(f"Could not extract any competitor from {len(raw)} {kind.value} result(s)")
    return competitors
