"""
IdeaScope Backend — Search Query Builder

Composes provider-specific query strings from the idea text and its keywords.
Pure functions: the idea text is never modified, nothing is cached.
"""

from dataclasses import dataclass
from typing import Optional

from ideascope.providers import ProviderKind

DOMAIN_FILTER = "site:.com | site:.co | site:.io"

EXCLUDED_PATH_SEGMENTS = [
    "blog", "article", "guide", "how-to", "news", "review", "podcast", "forum",
    "wiki", "login", "signup", "about", "pricing", "resources", "listicle",
]

PRODUCT_CATEGORY_CLAUSE = "(software | app | platform | tool | product)"


@dataclass(frozen=True)
class DomainTerms:
    triggers: tuple[str, ...]
    extra_terms: str
    narrow_terms: str


# Vertical → extra product-listing query terms. Add rows here to support new verticals.
DOMAIN_QUERY_TERMS: dict[str, DomainTerms] = {
    "fitness": DomainTerms(
        triggers=("fitness", "workout", "exercise", "training", "gym"),
        extra_terms="AI form feedback",
        narrow_terms="AI fitness coach form correction",
    ),
    "finance": DomainTerms(
        triggers=("budget", "invoice", "payment", "expense", "bookkeeping"),
        extra_terms="personal finance",
        narrow_terms="expense tracking budgeting",
    ),
    "education": DomainTerms(
        triggers=("tutor", "course", "student", "lesson", "learning"),
        extra_terms="online learning",
        narrow_terms="AI tutoring study tool",
    ),
}


@dataclass(frozen=True)
class SearchQueries:
    primary: str
    alternative: Optional[str] = None


def negative_clause() -> str:
    return f"-inurl:({' | '.join(EXCLUDED_PATH_SEGMENTS)})"


def match_domain(idea: str) -> Optional[DomainTerms]:
    """First DOMAIN_QUERY_TERMS row whose trigger words appear in the idea."""
    idea_lower = idea.lower()
    for terms in DOMAIN_QUERY_TERMS.values():
        if any(trigger in idea_lower for trigger in terms.triggers):
            return terms
    return None


def build_queries(idea: str, keywords: list[str], kind: ProviderKind) -> SearchQueries:
    """Primary + (optional) alternative query for the given provider kind."""
    idea = idea.strip()
    keyword_text = " ".join(keywords) if keywords else idea

    if kind is ProviderKind.WEB_SEARCH:
        return SearchQueries(
            primary=f"{idea} apps competitors {DOMAIN_FILTER} {negative_clause()}",
            alternative=f"{keyword_text} {PRODUCT_CATEGORY_CLAUSE} {DOMAIN_FILTER} {negative_clause()}",
        )

    if kind is ProviderKind.STRUCTURED_QA:
        return SearchQueries(primary=_qa_instruction(idea))

    if kind is ProviderKind.PRODUCT_LISTING:
        domain = match_domain(idea)
        if domain:
            return SearchQueries(
                primary=f"{idea} {domain.extra_terms}",
                alternative=f"{keyword_text} {domain.narrow_terms}",
            )
        return SearchQueries(primary=idea, alternative=keyword_text if keywords else None)

    raise ValueError(f"Unknown provider kind: {kind}")


def build_query(idea: str, keywords: list[str], kind: ProviderKind) -> str:
    return build_queries(idea, keywords, kind).primary


def _qa_instruction(idea: str) -> str:
    return (
        f'Find 3-5 direct competitors to this business idea: "{idea}".\n\n'
        "For each competitor, provide:\n"
        "1. Company name\n"
        "2. Website URL (must be accurate)\n"
        "3. Brief description of what they offer\n\n"
        "Format the response as a clean list with each competitor containing:\n"
        "- Name: [Company Name]\n"
        "- Website: [Website URL]\n"
        "- Description: [Brief description]\n\n"
        "Only include real, existing companies that are direct competitors to this idea. "
        "Do not include an introduction, headers, or any text other than the competitor entries."
    )
