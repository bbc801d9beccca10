"""
IdeaScope Backend — Competitor Providers

Interchangeable competitor-discovery adapters, exactly one active per deployment:
SerpAPI or DuckDuckGo (web search), Perplexity via litellm (structured Q&A),
Product Hunt GraphQL (product listings).

Each adapter issues exactly one outbound call per search() with a bounded
timeout and never retries; retry/fallback belongs to the orchestrator.
"""

import asyncio
import enum
import time
from dataclasses import dataclass
from typing import Protocol, Union

import httpx
from duckduckgo_search import DDGS

from ideascope import llm
from ideascope.config import Settings, log
from ideascope.errors import ConfigurationError, ProviderError, ProviderTimeout, redact


class ProviderKind(enum.Enum):
    WEB_SEARCH = "web_search"
    STRUCTURED_QA = "structured_qa"
    PRODUCT_LISTING = "product_listing"


@dataclass
class SearchHit:
    title: str
    snippet: str
    link: str


@dataclass
class AnswerText:
    text: str


@dataclass
class ProductListing:
    name: str
    tagline: str = ""
    description: str = ""
    url: str = ""
    website: str = ""


RawResult = Union[SearchHit, AnswerText, ProductListing]


class CompetitorProvider(Protocol):
    name: str
    kind: ProviderKind

    async def search(self, query: str) -> list[RawResult]:
        ...


DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; IdeaScope/1.0)"
SEARCH_RESULT_COUNT = 10
LISTING_RESULT_COUNT = 20


def _require(value: str, field_name: str) -> str:
    if not value:
        raise ConfigurationError(field_name)
    return value


def _check_response(provider: str, response: httpx.Response, secret: str) -> dict:
    """Raise ProviderError for non-2xx / non-JSON responses, return the decoded body."""
    if not response.is_success:
        body = redact(response.text, secret)
        log("ERROR", "provider returned error status", provider=provider, status=response.status_code, body=body)
        raise ProviderError(f"{provider} request failed", status=response.status_code, body=body)
    try:
        return response.json()
    except ValueError as e:
        body = redact(response.text, secret)
        raise ProviderError(f"{provider} returned invalid JSON", status=response.status_code, body=body) from e


# -----------------------------------------------------------------------------
# Web search
# -----------------------------------------------------------------------------


class SerpApiProvider:
    """Google results via SerpAPI."""

    name = "serpapi"
    kind = ProviderKind.WEB_SEARCH
    endpoint = "https://serpapi.com/search.json"

    def __init__(self, api_key: str, timeout: float):
        self.api_key = api_key
        self.timeout = timeout

    async def search(self, query: str) -> list[SearchHit]:
        api_key = _require(self.api_key, "serpapi_api_key")
        log("INFO", "search started", provider=self.name, query=query[:120])
        start = time.monotonic()

        try:
            async with httpx.AsyncClient(timeout=self.timeout, headers={"User-Agent": DEFAULT_USER_AGENT}) as client:
                response = await client.get(
                    self.endpoint,
                    params={
                        "engine": "google",
                        "q": query,
                        "num": SEARCH_RESULT_COUNT,
                        "api_key": api_key,
                    },
                )
        except httpx.TimeoutException as e:
            raise ProviderTimeout(self.name, self.timeout) from e
        except httpx.HTTPError as e:
            # httpx messages can embed the request URL, which carries the key.
            raise ProviderError(f"{self.name} request failed: {type(e).__name__}") from e

        data = _check_response(self.name, response, api_key)
        organic = data.get("organic_results") if isinstance(data, dict) else None
        if not isinstance(organic, list):
            raise ProviderError(
                f"{self.name} response missing organic_results",
                status=response.status_code,
                body=redact(str(data), api_key),
            )

        hits = [
            SearchHit(
                title=r.get("title", "") or "",
                snippet=r.get("snippet", "") or "",
                link=r.get("link", "") or "",
            )
            for r in organic
            if isinstance(r, dict)
        ]
        log("INFO", "search completed", provider=self.name, results_count=len(hits), duration_ms=int((time.monotonic() - start) * 1000))
        return hits


class DuckDuckGoProvider:
    """Keyless web search via duckduckgo-search."""

    name = "duckduckgo"
    kind = ProviderKind.WEB_SEARCH

    def __init__(self, timeout: float):
        self.timeout = timeout

    async def search(self, query: str) -> list[SearchHit]:
        log("INFO", "search started", provider=self.name, query=query[:120])
        start = time.monotonic()

        def _sync_search() -> list[SearchHit]:
            results = []
            for r in DDGS(timeout=int(self.timeout)).text(query, max_results=SEARCH_RESULT_COUNT):
                results.append(
                    SearchHit(
                        title=r.get("title", ""),
                        snippet=r.get("body", ""),
                        link=r.get("href", ""),
                    )
                )
            return results

        try:
            hits = await asyncio.wait_for(asyncio.to_thread(_sync_search), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise ProviderTimeout(self.name, self.timeout) from e
        except Exception as e:
            raise ProviderError(f"{self.name} search failed: {e}") from e

        log("INFO", "search completed", provider=self.name, results_count=len(hits), duration_ms=int((time.monotonic() - start) * 1000))
        return hits


# -----------------------------------------------------------------------------
# Structured Q&A
# -----------------------------------------------------------------------------

QA_SYSTEM_PROMPT = (
    "You are a research assistant that provides accurate information about business competitors. "
    "Return only factual information about real companies that would be direct competitors to the business idea. "
    "Include company name, website URL, and a brief description for each competitor. "
    'Format the information clearly as "Name: [Company Name]", "Website: [URL]", '
    '"Description: [Description]" for each competitor.'
)


class StructuredQAProvider:
    """Search-grounded LLM answering a natural-language competitor question."""

    name = "perplexity"
    kind = ProviderKind.STRUCTURED_QA
    temperature = 0.2
    max_tokens = 2000

    def __init__(self, api_key: str, model: str, timeout: float):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    async def search(self, query: str) -> list[AnswerText]:
        api_key = _require(self.api_key, "perplexity_api_key")
        content = await llm.call_llm(
            [
                {"role": "system", "content": QA_SYSTEM_PROMPT},
                {"role": "user", "content": query},
            ],
            model=self.model,
            api_key=api_key,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout=self.timeout,
        )
        return [AnswerText(text=content)]


# -----------------------------------------------------------------------------
# Product listings
# -----------------------------------------------------------------------------

PRODUCT_SEARCH_QUERY = """
query SearchPosts($query: String!, $first: Int!) {
  posts(first: $first, order: RANKING, search: $query) {
    edges {
      node {
        name
        tagline
        description
        url
        website
      }
    }
  }
}
"""


class ProductListingProvider:
    """Product Hunt GraphQL API."""

    name = "producthunt"
    kind = ProviderKind.PRODUCT_LISTING
    endpoint = "https://api.producthunt.com/v2/api/graphql"

    def __init__(self, token: str, timeout: float):
        self.token = token
        self.timeout = timeout

    async def search(self, query: str) -> list[ProductListing]:
        token = _require(self.token, "producthunt_token")
        log("INFO", "search started", provider=self.name, query=query[:120])
        start = time.monotonic()

        try:
            async with httpx.AsyncClient(timeout=self.timeout, headers={"User-Agent": DEFAULT_USER_AGENT}) as client:
                response = await client.post(
                    self.endpoint,
                    headers={
                        "Authorization": f"Bearer {token}",
                        "Content-Type": "application/json",
                        "Accept": "application/json",
                    },
                    json={
                        "query": PRODUCT_SEARCH_QUERY,
                        "variables": {"query": query, "first": LISTING_RESULT_COUNT},
                    },
                )
        except httpx.TimeoutException as e:
            raise ProviderTimeout(self.name, self.timeout) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"{self.name} request failed: {type(e).__name__}") from e

        data = _check_response(self.name, response, token)
        edges = None
        if isinstance(data, dict):
            edges = ((data.get("data") or {}).get("posts") or {}).get("edges")
        if not isinstance(edges, list):
            raise ProviderError(
                f"{self.name} response missing data.posts.edges",
                status=response.status_code,
                body=redact(str(data), token),
            )

        listings = []
        for edge in edges:
            node = edge.get("node") if isinstance(edge, dict) else None
            if not isinstance(node, dict):
                continue
            listings.append(
                ProductListing(
                    name=node.get("name") or "",
                    tagline=node.get("tagline") or "",
                    description=node.get("description") or "",
                    url=node.get("url") or "",
                    website=node.get("website") or "",
                )
            )
        log("INFO", "search completed", provider=self.name, results_count=len(listings), duration_ms=int((time.monotonic() - start) * 1000))
        return listings


# -----------------------------------------------------------------------------
# Selection
# -----------------------------------------------------------------------------


def build_provider(config: Settings) -> CompetitorProvider:
    """Instantiate the one provider variant selected by configuration."""
    kind = ProviderKind(config.competitor_provider)
    if kind is ProviderKind.WEB_SEARCH:
        if config.web_search_engine == "duckduckgo":
            return DuckDuckGoProvider(timeout=config.provider_timeout_seconds)
        return SerpApiProvider(api_key=config.serpapi_api_key, timeout=config.provider_timeout_seconds)
    if kind is ProviderKind.STRUCTURED_QA:
        return StructuredQAProvider(
            api_key=config.perplexity_api_key,
            model=config.qa_model,
            timeout=config.provider_timeout_seconds,
        )
    return ProductListingProvider(token=config.producthunt_token, timeout=config.provider_timeout_seconds)
