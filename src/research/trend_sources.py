"""
Trend sources for topic discovery and online research.

Three search backends are queried over HTTP: Brave Search (primary),
Serper.dev (Google results, secondary) and NewsAPI (news, tertiary). A
backend without an API key is skipped, and any backend failure is logged
and treated as "no results".
"""

import asyncio
import random
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional
from urllib.parse import urlparse

import httpx
from pydantic import BaseModel, Field

from src.config.settings import Settings, get_settings
from src.config.topics import TOPICS, get_trend_search_queries
from src.utils.logger import get_logger

logger = get_logger(__name__)

# Serper wants a country code alongside the language
LANGUAGE_COUNTRIES = {"fr": "fr", "en": "us", "es": "es", "de": "de", "it": "it"}

TITLE_DEDUP_PREFIX = 50
RESEARCH_SOURCE_LIMIT = 8


class TrendResult(BaseModel):
    """A single search or news result."""

    title: str = Field(description="Title of the result")
    description: str = Field(default="", description="Snippet or description")
    url: str = Field(default="", description="URL of the result")
    source: str = Field(default="", description="Hostname or publisher name")
    published_at: Optional[str] = Field(default=None, description="Age or publication date as given")


class OnlineResearch(BaseModel):
    """Sources and a context summary gathered for one topic."""

    topic: str
    sources: list[TrendResult] = Field(default_factory=list)
    context: str = ""
    has_recent_data: bool = False


def hostname(url: str) -> str:
    try:
        return urlparse(url).hostname or ""
    except ValueError:
        return ""


def dedupe_by_title(results: list[TrendResult]) -> list[TrendResult]:
    """Keep the first result for each lowercased 50-char title prefix."""
    seen: set[str] = set()
    unique = []
    for result in results:
        key = result.title[:TITLE_DEDUP_PREFIX].lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(result)
    return unique


def dedupe_by_url(results: list[TrendResult]) -> list[TrendResult]:
    seen: set[str] = set()
    unique = []
    for result in results:
        if result.url in seen:
            continue
        seen.add(result.url)
        unique.append(result)
    return unique


# =============================================================================
# Backends
# =============================================================================


class SearchBackend(ABC):
    """One HTTP search API."""

    name = "search"

    def __init__(
        self,
        api_key: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 20.0,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self._http_client = http_client

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        if self._http_client is not None:
            response = await self._http_client.request(method, url, **kwargs)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, url, **kwargs)
        response.raise_for_status()
        return response.json()

    @abstractmethod
    async def _fetch(self, query: str, language: str, limit: int) -> Any:
        """Perform the HTTP request and return the decoded payload."""

    @abstractmethod
    def _parse(self, payload: Any) -> list[TrendResult]:
        """Map the payload to results."""

    async def search(self, query: str, language: str = "en", limit: int = 10) -> list[TrendResult]:
        """
        Search and map results; returns ``[]`` on any failure.

        Args:
            query: Search query string
            language: Two-letter language code
            limit: Maximum number of results requested

        Returns:
            List of results, possibly empty
        """
        if not self.is_configured:
            logger.debug(f"{self.name}: no API key, skipping")
            return []

        try:
            payload = await self._fetch(query, language, limit)
            results = self._parse(payload)
        except httpx.HTTPStatusError as e:
            logger.error(f"{self.name} returned HTTP {e.response.status_code} for '{query}'")
            return []
        except httpx.HTTPError as e:
            logger.error(f"{self.name} request failed for '{query}': {e}")
            return []
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"{self.name} returned a malformed payload for '{query}': {e}")
            return []

        logger.info(f"{self.name}: {len(results)} results for '{query}'")
        return results


class BraveSearchBackend(SearchBackend):
    name = "Brave Search"
    URL = "https://api.search.brave.com/res/v1/web/search"

    async def _fetch(self, query: str, language: str, limit: int) -> Any:
        return await self._send(
            "GET",
            self.URL,
            params={
                "q": query,
                "count": limit,
                "search_lang": language,
                "freshness": "pm",
                "text_decorations": "false",
                "spellcheck": "false",
            },
            headers={
                "Accept": "application/json",
                "Accept-Encoding": "gzip",
                "X-Subscription-Token": self.api_key,
            },
        )

    def _parse(self, payload: Any) -> list[TrendResult]:
        items = (payload.get("web") or {}).get("results") or []
        return [
            TrendResult(
                title=item.get("title", ""),
                description=item.get("description", ""),
                url=item.get("url", ""),
                source=hostname(item.get("url", "")),
                published_at=item.get("age"),
            )
            for item in items
        ]


class SerperSearchBackend(SearchBackend):
    name = "Serper"
    URL = "https://google.serper.dev/search"

    async def _fetch(self, query: str, language: str, limit: int) -> Any:
        return await self._send(
            "POST",
            self.URL,
            json={
                "q": query,
                "gl": LANGUAGE_COUNTRIES.get(language, "us"),
                "hl": language,
                "num": limit,
                "tbs": "qdr:m",
            },
            headers={"X-API-KEY": self.api_key, "Content-Type": "application/json"},
        )

    def _parse(self, payload: Any) -> list[TrendResult]:
        items = payload.get("organic") or []
        return [
            TrendResult(
                title=item.get("title", ""),
                description=item.get("snippet", ""),
                url=item.get("link", ""),
                source=hostname(item.get("link", "")),
                published_at=item.get("date"),
            )
            for item in items
        ]


class NewsAPIBackend(SearchBackend):
    name = "NewsAPI"
    URL = "https://newsapi.org/v2/everything"

    async def _fetch(self, query: str, language: str, limit: int) -> Any:
        return await self._send(
            "GET",
            self.URL,
            params={
                "q": query,
                "language": language,
                "sortBy": "publishedAt",
                "pageSize": limit,
                "apiKey": self.api_key,
            },
        )

    def _parse(self, payload: Any) -> list[TrendResult]:
        items = payload.get("articles") or []
        return [
            TrendResult(
                title=item.get("title") or "",
                description=item.get("description") or "",
                url=item.get("url", ""),
                source=(item.get("source") or {}).get("name", ""),
                published_at=item.get("publishedAt"),
            )
            for item in items
        ]


# =============================================================================
# Aggregator
# =============================================================================


class TrendAggregator:
    """
    Queries the configured backends in priority order.

    Usage:
        aggregator = TrendAggregator()
        results = await aggregator.search("rust web frameworks")
        trending = await aggregator.get_trending_topics("webDevelopment")
    """

    def __init__(
        self,
        backends: Optional[list[SearchBackend]] = None,
        news_backend: Optional[SearchBackend] = None,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or get_settings()
        timeout = self.settings.search_timeout

        if news_backend is None:
            news_backend = NewsAPIBackend(self.settings.news_api_key, http_client, timeout)
        if backends is None:
            backends = [
                BraveSearchBackend(self.settings.brave_api_key, http_client, timeout),
                SerperSearchBackend(self.settings.serper_api_key, http_client, timeout),
                news_backend,
            ]

        self.backends = backends
        self.news_backend = news_backend
        self.rng = rng or random.Random()

    @property
    def has_configured_backend(self) -> bool:
        return any(backend.is_configured for backend in self.backends)

    async def search(self, query: str, language: str = "en", limit: int = 10) -> list[TrendResult]:
        """Return the first non-empty result list among configured backends."""
        for backend in self.backends:
            if not backend.is_configured:
                continue
            results = await backend.search(query, language=language, limit=limit)
            if results:
                return results

        logger.warning(f"No search backend returned results for '{query}'")
        return []

    async def get_trending_topics(
        self,
        category: Optional[str] = None,
        language: str = "en",
    ) -> list[TrendResult]:
        """
        Collect trending results for a category (or a random mix of queries).

        Up to three queries go through ``search`` and up to two directly to
        the news backend, all concurrently. Results are deduplicated by
        title prefix.
        """
        if category in TOPICS:
            queries = list(TOPICS[category]["search_queries"])
        else:
            queries = get_trend_search_queries()
            self.rng.shuffle(queries)
            queries = queries[:5]

        logger.info(f"Fetching trends for {category or 'all categories'} ({len(queries)} queries)")

        tasks = [self.search(query, language=language) for query in queries[:3]]
        if self.news_backend.is_configured:
            tasks.extend(self.news_backend.search(query, language=language) for query in queries[:2])

        batches = await asyncio.gather(*tasks)
        unique = dedupe_by_title([result for batch in batches for result in batch])

        logger.info(f"{len(unique)} unique trending results")
        return unique

    async def research_topic_online(self, topic: str, language: str = "en") -> OnlineResearch:
        """
        Gather recent sources about a topic to ground the outline.

        Runs three queries in parallel, deduplicates by URL and keeps the
        first eight sources.
        """
        year = datetime.now().year
        queries = [topic, f"{topic} {year} {year + 1}", f"{topic} news"]
        logger.info(f"Researching '{topic}' online ({len(queries)} queries)")

        batches = await asyncio.gather(
            *(self.search(query, language=language, limit=5) for query in queries)
        )
        sources = dedupe_by_url([r for batch in batches for r in batch])[:RESEARCH_SOURCE_LIMIT]

        context = "\n".join(
            f"- {source.title}: {source.description} (Source: {source.source})"
            for source in sources
        )
        logger.info(f"Research found {len(sources)} sources")
        return OnlineResearch(
            topic=topic,
            sources=sources,
            context=context,
            has_recent_data=bool(sources),
        )
