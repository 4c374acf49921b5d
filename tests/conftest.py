"""Shared fixtures: settings isolated from the environment, sample data."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.config.settings import Settings, get_settings
from src.pipeline.state import Article, ArticleSEO, ArticleStatus
from src.planning.outline_generator import Outline


SAMPLE_CONTENT = """Vector databases moved from research labs to production stacks in two years.

## Why similarity search matters

Embeddings turn text into points in space. Nearby points mean related ideas.

### Distance metrics

Cosine similarity is the usual default for text embeddings.

### Index structures

HNSW graphs trade memory for fast approximate lookups.

## Choosing a database

- Managed services reduce operations work
- Self-hosted engines give more control
- Extensions for existing databases avoid a new system

## Running it in production

Monitor recall as well as latency, and re-index when the embedding model changes.

## Where this is going

Hybrid search that mixes keywords and vectors is becoming the norm.
"""


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Settings with test keys, zero delays and a temporary output directory."""
    for name in ("OPENAI_API_KEY", "BRAVE_API_KEY", "SERPER_API_KEY", "NEWS_API_KEY", "MONGODB_URI"):
        monkeypatch.delenv(name, raising=False)
    return Settings(
        _env_file=None,
        openai_api_key="sk-test",
        openai_model="gpt-4-turbo",
        mongodb_uri="mongodb://localhost:27017/blog_test",
        retry_delay=0,
        batch_delay=0,
        cron_delay=0,
        output_dir=tmp_path / "outputs",
    )


@pytest.fixture
def mock_client():
    """Completion client double with async ``complete``/``complete_json``."""
    client = MagicMock()
    client.model = "gpt-test"
    client.complete = AsyncMock()
    client.complete_json = AsyncMock()
    return client


@pytest.fixture
def outline_payload():
    """Outline JSON as returned by the planner prompt."""
    return {
        "title": "Vector databases in production: what changes",
        "articleType": "guide",
        "angle": "Lessons from teams that shipped semantic search",
        "targetAudience": "backend developers",
        "introduction": {
            "hook": "Search that understands meaning is now a feature request.",
            "context": "Teams bolt vector search onto existing stacks.",
            "promise": "Know what to pick and what to monitor.",
        },
        "sections": [
            {
                "h2": "Why similarity search matters",
                "narrativeGoal": "Explain embeddings",
                "keyPoints": ["embeddings", "distance"],
                "subsections": [{"h3": "Distance metrics", "content": "cosine vs dot product"}],
            },
            {"h2": "Choosing a database", "narrativeGoal": "Compare options", "keyPoints": []},
            {"h2": "Running it in production", "narrativeGoal": "Operations", "keyPoints": []},
        ],
        "conclusion": {"type": "outlook", "direction": "Hybrid search"},
        "estimatedWordCount": 1800,
    }


@pytest.fixture
def outline(outline_payload):
    return Outline.from_payload(outline_payload)


@pytest.fixture
def seo_payload():
    return {
        "metaTitle": "Vector databases in production: a practical guide",
        "metaDescription": (
            "How teams run vector databases in production: picking an engine, tuning "
            "indexes and monitoring recall so semantic search stays fast and relevant."
        ),
        "keywords": "Vector Database, semantic search, embeddings, HNSW, RAG",
        "excerpt": "What changes when semantic search leaves the prototype stage and meets real traffic and real data.",
        "tags": ["AI", "Databases", "Search"],
    }


@pytest.fixture
def article():
    return Article(
        title="Vector databases in production: what changes",
        slug="vector-databases-in-production-what-changes",
        excerpt="What changes when semantic search meets real traffic.",
        content=SAMPLE_CONTENT,
        seo=ArticleSEO(
            meta_title="Vector databases in production: a practical guide",
            meta_description="How teams run vector databases in production and keep semantic search relevant.",
            keywords="vector database, semantic search, embeddings",
            tags=["AI", "Databases"],
        ),
        tags=[{"tag": "AI"}, {"tag": "Databases"}],
        author="Editorial Team",
        reading_time=1,
    )


@pytest.fixture
def published_article(article):
    return article.model_copy(
        update={
            "status": ArticleStatus.PUBLISHED.value,
            "published_at": datetime(2026, 3, 1, tzinfo=timezone.utc),
        }
    )


@pytest.fixture
def sample_content():
    return SAMPLE_CONTENT
