"""
Topic discovery: offline suggestions from category keywords and the pick
of a single topic for a category, preferring a relevant trending result.
"""

import random
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from src.config.topics import TOPICS, get_random_category
from src.research.trend_sources import TrendAggregator, TrendResult
from src.utils.logger import get_logger

logger = get_logger(__name__)

SUGGESTION_TEMPLATES = [
    "{keyword}: the complete guide for {year}",
    "How to master {keyword} in {year}",
    "{keyword}: best practices and pitfalls to avoid",
    "Why {keyword} is changing the game in {year}",
    "{keyword} vs the alternatives: which one to choose?",
    "Getting started with {keyword}: a practical tutorial",
    "{keyword}: 10 tips to boost your productivity",
    "The future of {keyword}: trends and outlook for {year}",
    "{keyword} in production: lessons learned",
    "Understanding {keyword}: concepts and real-world use cases",
]

SUGGESTION_COUNT = 5


class TopicSuggestion(BaseModel):
    """A candidate topic, either trending or generated from a keyword."""

    title: str
    description: str = ""
    category: str
    category_name: str = ""
    keyword: Optional[str] = None
    url: Optional[str] = None
    source: str = Field(default="generated", description="'generated' or 'trending'")
    relevance_score: int = 0


def _capitalize(keyword: str) -> str:
    return keyword[:1].upper() + keyword[1:]


def generate_topic_suggestions(
    category: Optional[str] = None,
    rng: Optional[random.Random] = None,
    year: Optional[int] = None,
) -> list[TopicSuggestion]:
    """
    Synthesize five suggestions from a category's keyword pool.

    Args:
        category: Category id; a random category is used when unknown or None
        rng: Random source, injectable for deterministic output
        year: Year used in templates (defaults to the current year)

    Returns:
        Five suggestions with distinct keywords
    """
    rng = rng or random.Random()
    year = year or datetime.now().year

    if category in TOPICS:
        category_data = {"id": category, **TOPICS[category]}
    else:
        category_data = get_random_category(rng)

    keywords = list(category_data["keywords"])
    rng.shuffle(keywords)

    suggestions = []
    for keyword in keywords[:SUGGESTION_COUNT]:
        template = rng.choice(SUGGESTION_TEMPLATES)
        suggestions.append(
            TopicSuggestion(
                title=template.format(keyword=_capitalize(keyword), year=year),
                category=category_data["id"],
                category_name=category_data["name"],
                keyword=keyword,
            )
        )
    return suggestions


def analyze_topic_relevance(results: list[TrendResult], category: str) -> list[TopicSuggestion]:
    """
    Score results against a category's keywords, best first.

    Each keyword found in the title adds 2 points, in the description 1.
    """
    keywords = [keyword.lower() for keyword in TOPICS[category]["keywords"]]
    scored = []
    for result in results:
        title = result.title.lower()
        description = result.description.lower()
        score = 0
        for keyword in keywords:
            if keyword in title:
                score += 2
            if keyword in description:
                score += 1
        scored.append(
            TopicSuggestion(
                title=result.title,
                description=result.description,
                category=category,
                category_name=TOPICS[category]["name"],
                url=result.url or None,
                source="trending",
                relevance_score=score,
            )
        )
    return sorted(scored, key=lambda s: s.relevance_score, reverse=True)


async def get_best_topic_for_category(
    category: str,
    aggregator: Optional[TrendAggregator] = None,
    language: str = "en",
    rng: Optional[random.Random] = None,
) -> TopicSuggestion:
    """
    Pick the topic to write about for a category.

    Uses the most relevant trending result when it scores above zero,
    otherwise the first generated suggestion.

    Raises:
        ValueError: If the category is unknown
    """
    if category not in TOPICS:
        raise ValueError(f"Unknown category: {category}")

    if aggregator is not None and aggregator.has_configured_backend:
        trending = await aggregator.get_trending_topics(category, language=language)
        ranked = analyze_topic_relevance(trending, category)
        if ranked and ranked[0].relevance_score > 0:
            logger.info(f"Trending topic selected: {ranked[0].title} (score {ranked[0].relevance_score})")
            return ranked[0]

    suggestion = generate_topic_suggestions(category, rng=rng)[0]
    logger.info(f"Generated topic selected: {suggestion.title}")
    return suggestion
