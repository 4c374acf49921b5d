"""Research module for trend discovery and online topic research."""

from .topic_discovery import (
    TopicSuggestion,
    analyze_topic_relevance,
    generate_topic_suggestions,
    get_best_topic_for_category,
)
from .trend_sources import (
    BraveSearchBackend,
    NewsAPIBackend,
    OnlineResearch,
    SerperSearchBackend,
    TrendAggregator,
    TrendResult,
)

__all__ = [
    "BraveSearchBackend",
    "NewsAPIBackend",
    "OnlineResearch",
    "SerperSearchBackend",
    "TopicSuggestion",
    "TrendAggregator",
    "TrendResult",
    "analyze_topic_relevance",
    "generate_topic_suggestions",
    "get_best_topic_for_category",
]
