"""Article pipeline: data model and orchestration (see ``article_generator``)."""

from .state import (
    Article,
    ArticleSEO,
    ArticleStatus,
    ArticleTag,
    BatchResult,
    GenerationInfo,
    GenerationOptions,
    Phase,
)

__all__ = [
    "Article",
    "ArticleSEO",
    "ArticleStatus",
    "ArticleTag",
    "BatchResult",
    "GenerationInfo",
    "GenerationOptions",
    "Phase",
]
