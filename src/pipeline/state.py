"""
State module - pipeline phases and the article data model.

This module defines:
- Phase enum for the generation pipeline
- Article, ArticleSEO and the diagnostic GenerationInfo
- GenerationOptions and BatchResult for the pipeline entry points

Models serialize with camelCase aliases, which is the shape stored in the
``posts`` collection.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


# =============================================================================
# Enums
# =============================================================================


class Phase(str, Enum):
    """
    Current phase of one article generation.

    State flow:
    research (optional) → planning → writing → post_processing → seo →
    assembled

    A failure in any phase aborts the article and propagates.
    """

    RESEARCH = "research"
    PLANNING = "planning"
    WRITING = "writing"
    POST_PROCESSING = "post_processing"
    SEO = "seo"
    ASSEMBLED = "assembled"


class ArticleStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


# =============================================================================
# Article model
# =============================================================================


class CamelModel(BaseModel):
    """Base model serializing to camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


class ArticleTag(CamelModel):
    tag: str


class ArticleSEO(CamelModel):
    """SEO block of an article."""

    meta_title: str = Field(default="", description="Title for search results, at most 60 chars")
    meta_description: str = Field(default="", description="Snippet, at most 160 chars")
    keywords: str = Field(default="", description="Comma separated, at most 8 terms")
    tags: list[str] = Field(default_factory=list, description="At most 5 tags")
    og_image: Optional[str] = None
    canonical_url: Optional[str] = None
    no_index: bool = False


class GenerationInfo(CamelModel):
    """Diagnostic data about how an article was produced. Never persisted."""

    topic: str
    category: Optional[str] = None
    language: Optional[str] = None
    angle: str = ""
    article_type: str = ""
    outline_sections: list[str] = Field(default_factory=list)
    research_sources: int = 0
    model: Optional[str] = None
    generated_at: datetime = Field(default_factory=datetime.now)


class Article(CamelModel):
    """A generated article in one language."""

    title: str
    slug: str
    excerpt: str = ""
    content: str
    cover_image: Optional[str] = None
    seo: ArticleSEO = Field(default_factory=ArticleSEO)
    status: ArticleStatus = ArticleStatus.DRAFT
    published_at: Optional[datetime] = None
    tags: list[ArticleTag] = Field(default_factory=list)
    author: str = ""
    reading_time: int = 1
    generation: Optional[GenerationInfo] = Field(default=None, alias="_generation")

    @model_validator(mode="after")
    def check_publication(self) -> "Article":
        published = self.status == ArticleStatus.PUBLISHED
        if published != (self.published_at is not None):
            raise ValueError("published_at must be set if and only if status is 'published'")
        return self

    def to_document(self) -> dict[str, Any]:
        """Storage shape: camelCase keys, diagnostics removed."""
        return self.model_dump(by_alias=True, exclude={"generation"})


# =============================================================================
# Pipeline inputs and outputs
# =============================================================================


class GenerationOptions(BaseModel):
    """Options for one article generation."""

    category: Optional[str] = None
    language: Optional[str] = None
    research_online: bool = False
    auto_publish: bool = False
    author: Optional[str] = None
    cover_image: Optional[str] = None
    og_image: Optional[str] = None
    canonical_url: Optional[str] = None
    tone: Optional[str] = None
    target_length: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)


class BatchError(BaseModel):
    topic: str
    error: str


class BatchResult(BaseModel):
    """Outcome of a batch: successes and per-topic failures."""

    articles: list[Article] = Field(default_factory=list)
    errors: list[BatchError] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.articles) + len(self.errors)
