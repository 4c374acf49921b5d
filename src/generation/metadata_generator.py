"""
SEO metadata generator for articles.

Asks the completion API for meta title, meta description, keywords,
excerpt and tags, then clamps every field into its target range. Missing
or too-short fields are synthesized from the article itself.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field

from src.config.topics import get_category_label
from src.utils.exceptions import InvalidJSON
from src.utils.helpers import strip_markdown, truncate_text
from src.utils.llm_helpers import CompletionClient
from src.utils.logger import get_logger

logger = get_logger(__name__)

META_TITLE_MAX = 60
META_TITLE_MIN = 10
META_DESCRIPTION_MAX = 160
META_DESCRIPTION_MIN = 50
EXCERPT_MAX = 200
EXCERPT_MIN = 50
MAX_KEYWORDS = 8
MAX_TAGS = 5


class SEOMetadata(BaseModel):
    """Normalized SEO metadata."""

    meta_title: str = Field(description="At most 60 characters")
    meta_description: str = Field(description="At most 160 characters")
    keywords: str = Field(default="", description="At most 8 lowercase terms joined by ', '")
    excerpt: str = Field(default="", description="At most 200 characters")
    tags: list[str] = Field(default_factory=list, description="At most 5 tags")


def normalize_keywords(value: Any) -> str:
    """Comma-joined string of at most 8 lowercased, trimmed terms."""
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(item) for item in value]
    else:
        if value is not None:
            logger.warning(f"Ignoring keywords of type {type(value).__name__}")
        return ""

    terms = [item.strip().lower() for item in items if item.strip()]
    return ", ".join(terms[:MAX_KEYWORDS])


def normalize_tags(value: Any) -> list[str]:
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(item) for item in value]
    else:
        return []
    return [item.strip() for item in items if item.strip()][:MAX_TAGS]


def normalize_seo_payload(payload: Any, title: str, content: str) -> SEOMetadata:
    """
    Clamp and backfill a raw SEO payload.

    Args:
        payload: Decoded JSON returned by the model
        title: Article title, used when the meta title is missing
        content: Article body, used when the meta description is missing

    Returns:
        SEOMetadata with every field in range

    Raises:
        InvalidJSON: If the payload is not a JSON object
    """
    if not isinstance(payload, dict):
        raise InvalidJSON("SEO payload is not a JSON object", excerpt=repr(payload))

    meta_title = str(payload.get("metaTitle") or "").strip()
    if len(meta_title) < META_TITLE_MIN:
        meta_title = title
    meta_title = truncate_text(meta_title, META_TITLE_MAX)

    meta_description = str(payload.get("metaDescription") or "").strip()
    if len(meta_description) < META_DESCRIPTION_MIN:
        meta_description = strip_markdown(content)[:EXCERPT_MAX]
    meta_description = truncate_text(meta_description, META_DESCRIPTION_MAX)

    excerpt = str(payload.get("excerpt") or "").strip()
    if len(excerpt) < EXCERPT_MIN:
        excerpt = meta_description
    excerpt = truncate_text(excerpt, EXCERPT_MAX)

    return SEOMetadata(
        meta_title=meta_title,
        meta_description=meta_description,
        keywords=normalize_keywords(payload.get("keywords")),
        excerpt=excerpt,
        tags=normalize_tags(payload.get("tags")),
    )


class SEOGenerator:
    """
    Generates SEO metadata for an article.

    Usage:
        generator = SEOGenerator(client)
        seo = await generator.generate_seo(title, content, category="databases")
    """

    SYSTEM_PROMPT = """
You are a senior SEO expert specialized in B2B tech content. You generate SEO metadata optimized for Google. No Title Case.

STRICT SEO RULES:
- metaTitle (50-60 characters): main keyword first, catchy and clear, no superfluous special characters
- metaDescription (150-160 characters): sums up the value of the article, implicit call to action, main keyword included naturally
- keywords: 5-8 relevant keywords mixing head terms and long tail, comma separated
- excerpt (150-200 characters): teaser for previews, may differ slightly from the meta description
- tags: 3-5 thematic tags usable for navigation

Always answer with valid JSON using exactly this structure:
{
  "metaTitle": "string",
  "metaDescription": "string",
  "keywords": "string",
  "excerpt": "string",
  "tags": ["string"]
}
"""

    def __init__(self, client: Optional[CompletionClient] = None):
        self.client = client or CompletionClient()

    def build_prompt(
        self,
        title: str,
        content: str,
        category: Optional[str] = None,
        suggested_keywords: Optional[list[str]] = None,
    ) -> str:
        return f"""Generate optimized SEO metadata for this article:

## Article title
{title}

## Category
{get_category_label(category)}

## Content excerpt (first 500 characters)
{content[:500] or "Not available"}

## Suggested main keywords
{", ".join(suggested_keywords) if suggested_keywords else "To be determined"}

Generate a JSON with: metaTitle, metaDescription, keywords, excerpt, tags"""

    async def generate_seo(
        self,
        title: str,
        content: str,
        category: Optional[str] = None,
        suggested_keywords: Optional[list[str]] = None,
    ) -> SEOMetadata:
        """
        Generate and normalize SEO metadata.

        Returns:
            SEOMetadata clamped to target lengths

        Raises:
            InvalidJSON: If the response is not a usable JSON object
        """
        logger.info(f"Generating SEO metadata for: {title}")

        prompt = self.build_prompt(title, content, category, suggested_keywords)
        payload = await self.client.complete_json(self.SYSTEM_PROMPT, prompt)

        seo = normalize_seo_payload(payload, title, content)
        logger.info(f"SEO metadata ready (meta title: {len(seo.meta_title)} chars)")
        return seo
