"""Content generation module: article body, cleanup and SEO metadata."""

from .content_generator import ContentWriter
from .metadata_generator import SEOGenerator, SEOMetadata, normalize_seo_payload
from .post_processor import DEFAULT_AI_PHRASES, ContentPostProcessor

__all__ = [
    "ContentWriter",
    "ContentPostProcessor",
    "DEFAULT_AI_PHRASES",
    "SEOGenerator",
    "SEOMetadata",
    "normalize_seo_payload",
]
