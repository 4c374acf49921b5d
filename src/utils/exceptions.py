"""
Exception types raised by the article pipeline.

Generation errors (refusal, truncation, empty output, unparsable JSON,
unusable outline) and ``ConnectionFailed`` reach callers. Translation and
slug errors are recovered where they occur and only logged.
"""

from typing import Optional

EXCERPT_LIMIT = 500


class PipelineError(Exception):
    """Base class for every pipeline error."""


class GenerationRefused(PipelineError):
    """The completion API declined to answer."""

    def __init__(self, refusal: str):
        self.refusal = refusal
        super().__init__(f"Model refused to generate content: {refusal}")


class GenerationTruncated(PipelineError):
    """The token limit was reached before any content was produced."""

    def __init__(self, max_tokens: Optional[int] = None):
        self.max_tokens = max_tokens
        detail = f" (max tokens: {max_tokens})" if max_tokens else ""
        super().__init__(f"Response truncated before any content was produced{detail}")


class EmptyGeneration(PipelineError):
    """The completion API returned no content."""

    def __init__(self, finish_reason: Optional[str] = None):
        self.finish_reason = finish_reason
        super().__init__(f"Empty response from completion API (finish_reason: {finish_reason})")


class InvalidJSON(PipelineError):
    """A JSON response could not be parsed or has the wrong shape."""

    def __init__(self, message: str, excerpt: str = ""):
        self.excerpt = excerpt[:EXCERPT_LIMIT]
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        return f"{base}: {self.excerpt!r}" if self.excerpt else base


class InvalidOutline(PipelineError):
    """The planner returned an outline without sections."""


class TranslationFailed(PipelineError):
    """A locale could not be translated; the source values are used instead."""

    def __init__(self, locale: str, cause: Optional[BaseException] = None):
        self.locale = locale
        self.cause = cause
        super().__init__(f"Translation to '{locale}' failed: {cause}")


class SEOTranslationFailed(PipelineError):
    """The translated SEO payload was unusable; the original fields are kept."""


class SlugCollision(PipelineError):
    """The slug is already taken in the store."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Slug already exists: {slug}")


class ConnectionFailed(PipelineError):
    """A required upstream (completion API or store) is unreachable."""
