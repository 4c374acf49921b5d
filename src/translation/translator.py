"""
Article translator for multilingual publishing.

Produces a document whose locale-sensitive fields map locale codes to
strings. Locales are translated concurrently and so are the four units of
one locale (title, excerpt, content, SEO block). A failing locale falls
back to the source-language values as a whole, so a locale never mixes
translated and untranslated fields.
"""

import asyncio
import re
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from src.config.locales import default_target_locales, get_language_label
from src.parsers.json_repair import parse_json_object
from src.pipeline.state import Article, ArticleTag, CamelModel
from src.utils.exceptions import InvalidJSON, SEOTranslationFailed, TranslationFailed
from src.utils.llm_helpers import CompletionClient
from src.utils.logger import get_logger

logger = get_logger(__name__)

MAX_CHUNK_SIZE = 3000
SECTION_SPLIT_RE = re.compile(r"\n(?=##?\s)")
SEO_KEYS = ("metaTitle", "metaDescription", "keywords", "excerpt")


class LocaleStatus(str, Enum):
    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FALLBACK = "fallback"


class LocalizedSEO(CamelModel):
    meta_title: dict[str, str] = Field(default_factory=dict)
    meta_description: dict[str, str] = Field(default_factory=dict)
    keywords: dict[str, str] = Field(default_factory=dict)
    og_image: Optional[str] = None
    canonical_url: Optional[str] = None
    no_index: bool = False


class MultilingualArticle(CamelModel):
    """Article with one value per locale for every translatable field."""

    slug: str
    cover_image: Optional[str] = None
    status: str = "draft"
    published_at: Optional[datetime] = None
    author: str = ""
    reading_time: int = 1
    title: dict[str, str] = Field(default_factory=dict)
    excerpt: dict[str, str] = Field(default_factory=dict)
    content: dict[str, str] = Field(default_factory=dict)
    seo: LocalizedSEO = Field(default_factory=LocalizedSEO)
    tags: list[ArticleTag] = Field(default_factory=list)
    locale_status: dict[str, LocaleStatus] = Field(default_factory=dict, exclude=True)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    def set_locale(self, locale: str, values: "LocaleValues") -> None:
        self.title[locale] = values.title
        self.excerpt[locale] = values.excerpt
        self.content[locale] = values.content
        self.seo.meta_title[locale] = values.meta_title
        self.seo.meta_description[locale] = values.meta_description
        self.seo.keywords[locale] = values.keywords


class LocaleValues(BaseModel):
    """Translatable values of an article in one locale."""

    title: str
    excerpt: str
    content: str
    meta_title: str
    meta_description: str
    keywords: str

    @classmethod
    def from_article(cls, article: Article) -> "LocaleValues":
        return cls(
            title=article.title,
            excerpt=article.excerpt,
            content=article.content,
            meta_title=article.seo.meta_title,
            meta_description=article.seo.meta_description,
            keywords=article.seo.keywords,
        )


def _seed(article: Article, source_locale: str) -> MultilingualArticle:
    multilingual = MultilingualArticle(
        slug=article.slug,
        cover_image=article.cover_image,
        status=article.status,
        published_at=article.published_at,
        author=article.author,
        reading_time=article.reading_time,
        seo=LocalizedSEO(
            og_image=article.seo.og_image,
            canonical_url=article.seo.canonical_url,
            no_index=article.seo.no_index,
        ),
        tags=article.tags,
    )
    multilingual.set_locale(source_locale, LocaleValues.from_article(article))
    return multilingual


def to_locale_document(article: Article, locale: str) -> dict[str, Any]:
    """Single-locale document in the multilingual shape, without translating."""
    return _seed(article, locale).to_document()


def _pick_locale(value: Any, locale: Optional[str]) -> Any:
    if isinstance(value, dict):
        return value.get(locale) or next(iter(value.values()), "")
    return value or ""


def from_locale_document(document: dict[str, Any], locale: Optional[str] = None) -> Article:
    """
    Rebuild a single-language article from a stored or exported document.

    Locale maps are reduced to ``locale`` (or their first locale when it is
    missing); plain string fields are taken as they are.
    """
    seo = document.get("seo") or {}
    return Article.model_validate(
        {
            **document,
            "title": _pick_locale(document.get("title"), locale),
            "excerpt": _pick_locale(document.get("excerpt"), locale),
            "content": _pick_locale(document.get("content"), locale),
            "seo": {
                **seo,
                "metaTitle": _pick_locale(seo.get("metaTitle"), locale),
                "metaDescription": _pick_locale(seo.get("metaDescription"), locale),
                "keywords": _pick_locale(seo.get("keywords"), locale),
            },
        }
    )


class ArticleTranslator:
    """
    Translates articles between locales.

    Usage:
        translator = ArticleTranslator(client)
        multilingual = await translator.translate_article(article, "fr", ["en", "es"])
    """

    SYSTEM_PROMPT = """
You are a professional translator specialized in tech and web content. You translate blog articles while:

TRANSLATION RULES:
1. Preserving meaning and tone: keep the conversational, professional yet accessible style
2. Adapting expressions: use natural idioms of the target language, never literal translation
3. Keeping the structure: preserve exactly the same Markdown structure (H2, H3, lists, code)
4. Technical terms: keep universal English tech terms (API, framework, backend...), adapt acronyms when needed
5. SEO: the translation stays natural and search friendly
6. Length: the translation may vary slightly in length, that is expected

OUTPUT:
Return ONLY the translated text, without comments or explanations.
"""

    def __init__(self, client: Optional[CompletionClient] = None):
        self.client = client or CompletionClient()

    async def translate_text(self, text: str, target_locale: str, source_locale: str) -> str:
        """
        Translate a text; identical locales or blank text return it unchanged.

        Texts longer than 3000 characters are translated section by section.
        """
        if not text or not text.strip() or target_locale == source_locale:
            return text

        if len(text) > MAX_CHUNK_SIZE:
            logger.debug(f"Long text ({len(text)} chars), translating by sections")
            return await self._translate_long_text(text, target_locale, source_locale)

        prompt = f"""Translate this text from {get_language_label(source_locale)} to {get_language_label(target_locale)}.

Text to translate:
---
{text}
---

Translation in {get_language_label(target_locale)}:"""

        translated = await self.client.complete(self.SYSTEM_PROMPT, prompt, max_tokens=4000)
        return translated.strip()

    async def _translate_section(self, section: str, target_locale: str, source_locale: str) -> str:
        if not section.strip():
            return section

        prompt = f"""Translate this text from {get_language_label(source_locale)} to {get_language_label(target_locale)}.
Keep the Markdown formatting exactly (## headings, lists, code, etc.).

Text:
---
{section}
---

Translation:"""
        try:
            translated = await self.client.complete(self.SYSTEM_PROMPT, prompt, max_tokens=4000)
        except Exception as e:
            logger.warning(f"Section translation to {target_locale} failed, keeping original: {e}")
            return section
        return translated.strip()

    async def _translate_long_text(self, text: str, target_locale: str, source_locale: str) -> str:
        sections = SECTION_SPLIT_RE.split(text)
        translated = await asyncio.gather(
            *(self._translate_section(section, target_locale, source_locale) for section in sections)
        )
        return "\n\n".join(translated)

    async def translate_seo(
        self,
        seo_fields: dict[str, str],
        target_locale: str,
        source_locale: str,
    ) -> dict[str, str]:
        """
        Translate the SEO block in one call.

        Args:
            seo_fields: ``metaTitle``, ``metaDescription``, ``keywords``, ``excerpt``

        Returns:
            Translated fields, or ``seo_fields`` when the response is unusable
        """
        if target_locale == source_locale:
            return seo_fields

        prompt = f"""Translate this SEO metadata from {get_language_label(source_locale)} to {get_language_label(target_locale)}.
Respect SEO length constraints (meta title: 50-60 chars, meta description: 150-160 chars).

Meta Title: {seo_fields.get("metaTitle", "")}
Meta Description: {seo_fields.get("metaDescription", "")}
Keywords: {seo_fields.get("keywords", "")}
Excerpt: {seo_fields.get("excerpt", "")}

Answer in JSON with exactly these keys: metaTitle, metaDescription, keywords, excerpt"""

        response = await self.client.complete(
            self.SYSTEM_PROMPT, prompt, temperature=0.3, max_tokens=4000
        )

        try:
            return self._coerce_seo(response)
        except SEOTranslationFailed as e:
            logger.warning(f"SEO translation to {target_locale} unusable, keeping original: {e}")
            return seo_fields

    @staticmethod
    def _coerce_seo(response: str) -> dict[str, str]:
        try:
            payload = parse_json_object(response)
        except InvalidJSON as e:
            raise SEOTranslationFailed(str(e)) from e

        missing = [key for key in SEO_KEYS[:3] if not payload.get(key)]
        if missing:
            raise SEOTranslationFailed(f"missing keys: {', '.join(missing)}")

        result = {}
        for key in SEO_KEYS:
            value = payload.get(key) or ""
            if isinstance(value, list):
                value = ", ".join(str(item) for item in value)
            result[key] = str(value).strip()
        return result

    async def _translate_locale(self, article: Article, source_locale: str, locale: str) -> LocaleValues:
        seo_fields = {
            "metaTitle": article.seo.meta_title,
            "metaDescription": article.seo.meta_description,
            "keywords": article.seo.keywords,
            "excerpt": article.excerpt,
        }
        results = await asyncio.gather(
            self.translate_text(article.title, locale, source_locale),
            self.translate_text(article.excerpt, locale, source_locale),
            self.translate_text(article.content, locale, source_locale),
            self.translate_seo(seo_fields, locale, source_locale),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise TranslationFailed(locale, result) from result

        title, excerpt, content, seo = results
        return LocaleValues(
            title=title,
            excerpt=excerpt,
            content=content,
            meta_title=seo["metaTitle"],
            meta_description=seo["metaDescription"],
            keywords=seo["keywords"],
        )

    async def _translate_locale_with_fallback(
        self,
        article: Article,
        source_locale: str,
        locale: str,
        multilingual: MultilingualArticle,
    ) -> None:
        multilingual.locale_status[locale] = LocaleStatus.IN_FLIGHT
        logger.info(f"Translating to {get_language_label(locale)}...")
        try:
            values = await self._translate_locale(article, source_locale, locale)
        except TranslationFailed as e:
            logger.error(f"{e}; using {source_locale} content for {locale}")
            multilingual.set_locale(locale, LocaleValues.from_article(article))
            multilingual.locale_status[locale] = LocaleStatus.FALLBACK
            return

        multilingual.set_locale(locale, values)
        multilingual.locale_status[locale] = LocaleStatus.SUCCEEDED
        logger.info(f"{get_language_label(locale)} done")

    async def translate_article(
        self,
        article: Article,
        source_locale: str,
        target_locales: Optional[list[str]] = None,
    ) -> MultilingualArticle:
        """
        Translate an article into every target locale.

        Never raises for a translation failure: the failing locale receives
        the source values and is marked ``fallback`` in ``locale_status``.

        Args:
            article: Source article
            source_locale: Locale the article is written in
            target_locales: Locales to produce (defaults to every supported one)

        Returns:
            MultilingualArticle with source and target locales filled
        """
        locales = target_locales if target_locales is not None else default_target_locales(source_locale)
        locales = [locale for locale in dict.fromkeys(locales) if locale != source_locale]

        multilingual = _seed(article, source_locale)
        multilingual.locale_status[source_locale] = LocaleStatus.SUCCEEDED
        for locale in locales:
            multilingual.locale_status[locale] = LocaleStatus.PENDING

        logger.info(f"Translating article to: {', '.join(locales) or 'nothing'}")
        await asyncio.gather(
            *(
                self._translate_locale_with_fallback(article, source_locale, locale, multilingual)
                for locale in locales
            )
        )

        failed = [
            locale
            for locale, status in multilingual.locale_status.items()
            if status == LocaleStatus.FALLBACK
        ]
        if failed:
            logger.warning(f"Locales using source content: {', '.join(failed)}")
        return multilingual

    async def generate_multilingual_article(
        self,
        article: Article,
        source_locale: str = "en",
        target_locales: Optional[list[str]] = None,
    ) -> MultilingualArticle:
        """Translate into every supported locale other than the source by default."""
        return await self.translate_article(article, source_locale, target_locales)
