"""Translation of articles into multiple locales."""

from .translator import (
    ArticleTranslator,
    LocaleStatus,
    MultilingualArticle,
    from_locale_document,
    to_locale_document,
)

__all__ = [
    "ArticleTranslator",
    "LocaleStatus",
    "MultilingualArticle",
    "from_locale_document",
    "to_locale_document",
]
