"""Locales the pipeline writes and translates articles in."""

SUPPORTED_LOCALES = ("fr", "en", "es")

LOCALE_NAMES = {
    "fr": "French",
    "en": "English",
    "es": "Spanish",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
}


def get_language_label(locale: str) -> str:
    """Human readable language name for prompts, e.g. ``fr`` -> ``French``."""
    return LOCALE_NAMES.get(locale, locale)


def default_target_locales(source_locale: str) -> list[str]:
    """Every supported locale except the source."""
    return [locale for locale in SUPPORTED_LOCALES if locale != source_locale]
