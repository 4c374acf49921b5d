"""
Text helpers shared by the generation, SEO and storage layers.
"""

import math
import re
import unicodedata
from typing import Any, Iterable

WORDS_PER_MINUTE = 200

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$", re.MULTILINE)
_MARKDOWN_CHARS_RE = re.compile(r"[#*_\[\]`>]")


def slugify(text: str, max_length: int = 80) -> str:
    """
    Convert text to a URL-friendly slug.

    Accents are folded to ASCII, every run of other characters becomes a
    single hyphen and leading/trailing hyphens are dropped.

    Args:
        text: Text to slugify
        max_length: Maximum slug length

    Returns:
        Slugified string
    """
    normalized = unicodedata.normalize("NFKD", text)
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii").lower()
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_text).strip("-")
    if len(slug) > max_length:
        slug = slug[:max_length].rstrip("-")
    return slug


def count_words(text: str) -> int:
    return len(text.split())


def estimate_reading_time(content: str) -> int:
    """Minutes to read ``content`` at 200 words per minute, rounded up."""
    return math.ceil(count_words(content) / WORDS_PER_MINUTE)


def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
    """Cut ``text`` so the result, suffix included, fits in ``max_length``."""
    if not text or len(text) <= max_length:
        return text or ""
    return text[: max_length - len(suffix)].strip() + suffix


def strip_markdown(text: str) -> str:
    """Drop markdown punctuation and collapse whitespace."""
    return re.sub(r"\s+", " ", _MARKDOWN_CHARS_RE.sub("", text)).strip()


def clean_markdown(content: str) -> str:
    """
    Normalize raw model output into clean markdown.

    Removes a wrapping code fence and a leading H1, normalizes line endings,
    ensures blank lines around ``##``/``###`` headings, converts tabs and
    strips trailing spaces.
    """
    cleaned = content.strip()
    cleaned = re.sub(r"^```(?:markdown|md)?\s*\n", "", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"\n```\s*$", "", cleaned)
    cleaned = re.sub(r"^# .+\n+", "", cleaned)

    cleaned = cleaned.replace("\r\n", "\n")
    cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)
    cleaned = re.sub(r"([^\n])\n(#{2,3}\s)", r"\1\n\n\2", cleaned)
    cleaned = re.sub(r"^(#{2,3}\s.+)\n([^\n#])", r"\1\n\n\2", cleaned, flags=re.MULTILINE)
    cleaned = cleaned.replace("\t", "  ")
    cleaned = re.sub(r"[ ]+$", "", cleaned, flags=re.MULTILINE)
    return cleaned.strip()


def extract_headings(content: str) -> list[dict[str, Any]]:
    """List markdown headings as ``{"level", "text"}`` dicts in document order."""
    return [
        {"level": len(match.group(1)), "text": match.group(2).strip()}
        for match in _HEADING_RE.finditer(content)
    ]


def format_tags(tags: Any) -> list[dict[str, str]]:
    """
    Normalize tags to the ``[{"tag": ...}]`` shape stored on articles.

    Accepts a comma separated string, a list of strings, or a list of
    already-shaped dicts.
    """
    if not tags:
        return []
    if isinstance(tags, str):
        items: Iterable[Any] = tags.split(",")
    elif isinstance(tags, (list, tuple)):
        items = tags
    else:
        return []

    formatted = []
    for item in items:
        value = item.get("tag", "") if isinstance(item, dict) else str(item)
        value = value.strip()
        if value:
            formatted.append({"tag": value})
    return formatted
