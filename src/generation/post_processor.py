"""
Deterministic cleanup of generated article markdown.

Removes headings and phrasing that read as machine-written: a stray H1,
generic section titles, short meta-commentary lines, and blacklisted
stock phrases at the start of sentences. This is a best-effort heuristic.
The phrase list is not exhaustive and mid-sentence occurrences are left
alone so grammar is not broken.
"""

import re
from typing import Iterable, Optional

from src.utils.logger import get_logger

logger = get_logger(__name__)

META_LINE_MAX_LENGTH = 120

# Regex fragments, matched case-insensitively
DEFAULT_AI_PHRASES: tuple[str, ...] = (
    # English
    r"in today'?s (?:fast-paced|digital|ever-evolving|rapidly evolving) (?:world|landscape|era)",
    r"it(?:'s| is) (?:important|worth|crucial) (?:to note|noting) that",
    r"it goes without saying that",
    r"needless to say",
    r"let'?s dive (?:in|into it|right in)[.!]?",
    r"without further ado",
    r"at the end of the day",
    r"in conclusion",
    r"in summary",
    r"to sum up",
    r"moreover",
    r"furthermore",
    r"additionally",
    r"ultimately",
    # French
    r"dans le monde (?:d'aujourd'hui|numérique actuel|en constante évolution)",
    r"à l'ère du numérique",
    r"il est (?:important|essentiel|crucial) de (?:noter|souligner) que",
    r"il va sans dire que",
    r"en conclusion",
    r"en résumé",
    r"pour conclure",
    r"de plus",
    r"par ailleurs",
    r"en outre",
)

DEFAULT_GENERIC_HEADINGS = re.compile(
    r"^#{2,3}\s*(?:introduction|conclusion|summary|in summary|final thoughts|key takeaways"
    r"|wrapping up|to sum up|faq|frequently asked questions|en résumé|pour résumer"
    r"|ce qu'il faut retenir|questions fréquentes|récapitulatif)\s*:?\s*$",
    re.IGNORECASE | re.MULTILINE,
)

DEFAULT_META_COMMENTS = re.compile(
    r"^.*(?:in this (?:section|article|post),? we(?:'ll| will)"
    r"|we will (?:now )?(?:see|explore|discover|cover|look at)"
    r"|let'?s (?:now )?(?:look at|take a look at|explore|see)"
    r"|now let'?s|before going further"
    r"|dans cette (?:section|partie)|dans cet article,? nous"
    r"|nous allons (?:maintenant )?(?:voir|explorer|découvrir|aborder)"
    r"|voyons maintenant|penchons-nous sur|intéressons-nous à|avant d'aller plus loin).*$",
    re.IGNORECASE | re.MULTILINE,
)


class ContentPostProcessor:
    """
    Pure text cleanup applied to every generated article body.

    The phrase list and the heading and meta-comment patterns are injected,
    so they can be tuned without touching the pipeline.
    """

    def __init__(
        self,
        phrase_patterns: Optional[Iterable[str]] = None,
        generic_heading_pattern: Optional[re.Pattern] = None,
        meta_comment_pattern: Optional[re.Pattern] = None,
    ):
        phrases = tuple(phrase_patterns) if phrase_patterns is not None else DEFAULT_AI_PHRASES
        self.generic_heading_pattern = generic_heading_pattern or DEFAULT_GENERIC_HEADINGS
        self.meta_comment_pattern = meta_comment_pattern or DEFAULT_META_COMMENTS

        self._detectors = [re.compile(rf"(?<!\w)(?:{phrase})(?!\w)", re.IGNORECASE) for phrase in phrases]
        self._line_start = [
            re.compile(rf"^({phrase})(?!\w),?[ \t]*(\S?)", re.IGNORECASE | re.MULTILINE) for phrase in phrases
        ]
        self._after_period = [
            re.compile(rf"(\. )({phrase})(?!\w),?[ \t]*(\S?)", re.IGNORECASE) for phrase in phrases
        ]

    def detect_phrases(self, text: str) -> list[str]:
        """Every blacklisted phrase occurrence, in pattern order."""
        found = []
        for detector in self._detectors:
            found.extend(match.group(0) for match in detector.finditer(text))
        return found

    def _strip_meta_line(self, match: re.Match) -> str:
        line = match.group(0)
        return "" if len(line) < META_LINE_MAX_LENGTH else line

    def _remove_phrases(self, text: str) -> str:
        def at_line_start(match: re.Match) -> str:
            return match.group(2).upper()

        def after_period(match: re.Match) -> str:
            return match.group(1) + match.group(3).upper()

        for line_start, period in zip(self._line_start, self._after_period):
            text = line_start.sub(at_line_start, text)
            text = period.sub(after_period, text)
        return text

    def process(self, text: str) -> str:
        """
        Clean an article body.

        Steps, in order: strip H1 lines; strip generic ``##``/``###``
        headings; strip short meta-commentary lines; log and remove
        blacklisted phrases at sentence start; collapse blank lines and
        repeated spaces; put blank lines around headings; trim.

        Args:
            text: Markdown body

        Returns:
            Cleaned markdown
        """
        cleaned = re.sub(r"^# .+$", "", text, flags=re.MULTILINE)
        cleaned = self.generic_heading_pattern.sub("", cleaned)
        cleaned = self.meta_comment_pattern.sub(self._strip_meta_line, cleaned)

        detected = self.detect_phrases(cleaned)
        if detected:
            unique = sorted({phrase.lower() for phrase in detected})
            logger.warning(f"Detected {len(detected)} stock phrases: {', '.join(unique)}")
            cleaned = self._remove_phrases(cleaned)
            cleaned = re.sub(r"^[ \t]+$", "", cleaned, flags=re.MULTILINE)

        cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)
        cleaned = re.sub(r"(?<=\S) {2,}(?=\S)", " ", cleaned)

        cleaned = re.sub(r"([^\n])\n(#{2,3}\s)", r"\1\n\n\2", cleaned)
        cleaned = re.sub(r"^(#{2,3}\s.+)\n([^\n#])", r"\1\n\n\2", cleaned, flags=re.MULTILINE)
        # Blank lines left behind by removed lines can stack up again
        cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)

        return cleaned.strip()
