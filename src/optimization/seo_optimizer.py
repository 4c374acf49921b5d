"""
SEO scoring for assembled articles.

Everything here is a pure function of the article fields: a weighted
0-100 score with feedback, improvement suggestions, and a structural
validation run before an article is handed over.
"""

import re
from typing import Any, Literal

from pydantic import BaseModel, Field

from src.pipeline.state import Article
from src.utils.helpers import extract_headings
from src.utils.logger import get_logger

logger = get_logger(__name__)

MAX_SCORE = 100

H2_RE = re.compile(r"^## ", re.MULTILINE)
H3_RE = re.compile(r"^### ", re.MULTILINE)
BULLET_RE = re.compile(r"^- ", re.MULTILINE)


class SEOScore(BaseModel):
    """Weighted SEO score of an article."""

    scores: dict[str, int] = Field(description="Points per dimension")
    total_score: int
    max_score: int = MAX_SCORE
    percentage: int
    level: str
    feedback: list[str] = Field(default_factory=list)


class SEOSuggestion(BaseModel):
    field: str
    priority: Literal["high", "medium", "low"]
    suggestion: str


def _level(percentage: int) -> str:
    if percentage >= 90:
        return "excellent"
    if percentage >= 75:
        return "good"
    if percentage >= 60:
        return "acceptable"
    if percentage >= 40:
        return "needs improvement"
    return "weak"


def _keyword_count(keywords: str) -> int:
    return len([keyword for keyword in keywords.split(",") if keyword.strip()])


def score_seo(article: Article) -> SEOScore:
    """
    Score an article out of 100.

    Weights: title 20, meta title 15, meta description 15, keywords 15,
    content 20, structure 15. Range bounds are inclusive on both ends.

    Args:
        article: Assembled article

    Returns:
        SEOScore with per-dimension points, level and feedback
    """
    scores = {
        "title": 0,
        "meta_title": 0,
        "meta_description": 0,
        "keywords": 0,
        "content": 0,
        "structure": 0,
    }
    feedback: list[str] = []

    if article.title:
        length = len(article.title)
        if 30 <= length <= 70:
            scores["title"] = 20
        elif 20 <= length <= 80:
            scores["title"] = 15
            feedback.append("Title slightly outside the optimal range (30-70 characters)")
        else:
            scores["title"] = 10
            feedback.append("Title too short or too long")

    if article.seo.meta_title:
        length = len(article.seo.meta_title)
        if 50 <= length <= 60:
            scores["meta_title"] = 15
        elif 40 <= length <= 65:
            scores["meta_title"] = 12
            feedback.append("Meta title slightly outside the optimal range (50-60 characters)")
        else:
            scores["meta_title"] = 8
            feedback.append("Meta title needs work")

    if article.seo.meta_description:
        length = len(article.seo.meta_description)
        if 150 <= length <= 160:
            scores["meta_description"] = 15
        elif 120 <= length <= 170:
            scores["meta_description"] = 12
            feedback.append("Meta description slightly outside the optimal range (150-160 characters)")
        else:
            scores["meta_description"] = 8
            feedback.append("Meta description needs work")

    if article.seo.keywords:
        count = _keyword_count(article.seo.keywords)
        if 5 <= count <= 8:
            scores["keywords"] = 15
        elif 3 <= count <= 10:
            scores["keywords"] = 12
            feedback.append("Keyword count not optimal (aim for 5-8)")
        else:
            scores["keywords"] = 8
            feedback.append("Adjust the number of keywords")

    if article.content:
        words = len(article.content.split())
        if 1500 <= words <= 2500:
            scores["content"] = 20
        elif 1000 <= words <= 3000:
            scores["content"] = 15
            feedback.append("Content length not optimal (aim for 1500-2500 words)")
        elif words >= 500:
            scores["content"] = 10
            feedback.append("Content a bit short for good SEO")
        else:
            scores["content"] = 5
            feedback.append("Content too short")

    h2_count = len(H2_RE.findall(article.content))
    h3_count = len(H3_RE.findall(article.content))

    if 4 <= h2_count <= 8:
        scores["structure"] += 10
    elif h2_count >= 2:
        scores["structure"] += 6
        feedback.append("Adjust the number of H2 headings (4-8 recommended)")
    else:
        scores["structure"] += 3
        feedback.append("Insufficient structure: add H2 headings")

    if h3_count >= 2:
        scores["structure"] += 5
    else:
        scores["structure"] += 2
        feedback.append("Consider adding H3 headings for more structure")

    total = sum(scores.values())
    percentage = round(total / MAX_SCORE * 100)
    return SEOScore(
        scores=scores,
        total_score=total,
        percentage=percentage,
        level=_level(percentage),
        feedback=feedback,
    )


def seo_suggestions(article: Article) -> list[SEOSuggestion]:
    """Concrete improvements beyond the score."""
    suggestions = []

    if article.title and " : " not in article.title and " - " not in article.title:
        suggestions.append(
            SEOSuggestion(
                field="title",
                priority="medium",
                suggestion="Consider a separator (':' or '-') to structure the title",
            )
        )

    if "[" not in article.content:
        suggestions.append(
            SEOSuggestion(
                field="content",
                priority="high",
                suggestion="Add internal links to other articles",
            )
        )

    if not article.cover_image:
        suggestions.append(
            SEOSuggestion(
                field="coverImage",
                priority="high",
                suggestion="Add a cover image (1200x630 recommended for social sharing)",
            )
        )

    if len(BULLET_RE.findall(article.content)) < 3:
        suggestions.append(
            SEOSuggestion(
                field="content",
                priority="low",
                suggestion="Bullet lists improve readability and featured snippets",
            )
        )

    return suggestions


def validate_seo_structure(article: Article) -> dict[str, Any]:
    """
    Check the minimum structure expected before an article is stored.

    Returns:
        ``{"valid": bool, "issues": [str]}``
    """
    issues = []

    if not article.title or not 10 <= len(article.title) <= 70:
        issues.append("Title must be between 10 and 70 characters")
    if not article.seo.meta_description or not 50 <= len(article.seo.meta_description) <= 160:
        issues.append("Meta description must be between 50 and 160 characters")
    if len(article.content) < 500:
        issues.append("Content must be at least 500 characters")
    headings = extract_headings(article.content)
    if not any(heading["level"] == 2 for heading in headings):
        issues.append("Content must contain at least one H2 heading")
    if any(heading["level"] == 1 for heading in headings):
        issues.append("Content must not contain H1 headings (the title is the H1)")
    if _keyword_count(article.seo.keywords) < 3:
        issues.append("At least 3 keywords are required")

    return {"valid": not issues, "issues": issues}
