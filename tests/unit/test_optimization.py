"""Tests for SEO scoring, suggestions and structural validation."""

import pytest

from src.optimization.seo_optimizer import score_seo, seo_suggestions, validate_seo_structure
from src.pipeline.state import Article, ArticleSEO


def make_article(title="T" * 40, content="", meta_title="", meta_description="", keywords="", cover_image=None):
    return Article(
        title=title,
        slug="slug",
        content=content,
        cover_image=cover_image,
        seo=ArticleSEO(meta_title=meta_title, meta_description=meta_description, keywords=keywords),
    )


def body(words=1800, h2=5, h3=2):
    parts = [f"## Section {i}\n\nParagraph." for i in range(h2)]
    parts += [f"### Sub {i}\n\nDetail." for i in range(h3)]
    parts.append("word " * words)
    return "\n\n".join(parts)


class TestScoreSeo:
    @pytest.mark.parametrize(
        "length,points",
        [(30, 20), (70, 20), (29, 15), (71, 15), (20, 15), (80, 15), (19, 10), (81, 10)],
    )
    def test_title_boundaries(self, length, points):
        assert score_seo(make_article(title="T" * length)).scores["title"] == points

    @pytest.mark.parametrize(
        "length,points",
        [(50, 15), (60, 15), (40, 12), (65, 12), (39, 8), (66, 8)],
    )
    def test_meta_title_boundaries(self, length, points):
        assert score_seo(make_article(meta_title="M" * length)).scores["meta_title"] == points

    @pytest.mark.parametrize(
        "length,points",
        [(150, 15), (160, 15), (120, 12), (170, 12), (119, 8), (171, 8)],
    )
    def test_meta_description_boundaries(self, length, points):
        article = make_article(meta_description="D" * length)
        assert score_seo(article).scores["meta_description"] == points

    @pytest.mark.parametrize("count,points", [(5, 15), (8, 15), (3, 12), (10, 12), (2, 8), (11, 8)])
    def test_keyword_count(self, count, points):
        keywords = ", ".join(f"kw{i}" for i in range(count))
        assert score_seo(make_article(keywords=keywords)).scores["keywords"] == points

    def test_empty_fields_score_zero(self):
        scores = score_seo(make_article()).scores
        assert scores["meta_title"] == 0
        assert scores["meta_description"] == 0
        assert scores["keywords"] == 0
        assert scores["content"] == 0

    def test_structure(self):
        assert score_seo(make_article(content=body(h2=4, h3=2))).scores["structure"] == 15
        assert score_seo(make_article(content=body(h2=2, h3=1))).scores["structure"] == 8
        assert score_seo(make_article(content=body(h2=1, h3=0))).scores["structure"] == 5

    def test_perfect_article(self):
        article = make_article(
            title="T" * 50,
            content=body(words=1800),
            meta_title="M" * 55,
            meta_description="D" * 155,
            keywords="a, b, c, d, e, f",
        )

        score = score_seo(article)

        assert score.total_score == 100
        assert score.percentage == 100
        assert score.level == "excellent"
        assert score.feedback == []

    def test_weak_article_collects_feedback(self):
        score = score_seo(make_article(title="Short", content="Too little."))
        assert score.level == "weak"
        assert "Content too short" in score.feedback
        assert "Title too short or too long" in score.feedback


class TestSuggestions:
    def test_suggestions_for_bare_article(self):
        fields = {s.field for s in seo_suggestions(make_article(content="plain"))}
        assert fields == {"title", "content", "coverImage"}

    def test_well_formed_article_has_no_suggestions(self):
        content = "See [the guide](/guide).\n\n- one\n- two\n- three"
        article = make_article(title="Caching - a practical guide", content=content, cover_image="/cover.png")
        assert seo_suggestions(article) == []


class TestValidateSeoStructure:
    def test_valid(self, article):
        result = validate_seo_structure(article)
        assert result == {"valid": True, "issues": []}

    def test_invalid(self):
        result = validate_seo_structure(make_article(title="Short", content="No headings"))
        assert result["valid"] is False
        assert len(result["issues"]) == 5

    def test_h1_in_body(self, article):
        article = article.model_copy(update={"content": "# Duplicate title\n\n" + article.content})

        result = validate_seo_structure(article)

        assert result["issues"] == ["Content must not contain H1 headings (the title is the H1)"]

    def test_h3_only_is_not_enough(self, article):
        content = article.content.replace("## ", "### ")
        result = validate_seo_structure(article.model_copy(update={"content": content}))
        assert "Content must contain at least one H2 heading" in result["issues"]
