"""
Unit tests for content writing, post-processing and SEO metadata.
"""

import pytest

from src.generation.content_generator import ContentWriter
from src.generation.metadata_generator import (
    SEOGenerator,
    normalize_keywords,
    normalize_seo_payload,
    normalize_tags,
)
from src.generation.post_processor import META_LINE_MAX_LENGTH, ContentPostProcessor
from src.utils.exceptions import EmptyGeneration, InvalidJSON


# =============================================================================
# Content writer
# =============================================================================


class TestContentWriter:
    @pytest.mark.asyncio
    async def test_write_content_cleans_output(self, mock_client, outline, settings):
        mock_client.complete.return_value = "```markdown\n# Title\n\nIntro.\n## First\nBody.\n```"
        writer = ContentWriter(mock_client, settings)

        content = await writer.write_content(outline, language="en")

        assert content == "Intro.\n\n## First\n\nBody."
        kwargs = mock_client.complete.await_args.kwargs
        assert kwargs["temperature"] == 0.85
        assert kwargs["frequency_penalty"] == 0.4
        assert kwargs["presence_penalty"] == 0.3

    @pytest.mark.asyncio
    async def test_prompt_embeds_outline(self, mock_client, outline, settings):
        mock_client.complete.return_value = "Body"
        writer = ContentWriter(mock_client, settings)

        await writer.write_content(
            outline,
            language="es",
            keywords=["hnsw", "embeddings"],
            research_context="- Recent benchmark (Source: example.com)",
        )

        prompt = mock_client.complete.await_args.args[1]
        assert outline.title in prompt
        for section in outline.sections:
            assert section.h2 in prompt
        assert "Distance metrics" in prompt
        assert "Spanish" in prompt
        assert "hnsw, embeddings" in prompt
        assert "Recent benchmark" in prompt
        assert settings.target_length in prompt
        assert "Planned length from the outline: 1800 words" in prompt
        assert settings.default_tone in prompt

    @pytest.mark.asyncio
    async def test_generation_errors_propagate(self, mock_client, outline, settings):
        mock_client.complete.side_effect = EmptyGeneration("stop")
        with pytest.raises(EmptyGeneration):
            await ContentWriter(mock_client, settings).write_content(outline)


# =============================================================================
# Post-processor
# =============================================================================


@pytest.fixture
def processor():
    return ContentPostProcessor()


class TestContentPostProcessor:
    def test_removes_h1_and_generic_headings(self, processor):
        text = (
            "# Title\n\nIntro paragraph.\n\n## Introduction\n\nBody.\n\n"
            "## Real section\nText.\n\n### Key takeaways:\n\n- point\n\n## Conclusion\n\nEnd."
        )

        result = processor.process(text)

        assert "# Title" not in result
        assert "## Introduction" not in result
        assert "## Conclusion" not in result
        assert "Key takeaways" not in result
        assert "## Real section\n\nText." in result
        assert result.startswith("Intro paragraph.")
        assert "\n\n\n" not in result

    def test_removes_short_meta_comment_lines(self, processor):
        text = "In this section, we'll explore caching.\nCaching stores results.\n\nNous allons voir les index.\nDone."
        result = processor.process(text)
        assert "we'll explore" not in result
        assert "Nous allons voir" not in result
        assert "Caching stores results." in result

    def test_keeps_long_meta_comment_lines(self, processor):
        line = "Now let's " + "look closely at how the cache behaves under load " * 4
        assert len(line) >= META_LINE_MAX_LENGTH
        assert processor.process(line) == line.strip()

    def test_removes_phrase_at_line_start_and_capitalizes(self, processor):
        result = processor.process("Moreover, caching helps.")
        assert result == "Caching helps."

    def test_removes_phrase_after_period(self, processor):
        result = processor.process("It works. Furthermore the cache expires.")
        assert result == "It works. The cache expires."

    def test_keeps_mid_sentence_phrase(self, processor):
        text = "Caching is ultimately a trade-off."
        assert processor.process(text) == text

    def test_french_phrases(self, processor):
        result = processor.process("En conclusion, le cache aide.\nIl existe de plusieurs façons.")
        assert result.startswith("Le cache aide.")
        assert "de plusieurs façons" in result

    def test_detect_phrases(self, processor):
        found = processor.detect_phrases("Moreover, it's important to note that speed matters. Needless to say.")
        lowered = [phrase.lower() for phrase in found]
        assert "moreover" in lowered
        assert "it's important to note that" in lowered
        assert "needless to say" in lowered

    def test_collapses_inner_spaces_but_keeps_indentation(self, processor):
        text = "Some  spaced   words.\n\n    indented code line"
        result = processor.process(text)
        assert "Some spaced words." in result
        assert "\n    indented code line" in result

    def test_blank_lines_around_headings(self, processor):
        result = processor.process("Intro.\n## Section\nBody.\n### Sub\nMore.")
        assert result == "Intro.\n\n## Section\n\nBody.\n\n### Sub\n\nMore."

    def test_is_idempotent(self, processor):
        text = (
            "# Title\n\nMoreover, vectors  matter.\n## Introduction\nIn this article, we will see things.\n"
            "## Indexes\nHNSW is fast. Additionally it scales.\n\n\n\n## Conclusion\nIn conclusion, pick one."
        )
        once = processor.process(text)
        assert processor.process(once) == once

    def test_custom_phrase_list(self):
        processor = ContentPostProcessor(phrase_patterns=[r"synergy-wise"])
        assert processor.process("Synergy-wise, teams win.") == "Teams win."
        assert processor.process("Moreover, kept.") == "Moreover, kept."


# =============================================================================
# SEO metadata
# =============================================================================


class TestNormalizeSeoPayload:
    def test_valid_payload(self, seo_payload):
        seo = normalize_seo_payload(seo_payload, "Title", "Content")

        assert seo.meta_title == seo_payload["metaTitle"]
        assert seo.keywords == "vector database, semantic search, embeddings, hnsw, rag"
        assert seo.tags == ["AI", "Databases", "Search"]
        assert seo.excerpt == seo_payload["excerpt"]

    def test_clamps_lengths(self):
        payload = {
            "metaTitle": "T" * 90,
            "metaDescription": "D" * 300,
            "excerpt": "E" * 400,
            "keywords": [f"kw{i}" for i in range(12)],
            "tags": ["a", "b", "c", "d", "e", "f", "g"],
        }
        seo = normalize_seo_payload(payload, "Title", "Content")

        assert len(seo.meta_title) <= 60
        assert len(seo.meta_description) <= 160
        assert len(seo.excerpt) <= 200
        assert len(seo.keywords.split(", ")) == 8
        assert len(seo.tags) == 5

    def test_backfills_missing_fields(self):
        content = "## Heading\n\n" + "Vector search finds related documents by meaning. " * 10
        seo = normalize_seo_payload({"metaTitle": "short"}, "A proper article title", content)

        assert seo.meta_title == "A proper article title"
        assert seo.meta_description.startswith("Heading Vector search")
        assert len(seo.meta_description) <= 160
        assert seo.excerpt == seo.meta_description
        assert seo.keywords == ""
        assert seo.tags == []

    def test_rejects_non_object(self):
        with pytest.raises(InvalidJSON):
            normalize_seo_payload(["not", "an", "object"], "Title", "Content")

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("A, b ,, C", "a, b, c"),
            (["One", " Two "], "one, two"),
            (None, ""),
            (42, ""),
        ],
    )
    def test_normalize_keywords(self, value, expected):
        assert normalize_keywords(value) == expected

    def test_normalize_tags_from_string(self):
        assert normalize_tags("ai, ml") == ["ai", "ml"]


class TestSEOGenerator:
    @pytest.mark.asyncio
    async def test_generate_seo(self, mock_client, seo_payload):
        mock_client.complete_json.return_value = seo_payload
        generator = SEOGenerator(mock_client)

        seo = await generator.generate_seo(
            "Vector databases", "Body text", category="databases", suggested_keywords=["hnsw"]
        )

        assert seo.meta_title == seo_payload["metaTitle"]
        system_prompt, prompt = mock_client.complete_json.await_args.args
        assert system_prompt == SEOGenerator.SYSTEM_PROMPT
        assert "Vector databases" in prompt
        assert "Databases" in prompt
        assert "hnsw" in prompt

    @pytest.mark.asyncio
    async def test_invalid_json_propagates(self, mock_client):
        mock_client.complete_json.side_effect = InvalidJSON("broken")
        with pytest.raises(InvalidJSON):
            await SEOGenerator(mock_client).generate_seo("Title", "Body")
