"""
Content writer: turns an outline into the markdown body of an article.
"""

from typing import Optional

from src.config.locales import get_language_label
from src.config.settings import Settings, get_settings
from src.planning.outline_generator import Outline
from src.utils.helpers import clean_markdown
from src.utils.llm_helpers import CompletionClient
from src.utils.logger import get_logger

logger = get_logger(__name__)


class ContentWriter:
    """Writes the full article body following an outline."""

    SYSTEM_PROMPT = """
You are an experienced senior web writer for a digital agency specialized in web development and innovative digital products. You write high-quality technical blog articles.

WRITING STYLE:
- Accessible and professional: close to the reader without being familiar
- Expert but never condescending: explain without oversimplifying
- Enthusiastic but measured: show interest without piling up superlatives
- Concrete and practical: always illustrate with real examples

NATURAL WRITING:
- Alternate short punchy sentences with longer developed ones; avoid repetitive structures
- Express nuanced opinions and acknowledge limits
- Use rhetorical questions, concrete situations and accessible analogies
- Alternate dense paragraphs and lighter ones; use bullet lists sparingly
- Never comment on the article itself ("in this section we will...", "let's now look at...")
- Avoid stock phrases such as "in today's fast-paced world", "it's important to note that", "moreover", "in conclusion"

STRUCTURE:
- ## for H2 sections, ### for H3 subsections
- Never write the H1 title; it is added separately
- Never use generic headings like "Introduction", "Conclusion" or "FAQ"
- Open with the introduction directly, close with a conclusion that opens perspectives

OUTPUT:
Clean, well-structured Markdown only. No Title Case. No preamble or closing remarks outside the article.
"""

    def __init__(self, client: Optional[CompletionClient] = None, settings: Optional[Settings] = None):
        self.client = client or CompletionClient()
        self.settings = settings or get_settings()

    def build_prompt(
        self,
        outline: Outline,
        language: str,
        tone: str,
        target_length: str,
        keywords: Optional[list[str]] = None,
        research_context: Optional[str] = None,
    ) -> str:
        """Build the user prompt embedding the whole outline."""
        intro = outline.introduction
        planned_length = (
            f"- Planned length from the outline: {outline.estimated_word_count} words\n"
            if outline.estimated_word_count
            else ""
        )
        sections = []
        for index, section in enumerate(outline.sections, 1):
            lines = [f"#### {index}. {section.h2}"]
            if section.narrative_goal:
                lines.append(f"- Goal: {section.narrative_goal}")
            if section.key_points:
                lines.append(f"- Key points: {', '.join(section.key_points)}")
            for sub in section.subsections:
                lines.append(f"  - {sub.h3}: {sub.content}")
            sections.append("\n".join(lines))

        prompt = f"""## Mission
Write a complete article following EXACTLY the outline below.

## Article title
{outline.title}

## Angle
{outline.angle or "Chosen by you according to the topic"}

## Target audience
{outline.target_audience or "Developers and tech decision makers"}

## Outline

### Introduction
- Hook: {intro.hook}
- Context: {intro.context}
- Promise: {intro.promise}

### Main sections
{chr(10).join(sections)}

### Conclusion
- Type: {outline.conclusion.type}
- Direction: {outline.conclusion.direction}

## Writing constraints
- Target length: {target_length} words
{planned_length}- Tone: {tone}
- Language: {get_language_label(language)}
- Keywords to weave in naturally: {", ".join(keywords) if keywords else "according to context"}
- Prefer developed paragraphs over lists; at most one or two lists in the whole article
- No meta-commentary about the article or its sections
"""
        if research_context:
            prompt += f"""
## Recent facts to draw on
{research_context}
"""
        prompt += """
## Format
Markdown. Start directly with the introduction (the H1 title is added separately).
Use ## for H2 and ### for H3."""
        return prompt

    async def write_content(
        self,
        outline: Outline,
        language: str = "en",
        tone: Optional[str] = None,
        target_length: Optional[str] = None,
        keywords: Optional[list[str]] = None,
        research_context: Optional[str] = None,
    ) -> str:
        """
        Write the article body for an outline.

        Args:
            outline: Planned outline
            language: Locale of the article
            tone: Writing tone (defaults to settings)
            target_length: Word count range, e.g. "1800-2200"
            keywords: Keywords to include
            research_context: Optional summary of recent sources

        Returns:
            Cleaned markdown body without H1
        """
        logger.info(f"Writing content for: {outline.title}")

        prompt = self.build_prompt(
            outline,
            language=language,
            tone=tone or self.settings.default_tone,
            target_length=target_length or self.settings.target_length,
            keywords=keywords,
            research_context=research_context,
        )
        raw = await self.client.complete(
            self.SYSTEM_PROMPT,
            prompt,
            temperature=0.85,
            frequency_penalty=0.4,
            presence_penalty=0.3,
            max_tokens=6000,
        )

        content = clean_markdown(raw)
        logger.info(f"Content written: {len(content.split())} words")
        return content
