"""
Article pipeline orchestration.

One article runs as a single unit of work:
research (optional) → planning → writing → post_processing → seo → assembled

Any failure aborts the article and propagates to the caller. Batches run
articles one after another, pausing between items, and record failures
per topic instead of stopping.
"""

from datetime import datetime, timezone
from typing import Any, Optional, Union

from src.config.settings import Settings, get_settings
from src.generation.content_generator import ContentWriter
from src.generation.metadata_generator import SEOGenerator, SEOMetadata
from src.generation.post_processor import ContentPostProcessor
from src.optimization.seo_optimizer import validate_seo_structure
from src.pipeline.state import (
    Article,
    ArticleSEO,
    ArticleStatus,
    BatchError,
    BatchResult,
    GenerationInfo,
    GenerationOptions,
    Phase,
)
from src.planning.outline_generator import Outline, OutlinePlanner
from src.research.topic_discovery import TopicSuggestion
from src.research.trend_sources import OnlineResearch, TrendAggregator
from src.utils.exceptions import InvalidOutline
from src.utils.helpers import estimate_reading_time, format_tags, slugify
from src.utils.llm_helpers import CompletionClient
from src.utils.logger import get_logger, log_step
from src.utils.retry import FixedDelayPacer, Pacer

logger = get_logger(__name__)

TopicInput = Union[str, Outline, TopicSuggestion, dict]


def assemble_article(
    outline: Outline,
    content: str,
    seo: SEOMetadata,
    options: GenerationOptions,
    topic: str,
    author: str,
    model: Optional[str] = None,
    research: Optional[OnlineResearch] = None,
    now: Optional[datetime] = None,
) -> Article:
    """
    Compose the final article from the pipeline outputs.

    Derives slug and reading time, and sets ``published_at`` only when
    ``auto_publish`` is requested.
    """
    now = now or datetime.now(timezone.utc)
    status = ArticleStatus.PUBLISHED if options.auto_publish else ArticleStatus.DRAFT

    return Article(
        title=outline.title,
        slug=slugify(outline.title),
        excerpt=seo.excerpt,
        content=content,
        cover_image=options.cover_image,
        seo=ArticleSEO(
            meta_title=seo.meta_title,
            meta_description=seo.meta_description,
            keywords=seo.keywords,
            tags=seo.tags,
            og_image=options.og_image or options.cover_image,
            canonical_url=options.canonical_url,
        ),
        status=status,
        published_at=now if options.auto_publish else None,
        tags=format_tags(seo.tags),
        author=author,
        reading_time=estimate_reading_time(content),
        generation=GenerationInfo(
            topic=topic,
            category=options.category,
            language=options.language,
            angle=outline.angle,
            article_type=outline.article_type,
            outline_sections=outline.summary(),
            research_sources=len(research.sources) if research else 0,
            model=model,
            generated_at=now,
        ),
    )


class ArticlePipeline:
    """
    Generates complete articles from a topic or a ready-made outline.

    Usage:
        pipeline = ArticlePipeline()
        article = await pipeline.generate_article("Vector databases in production")
        batch = await pipeline.generate_article_batch(["topic a", "topic b"])
    """

    def __init__(
        self,
        client: Optional[CompletionClient] = None,
        aggregator: Optional[TrendAggregator] = None,
        planner: Optional[OutlinePlanner] = None,
        writer: Optional[ContentWriter] = None,
        post_processor: Optional[ContentPostProcessor] = None,
        seo_generator: Optional[SEOGenerator] = None,
        pacer: Optional[Pacer] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.client = client or CompletionClient(self.settings)
        self.aggregator = aggregator
        self.planner = planner or OutlinePlanner(self.client)
        self.writer = writer or ContentWriter(self.client, self.settings)
        self.post_processor = post_processor or ContentPostProcessor()
        self.seo_generator = seo_generator or SEOGenerator(self.client)
        self.pacer = pacer or FixedDelayPacer(self.settings.batch_delay)

    def _resolve_input(self, topic_or_outline: TopicInput) -> tuple[str, Optional[Outline], Optional[str]]:
        """Split the input into (topic text, outline if given, category hint)."""
        if isinstance(topic_or_outline, Outline):
            return topic_or_outline.title, topic_or_outline, None
        if isinstance(topic_or_outline, TopicSuggestion):
            return topic_or_outline.title, None, topic_or_outline.category
        if isinstance(topic_or_outline, dict):
            if "sections" in topic_or_outline:
                outline = Outline.from_payload(topic_or_outline)
                return outline.title, outline, topic_or_outline.get("category")
            title = topic_or_outline.get("proposedTitle") or topic_or_outline.get("title")
            if not title:
                raise ValueError("Topic dict needs a 'title' or 'sections'")
            return title, None, topic_or_outline.get("category")
        if isinstance(topic_or_outline, str) and topic_or_outline.strip():
            return topic_or_outline.strip(), None, None
        raise ValueError(f"Unsupported topic input: {topic_or_outline!r}")

    async def generate_article(
        self,
        topic_or_outline: TopicInput,
        options: Optional[GenerationOptions] = None,
    ) -> Article:
        """
        Run the full pipeline for one article.

        Args:
            topic_or_outline: Topic string, topic suggestion, or an outline
                (an ``Outline`` or a dict with ``sections``) to skip planning
            options: Generation options

        Returns:
            Assembled article

        Raises:
            PipelineError: Any generation failure, unchanged
        """
        options = (options or GenerationOptions()).model_copy()
        topic, outline, category_hint = self._resolve_input(topic_or_outline)
        options.category = options.category or category_hint
        options.language = options.language or self.settings.default_language

        total = 5 if options.research_online else 4
        step = 0
        phase = Phase.PLANNING
        research: Optional[OnlineResearch] = None
        logger.info(f"Generating article: {topic}")

        try:
            if options.research_online:
                phase = Phase.RESEARCH
                step += 1
                log_step(logger, step, total, "Researching topic online")
                aggregator = self.aggregator or TrendAggregator(settings=self.settings)
                research = await aggregator.research_topic_online(topic, options.language)

            phase = Phase.PLANNING
            step += 1
            if outline is None:
                log_step(logger, step, total, "Planning outline")
                outline = await self.planner.plan_topic(
                    topic,
                    category=options.category,
                    language=options.language,
                    online_context=research.context if research and research.has_recent_data else None,
                )
            else:
                log_step(logger, step, total, "Using provided outline")
                if not outline.sections:
                    raise InvalidOutline("Provided outline has no sections")

            phase = Phase.WRITING
            step += 1
            log_step(logger, step, total, "Writing content")
            raw_content = await self.writer.write_content(
                outline,
                language=options.language,
                tone=options.tone,
                target_length=options.target_length,
                keywords=options.keywords,
                research_context=research.context if research else None,
            )

            phase = Phase.POST_PROCESSING
            content = self.post_processor.process(raw_content)

            phase = Phase.SEO
            step += 1
            log_step(logger, step, total, "Generating SEO metadata")
            seo = await self.seo_generator.generate_seo(
                outline.title,
                content,
                category=options.category,
                suggested_keywords=options.keywords,
            )

            step += 1
            log_step(logger, step, total, "Assembling article")
            article = assemble_article(
                outline,
                content,
                seo,
                options,
                topic=topic,
                author=options.author or self.settings.default_author,
                model=self.client.model,
                research=research,
            )
            phase = Phase.ASSEMBLED
        except Exception:
            logger.error(f"Article generation failed during {phase.value}: {topic}")
            raise

        validation = validate_seo_structure(article)
        if not validation["valid"]:
            for issue in validation["issues"]:
                logger.warning(f"SEO structure: {issue}")

        logger.info(
            f"Article {phase.value}: '{article.title}' ({article.reading_time} min read, {article.status})"
        )
        return article

    async def generate_article_batch(
        self,
        topics: list[Any],
        options: Optional[GenerationOptions] = None,
    ) -> BatchResult:
        """
        Generate articles sequentially, pacing between items.

        A failing topic is recorded in ``errors`` and the batch continues.
        """
        result = BatchResult()
        logger.info(f"Batch generation of {len(topics)} articles")

        for index, topic in enumerate(topics):
            label = self._label(topic)
            logger.info(f"Batch item {index + 1}/{len(topics)}: {label}")
            try:
                article = await self.generate_article(topic, options)
            except Exception as e:
                logger.error(f"Batch item failed ({label}): {e}", exc_info=True)
                result.errors.append(BatchError(topic=label, error=str(e)))
            else:
                result.articles.append(article)

            if index < len(topics) - 1:
                await self.pacer.wait()

        logger.info(f"Batch done: {len(result.articles)} succeeded, {len(result.errors)} failed")
        return result

    @staticmethod
    def _label(topic: Any) -> str:
        if isinstance(topic, (Outline, TopicSuggestion)):
            return topic.title
        if isinstance(topic, dict):
            return str(topic.get("proposedTitle") or topic.get("title") or "untitled outline")
        return str(topic)
