"""
Command line entry point for the SEO Article Pipeline.

Commands:
1. check    - verify completion API and MongoDB connectivity
2. generate - generate one article (optionally translated) and save it
3. batch    - generate several articles across categories
4. cron     - non-interactive scheduled generation, exit 1 on any failure
5. translate - translate a stored article into the other locales
6. trends / suggest / research - topic discovery helpers
7. score    - score an exported article
"""

import asyncio
import random
import sys
from pathlib import Path
from typing import Any, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.config.locales import SUPPORTED_LOCALES
from src.config.settings import Settings, get_settings
from src.config.topics import TOPICS, get_random_category
from src.optimization.seo_optimizer import score_seo, seo_suggestions
from src.pipeline.article_generator import ArticlePipeline
from src.pipeline.state import Article, GenerationOptions
from src.research.topic_discovery import generate_topic_suggestions, get_best_topic_for_category
from src.research.trend_sources import TrendAggregator
from src.storage.database import ArticleStore
from src.translation.translator import (
    ArticleTranslator,
    LocaleStatus,
    MultilingualArticle,
    from_locale_document,
    to_locale_document,
)
from src.utils.exceptions import ConnectionFailed
from src.utils.file_handler import FileHandler
from src.utils.llm_helpers import CompletionClient
from src.utils.logger import configure_logging, get_logger
from src.utils.retry import FixedDelayPacer

console = Console()
logger = get_logger(__name__)

CATEGORY_CHOICE = click.Choice(sorted(TOPICS))
LANGUAGE_CHOICE = click.Choice(SUPPORTED_LOCALES)


async def verify_connections(settings: Settings, need_store: bool = True) -> None:
    """
    Fail fast before any generation.

    Raises:
        ConnectionFailed: If the completion API or the store is unreachable
    """
    await CompletionClient(settings).check_connection()
    if need_store:
        store = ArticleStore(settings)
        try:
            await store.check_connection()
        finally:
            await store.close()


async def persist_articles(
    articles: list[Article],
    settings: Settings,
    language: str,
    publish: Optional[bool],
    multilingual: bool,
    dry_run: bool,
) -> tuple[list[dict[str, Any]], list[dict[str, str]]]:
    """Save articles to the store (or export drafts on dry run)."""
    saved: list[dict[str, Any]] = []
    errors: list[dict[str, str]] = []
    translator = ArticleTranslator(CompletionClient(settings)) if multilingual else None

    if dry_run:
        for article in articles:
            if translator is not None:
                document = (await translator.translate_article(article, language)).to_document()
            else:
                document = to_locale_document(article, language)
            path = FileHandler.save_article_draft(document, settings.output_dir)
            saved.append({"id": "dry-run", "slug": article.slug, "path": str(path)})
        return saved, errors

    async with ArticleStore(settings) as store:
        for article in articles:
            try:
                saved.append(
                    await store.save_article(
                        article,
                        language=language,
                        publish=publish,
                        multilingual=multilingual,
                        translator=translator,
                    )
                )
            except Exception as e:
                logger.error(f"Could not save '{article.title}': {e}", exc_info=True)
                errors.append({"topic": article.title, "error": str(e)})
    return saved, errors


def print_article_preview(article: Article) -> None:
    score = score_seo(article)

    table = Table(title="SEO score", show_header=True, header_style="bold cyan")
    table.add_column("Dimension")
    table.add_column("Points", justify="right")
    for dimension, points in score.scores.items():
        table.add_row(dimension.replace("_", " "), str(points))
    table.add_row("[bold]total[/bold]", f"[bold]{score.total_score}/{score.max_score}[/bold]")

    preview = article.content[:400] + ("..." if len(article.content) > 400 else "")
    console.print(
        Panel(
            f"[bold]{article.title}[/bold]\n"
            f"Slug: {article.slug}\n"
            f"Status: {article.status} | Reading time: {article.reading_time} min\n"
            f"Keywords: {article.seo.keywords}\n\n"
            f"{preview}",
            title="📝 Article",
            border_style="blue",
        )
    )
    console.print(table)
    console.print(f"Level: [bold]{score.level}[/bold] ({score.percentage}%)")
    for item in score.feedback:
        console.print(f"  [yellow]•[/yellow] {item}")


def print_saved(saved: list[dict[str, Any]], errors: list[dict[str, str]]) -> None:
    for item in saved:
        location = item.get("path") or item.get("id")
        console.print(f"[green]✓[/green] {item['slug']} → {location}")
    for item in errors:
        console.print(f"[red]✗[/red] {item['topic']}: {item['error']}")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool):
    """SEO Article Pipeline - generate, translate and publish blog articles."""
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level)


@cli.command()
def check() -> None:
    """Verify completion API and MongoDB connectivity."""
    settings = get_settings()
    try:
        asyncio.run(verify_connections(settings))
    except ConnectionFailed as e:
        logger.error(f"Connection check failed: {e}")
        console.print(f"[bold red]❌ {e}[/bold red]")
        sys.exit(1)
    console.print("[bold green]✅ Completion API and MongoDB reachable[/bold green]")


async def run_generate(
    settings: Settings,
    topic: Optional[str],
    category: Optional[str],
    options: GenerationOptions,
    multilingual: bool,
    dry_run: bool,
) -> tuple[Article, list[dict[str, Any]], list[dict[str, str]]]:
    await verify_connections(settings, need_store=not dry_run)

    aggregator = TrendAggregator(settings=settings)
    if topic is None:
        category = category or get_random_category()["id"]
        suggestion = await get_best_topic_for_category(category, aggregator, options.language)
        topic = suggestion.title
        options.category = category

    pipeline = ArticlePipeline(aggregator=aggregator, settings=settings)
    article = await pipeline.generate_article(topic, options)
    print_article_preview(article)

    saved, errors = await persist_articles(
        [article], settings, options.language, None, multilingual, dry_run
    )
    return article, saved, errors


@cli.command()
@click.option("--topic", "-t", default=None, help="Article topic (default: best topic for the category)")
@click.option("--category", "-c", type=CATEGORY_CHOICE, default=None, help="Category id")
@click.option("--language", "-l", type=LANGUAGE_CHOICE, default=None, help="Article language")
@click.option("--research", is_flag=True, help="Research the topic online before planning")
@click.option("--multilingual", is_flag=True, help="Translate into every supported language")
@click.option("--auto-publish", is_flag=True, help="Publish immediately instead of saving a draft")
@click.option("--dry-run", is_flag=True, help="Export the article to files instead of the database")
def generate(
    topic: Optional[str],
    category: Optional[str],
    language: Optional[str],
    research: bool,
    multilingual: bool,
    auto_publish: bool,
    dry_run: bool,
) -> None:
    """Generate one article and save it."""
    settings = get_settings()
    options = GenerationOptions(
        category=category,
        language=language or settings.default_language,
        research_online=research,
        auto_publish=auto_publish,
    )

    console.print("\n[bold blue]🚀 SEO Article Pipeline - Generate[/bold blue]\n")
    if dry_run:
        console.print("[yellow]⚠️  Dry run: nothing will be written to the database[/yellow]")

    try:
        with console.status("[cyan]Generating article..."):
            _, saved, errors = asyncio.run(
                run_generate(settings, topic, category, options, multilingual, dry_run)
            )
    except Exception as e:
        logger.error(f"Article generation failed: {e}", exc_info=True)
        console.print(f"\n[bold red]❌ Error: {e}[/bold red]")
        sys.exit(1)

    print_saved(saved, errors)
    if errors:
        sys.exit(1)
    console.print(Panel("[green]Article generated![/green]", title="✅ Success", border_style="green"))


def round_robin_topics(count: int, rng: Optional[random.Random] = None) -> list[Any]:
    """One generated suggestion per category, cycling through categories."""
    categories = list(TOPICS)
    return [
        generate_topic_suggestions(categories[index % len(categories)], rng=rng)[0]
        for index in range(count)
    ]


async def run_batch(
    settings: Settings,
    topics: list[Any],
    options: GenerationOptions,
    publish: Optional[bool],
    multilingual: bool,
    dry_run: bool,
    delay: float,
) -> tuple[int, list[dict[str, Any]], list[dict[str, str]]]:
    await verify_connections(settings, need_store=not dry_run)

    pipeline = ArticlePipeline(
        aggregator=TrendAggregator(settings=settings),
        pacer=FixedDelayPacer(delay),
        settings=settings,
    )
    result = await pipeline.generate_article_batch(topics, options)
    saved, save_errors = await persist_articles(
        result.articles, settings, options.language, publish, multilingual, dry_run
    )
    errors = [error.model_dump() for error in result.errors] + save_errors
    return result.total, saved, errors


@cli.command()
@click.option("--count", "-n", type=int, default=3, help="Number of articles (default: 3)")
@click.option("--language", "-l", type=LANGUAGE_CHOICE, default=None, help="Article language")
@click.option("--auto-publish", is_flag=True, help="Publish immediately instead of saving drafts")
@click.option("--multilingual", is_flag=True, help="Translate into every supported language")
@click.option("--dry-run", is_flag=True, help="Export articles to files instead of the database")
def batch(
    count: int,
    language: Optional[str],
    auto_publish: bool,
    multilingual: bool,
    dry_run: bool,
) -> None:
    """Generate several articles, one category after another."""
    settings = get_settings()
    options = GenerationOptions(
        language=language or settings.default_language,
        auto_publish=auto_publish,
    )
    topics = round_robin_topics(count)

    console.print(f"\n[bold blue]🚀 SEO Article Pipeline - Batch of {count}[/bold blue]\n")
    for suggestion in topics:
        console.print(f"  • [{suggestion.category_name}] {suggestion.title}")

    try:
        total, saved, errors = asyncio.run(
            run_batch(settings, topics, options, None, multilingual, dry_run, settings.batch_delay)
        )
    except ConnectionFailed as e:
        logger.error(f"Batch aborted: {e}")
        console.print(f"\n[bold red]❌ Error: {e}[/bold red]")
        sys.exit(1)

    print_saved(saved, errors)
    console.print(f"\n[bold]{len(saved)}/{total} articles saved[/bold]")
    if errors and not saved:
        sys.exit(1)


async def pick_cron_topics(
    settings: Settings,
    count: int,
    category: Optional[str],
    language: str,
) -> list[Any]:
    aggregator = TrendAggregator(settings=settings)
    topics = []
    for _ in range(count):
        category_id = category or get_random_category()["id"]
        topics.append(await get_best_topic_for_category(category_id, aggregator, language))
    return topics


@cli.command()
@click.option("--count", "-n", type=int, default=1, help="Number of articles (default: 1)")
@click.option("--publish", is_flag=True, help="Publish immediately instead of saving drafts")
@click.option("--multilingual", is_flag=True, help="Translate into every supported language")
@click.option("--category", "-c", type=CATEGORY_CHOICE, default=None, help="Category id (default: random)")
@click.option("--language", "-l", type=LANGUAGE_CHOICE, default=None, help="Article language")
@click.option("--dry-run", is_flag=True, help="Export articles to files instead of the database")
def cron(
    count: int,
    publish: bool,
    multilingual: bool,
    category: Optional[str],
    language: Optional[str],
    dry_run: bool,
) -> None:
    """Scheduled generation; exits with status 1 if any article failed."""
    settings = get_settings()
    language = language or settings.default_language
    options = GenerationOptions(category=category, language=language)
    logger.info(
        f"Cron run: count={count} publish={publish} multilingual={multilingual} "
        f"category={category} language={language} dry_run={dry_run}"
    )

    async def run() -> tuple[int, list[dict[str, Any]], list[dict[str, str]]]:
        topics = await pick_cron_topics(settings, count, category, language)
        return await run_batch(
            settings, topics, options, publish, multilingual, dry_run, settings.cron_delay
        )

    try:
        total, saved, errors = asyncio.run(run())
    except Exception as e:
        logger.error(f"Cron run aborted: {e}", exc_info=True)
        sys.exit(1)

    logger.info(f"Cron run finished: {len(saved)}/{total} saved, {len(errors)} errors")
    for error in errors:
        logger.error(f"{error['topic']}: {error['error']}")
    if errors:
        sys.exit(1)


async def run_translate(
    settings: Settings,
    slug: Optional[str],
    post_id: Optional[str],
    source_locale: str,
    dry_run: bool,
) -> tuple[Article, MultilingualArticle]:
    """
    Translate a stored article into every other locale.

    Raises:
        ConnectionFailed: If the completion API or the store is unreachable
        LookupError: If no article matches the slug or id
    """
    await verify_connections(settings)

    async with ArticleStore(settings) as store:
        if post_id:
            document = await store.find_one_by_id(post_id)
        else:
            document = await store.find_one_by_slug(slug)
        if document is None:
            raise LookupError(f"Article not found: {post_id or slug}")

        article = from_locale_document(document, source_locale)
        logger.info(f"Article found: {article.slug} ({len(article.content)} characters)")

        translator = ArticleTranslator(CompletionClient(settings))
        multilingual = await translator.translate_article(article, source_locale)

        if dry_run:
            logger.info("Dry run: translations not saved")
        else:
            await store.save_translations(str(document["_id"]), multilingual)

    return article, multilingual


@cli.command()
@click.option("--slug", "-s", default=None, help="Slug of the stored article")
@click.option("--id", "-i", "post_id", default=None, help="MongoDB id of the stored article")
@click.option("--source-locale", "-l", type=LANGUAGE_CHOICE, default=None, help="Language the article is written in")
@click.option("--dry-run", is_flag=True, help="Show the translations without saving them")
def translate(slug: Optional[str], post_id: Optional[str], source_locale: Optional[str], dry_run: bool) -> None:
    """Translate a stored article into the other supported languages."""
    if not slug and not post_id:
        raise click.UsageError("Specify --slug or --id")

    settings = get_settings()
    source_locale = source_locale or settings.default_language

    console.print("\n[bold blue]🌍 SEO Article Pipeline - Translate[/bold blue]\n")
    try:
        with console.status("[cyan]Translating article..."):
            article, multilingual = asyncio.run(
                run_translate(settings, slug, post_id, source_locale, dry_run)
            )
    except Exception as e:
        logger.error(f"Translation failed: {e}", exc_info=True)
        console.print(f"\n[bold red]❌ Error: {e}[/bold red]")
        sys.exit(1)

    table = Table(title=f"Translations: {article.slug}", show_header=True, header_style="bold cyan")
    table.add_column("Locale")
    table.add_column("Status")
    table.add_column("Title")
    table.add_column("Content", justify="right")
    for locale, status in multilingual.locale_status.items():
        table.add_row(
            locale,
            LocaleStatus(status).value,
            multilingual.title.get(locale, "")[:60],
            f"{len(multilingual.content.get(locale, ''))} chars",
        )
    console.print(table)

    if dry_run:
        console.print("[yellow]⚠️  Dry run: translations not saved[/yellow]")
    else:
        console.print(Panel("[green]Translations saved![/green]", title="✅ Success", border_style="green"))


@cli.command()
@click.option("--category", "-c", type=CATEGORY_CHOICE, default=None, help="Category id")
@click.option("--language", "-l", type=LANGUAGE_CHOICE, default=None, help="Search language")
def trends(category: Optional[str], language: Optional[str]) -> None:
    """Show trending results for a category."""
    settings = get_settings()
    aggregator = TrendAggregator(settings=settings)
    if not aggregator.has_configured_backend:
        console.print("[yellow]No search API key configured (BRAVE_API_KEY, SERPER_API_KEY, NEWS_API_KEY)[/yellow]")
        sys.exit(1)

    results = asyncio.run(
        aggregator.get_trending_topics(category, language=language or settings.default_language)
    )

    table = Table(title=f"Trends: {category or 'all categories'}", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Source")
    for index, result in enumerate(results[:20], 1):
        table.add_row(str(index), result.title, result.source)
    console.print(table)


@cli.command()
@click.option("--category", "-c", type=CATEGORY_CHOICE, default=None, help="Category id")
def suggest(category: Optional[str]) -> None:
    """Suggest article topics from category keywords."""
    suggestions = generate_topic_suggestions(category)

    table = Table(title="Topic suggestions", show_header=True, header_style="bold cyan")
    table.add_column("Category")
    table.add_column("Title")
    for suggestion in suggestions:
        table.add_row(suggestion.category_name, suggestion.title)
    console.print(table)


@cli.command()
@click.argument("topic")
@click.option("--language", "-l", type=LANGUAGE_CHOICE, default=None, help="Search language")
def research(topic: str, language: Optional[str]) -> None:
    """Research a topic online and show the sources found."""
    settings = get_settings()
    aggregator = TrendAggregator(settings=settings)
    result = asyncio.run(
        aggregator.research_topic_online(topic, language or settings.default_language)
    )

    if not result.has_recent_data:
        console.print("[yellow]No sources found[/yellow]")
        return
    console.print(Panel(result.context, title=f"🔎 {len(result.sources)} sources", border_style="blue"))


@cli.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.option("--locale", default=None, help="Locale to score for multilingual exports")
def score(path: Path, locale: Optional[str]) -> None:
    """Score an exported article (draft directory or metadata file)."""
    article = from_locale_document(FileHandler.load_article_draft(path), locale)
    print_article_preview(article)
    for suggestion in seo_suggestions(article):
        console.print(f"  [cyan]{suggestion.priority}[/cyan] {suggestion.field}: {suggestion.suggestion}")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
