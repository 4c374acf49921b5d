"""
MongoDB store for generated articles.

``ArticleStore`` owns its client: open it once with ``connect()`` (or
``async with``), share it for the whole run, close it once. Documents live
in the ``posts`` collection with ``createdAt``/``updatedAt`` timestamps.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import AsyncMongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError

from src.config.settings import Settings, get_settings
from src.pipeline.state import Article, ArticleStatus
from src.translation.translator import ArticleTranslator, MultilingualArticle, to_locale_document
from src.utils.exceptions import ConnectionFailed, SlugCollision
from src.utils.logger import get_logger

logger = get_logger(__name__)

COLLECTION_NAME = "posts"
SLUG_ATTEMPTS = 3
TRANSLATED_FIELDS = ("title", "excerpt", "content", "seo")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ArticleStore:
    """
    Persistence for articles.

    Usage:
        async with ArticleStore() as store:
            slug = await store.generate_unique_slug("my-article")
            post_id = await store.insert_one(document)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[AsyncMongoClient] = None,
        collection: Any = None,
    ):
        self.settings = settings or get_settings()
        self._client = client
        self._collection = collection
        self._owns_client = client is None

    async def connect(self) -> "ArticleStore":
        """
        Open the client and select the database named in the URI.

        Raises:
            ConnectionFailed: If the URI is missing or the server does not answer
        """
        if self._collection is not None:
            return self

        if self._client is None:
            if not self.settings.mongodb_uri:
                raise ConnectionFailed("MONGODB_URI is not set")
            self._client = AsyncMongoClient(self.settings.mongodb_uri)

        try:
            await self._client.admin.command("ping")
        except PyMongoError as e:
            raise ConnectionFailed(f"MongoDB unreachable: {e}") from e

        database = self._client.get_default_database(default=self.settings.mongodb_database)
        self._collection = database[COLLECTION_NAME]
        logger.info(f"Connected to MongoDB: {database.name}")
        return self

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.close()
            logger.info("Disconnected from MongoDB")
        self._client = None
        self._collection = None

    async def __aenter__(self) -> "ArticleStore":
        return await self.connect()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def collection(self):
        if self._collection is None:
            raise RuntimeError("ArticleStore is not connected; call connect() first")
        return self._collection

    async def insert_one(self, document: dict[str, Any]) -> str:
        """
        Insert a document, stamping ``createdAt`` and ``updatedAt``.

        Returns:
            The new document id as a string

        Raises:
            SlugCollision: If a unique slug index rejects the document
        """
        now = _now()
        record = {**document, "createdAt": now, "updatedAt": now}
        try:
            result = await self.collection.insert_one(record)
        except DuplicateKeyError as e:
            raise SlugCollision(document.get("slug", "")) from e

        post_id = str(result.inserted_id)
        logger.info(f"Article created with id {post_id}")
        return post_id

    async def find_one_by_slug(self, slug: str) -> Optional[dict[str, Any]]:
        return await self.collection.find_one({"slug": slug})

    async def find_one_by_id(self, post_id: str) -> Optional[dict[str, Any]]:
        """
        Raises:
            ValueError: If ``post_id`` is not a valid ObjectId
        """
        try:
            object_id = ObjectId(post_id)
        except InvalidId as e:
            raise ValueError(f"Invalid article id: {post_id}") from e
        return await self.collection.find_one({"_id": object_id})

    async def update_one(self, post_id: str, fields: dict[str, Any]) -> None:
        """
        Set fields on a document and refresh ``updatedAt``.

        Raises:
            LookupError: If no document has this id
        """
        result = await self.collection.update_one(
            {"_id": ObjectId(post_id)},
            {"$set": {**fields, "updatedAt": _now()}},
        )
        if result.matched_count == 0:
            raise LookupError(f"Article not found: {post_id}")
        logger.info(f"Article updated: {post_id}")

    async def save_translations(self, post_id: str, multilingual: MultilingualArticle) -> None:
        """Overwrite the locale maps (title, excerpt, content, seo) of a stored article."""
        document = multilingual.to_document()
        await self.update_one(post_id, {key: document[key] for key in TRANSLATED_FIELDS})

    async def slug_exists(self, slug: str) -> bool:
        return await self.find_one_by_slug(slug) is not None

    async def generate_unique_slug(self, base_slug: str) -> str:
        """
        First free slug among ``base``, ``base-1``, ``base-2``...

        The probe and the later insert are separate operations, so two
        concurrent writers can still pick the same slug.
        """
        slug = base_slug
        counter = 1
        while await self.slug_exists(slug):
            slug = f"{base_slug}-{counter}"
            counter += 1
        if slug != base_slug:
            logger.info(f"Slug '{base_slug}' taken, using '{slug}'")
        return slug

    async def get_recent_posts(self, limit: int = 10) -> list[dict[str, Any]]:
        cursor = self.collection.find({}).sort("createdAt", -1).limit(limit)
        return await cursor.to_list(length=limit)

    async def count_posts(self) -> int:
        return await self.collection.count_documents({})

    async def check_connection(self) -> bool:
        """Connect and count posts; raises ConnectionFailed when unreachable."""
        await self.connect()
        try:
            count = await self.count_posts()
        except PyMongoError as e:
            raise ConnectionFailed(f"MongoDB query failed: {e}") from e
        logger.info(f"{count} articles in the store")
        return True

    async def save_article(
        self,
        article: Article,
        language: str,
        publish: Optional[bool] = None,
        multilingual: bool = False,
        translator: Optional[ArticleTranslator] = None,
        target_locales: Optional[list[str]] = None,
    ) -> dict[str, Any]:
        """
        Persist an article under a unique slug.

        Diagnostics are dropped. With ``multilingual`` the article is
        translated first, otherwise it is stored as a single-locale
        document. ``publish`` overrides the article's own status.

        Returns:
            ``{"id", "slug", "status"}`` of the stored document
        """
        if publish is None:
            publish = article.status == ArticleStatus.PUBLISHED

        if multilingual:
            translator = translator or ArticleTranslator()
            document = (await translator.translate_article(article, language, target_locales)).to_document()
        else:
            document = to_locale_document(article, language)

        status = ArticleStatus.PUBLISHED.value if publish else ArticleStatus.DRAFT.value
        document["status"] = status
        document["publishedAt"] = (article.published_at or _now()) if publish else None

        for attempt in range(1, SLUG_ATTEMPTS + 1):
            document["slug"] = await self.generate_unique_slug(article.slug)
            try:
                post_id = await self.insert_one(document)
            except SlugCollision as e:
                if attempt == SLUG_ATTEMPTS:
                    raise
                logger.warning(f"{e}; probing again ({attempt}/{SLUG_ATTEMPTS})")
                continue
            logger.info(f"Article {'published' if publish else 'saved as draft'}: {document['slug']}")
            return {"id": post_id, "slug": document["slug"], "status": status}

        raise SlugCollision(article.slug)
