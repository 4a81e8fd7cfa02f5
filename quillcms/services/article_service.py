"""
Article service - business logic for the Article aggregate.

Design notes
------------
- Published-list pages and article details are read through the Redis
  cache.  Keys encode every dimension that affects the result.  Writes
  only mark articles stale; keys are purged once the request commits.
  Draft visibility is checked by the resolver after the lookup, so cached
  drafts are never served to anonymous users.
- ``selectinload`` is used for the comments/files collections to avoid
  N+1 queries.
- Lists are ordered by creation time with the id as tie-breaker, which
  is stable across pages.
- Service functions flush but do not commit; the transaction boundary
  is owned by the ``get_db`` dependency.
"""
import logging

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from quillcms.cache import cache, detail_key, published_list_key
from quillcms.config import settings
from quillcms.errors import NotFoundError
from quillcms.models import Article, Comment, File, utcnow
from quillcms.schemas import ArticleInput, Pagination
from quillcms.services.serializers import article_to_dict

logger = logging.getLogger(__name__)


def _paginate(q, pagination: Pagination):
    q = q.order_by(Article.created_at, Article.id).offset(pagination.skip)
    if pagination.first is not None:
        q = q.limit(pagination.first)
    return q


def _with_relations(q):
    return q.options(
        selectinload(Article.comments), selectinload(Article.files)
    ).execution_options(populate_existing=True)


async def _load(db: AsyncSession, article_id: str) -> Article:
    q = _with_relations(select(Article).where(Article.id == article_id))
    article = (await db.execute(q)).scalar_one_or_none()
    if article is None:
        raise NotFoundError(f"No article with id={article_id}")
    return article


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

async def get_published_articles(
    db: AsyncSession,
    pagination: Pagination,
    filter: str | None = None,
) -> list[dict]:
    """
    Return non-draft articles, optionally restricted to those whose title
    or summary contains *filter* (case-sensitive).
    """
    async def load() -> list[dict]:
        q = select(Article).where(Article.draft.is_(False))
        if filter:
            q = q.where(
                or_(
                    Article.title.contains(filter, autoescape=True),
                    Article.summary.contains(filter, autoescape=True),
                )
            )
        q = _paginate(_with_relations(q), pagination)
        return [article_to_dict(a) for a in (await db.execute(q)).scalars().all()]

    return await cache.read_through(
        db,
        published_list_key(filter, pagination.skip, pagination.first),
        settings.CACHE_TTL_LIST,
        load,
    )


async def get_all_articles(db: AsyncSession, pagination: Pagination) -> list[dict]:
    """Return every article, drafts included.  Not cached."""
    q = _paginate(_with_relations(select(Article)), pagination)
    return [article_to_dict(a) for a in (await db.execute(q)).scalars().all()]


async def get_article(db: AsyncSession, article_id: str) -> dict:
    """
    Return the detail dict for *article_id* including comments and files.

    Raises NotFoundError when the article does not exist.
    """
    async def load() -> dict:
        return article_to_dict(await _load(db, article_id))

    return await cache.read_through(db, detail_key(article_id), settings.CACHE_TTL_DETAIL, load)


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

async def create_article(db: AsyncSession, data: ArticleInput) -> dict:
    """Create a new draft article and return its detail dict."""
    now = utcnow()
    article = Article(
        title=data.title,
        summary=data.summary,
        content=data.content,
        tags=list(data.tags),
        draft=True,
        created_at=now,
        modified_at=now,
    )
    db.add(article)
    await db.flush()

    cache.mark_stale(db)
    logger.info("Created article id=%s", article.id)
    return article_to_dict(article)


async def update_article(db: AsyncSession, article_id: str, data: ArticleInput) -> dict:
    """
    Overwrite title, summary, content and tags of *article_id*.

    The tag list is replaced as a whole.  Raises NotFoundError when the
    article does not exist.
    """
    article = await _load(db, article_id)
    article.title = data.title
    article.summary = data.summary
    article.content = data.content
    article.tags = list(data.tags)
    article.modified_at = utcnow()
    await db.flush()

    cache.mark_stale(db, article_id)
    logger.info("Updated article id=%s", article_id)
    return article_to_dict(article)


async def publish_article(db: AsyncSession, article_id: str, publish: bool) -> dict:
    """
    Set the draft flag to ``not publish``.

    ``published_at`` is stamped when a draft becomes published and left
    untouched when an article is unpublished.
    """
    article = await _load(db, article_id)
    if publish and article.draft:
        article.published_at = utcnow()
    article.draft = not publish
    await db.flush()

    cache.mark_stale(db, article_id)
    logger.info("%s article id=%s", "Published" if publish else "Unpublished", article_id)
    return article_to_dict(article)


async def delete_article(db: AsyncSession, article_id: str) -> dict:
    """
    Delete *article_id* together with its comments and files.

    Returns the detail dict of the deleted article.  Raises NotFoundError
    when the article does not exist.
    """
    article = await _load(db, article_id)
    data = article_to_dict(article)

    await db.execute(delete(Comment).where(Comment.article_id == article_id))
    await db.execute(delete(File).where(File.article_id == article_id))
    await db.execute(delete(Article).where(Article.id == article_id))

    cache.mark_stale(db, article_id)
    logger.info(
        "Deleted article id=%s with %d comment(s) and %d file(s)",
        article_id,
        len(data["comments"]),
        len(data["files"]),
    )
    return data
