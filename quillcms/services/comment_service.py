"""
Comment service - listing, creation and moderation of comments.

Every write marks the parent article stale so its cached detail
view stays consistent.
"""
import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from quillcms.cache import cache
from quillcms.errors import NotFoundError
from quillcms.models import Article, Comment, User, utcnow
from quillcms.schemas import CommentInput, Pagination
from quillcms.services.serializers import comment_to_dict

logger = logging.getLogger(__name__)


async def get_comments(db: AsyncSession, pagination: Pagination) -> list[dict]:
    """Return comments in insertion order, each with its article and author."""
    q = (
        select(Comment)
        .options(joinedload(Comment.article), joinedload(Comment.user))
        .execution_options(populate_existing=True)
        .order_by(Comment.created_at, Comment.id)
        .offset(pagination.skip)
    )
    if pagination.first is not None:
        q = q.limit(pagination.first)
    result = await db.execute(q)
    return [comment_to_dict(c) for c in result.unique().scalars().all()]


async def add_comment(db: AsyncSession, user: User, data: CommentInput) -> dict:
    """
    Attach a new comment by *user* to ``data.article_id``.

    Raises NotFoundError when the target article does not exist.
    """
    article = await db.get(Article, data.article_id)
    if article is None:
        raise NotFoundError(f"No article with id={data.article_id}")

    now = utcnow()
    comment = Comment(
        content=data.content,
        user=user,
        article=article,
        created_at=now,
        modified_at=now,
    )
    db.add(comment)
    await db.flush()

    cache.mark_stale(db, article.id)
    logger.info("Added comment id=%s to article id=%s", comment.id, article.id)
    return comment_to_dict(comment)


async def delete_comment(db: AsyncSession, comment_id: str) -> dict:
    """
    Remove *comment_id* and return its dict.

    Raises NotFoundError when the comment does not exist.
    """
    comment = await db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError(f"No comment with id={comment_id}")

    data = comment_to_dict(comment)
    await db.execute(delete(Comment).where(Comment.id == comment_id))

    cache.mark_stale(db, data["article"]["id"])
    logger.info("Deleted comment id=%s", comment_id)
    return data
