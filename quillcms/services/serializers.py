"""
Plain-dict serialisers for ORM instances.

Services return dicts rather than ORM objects so results can be cached in
Redis as JSON and handed straight to the GraphQL layer.  Relationships are
only serialised when the caller has eager-loaded them; nested objects are
deliberately shallow to avoid circular nesting.
"""
from datetime import datetime, timezone

from sqlalchemy import inspect

from quillcms.models import Article, Comment, File, Page, User


def isoformat(value: datetime | None) -> str | None:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _loaded(obj, attr: str) -> bool:
    return attr not in inspect(obj).unloaded


def user_to_dict(user: User) -> dict:
    # Never expose pw_hash.
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "created_at": isoformat(user.created_at),
    }


def file_to_dict(file: File) -> dict:
    return {
        "id": file.id,
        "name": file.name,
        "extension": file.extension,
        "created_at": isoformat(file.created_at),
        "page": {"id": file.page_id} if file.page_id is not None else None,
        "article": {"id": file.article_id} if file.article_id is not None else None,
    }


def comment_to_dict(comment: Comment) -> dict:
    data = {
        "id": comment.id,
        "content": comment.content,
        "created_at": isoformat(comment.created_at),
        "modified_at": isoformat(comment.modified_at),
        "user": {"id": comment.user_id},
        "article": {"id": comment.article_id},
    }
    if _loaded(comment, "user") and comment.user is not None:
        data["user"] = {"id": comment.user.id, "name": comment.user.name}
    if _loaded(comment, "article") and comment.article is not None:
        data["article"] = {"id": comment.article.id, "title": comment.article.title}
    return data


def article_to_dict(article: Article) -> dict:
    data = {
        "id": article.id,
        "title": article.title,
        "summary": article.summary,
        "content": article.content,
        "tags": list(article.tags or []),
        "draft": article.draft,
        "created_at": isoformat(article.created_at),
        "modified_at": isoformat(article.modified_at),
        "published_at": isoformat(article.published_at),
        "comments": [],
        "files": [],
    }
    if _loaded(article, "comments"):
        data["comments"] = [comment_to_dict(c) for c in article.comments]
    if _loaded(article, "files"):
        data["files"] = [file_to_dict(f) for f in article.files]
    return data


def page_to_dict(page: Page) -> dict:
    data = {
        "id": page.id,
        "name": page.name,
        "title": page.title,
        "content": page.content,
        "created_at": isoformat(page.created_at),
        "modified_at": isoformat(page.modified_at),
        "files": [],
    }
    if _loaded(page, "files"):
        data["files"] = [file_to_dict(f) for f in page.files]
    return data
