"""Typed payloads returned by the admin client.

Queries select different subsets of fields, so everything except ``id``
is optional.
"""
from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserRef(_Payload):
    id: str
    name: str | None = None


class ArticleRef(_Payload):
    id: str
    title: str | None = None


class CommentRef(_Payload):
    id: str


class FileRef(_Payload):
    id: str
    name: str | None = None
    extension: str | None = None


class Article(_Payload):
    id: str | None = None
    title: str = ""
    summary: str = ""
    content: str = ""
    tags: list[str] = []
    draft: bool | None = None
    created_at: datetime | None = None
    modified_at: datetime | None = None
    published_at: datetime | None = None
    comments: list[CommentRef] = []
    files: list[FileRef] = []


class Comment(_Payload):
    id: str
    content: str | None = None
    created_at: datetime | None = None
    article: ArticleRef | None = None
    user: UserRef | None = None
