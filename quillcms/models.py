from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quillcms.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    # Ids are unique across tables so a page and an article never collide.
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    pw_hash: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships - lazy="raise": services load what they serialise explicitly
    comments: Mapped[List["Comment"]] = relationship(
        "Comment", back_populates="user", lazy="raise"
    )


# ---------------------------------------------------------------------------
# Article
# ---------------------------------------------------------------------------
class Article(Base):
    __tablename__ = "articles"

    __table_args__ = (
        # Published articles feed
        Index("ix_articles_draft_created_at", "draft", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    summary: Mapped[str] = mapped_column(String(1000), nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Ordered, duplicate-free list of tag names; always replaced as a whole.
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    draft: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    modified_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships - lazy="raise" to prevent N+1; use selectinload in services
    comments: Mapped[List["Comment"]] = relationship(
        "Comment", back_populates="article", lazy="raise", order_by="Comment.created_at"
    )
    files: Mapped[List["File"]] = relationship(
        "File", back_populates="article", lazy="raise", order_by="File.created_at"
    )


# ---------------------------------------------------------------------------
# Comment
# ---------------------------------------------------------------------------
class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    modified_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    article_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True
    )

    user: Mapped["User"] = relationship("User", back_populates="comments", lazy="raise")
    article: Mapped["Article"] = relationship("Article", back_populates="comments", lazy="raise")


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------
class Page(Base):
    __tablename__ = "pages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    modified_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    files: Mapped[List["File"]] = relationship(
        "File", back_populates="page", lazy="raise", order_by="File.created_at"
    )


# ---------------------------------------------------------------------------
# File
# ---------------------------------------------------------------------------
class File(Base):
    __tablename__ = "files"

    __table_args__ = (
        # A file belongs to exactly one parent document.
        CheckConstraint(
            "(page_id IS NULL) <> (article_id IS NULL)",
            name="ck_files_single_parent",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    extension: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    page_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("pages.id", ondelete="CASCADE"), nullable=True, index=True
    )
    article_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("articles.id", ondelete="CASCADE"), nullable=True, index=True
    )

    page: Mapped[Optional["Page"]] = relationship("Page", back_populates="files", lazy="raise")
    article: Mapped[Optional["Article"]] = relationship(
        "Article", back_populates="files", lazy="raise"
    )
