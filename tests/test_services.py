"""
Direct service-layer tests - business logic without the GraphQL layer.

Covers the read-through cache with an in-memory stand-in for the Redis
client, including how article writes interact with the request
transaction, plus service behaviour that is awkward to observe over HTTP.
"""
import json

import pytest
from sqlalchemy.exc import InvalidRequestError
from sqlalchemy.ext.asyncio import AsyncSession

from quillcms.cache import cache, detail_key, has_pending_writes, published_list_key
from quillcms.database import transaction
from quillcms.errors import DuplicateUserError, InvalidCredentialsError, NotFoundError
from quillcms.models import Comment, User
from quillcms.schemas import ArticleInput, CommentInput, LoginInput, Pagination, SignupInput
from quillcms.security import decode_access_token, hash_password
from quillcms.services import article_service, comment_service, file_service, user_service
from quillcms.services.serializers import comment_to_dict


async def _admin(db: AsyncSession) -> User:
    user = User(name="admin", email="admin@example.com", pw_hash=hash_password("pw"))
    db.add(user)
    await db.flush()
    return user


async def _published(db: AsyncSession, title: str = "Cached") -> dict:
    """Create and publish an article in its own committed transaction."""
    async with transaction(db):
        created = await article_service.create_article(db, ArticleInput(title=title))
        return await article_service.publish_article(db, created["id"], True)


# ---------------------------------------------------------------------------
# user_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_signup_and_login(db_session: AsyncSession):
    signed_up = await user_service.signup(
        db_session, SignupInput(name="zoe", email="zoe@example.com", password="pw")
    )
    assert "pw_hash" not in signed_up["user"]
    assert decode_access_token(signed_up["token"]) == signed_up["user"]["id"]

    logged_in = await user_service.login(db_session, LoginInput(email="zoe@example.com", password="pw"))
    assert logged_in["user"]["id"] == signed_up["user"]["id"]


@pytest.mark.asyncio
async def test_signup_duplicate(db_session: AsyncSession):
    await user_service.signup(db_session, SignupInput(name="zoe", email="zoe@example.com", password="pw"))
    with pytest.raises(DuplicateUserError):
        await user_service.signup(
            db_session, SignupInput(name="zoe", email="zoe2@example.com", password="pw")
        )


@pytest.mark.asyncio
async def test_login_failures(db_session: AsyncSession):
    await _admin(db_session)
    with pytest.raises(NotFoundError):
        await user_service.login(db_session, LoginInput(email="x@example.com", password="pw"))
    with pytest.raises(InvalidCredentialsError):
        await user_service.login(db_session, LoginInput(email="admin@example.com", password="bad"))


# ---------------------------------------------------------------------------
# article_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_article_defaults(db_session: AsyncSession):
    result = await article_service.create_article(
        db_session, ArticleInput(title="Draft", tags=["a", "a", "b"])
    )
    assert result["draft"] is True
    assert result["published_at"] is None
    assert result["tags"] == ["a", "b"]
    assert result["comments"] == []
    assert result["files"] == []


@pytest.mark.asyncio
async def test_get_missing_article(db_session: AsyncSession):
    with pytest.raises(NotFoundError):
        await article_service.get_article(db_session, "missing")


@pytest.mark.asyncio
async def test_writes_mark_session_stale(db_session: AsyncSession):
    created = await article_service.create_article(db_session, ArticleInput(title="Pending"))
    assert has_pending_writes(db_session)

    await db_session.rollback()
    cache.discard_pending(db_session)
    assert not has_pending_writes(db_session)
    assert created["id"]


# ---------------------------------------------------------------------------
# Read-through cache
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_published_list_is_cached(db_session: AsyncSession, redis_store):
    await _published(db_session)
    key = published_list_key(None, 0, None)

    first = await article_service.get_published_articles(db_session, Pagination())
    assert json.loads(redis_store[key]) == first

    # A poisoned entry proves the second read is served from the cache.
    redis_store[key] = json.dumps([{"id": "from-cache"}])
    second = await article_service.get_published_articles(db_session, Pagination())
    assert second == [{"id": "from-cache"}]


@pytest.mark.asyncio
async def test_commit_purges_published_lists(db_session: AsyncSession, redis_store):
    await _published(db_session, "One")
    await article_service.get_published_articles(db_session, Pagination())
    await article_service.get_published_articles(db_session, Pagination(first=1), "One")
    assert any(k.startswith("articles:published") for k in redis_store)

    await _published(db_session, "Two")
    assert not any(k.startswith("articles:published") for k in redis_store)

    titles = [a["title"] for a in await article_service.get_published_articles(db_session, Pagination())]
    assert titles == ["One", "Two"]


@pytest.mark.asyncio
async def test_detail_purged_only_after_commit(db_session: AsyncSession, redis_store):
    article = await _published(db_session)
    await article_service.get_article(db_session, article["id"])
    key = detail_key(article["id"])

    async with transaction(db_session):
        await article_service.update_article(db_session, article["id"], ArticleInput(title="Renamed"))
        # Uncommitted: the shared entry is untouched and this session reads its own write.
        assert json.loads(redis_store[key])["title"] == "Cached"
        assert (await article_service.get_article(db_session, article["id"]))["title"] == "Renamed"
        assert json.loads(redis_store[key])["title"] == "Cached"

    assert key not in redis_store
    assert (await article_service.get_article(db_session, article["id"]))["title"] == "Renamed"


@pytest.mark.asyncio
async def test_rolled_back_write_never_reaches_cache(db_session: AsyncSession, redis_store):
    article = await _published(db_session, "Original")
    await article_service.get_article(db_session, article["id"])

    with pytest.raises(NotFoundError):
        async with transaction(db_session):
            await article_service.update_article(db_session, article["id"], ArticleInput(title="Ghost"))
            await article_service.get_article(db_session, article["id"])
            await article_service.get_published_articles(db_session, Pagination())
            await comment_service.delete_comment(db_session, "missing")

    assert not has_pending_writes(db_session)
    assert json.loads(redis_store[detail_key(article["id"])])["title"] == "Original"
    assert published_list_key(None, 0, None) not in redis_store
    assert (await article_service.get_article(db_session, article["id"]))["title"] == "Original"
    stored = await article_service.get_all_articles(db_session, Pagination())
    assert [a["title"] for a in stored] == ["Original"]


@pytest.mark.asyncio
async def test_comment_commit_purges_article_detail(db_session: AsyncSession, redis_store):
    admin = await _admin(db_session)
    article = await _published(db_session)
    await article_service.get_article(db_session, article["id"])

    async with transaction(db_session):
        await comment_service.add_comment(
            db_session, admin, CommentInput(content="hello", article_id=article["id"])
        )
    detail = await article_service.get_article(db_session, article["id"])
    assert [c["content"] for c in detail["comments"]] == ["hello"]


@pytest.mark.asyncio
async def test_cache_stats(db_session: AsyncSession, redis_store):
    article = await _published(db_session)
    before = cache.stats
    await article_service.get_article(db_session, article["id"])
    await article_service.get_article(db_session, article["id"])
    after = cache.stats
    assert after["hits"] == before["hits"] + 1
    assert after["misses"] == before["misses"] + 1

    async with transaction(db_session):
        await article_service.update_article(db_session, article["id"], ArticleInput(title="x"))
        await article_service.get_article(db_session, article["id"])
    assert cache.stats["bypassed"] == after["bypassed"] + 1
    assert cache.stats["purged"] > after["purged"]


# ---------------------------------------------------------------------------
# comment_service / file_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_add_comment_serialises_author_and_article(db_session: AsyncSession):
    admin = await _admin(db_session)
    article = await article_service.create_article(db_session, ArticleInput(title="Host"))

    comment = await comment_service.add_comment(
        db_session, admin, CommentInput(content="hello", article_id=article["id"])
    )
    assert comment["user"] == {"id": admin.id, "name": "admin"}
    assert comment["article"] == {"id": article["id"], "title": "Host"}



@pytest.mark.asyncio
async def test_unloaded_relations_raise_and_serialise_as_refs(db_session: AsyncSession):
    admin = await _admin(db_session)
    article = await article_service.create_article(db_session, ArticleInput(title="Host"))
    created = await comment_service.add_comment(
        db_session, admin, CommentInput(content="hello", article_id=article["id"])
    )
    await db_session.commit()
    db_session.expunge_all()

    comment = await db_session.get(Comment, created["id"])
    with pytest.raises(InvalidRequestError):
        comment.user
    assert comment_to_dict(comment)["user"] == {"id": admin.id}
    assert comment_to_dict(comment)["article"] == {"id": article["id"]}

@pytest.mark.asyncio
async def test_delete_comment_missing(db_session: AsyncSession):
    with pytest.raises(NotFoundError):
        await comment_service.delete_comment(db_session, "missing")


@pytest.mark.asyncio
async def test_files_empty(db_session: AsyncSession):
    assert await file_service.get_files(db_session, "missing") == []
