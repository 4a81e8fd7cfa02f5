from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from quillcms.cache import cache
from quillcms.config import settings
from quillcms.middleware import install_query_counter


def install_sqlite_pragmas(engine) -> None:
    """
    Make ``LIKE`` case-sensitive on SQLite connections so the article text
    filter behaves the same as on PostgreSQL.  No-op for other dialects.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA case_sensitive_like = ON")
        cursor.close()


# Module-level engine variable allows tests to override with a test engine.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

install_query_counter(engine)
install_sqlite_pragmas(engine)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


@asynccontextmanager
async def transaction(session: AsyncSession):
    """
    Own the request transaction on *session*: commit after the request,
    then purge the article cache keys the transaction made stale.  On
    failure roll back and forget them.
    """
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        cache.discard_pending(session)
        raise
    await cache.purge_committed(session)


async def get_db():
    async with async_session() as session, transaction(session):
        yield session
