"""Page service - read access to named static pages."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from quillcms.errors import NotFoundError
from quillcms.models import Page
from quillcms.services.serializers import page_to_dict


async def get_page(db: AsyncSession, name: str) -> dict:
    """Return the page called *name* with its files, or raise NotFoundError."""
    q = select(Page).where(Page.name == name).options(selectinload(Page.files))
    page = (await db.execute(q)).scalar_one_or_none()
    if page is None:
        raise NotFoundError(f"No page named {name!r}")
    return page_to_dict(page)


async def get_pages(db: AsyncSession) -> list[dict]:
    q = select(Page).options(selectinload(Page.files)).order_by(Page.created_at, Page.id)
    return [page_to_dict(p) for p in (await db.execute(q)).scalars().all()]


async def get_page_by_id(db: AsyncSession, page_id: str) -> dict:
    q = select(Page).where(Page.id == page_id).options(selectinload(Page.files))
    page = (await db.execute(q)).scalar_one_or_none()
    if page is None:
        raise NotFoundError(f"No page with id={page_id}")
    return page_to_dict(page)
