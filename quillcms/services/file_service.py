"""File service - attachment metadata lookups."""
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from quillcms.models import File
from quillcms.services.serializers import file_to_dict


async def get_files(db: AsyncSession, document_id: str) -> list[dict]:
    """
    Return the files attached to the page or article with id *document_id*.
    """
    q = (
        select(File)
        .where(or_(File.page_id == document_id, File.article_id == document_id))
        .order_by(File.created_at, File.id)
    )
    return [file_to_dict(f) for f in (await db.execute(q)).scalars().all()]
