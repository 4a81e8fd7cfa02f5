from fastapi import Header

from quillcms.config import settings
from quillcms.errors import ValidationError
from quillcms.schemas import Pagination, parse_input


def bearer_token(authorization: str | None = Header(None)) -> str | None:
    """
    FastAPI dependency returning the session token from an
    ``Authorization: Bearer <token>`` header, or None for anonymous callers.
    """
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_pagination(skip: int | None = None, first: int | None = None) -> Pagination:
    """
    Validate the ``skip``/``first`` arguments of a list query.

    Omitted values mean "from the start" and "no limit".  An explicit
    ``first`` above ``settings.MAX_PAGE_SIZE`` is rejected rather than
    silently clamped so callers notice they are missing rows.
    """
    pagination = parse_input(Pagination, skip=skip or 0, first=first)
    if pagination.first is not None and pagination.first > settings.MAX_PAGE_SIZE:
        raise ValidationError(f"first: must be at most {settings.MAX_PAGE_SIZE}")
    return pagination
