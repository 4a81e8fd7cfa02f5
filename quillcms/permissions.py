"""
Authorization guard.

The request context built by the GraphQL route is a dict with ``db`` (the
request's AsyncSession), ``token`` (bearer token or None) and ``request``.
Every content-mutating resolver is wrapped with ``admin_required`` so the
admin check lives in exactly one place.
"""
import functools
import logging

from quillcms.config import settings
from quillcms.errors import NotAuthorizedError, UnauthenticatedError
from quillcms.models import User
from quillcms.security import decode_access_token
from quillcms.services import user_service

logger = logging.getLogger(__name__)


def resolve_current_user_id(context: dict) -> str:
    """Return the user id embedded in the request's session token."""
    token = context.get("token")
    if not token:
        raise UnauthenticatedError()
    return decode_access_token(token)


async def assert_admin_user(context: dict) -> User:
    """
    Return the current user if it is the configured admin.

    Raises UnauthenticatedError without a valid token and
    NotAuthorizedError for any other identity, including a token whose
    user no longer exists.
    """
    user_id = resolve_current_user_id(context)
    user = await user_service.get_user(context["db"], user_id)
    if user is None or user.name != settings.ADMIN_USER:
        logger.warning("Admin check denied for user id=%s", user_id)
        raise NotAuthorizedError()
    return user


def admin_required(resolver):
    """Decorate an async ariadne resolver so it only runs for the admin."""

    @functools.wraps(resolver)
    async def wrapper(obj, info, **kwargs):
        await assert_admin_user(info.context)
        return await resolver(obj, info, **kwargs)

    return wrapper
