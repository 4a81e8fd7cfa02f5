"""
User service - signup, login and lookups for the User aggregate.

``signup`` and ``login`` both return an auth payload ``{"token", "user"}``
whose token embeds the user id; see ``quillcms.security`` for the token
format.
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from quillcms.errors import DuplicateUserError, InvalidCredentialsError, NotFoundError
from quillcms.models import User
from quillcms.schemas import LoginInput, SignupInput
from quillcms.security import create_access_token, hash_password, verify_password
from quillcms.services.serializers import user_to_dict

logger = logging.getLogger(__name__)


def _auth_payload(user: User) -> dict:
    return {"token": create_access_token(user.id), "user": user_to_dict(user)}


async def get_user(db: AsyncSession, user_id: str) -> User | None:
    """Return the User row for *user_id*, or None."""
    return await db.get(User, user_id)


async def signup(db: AsyncSession, data: SignupInput) -> dict:
    """
    Register a new user and return an auth payload.

    Raises DuplicateUserError when the name or the email is taken.  The
    unique constraints back up the pre-check for concurrent signups; the
    request transaction is rolled back in that case.
    """
    existing = await db.execute(
        select(User.id).where((User.name == data.name) | (User.email == data.email))
    )
    if existing.first() is not None:
        raise DuplicateUserError()

    user = User(name=data.name, email=data.email, pw_hash=hash_password(data.password))
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as exc:
        raise DuplicateUserError() from exc

    logger.info("Signed up user id=%s name=%r", user.id, user.name)
    return _auth_payload(user)


async def login(db: AsyncSession, data: LoginInput) -> dict:
    """
    Verify credentials and return an auth payload.

    Raises NotFoundError for an unknown email and InvalidCredentialsError
    when the password does not match the stored hash.
    """
    result = await db.execute(select(User).where(User.email == data.email))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("No such user found")

    if not verify_password(data.password, user.pw_hash):
        logger.warning("Failed login for user id=%s", user.id)
        raise InvalidCredentialsError()

    return _auth_payload(user)
