"""
Password hashing and session token helpers.

Passwords are hashed with bcrypt using ``settings.BCRYPT_ROUNDS`` as the
cost factor.  Session tokens are HS256 JWTs carrying the user id in the
``sub`` claim; they are not persisted, so validity is purely a matter of
the signature (and ``exp`` when ``TOKEN_TTL_SECONDS`` is set).
"""
import logging
import time

import bcrypt
from jose import JWTError, jwt

from quillcms.config import settings
from quillcms.errors import UnauthenticatedError

logger = logging.getLogger(__name__)


def hash_password(raw_password: str) -> str:
    """Hash a raw password using bcrypt and return the utf-8 string."""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(raw_password.encode(), salt).decode()


def verify_password(raw_password: str, pw_hash: str) -> bool:
    """Verify *raw_password* against a stored bcrypt hash."""
    if not pw_hash:
        return False
    try:
        return bcrypt.checkpw(raw_password.encode(), pw_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


def create_access_token(user_id: str) -> str:
    now = int(time.time())
    claims = {"sub": user_id, "iat": now}
    if settings.TOKEN_TTL_SECONDS > 0:
        claims["exp"] = now + settings.TOKEN_TTL_SECONDS
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> str:
    """
    Verify *token* and return the embedded user id.

    Raises UnauthenticatedError for tampered, unsigned, expired or
    otherwise malformed tokens.
    """
    if not token:
        raise UnauthenticatedError()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        logger.warning("Rejected session token: %s", exc)
        raise UnauthenticatedError("Invalid token") from exc

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise UnauthenticatedError("Invalid token")
    return user_id
