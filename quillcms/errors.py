"""
Error taxonomy shared by the service layer, the GraphQL surface and the
client façade.

Each error carries a stable ``code`` that is exposed to GraphQL callers as
``extensions.code`` and mapped back to the same class by the client.
"""
from graphql import GraphQLError

from ariadne import format_error, unwrap_graphql_error


class CMSError(Exception):
    code = "INTERNAL_SERVER_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class NotFoundError(CMSError):
    code = "NOT_FOUND"
    default_message = "Not found"


class DuplicateError(CMSError):
    code = "DUPLICATE"
    default_message = "Already exists"


class DuplicateUserError(DuplicateError):
    default_message = "User already exists"


class InvalidCredentialsError(CMSError):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid password"


class UnauthenticatedError(CMSError):
    code = "UNAUTHENTICATED"
    default_message = "Not authenticated"


class NotAuthorizedError(CMSError):
    code = "NOT_AUTHORIZED"
    default_message = "Not authorized"


class ValidationError(CMSError):
    code = "VALIDATION_ERROR"
    default_message = "Invalid input"


ERRORS_BY_CODE: dict[str, type[CMSError]] = {
    cls.code: cls
    for cls in (
        NotFoundError,
        DuplicateError,
        InvalidCredentialsError,
        UnauthenticatedError,
        NotAuthorizedError,
        ValidationError,
    )
}


def format_cms_error(error: GraphQLError, debug: bool = False) -> dict:
    """ariadne error formatter that adds ``extensions.code`` for CMS errors."""
    formatted = format_error(error, debug)
    original = unwrap_graphql_error(error)
    if isinstance(original, CMSError):
        formatted.setdefault("extensions", {})["code"] = original.code
    return formatted
