from typing import TypeVar

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from quillcms.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_input(model: type[ModelT], **data) -> ModelT:
    """Validate resolver arguments, surfacing failures as ValidationError."""
    try:
        return model(**data)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or model.__name__
        raise ValidationError(f"{field}: {first['msg']}") from exc


# --- User ---

class SignupInput(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=72)


class LoginInput(BaseModel):
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=72)


# --- Article ---

class ArticleInput(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    summary: str = Field("", max_length=1000)
    content: str = ""
    tags: list[str] = []

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, tags: list[str]) -> list[str]:
        # Ordered set: keep the first occurrence of each tag.
        return list(dict.fromkeys(tags))


# --- Comment ---

class CommentInput(BaseModel):
    content: str = Field(min_length=1)
    article_id: str


# --- Pagination ---

class Pagination(BaseModel):
    """
    Offset/limit window for list queries.

    ``first`` of None means "no limit"; explicit values are checked against
    ``settings.MAX_PAGE_SIZE`` by ``dependencies.get_pagination``.
    """

    skip: int = Field(0, ge=0)
    first: int | None = Field(None, ge=0)
