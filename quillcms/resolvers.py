"""
ariadne resolvers for the content API.

Resolvers stay thin: validate arguments, apply the authorization guard,
delegate to the service layer.  Services return plain dicts, so the
default resolvers handle scalar fields; the relation resolvers below only
hit the database when a client selects fields the shallow nested dict
does not carry.
"""
from datetime import datetime

from ariadne import MutationType, ObjectType, QueryType, ScalarType, convert_camel_case_to_snake
from graphql import FieldNode, GraphQLResolveInfo

from quillcms.dependencies import get_pagination
from quillcms.permissions import admin_required, assert_admin_user
from quillcms.schemas import ArticleInput, CommentInput, LoginInput, SignupInput, parse_input
from quillcms.services import (
    article_service,
    comment_service,
    file_service,
    page_service,
    user_service,
)
from quillcms.services.serializers import user_to_dict

query = QueryType()
mutation = MutationType()
datetime_scalar = ScalarType("DateTime")
comment_type = ObjectType("Comment")
file_type = ObjectType("File")


@datetime_scalar.serializer
def serialize_datetime(value):
    # Cached payloads already hold ISO strings.
    if isinstance(value, datetime):
        return value.isoformat()
    return value


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

@query.field("publishedArticles")
async def resolve_published_articles(_, info, filter=None, skip=None, first=None):
    return await article_service.get_published_articles(
        info.context["db"], get_pagination(skip, first), filter
    )


@query.field("allArticles")
async def resolve_all_articles(_, info, skip=None, first=None):
    return await article_service.get_all_articles(info.context["db"], get_pagination(skip, first))


@query.field("article")
async def resolve_article(_, info, id):
    article = await article_service.get_article(info.context["db"], id)
    if article["draft"]:
        await assert_admin_user(info.context)
    return article


@query.field("comments")
async def resolve_comments(_, info, skip=None, first=None):
    return await comment_service.get_comments(info.context["db"], get_pagination(skip, first))


@query.field("page")
async def resolve_page(_, info, name):
    return await page_service.get_page(info.context["db"], name)


@query.field("pages")
async def resolve_pages(_, info):
    return await page_service.get_pages(info.context["db"])


@query.field("files")
async def resolve_files(_, info, document_id):
    return await file_service.get_files(info.context["db"], document_id)


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

@mutation.field("signup")
async def resolve_signup(_, info, name, email, password):
    data = parse_input(SignupInput, name=name, email=email, password=password)
    return await user_service.signup(info.context["db"], data)


@mutation.field("login")
async def resolve_login(_, info, email, password):
    data = parse_input(LoginInput, email=email, password=password)
    return await user_service.login(info.context["db"], data)


@mutation.field("postArticle")
@admin_required
async def resolve_post_article(_, info, title, summary, content, tags):
    data = parse_input(ArticleInput, title=title, summary=summary, content=content, tags=tags)
    return await article_service.create_article(info.context["db"], data)


@mutation.field("updateArticle")
@admin_required
async def resolve_update_article(_, info, id, title, summary, content, tags):
    data = parse_input(ArticleInput, title=title, summary=summary, content=content, tags=tags)
    return await article_service.update_article(info.context["db"], id, data)


@mutation.field("publishArticle")
@admin_required
async def resolve_publish_article(_, info, id, publish):
    return await article_service.publish_article(info.context["db"], id, publish)


@mutation.field("deleteArticle")
@admin_required
async def resolve_delete_article(_, info, id):
    return await article_service.delete_article(info.context["db"], id)


@mutation.field("postComment")
async def resolve_post_comment(_, info, content, article_id):
    # Not wrapped with admin_required: the admin user row is needed as author.
    user = await assert_admin_user(info.context)
    data = parse_input(CommentInput, content=content, article_id=article_id)
    return await comment_service.add_comment(info.context["db"], user, data)


@mutation.field("deleteComment")
@admin_required
async def resolve_delete_comment(_, info, id):
    return await comment_service.delete_comment(info.context["db"], id)


# ---------------------------------------------------------------------------
# Relations
# ---------------------------------------------------------------------------

def _selected_fields(info: GraphQLResolveInfo) -> set[str] | None:
    """Snake-cased field names selected below the current field, or None
    when fragments make the selection unknown."""
    names = set()
    for node in info.field_nodes:
        if node.selection_set is None:
            continue
        for selection in node.selection_set.selections:
            if not isinstance(selection, FieldNode):
                return None
            names.add(convert_camel_case_to_snake(selection.name.value))
    names.discard("__typename")
    return names


async def _load_user(db, user_id):
    user = await user_service.get_user(db, user_id)
    return user_to_dict(user) if user is not None else None


def _relation(key, loader):
    async def resolve(obj, info):
        partial = obj.get(key)
        if partial is None:
            return None
        selected = _selected_fields(info)
        if selected is not None and selected <= partial.keys():
            return partial
        return await loader(info.context["db"], partial["id"])

    return resolve


comment_type.set_field("user", _relation("user", _load_user))
comment_type.set_field("article", _relation("article", article_service.get_article))
file_type.set_field("page", _relation("page", page_service.get_page_by_id))
file_type.set_field("article", _relation("article", article_service.get_article))


resolvers = [query, mutation, datetime_scalar, comment_type, file_type]
