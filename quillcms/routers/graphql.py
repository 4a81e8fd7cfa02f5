import logging

from ariadne import graphql, make_executable_schema
from ariadne.explorer import ExplorerGraphiQL
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from quillcms.cache import cache
from quillcms.config import settings
from quillcms.database import get_db
from quillcms.dependencies import bearer_token
from quillcms.errors import format_cms_error
from quillcms.middleware import current_request_stats
from quillcms.resolvers import resolvers
from quillcms.type_defs import type_defs

logger = logging.getLogger(__name__)

schema = make_executable_schema(type_defs, *resolvers, convert_names_case=True)

router = APIRouter(tags=["graphql"])


@router.get("/graphql", response_class=HTMLResponse)
async def graphql_explorer():
    return ExplorerGraphiQL().html(None)


@router.post("/graphql")
async def graphql_server(
    request: Request,
    db: AsyncSession = Depends(get_db),
    token: str | None = Depends(bearer_token),
):
    try:
        data = await request.json()
    except ValueError:
        return JSONResponse({"errors": [{"message": "Request body is not valid JSON"}]}, status_code=400)

    operation_name = data.get("operationName") if isinstance(data, dict) else None
    stats = current_request_stats()
    # GraphQL names are ASCII identifiers; anything else is not echoed.
    if stats is not None and isinstance(operation_name, str) and operation_name.isascii() \
            and operation_name.isidentifier():
        stats.operation = operation_name

    context = {"request": request, "db": db, "token": token}
    _, result = await graphql(
        schema,
        data,
        context_value=context,
        debug=settings.DEBUG,
        error_formatter=format_cms_error,
    )

    if result.get("errors"):
        # A failed operation must not leave partial writes behind.
        await db.rollback()
        cache.discard_pending(db)
        logger.info(
            "GraphQL operation %r failed: %s",
            operation_name,
            "; ".join(e.get("message", "") for e in result["errors"]),
        )

    # Parse and validation failures carry no "data" key; an executed
    # operation is a 200 even when its resolvers raised.
    return JSONResponse(result, status_code=200 if "data" in result else 400)
