"""Admin client for the content API."""
from quillcms.client.article_service import ArticleService
from quillcms.client.logging_service import LoggingService
from quillcms.client.streams import ResultStream
from quillcms.client.transport import GraphQLClient, GraphQLClientError, WatchedQuery

__all__ = [
    "ArticleService",
    "GraphQLClient",
    "GraphQLClientError",
    "LoggingService",
    "ResultStream",
    "WatchedQuery",
]
