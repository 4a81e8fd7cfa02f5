"""
Admin data-access façade over the content API.

Query methods return live ``ResultStream`` objects: iterate them to be
notified of the initial result and of every refetch, or call ``first()``
for a single value.  Mutation methods are coroutines resolving to the
mutated payload; those that change a list refetch the watched list queries
that depend on it.

Every operation reports success or failure to the ``LoggingService``.
Success is only reported once the payload has been parsed.  Failures are
logged and then re-raised to the caller.
"""
from pydantic import ValidationError as PayloadError

from quillcms.client import documents
from quillcms.client.logging_service import LoggingService
from quillcms.client.streams import ResultStream
from quillcms.client.transport import CLIENT_ERRORS, GraphQLClient
from quillcms.client.types import Article, Comment

# A mutation fails when the request fails or its payload does not parse.
MUTATION_ERRORS = (*CLIENT_ERRORS, PayloadError)


class ArticleService:
    def __init__(self, client: GraphQLClient, logger: LoggingService) -> None:
        self._client = client
        self._logger = logger

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_article(self, id: str) -> ResultStream[Article]:
        query = self._client.watch(documents.GET_ARTICLE, {"id": id})
        return ResultStream(
            query.subscribe(),
            lambda data: Article.model_validate(data["article"]),
            on_next=lambda _: self._logger.add(f"Fetched article, id={id}"),
            on_error=lambda _: self._logger.add(f"Failed to fetch article, id={id}"),
        )

    def get_articles(self) -> ResultStream[list[Article]]:
        query = self._client.watch(documents.GET_ALL_ARTICLES)
        return ResultStream(
            query.subscribe(),
            lambda data: [Article.model_validate(a) for a in data["allArticles"]],
            on_next=lambda _: self._logger.add("Fetched articles"),
            on_error=lambda _: self._logger.add("Failed to fetch articles"),
        )

    def get_comments(self) -> ResultStream[list[Comment]]:
        query = self._client.watch(documents.GET_COMMENTS)
        return ResultStream(
            query.subscribe(),
            lambda data: [Comment.model_validate(c) for c in data["comments"]],
            on_next=lambda _: self._logger.add("Fetched comments"),
            on_error=lambda _: self._logger.add("Failed to fetch comments"),
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def post_article(self, article: Article) -> Article:
        try:
            data = await self._client.mutate(
                documents.POST_ARTICLE,
                {
                    "title": article.title,
                    "summary": article.summary,
                    "content": article.content,
                    "tags": article.tags,
                },
                refetch_queries=[documents.GET_ALL_ARTICLES],
            )
            created = Article.model_validate(data["postArticle"])
        except MUTATION_ERRORS:
            self._logger.add("Failed to create article")
            raise
        self._logger.add(f"Created article, id={created.id}")
        return created

    async def update_article(self, article: Article) -> Article:
        try:
            data = await self._client.mutate(
                documents.UPDATE_ARTICLE,
                {
                    "id": article.id,
                    "title": article.title,
                    "summary": article.summary,
                    "content": article.content,
                    "tags": article.tags,
                },
            )
            saved = Article.model_validate(data["updateArticle"])
        except MUTATION_ERRORS:
            self._logger.add(f"Failed to save article, id={article.id}")
            raise
        self._logger.add(f"Saved article, id={article.id}")
        return saved

    async def publish_article(self, id: str, publish: bool) -> Article:
        try:
            data = await self._client.mutate(
                documents.PUBLISH_ARTICLE, {"id": id, "publish": publish}
            )
            published = Article.model_validate(data["publishArticle"])
        except MUTATION_ERRORS:
            self._logger.add(f"Failed to {'publish' if publish else 'unpublish'} article, id={id}")
            raise
        self._logger.add(f"{'Published' if publish else 'Unpublished'} article, id={id}")
        return published

    async def delete_article(self, id: str) -> Article:
        try:
            data = await self._client.mutate(
                documents.DELETE_ARTICLE,
                {"id": id},
                refetch_queries=[documents.GET_ALL_ARTICLES],
            )
            deleted = Article.model_validate(data["deleteArticle"])
        except MUTATION_ERRORS:
            self._logger.add(f"Failed to delete article, id={id}")
            raise
        self._logger.add(f"Deleted article, id={id}")
        return deleted

    async def delete_comment(self, id: str) -> Comment:
        try:
            data = await self._client.mutate(
                documents.DELETE_COMMENT,
                {"id": id},
                refetch_queries=[documents.GET_COMMENTS],
            )
            deleted = Comment.model_validate(data["deleteComment"])
        except MUTATION_ERRORS:
            self._logger.add(f"Failed to delete comment, id={id}")
            raise
        self._logger.add(f"Deleted comment, id={id}")
        return deleted
