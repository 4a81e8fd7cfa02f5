"""GraphQL documents and assertion helpers shared by the test modules."""
import fnmatch

ADMIN_PASSWORD = "admin-secret"
READER_PASSWORD = "reader-secret"

SIGNUP = """
mutation signup($name: String!, $email: String!, $password: String!) {
  signup(name: $name, email: $email, password: $password) {
    token
    user { id name email }
  }
}
"""

LOGIN = """
mutation login($email: String!, $password: String!) {
  login(email: $email, password: $password) {
    token
    user { id name email }
  }
}
"""

ARTICLE_FIELDS = """
    id
    title
    summary
    content
    tags
    draft
    createdAt
    modifiedAt
    publishedAt
"""

POST_ARTICLE = """
mutation postArticle($title: String!, $summary: String!, $content: String!, $tags: [String!]!) {
  postArticle(title: $title, summary: $summary, content: $content, tags: $tags) {%s}
}
""" % ARTICLE_FIELDS

UPDATE_ARTICLE = """
mutation updateArticle($id: ID!, $title: String!, $summary: String!, $content: String!, $tags: [String!]!) {
  updateArticle(id: $id, title: $title, summary: $summary, content: $content, tags: $tags) {%s}
}
""" % ARTICLE_FIELDS

PUBLISH_ARTICLE = """
mutation publishArticle($id: ID!, $publish: Boolean!) {
  publishArticle(id: $id, publish: $publish) { id draft publishedAt }
}
"""

DELETE_ARTICLE = """
mutation deleteArticle($id: ID!) {
  deleteArticle(id: $id) { id }
}
"""

GET_ARTICLE = """
query article($id: ID!) {
  article(id: $id) {
    %s
    comments { id content user { id name } }
    files { id name extension }
  }
}
""" % ARTICLE_FIELDS

PUBLISHED_ARTICLES = """
query publishedArticles($filter: String, $skip: Int, $first: Int) {
  publishedArticles(filter: $filter, skip: $skip, first: $first) { id title summary draft }
}
"""

ALL_ARTICLES = """
query allArticles($skip: Int, $first: Int) {
  allArticles(skip: $skip, first: $first) { id title draft }
}
"""

POST_COMMENT = """
mutation postComment($content: String!, $articleId: ID!) {
  postComment(content: $content, articleId: $articleId) {
    id
    content
    user { id name }
    article { id title }
  }
}
"""

DELETE_COMMENT = """
mutation deleteComment($id: ID!) {
  deleteComment(id: $id) { id }
}
"""

COMMENTS = """
query comments($skip: Int, $first: Int) {
  comments(skip: $skip, first: $first) {
    id
    content
    createdAt
    article { id title }
    user { id name }
  }
}
"""


def error_code(body: dict) -> str | None:
    """Return ``extensions.code`` of the first GraphQL error in *body*."""
    errors = body.get("errors") or []
    if not errors:
        return None
    return (errors[0].get("extensions") or {}).get("code")


async def post_article(gql, token: str, title: str = "Title", summary: str = "Summary",
                       content: str = "Content", tags: list[str] | None = None) -> dict:
    body = await gql(POST_ARTICLE, {
        "title": title,
        "summary": summary,
        "content": content,
        "tags": tags or [],
    }, token=token)
    assert "errors" not in body, body
    return body["data"]["postArticle"]


async def publish(gql, token: str, article_id: str, publish: bool = True) -> dict:
    body = await gql(PUBLISH_ARTICLE, {"id": article_id, "publish": publish}, token=token)
    assert "errors" not in body, body
    return body["data"]["publishArticle"]


class MemoryRedis:
    """The subset of redis.asyncio.Redis used by ArticleCache."""

    def __init__(self):
        self.store: dict[str, str] = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value

    async def delete(self, *keys):
        for key in keys:
            self.store.pop(key, None)

    async def scan_iter(self, match="*"):
        for key in list(self.store):
            if fnmatch.fnmatchcase(key, match):
                yield key

    async def aclose(self):
        pass
