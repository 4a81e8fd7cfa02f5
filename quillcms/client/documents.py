"""GraphQL documents used by the admin client."""

GET_ARTICLE = """
query article($id: ID!) {
  article(id: $id) {
    id
    draft
    createdAt
    modifiedAt
    publishedAt
    title
    summary
    content
    tags
    files {
      id
      name
      extension
    }
    comments {
      id
    }
  }
}
"""

GET_ALL_ARTICLES = """
query allArticles {
  allArticles {
    id
    draft
    createdAt
    modifiedAt
    publishedAt
    title
    summary
    tags
    comments {
      id
    }
  }
}
"""

GET_COMMENTS = """
query comments {
  comments {
    id
    createdAt
    content
    article {
      id
      title
    }
    user {
      id
      name
    }
  }
}
"""

POST_ARTICLE = """
mutation postArticle($title: String!, $summary: String!, $content: String!, $tags: [String!]!) {
  postArticle(title: $title, summary: $summary, content: $content, tags: $tags) {
    id
    draft
    modifiedAt
    title
    summary
    content
    tags
  }
}
"""

UPDATE_ARTICLE = """
mutation updateArticle($id: ID!, $title: String!, $summary: String!, $content: String!, $tags: [String!]!) {
  updateArticle(id: $id, title: $title, summary: $summary, content: $content, tags: $tags) {
    id
    draft
    modifiedAt
    title
    summary
    content
    tags
  }
}
"""

PUBLISH_ARTICLE = """
mutation publishArticle($id: ID!, $publish: Boolean!) {
  publishArticle(id: $id, publish: $publish) {
    id
    draft
    publishedAt
  }
}
"""

DELETE_ARTICLE = """
mutation deleteArticle($id: ID!) {
  deleteArticle(id: $id) {
    id
  }
}
"""

DELETE_COMMENT = """
mutation deleteComment($id: ID!) {
  deleteComment(id: $id) {
    id
  }
}
"""

LOGIN = """
mutation login($email: String!, $password: String!) {
  login(email: $email, password: $password) {
    token
    user {
      id
      name
    }
  }
}
"""
