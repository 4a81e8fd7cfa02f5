"""
GraphQL SDL for the content API, exported as ``type_defs``.

Field and argument names are camelCase here and snake_case in Python;
``make_executable_schema(..., convert_names_case=True)`` maps between them.
"""

type_defs = """
schema {
  query: Query
  mutation: Mutation
}

scalar DateTime

type Query {
  publishedArticles(filter: String, skip: Int, first: Int): [Article!]!
  allArticles(skip: Int, first: Int): [Article!]!
  article(id: ID!): Article!
  comments(skip: Int, first: Int): [Comment!]!
  page(name: String!): Page!
  pages: [Page!]!
  files(documentId: ID!): [File!]!
}

type Mutation {
  signup(name: String!, email: String!, password: String!): AuthPayload!
  login(email: String!, password: String!): AuthPayload!
  postArticle(title: String!, summary: String!, content: String!, tags: [String!]!): Article!
  updateArticle(id: ID!, title: String!, summary: String!, content: String!, tags: [String!]!): Article!
  publishArticle(id: ID!, publish: Boolean!): Article!
  deleteArticle(id: ID!): Article!
  postComment(content: String!, articleId: ID!): Comment!
  deleteComment(id: ID!): Comment!
}

type AuthPayload {
  token: String!
  user: User!
}

type User {
  id: ID!
  name: String
  email: String
  createdAt: DateTime
}

type Article {
  id: ID!
  title: String!
  summary: String!
  content: String!
  tags: [String!]!
  draft: Boolean!
  createdAt: DateTime!
  modifiedAt: DateTime!
  publishedAt: DateTime
  comments: [Comment!]!
  files: [File!]!
}

type Comment {
  id: ID!
  content: String!
  createdAt: DateTime!
  modifiedAt: DateTime!
  user: User!
  article: Article!
}

type Page {
  id: ID!
  name: String!
  title: String!
  content: String!
  createdAt: DateTime!
  modifiedAt: DateTime!
  files: [File!]!
}

type File {
  id: ID!
  name: String!
  extension: String!
  createdAt: DateTime!
  page: Page
  article: Article
}
"""
