# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business logic and database access for a single aggregate:
#
#   article_service  - queries, CRUD, publishing + cache for Article
#   comment_service  - listing, creation and deletion of Comment
#   page_service     - lookups for Page
#   file_service     - attachment lookups by parent document
#   user_service     - signup / login for User
#
# All service functions accept an AsyncSession as their first argument
# so that the GraphQL route controls the transaction boundary via the
# ``get_db`` dependency.  Failures are raised as quillcms.errors types.
