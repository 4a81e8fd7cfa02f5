"""Content management backend with a GraphQL API and an admin client."""
