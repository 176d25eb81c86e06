import os
from typing import Any, Dict

import pytest

from gqlflow.core.graphql.types import Mutation, Query, Type


# List of environment variables that may be modified by tests
_ENV_VARS_TO_ISOLATE = [
    "GRAPHQL_ENABLED",
    "GRAPHQL_MAX_QUERY_COMPLEXITY",
    "GRAPHQL_MAX_QUERY_DEPTH",
    "GRAPHQL_STRICT_ARGUMENTS",
    "GRAPHQL_DEBUG",
    "LOG_LEVEL",
    "LOG_JSON",
    "SERVICE_NAME",
    "ENVIRONMENT",
]


@pytest.fixture(autouse=True)
def env_isolation():
    """Isolate environment variables and cached settings between tests."""
    from gqlflow.core.config import reset_settings

    backup = {k: os.environ.get(k) for k in _ENV_VARS_TO_ISOLATE}
    for k in _ENV_VARS_TO_ISOLATE:
        os.environ.pop(k, None)
    reset_settings()
    try:
        yield
    finally:
        for k, v in backup.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v
        reset_settings()


# ============================================================================
# Sample schema
# ============================================================================

class UserType(Type):
    name = "User"
    description = "A registered user"
    fields = {
        "id": "Int!",
        "name": "String!",
        "email": "String!",
        "posts": "[Post]",
    }

    def resolve_field(self, field_name, args=None, context=None):
        if field_name == "posts":
            return [{"id": 1, "title": "Test Post", "author_id": 1}]
        return None


class PostType(Type):
    name = "Post"
    description = "A blog post"
    fields = {
        "id": "Int!",
        "title": "String!",
        "content": "String",
        "author": "User",
    }

    def resolve_field(self, field_name, args=None, context=None):
        if field_name == "author":
            return {"id": 1, "name": "John Doe", "email": "john@example.com"}
        return None


class UserQuery(Query):
    name = "user"
    description = "Get user by ID"
    return_type = "User"
    args = {"id": "Int!"}

    def resolve(self, root, args, context, info):
        return {
            "id": args.get("id", 1),
            "name": "John Doe",
            "email": "john@example.com",
        }


class UsersQuery(Query):
    name = "users"
    description = "List users"
    return_type = "[User]"
    args = {"limit": "Int", "offset": "Int"}

    def resolve(self, root, args, context, info):
        users = [
            {"id": 1, "name": "John Doe", "email": "john@example.com"},
            {"id": 2, "name": "Jane Smith", "email": "jane@example.com"},
        ]
        offset = args.get("offset") or 0
        limit = args.get("limit") or len(users)
        return users[offset:offset + limit]


class PostQuery(Query):
    name = "post"
    return_type = "Post"
    args = {"id": "Int!"}

    def resolve(self, root, args, context, info):
        return {
            "id": args.get("id", 1),
            "title": "Hello World",
            "content": "This is my first post",
        }


class CreateUser(Mutation):
    description = "Create a new user"
    return_type = "User"
    args = {"input": "UserInput!"}

    def resolve(self, root, args, context, info):
        data = args.get("input") or {}
        return {
            "id": 3,
            "name": data.get("name", "New User"),
            "email": data.get("email", "new@example.com"),
        }


class DeleteUser(Mutation):
    return_type = "Boolean"
    args = {"id": "Int!"}

    def resolve(self, root, args, context, info):
        return True


def build_sample_schema() -> Dict[str, Dict[str, Any]]:
    return {
        "types": {"User": UserType(), "Post": PostType()},
        "queries": {"user": UserQuery(), "users": UsersQuery(), "post": PostQuery()},
        "mutations": {"createUser": CreateUser(), "deleteUser": DeleteUser()},
    }


@pytest.fixture
def sample_schema():
    return build_sample_schema()


@pytest.fixture
def settings():
    from gqlflow.core.config import Settings

    return Settings()


@pytest.fixture
def manager(sample_schema, settings):
    from gqlflow.core.graphql.manager import GraphQLManager

    graphql_manager = GraphQLManager(settings=settings)
    graphql_manager.load_schema(sample_schema)
    return graphql_manager
