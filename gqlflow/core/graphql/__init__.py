"""GraphQL query pipeline.

Provides:
- Schema registry for types, queries and mutations
- Request parsing and text-based validation
- Onion-ordered middleware pipeline
- Resolution dispatch and introspection
"""

from gqlflow.core.graphql.executor import (
    IntrospectionProvider,
    ResolutionDispatcher,
)
from gqlflow.core.graphql.manager import GraphQLManager
from gqlflow.core.graphql.middleware import (
    MiddlewarePipeline,
    logging_middleware,
    metrics_middleware,
    timing_middleware,
)
from gqlflow.core.graphql.request import (
    GraphQLRequest,
    RequestParser,
)
from gqlflow.core.graphql.schema import SchemaRegistry
from gqlflow.core.graphql.types import (
    Mutation,
    Query,
    Resolvable,
    Type,
)
from gqlflow.core.graphql.validation import (
    QueryValidator,
    calculate_complexity,
    calculate_depth,
)

__all__ = [
    # Schema
    "SchemaRegistry",
    "Type",
    "Query",
    "Mutation",
    "Resolvable",
    # Request
    "GraphQLRequest",
    "RequestParser",
    # Validation
    "QueryValidator",
    "calculate_complexity",
    "calculate_depth",
    # Middleware
    "MiddlewarePipeline",
    "logging_middleware",
    "metrics_middleware",
    "timing_middleware",
    # Execution
    "ResolutionDispatcher",
    "IntrospectionProvider",
    "GraphQLManager",
]
