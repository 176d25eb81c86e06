"""GraphQL manager.

Ties the pipeline together::

    request -> RequestParser -> QueryValidator -> MiddlewarePipeline
            -> ResolutionDispatcher -> {data} | {errors}

User-facing failures come back as data; ``execute_query`` does not raise for
them.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from gqlflow.core.config import Settings, get_settings
from gqlflow.core.errors import (
    GraphQLError,
    QuerySyntaxError,
    ServiceDisabled,
    error_envelope,
)
from gqlflow.core.graphql.executor import ResolutionDispatcher
from gqlflow.core.graphql.middleware import Middleware, MiddlewarePipeline, Result, metrics_middleware
from gqlflow.core.graphql.request import GraphQLRequest, RequestParser
from gqlflow.core.graphql.schema import SchemaRegistry
from gqlflow.core.graphql.types import Mutation, Query, Type
from gqlflow.core.graphql.validation import QueryValidator
from gqlflow.core.logging.structured import clear_request_context, set_request_context
from gqlflow.utils.metrics import graphql_validation_failures_total

logger = logging.getLogger(__name__)


class GraphQLManager:
    """Entry point for schema registration and query execution."""

    def __init__(
        self,
        registry: Optional[SchemaRegistry] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.registry = registry if registry is not None else SchemaRegistry()
        self.validator = QueryValidator(
            max_complexity=self.settings.GRAPHQL_MAX_QUERY_COMPLEXITY,
            max_depth=self.settings.GRAPHQL_MAX_QUERY_DEPTH,
        )
        self.pipeline = MiddlewarePipeline()
        self.parser = RequestParser()
        self.dispatcher = ResolutionDispatcher(
            self.registry,
            validator=self.validator,
            strict_arguments=self.settings.GRAPHQL_STRICT_ARGUMENTS,
            debug=self.settings.GRAPHQL_DEBUG,
        )

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def load_schema(self, fragment: Mapping[str, Any]) -> None:
        self.registry.load_schema(fragment)

    def get_schema(self) -> Dict[str, Dict[str, Any]]:
        return self.registry.get_schema()

    def register_type(self, name: str, type_obj: Type) -> None:
        self.registry.register_type(name, type_obj)

    def register_query(self, name: str, query: Query) -> None:
        self.registry.register_query(name, query)

    def register_mutation(self, name: str, mutation: Mutation) -> None:
        self.registry.register_mutation(name, mutation)

    def get_type(self, name: str) -> Optional[Type]:
        return self.registry.get_type(name)

    def get_query(self, name: str) -> Optional[Query]:
        return self.registry.get_query(name)

    def get_mutation(self, name: str) -> Optional[Mutation]:
        return self.registry.get_mutation(name)

    # ------------------------------------------------------------------
    # Limits and middleware
    # ------------------------------------------------------------------

    def set_max_query_complexity(self, max_complexity: Optional[int]) -> None:
        self.validator.max_complexity = max_complexity

    def get_max_query_complexity(self) -> Optional[int]:
        return self.validator.max_complexity

    def set_max_query_depth(self, max_depth: Optional[int]) -> None:
        self.validator.max_depth = max_depth

    def get_max_query_depth(self) -> Optional[int]:
        return self.validator.max_depth

    def add_middleware(self, middleware: Middleware) -> None:
        self.pipeline.add(middleware)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def parse_request(self, request: Any) -> GraphQLRequest:
        return self.parser.parse(request)

    def execute_query(
        self,
        query: Optional[str],
        variables: Optional[Dict[str, Any]] = None,
        operation_name: Optional[str] = None,
        context: Any = None,
    ) -> Result:
        """Validate and execute a query.

        Args:
            query: Query document text
            variables: Request variables, passed to the resolver as arguments
            operation_name: Operation to run when the document holds several
            context: Passed through to resolvers

        Returns:
            ``{"data": ...}`` on success, ``{"errors": [...]}`` on failure
        """
        variables = dict(variables or {})
        set_request_context()
        try:
            try:
                self.validator.validate(query)
            except GraphQLError as exc:
                graphql_validation_failures_total.labels(code=exc.code.value).inc()
                return error_envelope(exc, debug=self.settings.GRAPHQL_DEBUG)

            def terminal(current_query: str) -> Result:
                return self.dispatcher.resolve(current_query, variables, operation_name, context)

            # Metrics wrap the whole chain, including user middleware
            return metrics_middleware(query, lambda q: self.pipeline.execute(q, terminal))
        finally:
            clear_request_context()

    def handle_request(self, request: Any) -> Tuple[int, Result]:
        """Parse and execute an HTTP-shaped request.

        Returns:
            ``(status_code, envelope)`` for the HTTP layer to serialize
        """
        if not self.settings.GRAPHQL_ENABLED:
            logger.warning("Rejected request: GraphQL is disabled")
            error = ServiceDisabled()
            return error.status_code, error_envelope(error)

        parsed = self.parse_request(request)
        if not parsed.query:
            error = QuerySyntaxError("Invalid GraphQL request: missing query")
            graphql_validation_failures_total.labels(code=error.code.value).inc()
            return error.status_code, error_envelope(error)

        result = self.execute_query(parsed.query, parsed.variables, parsed.operation_name)
        if "data" not in result and result.get("errors"):
            # Rejected before execution
            return 400, result
        return 200, result


__all__ = ["GraphQLManager"]
