"""Error codes and exceptions for the query pipeline.

Every user-facing failure has an ``ErrorCode`` and a matching exception.
Components raise; the executor and manager turn exceptions into response
envelopes with ``GraphQLError.to_dict()`` so callers never need a try block.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    SYNTAX_ERROR = "SYNTAX_ERROR"  # Unbalanced braces/parentheses, empty query
    COMPLEXITY_EXCEEDED = "COMPLEXITY_EXCEEDED"
    DEPTH_EXCEEDED = "DEPTH_EXCEEDED"
    FIELD_NOT_FOUND = "FIELD_NOT_FOUND"
    OPERATION_NOT_SUPPORTED = "OPERATION_NOT_SUPPORTED"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    RESOLVER_ERROR = "RESOLVER_ERROR"  # Resolver raised; surfaced, never masked
    SERVICE_DISABLED = "SERVICE_DISABLED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# HTTP status suggested for each code when the HTTP collaborator asks for one
ERROR_STATUS_MAPPING: Dict[ErrorCode, int] = {
    ErrorCode.SYNTAX_ERROR: 400,
    ErrorCode.COMPLEXITY_EXCEEDED: 400,
    ErrorCode.DEPTH_EXCEEDED: 400,
    ErrorCode.FIELD_NOT_FOUND: 200,
    ErrorCode.OPERATION_NOT_SUPPORTED: 200,
    ErrorCode.INVALID_ARGUMENT: 200,
    ErrorCode.RESOLVER_ERROR: 200,
    ErrorCode.SERVICE_DISABLED: 503,
    ErrorCode.INTERNAL_ERROR: 500,
}


class GraphQLError(Exception):
    """Base class for all pipeline errors."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_MAPPING.get(self.code, 500)

    def to_dict(self, debug: bool = False) -> Dict[str, Any]:
        """Render as a GraphQL error object."""
        extensions: Dict[str, Any] = {"code": self.code.value}
        if self.details:
            extensions.update(self.details)
        if debug and self.__cause__ is not None:
            extensions["exception"] = type(self.__cause__).__name__
        return {"message": self.message, "extensions": extensions}


class QuerySyntaxError(GraphQLError):
    code = ErrorCode.SYNTAX_ERROR


class ComplexityExceeded(GraphQLError):
    code = ErrorCode.COMPLEXITY_EXCEEDED

    def __init__(self, complexity: int, max_complexity: int):
        super().__init__(
            f"Query complexity of {complexity} exceeds maximum allowed "
            f"complexity of {max_complexity}",
            {"complexity": complexity, "maxComplexity": max_complexity},
        )
        self.complexity = complexity
        self.max_complexity = max_complexity


class DepthExceeded(GraphQLError):
    code = ErrorCode.DEPTH_EXCEEDED

    def __init__(self, depth: int, max_depth: int):
        super().__init__(
            f"Query depth of {depth} exceeds maximum allowed depth of {max_depth}",
            {"depth": depth, "maxDepth": max_depth},
        )
        self.depth = depth
        self.max_depth = max_depth


class FieldNotFound(GraphQLError):
    code = ErrorCode.FIELD_NOT_FOUND

    def __init__(self, field_name: str, type_name: str):
        super().__init__(f'Field "{field_name}" does not exist on type "{type_name}"')
        self.field_name = field_name
        self.type_name = type_name


class OperationNotSupported(GraphQLError):
    code = ErrorCode.OPERATION_NOT_SUPPORTED

    def __init__(self, message: str = "Query not supported"):
        super().__init__(message)


class InvalidArgument(GraphQLError):
    code = ErrorCode.INVALID_ARGUMENT


class ResolverError(GraphQLError):
    code = ErrorCode.RESOLVER_ERROR

    def __init__(self, operation_name: str, error: BaseException):
        super().__init__(f'Resolver for "{operation_name}" failed: {error}')
        self.operation_name = operation_name


class ServiceDisabled(GraphQLError):
    code = ErrorCode.SERVICE_DISABLED

    def __init__(self) -> None:
        super().__init__("GraphQL is disabled")


def error_envelope(*errors: GraphQLError, debug: bool = False, with_data: bool = False) -> Dict[str, Any]:
    """Build a ``{errors: [...]}`` envelope, optionally with ``data: None``."""
    envelope: Dict[str, Any] = {}
    if with_data:
        envelope["data"] = None
    envelope["errors"] = [e.to_dict(debug=debug) for e in errors]
    return envelope


__all__ = [
    "ErrorCode",
    "ERROR_STATUS_MAPPING",
    "GraphQLError",
    "QuerySyntaxError",
    "ComplexityExceeded",
    "DepthExceeded",
    "FieldNotFound",
    "OperationNotSupported",
    "InvalidArgument",
    "ResolverError",
    "ServiceDisabled",
    "error_envelope",
]
