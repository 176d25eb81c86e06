"""Query validation.

All checks run on raw query text in a single pass each. The complexity score
is a heuristic (nesting level times two plus a count of ``:`` and a few common
field names), not a per-field cost model. Limits in existing deployments are
tuned against this exact formula.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from gqlflow.core.errors import (
    ComplexityExceeded,
    DepthExceeded,
    InvalidArgument,
    QuerySyntaxError,
)
from gqlflow.core.graphql.types import BUILTIN_SCALARS, Operation, is_list_type, is_non_null, named_type

logger = logging.getLogger(__name__)

# Substrings counted as fields by the complexity heuristic
FIELD_TOKENS: Tuple[str, ...] = (":", " id", " name", " email", " title", " content")


def max_nesting_level(query: str) -> int:
    level = 0
    deepest = 0
    for char in query:
        if char == "{":
            level += 1
            deepest = max(deepest, level)
        elif char == "}":
            level -= 1
    return deepest


def calculate_complexity(query: str) -> int:
    """``max_nesting_level * 2 + field_count`` for a query string."""
    field_count = sum(query.count(token) for token in FIELD_TOKENS)
    return max_nesting_level(query) * 2 + field_count


def calculate_depth(query: str) -> int:
    return max_nesting_level(query)


def check_balance(query: Optional[str]) -> None:
    """Raise QuerySyntaxError on unbalanced braces or parentheses."""
    if not query or not query.strip():
        raise QuerySyntaxError("Query string is required")

    opening, closing = query.count("{"), query.count("}")
    if opening != closing:
        raise QuerySyntaxError(
            f"Syntax error: Unbalanced braces in query ({opening} '{{' vs {closing} '}}')",
            {"openBraces": opening, "closeBraces": closing},
        )

    if "(" in query:
        opening, closing = query.count("("), query.count(")")
        if opening != closing:
            raise QuerySyntaxError(
                f"Syntax error: Unbalanced parentheses in query ({opening} '(' vs {closing} ')')",
                {"openParens": opening, "closeParens": closing},
            )


_SCALAR_CHECKS = {
    "Int": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "Float": lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
    "String": lambda v: isinstance(v, str),
    "Boolean": lambda v: isinstance(v, bool),
    "ID": lambda v: isinstance(v, (str, int)) and not isinstance(v, bool),
}


class QueryValidator:
    """Validates query text against the configured limits."""

    def __init__(self, max_complexity: Optional[int] = None, max_depth: Optional[int] = None):
        self.max_complexity = max_complexity
        self.max_depth = max_depth

    def validate(self, query: Optional[str]) -> None:
        """Run syntax, complexity and depth checks, stopping at the first failure."""
        check_balance(query)

        if self.max_complexity is not None:
            complexity = calculate_complexity(query)
            if complexity > self.max_complexity:
                logger.info("Query rejected: complexity %d > %d", complexity, self.max_complexity)
                raise ComplexityExceeded(complexity, self.max_complexity)

        if self.max_depth is not None:
            depth = calculate_depth(query)
            if depth > self.max_depth:
                logger.info("Query rejected: depth %d > %d", depth, self.max_depth)
                raise DepthExceeded(depth, self.max_depth)

    def validate_arguments(self, operation: Operation, args: Dict[str, Any]) -> None:
        """Check arguments against the operation's declared argument types.

        Custom input types are accepted as-is; only built-in scalars and
        list wrappers are checked.
        """
        for arg_name, type_string in operation.args.items():
            value = args.get(arg_name)
            if value is None:
                if is_non_null(type_string):
                    raise InvalidArgument(
                        f"Required argument '{arg_name}' is missing for '{operation.name}'"
                    )
                continue

            base = named_type(type_string)
            if is_list_type(type_string):
                if not isinstance(value, list):
                    raise InvalidArgument(f"Invalid type for argument '{arg_name}': Expected list")
                values = value
            else:
                values = [value]

            check = _SCALAR_CHECKS.get(base) if base in BUILTIN_SCALARS else None
            if check is None:
                continue
            for item in values:
                if item is not None and not check(item):
                    raise InvalidArgument(
                        f"Invalid type for argument '{arg_name}': Expected {base}"
                    )


__all__ = [
    "FIELD_TOKENS",
    "max_nesting_level",
    "calculate_complexity",
    "calculate_depth",
    "check_balance",
    "QueryValidator",
]
