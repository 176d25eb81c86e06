"""Tests for text-based query validation."""

from __future__ import annotations

import pytest

from gqlflow.core.errors import (
    ComplexityExceeded,
    DepthExceeded,
    ErrorCode,
    InvalidArgument,
    QuerySyntaxError,
)
from gqlflow.core.graphql.validation import (
    QueryValidator,
    calculate_complexity,
    calculate_depth,
    check_balance,
)

USER_QUERY = "{ user(id: 1) { id name email } }"

NESTED_QUERY = """{
    users {
        id
        name
        posts {
            id
            title
            author {
                id
                name
                posts {
                    id
                    title
                }
            }
        }
    }
}"""


class TestScoring:
    """Tests for complexity and depth scores."""

    def test_complexity_formula(self):
        """Nesting level 2 doubled, plus ':' and id/name/email tokens."""
        assert calculate_complexity(USER_QUERY) == 8

    def test_complexity_of_trivial_queries(self):
        assert calculate_complexity("{ a }") == 2
        assert calculate_complexity("") == 0

    def test_complexity_counts_title_and_content(self):
        assert calculate_complexity("{ post { title content } }") == 4 + 2

    def test_depth(self):
        assert calculate_depth(USER_QUERY) == 2
        assert calculate_depth(NESTED_QUERY) == 5
        assert calculate_depth("no braces") == 0

    def test_scores_are_pure(self):
        """Same input, same scores."""
        assert calculate_complexity(NESTED_QUERY) == calculate_complexity(NESTED_QUERY)
        assert calculate_depth(NESTED_QUERY) == calculate_depth(NESTED_QUERY)


class TestBalanceCheck:
    """Tests for brace/parenthesis balance."""

    @pytest.mark.parametrize(
        "query",
        [
            "{ user { id }",
            "{ user(id: 1 { id } }",
            "{ user(id: 1)) { id } }",
            "}{ user { id } }}",
        ],
    )
    def test_unbalanced_queries_fail(self, query):
        with pytest.raises(QuerySyntaxError) as exc_info:
            check_balance(query)

        assert exc_info.value.code == ErrorCode.SYNTAX_ERROR

    def test_message_reports_counts(self):
        with pytest.raises(QuerySyntaxError) as exc_info:
            check_balance("{ user { id }")

        assert "2" in exc_info.value.message
        assert "1" in exc_info.value.message
        assert exc_info.value.details == {"openBraces": 2, "closeBraces": 1}

    def test_closing_paren_without_opening_is_not_checked(self):
        """Parentheses are only counted when '(' appears."""
        check_balance("{ user { id ) } }")

    @pytest.mark.parametrize("query", [None, "", "   "])
    def test_empty_query_fails(self, query):
        with pytest.raises(QuerySyntaxError):
            check_balance(query)


class TestQueryValidator:
    """Tests for QueryValidator.validate."""

    def test_no_limits_accepts_deep_queries(self):
        QueryValidator().validate(NESTED_QUERY)

    def test_complexity_limit(self):
        validator = QueryValidator(max_complexity=5)

        with pytest.raises(ComplexityExceeded) as exc_info:
            validator.validate(NESTED_QUERY)

        error = exc_info.value
        assert error.complexity == calculate_complexity(NESTED_QUERY)
        assert error.max_complexity == 5
        assert str(error.complexity) in error.message

    def test_complexity_limit_is_inclusive(self):
        QueryValidator(max_complexity=8).validate(USER_QUERY)

        with pytest.raises(ComplexityExceeded):
            QueryValidator(max_complexity=7).validate(USER_QUERY)

    def test_depth_limit(self):
        validator = QueryValidator(max_depth=3)

        with pytest.raises(DepthExceeded) as exc_info:
            validator.validate(NESTED_QUERY)

        assert exc_info.value.depth == 5
        assert exc_info.value.max_depth == 3

    def test_syntax_checked_before_limits(self):
        validator = QueryValidator(max_complexity=1, max_depth=1)

        with pytest.raises(QuerySyntaxError):
            validator.validate("{ user { id }")

    def test_complexity_checked_before_depth(self):
        validator = QueryValidator(max_complexity=1, max_depth=1)

        with pytest.raises(ComplexityExceeded):
            validator.validate(NESTED_QUERY)


class TestArgumentValidation:
    """Tests for declared argument checks."""

    def test_required_argument_missing(self, sample_schema):
        user_query = sample_schema["queries"]["user"]

        with pytest.raises(InvalidArgument, match="Required argument 'id'"):
            QueryValidator().validate_arguments(user_query, {})

    def test_scalar_type_mismatch(self, sample_schema):
        user_query = sample_schema["queries"]["user"]

        with pytest.raises(InvalidArgument, match="Expected Int"):
            QueryValidator().validate_arguments(user_query, {"id": "one"})

    def test_booleans_are_not_ints(self, sample_schema):
        with pytest.raises(InvalidArgument):
            QueryValidator().validate_arguments(sample_schema["queries"]["user"], {"id": True})

    def test_optional_and_custom_types_pass(self, sample_schema):
        validator = QueryValidator()

        validator.validate_arguments(sample_schema["queries"]["users"], {})
        validator.validate_arguments(sample_schema["mutations"]["createUser"], {"input": {"name": "x"}})

    def test_list_arguments(self):
        from gqlflow.core.graphql.types import Query

        class ByIds(Query):
            args = {"ids": "[Int!]!"}

            def resolve(self, root, args, context, info):
                return []

        validator = QueryValidator()
        validator.validate_arguments(ByIds(), {"ids": [1, 2]})

        with pytest.raises(InvalidArgument, match="Expected list"):
            validator.validate_arguments(ByIds(), {"ids": 1})
        with pytest.raises(InvalidArgument, match="Expected Int"):
            validator.validate_arguments(ByIds(), {"ids": [1, "2"]})
