"""Resolution dispatcher.

The innermost step of the pipeline. Matching is pattern based: the first
field of the selected operation names the query or mutation to run. Nested
selections are only used to check field names against registered types and
to project the resolver's result.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from gqlflow.core.errors import (
    FieldNotFound,
    GraphQLError,
    OperationNotSupported,
    ResolverError,
    error_envelope,
)
from gqlflow.core.graphql.middleware import Result
from gqlflow.core.graphql.schema import SchemaRegistry
from gqlflow.core.graphql.selection import (
    FieldSelection,
    build_arguments,
    parse_document,
    select_operation,
    substitute_variables,
)
from gqlflow.core.graphql.types import Operation, Type, named_type
from gqlflow.core.graphql.validation import QueryValidator
from gqlflow.core.logging.structured import operation_var

logger = logging.getLogger(__name__)

INTROSPECTION_MARKER = "__schema"

_MISSING = object()


class IntrospectionProvider:
    """Answers ``__schema`` queries with the registered type names."""

    SYNTHETIC_TYPES = ("Query", "Mutation")

    def __init__(self, registry: SchemaRegistry):
        self.registry = registry

    def describe(self) -> Dict[str, Any]:
        names = self.registry.type_names()
        for synthetic in self.SYNTHETIC_TYPES:
            if synthetic not in names:
                names.append(synthetic)
        return {"__schema": {"types": [{"name": name} for name in names]}}


class ResolutionDispatcher:
    """Maps a query to a registered operation and invokes its resolver."""

    def __init__(
        self,
        registry: SchemaRegistry,
        validator: Optional[QueryValidator] = None,
        strict_arguments: bool = False,
        debug: bool = False,
    ):
        self.registry = registry
        self.validator = validator or QueryValidator()
        self.introspection = IntrospectionProvider(registry)
        self.strict_arguments = strict_arguments
        self.debug = debug

    def resolve(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        operation_name: Optional[str] = None,
        context: Any = None,
    ) -> Result:
        """Execute ``query`` and return a ``{data}`` or ``{data: None, errors}`` envelope."""
        if INTROSPECTION_MARKER in query:
            return {"data": self.introspection.describe()}

        try:
            return self._dispatch(query, variables or {}, operation_name, context)
        except GraphQLError as exc:
            return error_envelope(exc, debug=self.debug, with_data=True)

    # ------------------------------------------------------------------

    def _dispatch(
        self,
        query: str,
        variables: Dict[str, Any],
        operation_name: Optional[str],
        context: Any,
    ) -> Result:
        definition = select_operation(parse_document(query), operation_name)
        if definition is None and operation_name:
            raise OperationNotSupported(f'Unknown operation named "{operation_name}"')
        if definition is None or definition.top_level_field is None:
            raise OperationNotSupported()

        selection = definition.top_level_field
        prefer = "mutation" if definition.kind == "mutation" else "query"
        found = self.registry.find_operation(selection.name, prefer=prefer)
        if found is None:
            logger.info("No operation registered for %s", selection.name)
            raise OperationNotSupported()
        kind, operation = found
        operation_var.set(operation.name)

        self._check_fields(selection.selections, operation.return_type)

        args = build_arguments(selection, variables, definition.variable_defaults)
        if self.strict_arguments:
            self.validator.validate_arguments(operation, args)

        info = {
            "field_name": selection.name,
            "operation": kind,
            "operation_name": definition.name or operation_name,
            "return_type": operation.return_type,
            "selections": selection.selections,
            "variables": variables,
        }
        value = self._call_resolver(operation, args, context, info)

        scope = {**definition.variable_defaults, **variables}
        value = self._project(value, selection.selections, operation.return_type, context, scope)
        return {"data": {selection.response_key: value}}

    def _call_resolver(self, operation: Operation, args: Dict[str, Any], context: Any, info: Dict[str, Any]) -> Any:
        try:
            return operation.resolve({}, args, context, info)
        except GraphQLError:
            raise
        except Exception as exc:
            logger.exception("Resolver for %s raised", operation.name)
            error = ResolverError(operation.name, exc)
            error.__cause__ = exc
            raise error

    def _call_field_resolver(self, type_obj: Type, field_name: str, args: Dict[str, Any], context: Any) -> Any:
        try:
            return type_obj.resolve_field(field_name, args, context)
        except GraphQLError:
            raise
        except Exception as exc:
            path = f"{type_obj.name}.{field_name}"
            logger.exception("Field resolver for %s raised", path)
            error = ResolverError(path, exc)
            error.__cause__ = exc
            raise error

    def _check_fields(self, selections: List[FieldSelection], type_string: str) -> None:
        """Reject selections that a registered type does not declare."""
        type_obj = self.registry.get_type(named_type(type_string))
        if type_obj is None or not selections:
            return
        for selection in selections:
            if selection.name.startswith("__"):
                continue
            if not type_obj.has_field(selection.name):
                raise FieldNotFound(selection.name, type_obj.name)
            if selection.selections:
                self._check_fields(selection.selections, type_obj.field_type(selection.name))

    def _project(
        self,
        value: Any,
        selections: List[FieldSelection],
        type_string: str,
        context: Any,
        scope: Dict[str, Any],
    ) -> Any:
        """Reduce a resolved value to the selected fields."""
        if value is None or not selections:
            return value
        if isinstance(value, (list, tuple)):
            return [self._project(item, selections, type_string, context, scope) for item in value]
        if isinstance(value, (str, bytes, int, float, bool)):
            return value

        type_name = named_type(type_string)
        type_obj = self.registry.get_type(type_name)
        projected: Dict[str, Any] = {}
        for selection in selections:
            if selection.name == "__typename":
                projected[selection.response_key] = type_obj.name if type_obj else type_name
                continue

            field_value = _read_field(value, selection.name)
            if field_value is _MISSING:
                field_value = None
                if type_obj is not None:
                    field_args = substitute_variables(selection.arguments, scope)
                    field_value = self._call_field_resolver(type_obj, selection.name, field_args, context)

            field_type = type_obj.field_type(selection.name) if type_obj else None
            projected[selection.response_key] = self._project(
                field_value, selection.selections, field_type or "", context, scope
            )
        return projected


def _read_field(parent: Any, name: str) -> Any:
    if isinstance(parent, Mapping):
        return parent.get(name, _MISSING)
    return getattr(parent, name, _MISSING)


__all__ = ["INTROSPECTION_MARKER", "IntrospectionProvider", "ResolutionDispatcher"]
