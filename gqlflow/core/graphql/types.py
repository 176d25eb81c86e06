"""GraphQL Type and Operation Definitions.

Types describe the shape of objects; operations (queries and mutations) are
the resolvable entry points of the schema.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

BUILTIN_SCALARS = ("Int", "Float", "String", "Boolean", "ID")

_NAMED_TYPE_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def named_type(type_string: str) -> str:
    """Strip list and non-null wrappers: ``[Post!]!`` -> ``Post``."""
    match = _NAMED_TYPE_RE.search(type_string or "")
    return match.group(0) if match else ""


def is_non_null(type_string: str) -> bool:
    return (type_string or "").rstrip().endswith("!")


def is_list_type(type_string: str) -> bool:
    return (type_string or "").lstrip().startswith("[")


class Type:
    """An object type: a name plus a map of field names to type strings.

    Subclasses either declare ``name``/``description``/``fields`` as class
    attributes or pass them to the constructor. Field values that a resolver
    result does not carry are obtained through ``resolve_field``.
    """

    name: str = ""
    description: Optional[str] = None
    fields: Dict[str, str] = {}
    interfaces: List[str] = []

    def __init__(
        self,
        name: Optional[str] = None,
        description: Optional[str] = None,
        fields: Optional[Dict[str, str]] = None,
        interfaces: Optional[List[str]] = None,
    ):
        if name is not None:
            self.name = name
        if description is not None:
            self.description = description
        self.fields = dict(fields if fields is not None else type(self).fields)
        self.interfaces = list(interfaces if interfaces is not None else type(self).interfaces)
        if not self.name:
            self.name = type(self).__name__

    def has_field(self, field_name: str) -> bool:
        return field_name in self.fields

    def field_type(self, field_name: str) -> Optional[str]:
        return self.fields.get(field_name)

    def resolve_field(
        self,
        field_name: str,
        args: Optional[Dict[str, Any]] = None,
        context: Any = None,
    ) -> Any:
        """Resolve a field the parent value does not carry. Default: None."""
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} fields={list(self.fields)}>"


class Resolvable(ABC):
    """Anything the dispatcher can invoke."""

    @abstractmethod
    def resolve(self, root: Any, args: Dict[str, Any], context: Any, info: Dict[str, Any]) -> Any:
        """Resolve the operation.

        Args:
            root: Root value (an empty dict for top-level operations)
            args: Inline arguments merged with request variables
            context: Caller supplied context, None by default
            info: Execution metadata (field name, operation kind, selections)

        Returns:
            The operation's value
        """
        pass


class Operation(Resolvable):
    """Common base for queries and mutations."""

    kind: str = ""
    name: str = ""
    description: str = ""
    return_type: str = ""
    args: Dict[str, str] = {}

    def __init__(
        self,
        name: Optional[str] = None,
        description: Optional[str] = None,
        return_type: Optional[str] = None,
        args: Optional[Dict[str, str]] = None,
    ):
        if name is not None:
            self.name = name
        if description is not None:
            self.description = description
        if return_type is not None:
            self.return_type = return_type
        self.args = dict(args if args is not None else type(self).args)
        if not self.name:
            # CreateUser -> createUser
            class_name = type(self).__name__
            self.name = class_name[:1].lower() + class_name[1:]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.kind} {self.name}: {self.return_type}>"


class Query(Operation):
    """Base class for query operations."""

    kind = "query"


class Mutation(Operation):
    """Base class for mutation operations."""

    kind = "mutation"


__all__ = [
    "BUILTIN_SCALARS",
    "named_type",
    "is_non_null",
    "is_list_type",
    "Type",
    "Resolvable",
    "Operation",
    "Query",
    "Mutation",
]
