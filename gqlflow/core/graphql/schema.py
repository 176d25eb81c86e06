"""Schema registry.

Holds named types, queries and mutations. Registration is last-write-wins and
cross references are not checked: a field may name a type that was never
registered.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Tuple

from gqlflow.core.graphql.types import Mutation, Operation, Query, Type

logger = logging.getLogger(__name__)


class SchemaRegistry:
    """Registry of types and operations.

    Writes and snapshot reads hold a re-entrant lock so a schema can be
    reloaded while requests are being served.
    """

    def __init__(self, name: str = "default"):
        self.name = name
        self._types: Dict[str, Type] = {}
        self._queries: Dict[str, Query] = {}
        self._mutations: Dict[str, Mutation] = {}
        self._history: List[Mapping[str, Any]] = []
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def load_schema(self, fragment: Mapping[str, Any]) -> None:
        """Register every type, query and mutation in a schema fragment."""
        with self._lock:
            for name, type_obj in (fragment.get("types") or {}).items():
                self.register_type(name, type_obj)
            for name, query in (fragment.get("queries") or {}).items():
                self.register_query(name, query)
            for name, mutation in (fragment.get("mutations") or {}).items():
                self.register_mutation(name, mutation)
            self._history.append(fragment)
        logger.info(
            "Schema fragment loaded",
            extra={
                "types": len(fragment.get("types") or {}),
                "queries": len(fragment.get("queries") or {}),
                "mutations": len(fragment.get("mutations") or {}),
            },
        )

    def register_type(self, name: str, type_obj: Type) -> None:
        with self._lock:
            if name in self._types:
                logger.debug("Overwriting type %s", name)
            self._types[name] = type_obj

    def register_query(self, name: str, query: Query) -> None:
        with self._lock:
            if name in self._queries:
                logger.debug("Overwriting query %s", name)
            self._queries[name] = query

    def register_mutation(self, name: str, mutation: Mutation) -> None:
        with self._lock:
            if name in self._mutations:
                logger.debug("Overwriting mutation %s", name)
            self._mutations[name] = mutation

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_type(self, name: str) -> Optional[Type]:
        return self._types.get(name)

    def get_query(self, name: str) -> Optional[Query]:
        return self._queries.get(name)

    def get_mutation(self, name: str) -> Optional[Mutation]:
        return self._mutations.get(name)

    def find_operation(self, name: str, prefer: str = "query") -> Optional[Tuple[str, Operation]]:
        """Look up an operation in both maps, trying ``prefer`` first.

        Returns:
            ``(kind, operation)`` or None
        """
        with self._lock:
            order = [("query", self._queries), ("mutation", self._mutations)]
            if prefer == "mutation":
                order.reverse()
            for kind, operations in order:
                operation = operations.get(name)
                if operation is not None:
                    return kind, operation
        return None

    def type_names(self) -> List[str]:
        with self._lock:
            return list(self._types)

    def get_schema(self) -> Dict[str, Dict[str, Any]]:
        """Snapshot of the registry for introspection and debugging."""
        with self._lock:
            return {
                "types": dict(self._types),
                "queries": dict(self._queries),
                "mutations": dict(self._mutations),
            }

    @property
    def history(self) -> List[Mapping[str, Any]]:
        """Fragments passed to ``load_schema``, oldest first."""
        with self._lock:
            return list(self._history)

    # ------------------------------------------------------------------
    # SDL export
    # ------------------------------------------------------------------

    def to_sdl(self) -> str:
        """Generate GraphQL Schema Definition Language."""
        snapshot = self.get_schema()
        lines: List[str] = []

        for type_obj in snapshot["types"].values():
            lines.append(self._type_to_sdl(type_obj))
            lines.append("")

        for title, operations in (("Query", snapshot["queries"]), ("Mutation", snapshot["mutations"])):
            if not operations:
                continue
            lines.append(f"type {title} {{")
            for operation in operations.values():
                lines.append(f"  {self._operation_to_sdl(operation)}")
            lines.append("}")
            lines.append("")

        return "\n".join(lines).rstrip() + "\n"

    def _type_to_sdl(self, type_obj: Type) -> str:
        parts = []

        if type_obj.description:
            parts.append(f'"""{type_obj.description}"""')

        interfaces = f" implements {' & '.join(type_obj.interfaces)}" if type_obj.interfaces else ""
        parts.append(f"type {type_obj.name}{interfaces} {{")

        for field_name, field_type in type_obj.fields.items():
            parts.append(f"  {field_name}: {field_type}")

        parts.append("}")
        return "\n".join(parts)

    def _operation_to_sdl(self, operation: Operation) -> str:
        args = ""
        if operation.args:
            arg_strs = [f"{name}: {type_name}" for name, type_name in operation.args.items()]
            args = f"({', '.join(arg_strs)})"

        return f"{operation.name}{args}: {operation.return_type or 'String'}"


__all__ = ["SchemaRegistry"]
