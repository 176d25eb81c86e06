"""Lenient scanner for query documents.

This is not a GraphQL parser. It extracts just enough structure for dispatch:
each operation's kind and name, variable defaults, and the tree of selected
fields with their literal arguments. Tokens it does not understand are
skipped rather than rejected; delimiter balance is checked earlier by the
validator. The only rejection is nesting deeper than ``MAX_NESTING``.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from gqlflow.core.errors import QuerySyntaxError

_TOKEN_RE = re.compile(
    r"""
    (?P<skip>[\s,]+|\#[^\n]*)
  | (?P<block>\"\"\"(?:\\\"\"\"|[^"]|"(?!""))*\"\"\")
  | (?P<string>"(?:\\.|[^"\\])*")
  | (?P<number>-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)
  | (?P<name>[_A-Za-z][_0-9A-Za-z]*)
  | (?P<spread>\.\.\.)
  | (?P<punct>[{}()\[\]:=@!$|&])
  | (?P<other>.)
    """,
    re.VERBOSE | re.DOTALL,
)

OPERATION_KEYWORDS = ("query", "mutation", "subscription")

# Selection sets and list/object literals may nest at most this deep
MAX_NESTING = 256


@dataclass(frozen=True)
class Token:
    kind: str
    value: str


@dataclass(frozen=True)
class VariableRef:
    """A ``$name`` reference inside an argument value."""

    name: str


@dataclass
class FieldSelection:
    """A selected field with its literal arguments and sub-selections."""

    name: str
    alias: Optional[str] = None
    arguments: Dict[str, Any] = field(default_factory=dict)
    selections: List["FieldSelection"] = field(default_factory=list)

    @property
    def response_key(self) -> str:
        return self.alias or self.name


@dataclass
class OperationDefinition:
    kind: str = "query"
    name: Optional[str] = None
    variable_defaults: Dict[str, Any] = field(default_factory=dict)
    selections: List[FieldSelection] = field(default_factory=list)

    @property
    def top_level_field(self) -> Optional[FieldSelection]:
        return self.selections[0] if self.selections else None


def tokenize(text: str) -> List[Token]:
    tokens = []
    for match in _TOKEN_RE.finditer(text or ""):
        kind = match.lastgroup
        if kind == "skip":
            continue
        tokens.append(Token(kind, match.group(kind)))
    return tokens


class _Scanner:
    def __init__(self, text: str):
        self.tokens = tokenize(text)
        self.pos = 0
        self.nesting = 0

    # -- cursor helpers -------------------------------------------------

    def peek(self, offset: int = 0) -> Optional[Token]:
        index = self.pos + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def at(self, value: str) -> bool:
        token = self.peek()
        return token is not None and token.kind in ("punct", "spread") and token.value == value

    def advance(self) -> Optional[Token]:
        token = self.peek()
        if token is not None:
            self.pos += 1
        return token

    def enter(self) -> None:
        self.nesting += 1
        if self.nesting > MAX_NESTING:
            raise QuerySyntaxError(
                f"Syntax error: Query nesting exceeds {MAX_NESTING} levels",
                {"maxNesting": MAX_NESTING},
            )

    def leave(self) -> None:
        self.nesting -= 1

    def skip_balanced(self, opener: str, closer: str) -> None:
        """Skip from an opening delimiter to its matching closer."""
        depth = 0
        while self.peek() is not None:
            token = self.advance()
            if token.kind == "punct" and token.value == opener:
                depth += 1
            elif token.kind == "punct" and token.value == closer:
                depth -= 1
                if depth <= 0:
                    return

    # -- document -------------------------------------------------------

    def document(self) -> List[OperationDefinition]:
        operations: List[OperationDefinition] = []
        while self.peek() is not None:
            token = self.peek()
            if self.at("{"):
                operations.append(OperationDefinition(selections=self.selection_set()))
            elif token.kind == "name" and token.value in OPERATION_KEYWORDS:
                operations.append(self.operation())
            elif token.kind == "name" and token.value == "fragment":
                # Fragments are not executed; skip the whole definition
                while self.peek() is not None and not self.at("{"):
                    self.advance()
                if self.at("{"):
                    self.skip_balanced("{", "}")
            else:
                self.advance()
        return operations

    def operation(self) -> OperationDefinition:
        operation = OperationDefinition(kind=self.advance().value)
        token = self.peek()
        if token is not None and token.kind == "name":
            operation.name = self.advance().value
        if self.at("("):
            operation.variable_defaults = self.variable_definitions()
        self.directives()
        if self.at("{"):
            operation.selections = self.selection_set()
        return operation

    def variable_definitions(self) -> Dict[str, Any]:
        defaults: Dict[str, Any] = {}
        self.advance()  # (
        while self.peek() is not None and not self.at(")"):
            if self.at("$"):
                self.advance()
                name_token = self.advance()
                # Skip the type reference up to a default or the next variable
                while self.peek() is not None and not (self.at("=") or self.at("$") or self.at(")")):
                    self.advance()
                if self.at("=") and name_token is not None:
                    self.advance()
                    defaults[name_token.value] = self.value()
            else:
                self.advance()
        if self.at(")"):
            self.advance()
        return defaults

    def directives(self) -> None:
        while self.at("@"):
            self.advance()
            self.advance()  # directive name
            if self.at("("):
                self.skip_balanced("(", ")")

    # -- selections -----------------------------------------------------

    def selection_set(self) -> List[FieldSelection]:
        selections: List[FieldSelection] = []
        self.advance()  # {
        self.enter()
        while self.peek() is not None and not self.at("}"):
            token = self.peek()
            if self.at("..."):
                # Spreads and inline fragments are not executed
                self.advance()
                next_token = self.peek()
                if next_token is not None and next_token.kind == "name":
                    if next_token.value == "on":
                        self.advance()
                    self.advance()
                self.directives()
                if self.at("{"):
                    self.skip_balanced("{", "}")
            elif token.kind == "name":
                selections.append(self.field())
            elif self.at("{"):
                self.skip_balanced("{", "}")
            else:
                self.advance()
        if self.at("}"):
            self.advance()
        self.leave()
        return selections

    def field(self) -> FieldSelection:
        name = self.advance().value
        alias = None
        next_token = self.peek(1)
        if self.at(":") and next_token is not None and next_token.kind == "name":
            self.advance()
            alias, name = name, self.advance().value
        selection = FieldSelection(name=name, alias=alias)
        if self.at("("):
            selection.arguments = self.arguments()
        self.directives()
        if self.at("{"):
            selection.selections = self.selection_set()
        return selection

    def arguments(self) -> Dict[str, Any]:
        arguments: Dict[str, Any] = {}
        self.advance()  # (
        while self.peek() is not None and not self.at(")"):
            token = self.peek()
            if token.kind == "name" and self.peek(1) is not None and self.peek(1).value == ":":
                self.advance()
                self.advance()
                arguments[token.value] = self.value()
            elif self.at("{"):
                # Unbalanced parentheses reach here; stop at the selection set
                break
            else:
                self.advance()
        if self.at(")"):
            self.advance()
        return arguments

    # -- values ---------------------------------------------------------

    def value(self) -> Any:
        token = self.peek()
        if token is None:
            return None
        if self.at("$"):
            self.advance()
            name_token = self.advance()
            return VariableRef(name_token.value if name_token else "")
        if self.at("["):
            self.advance()
            self.enter()
            items = []
            while self.peek() is not None and not self.at("]"):
                if self.at(")") or self.at("}"):
                    break
                items.append(self.value())
            if self.at("]"):
                self.advance()
            self.leave()
            return items
        if self.at("{"):
            self.advance()
            self.enter()
            obj: Dict[str, Any] = {}
            while self.peek() is not None and not self.at("}"):
                key_token = self.advance()
                if key_token.kind == "name" and self.at(":"):
                    self.advance()
                    obj[key_token.value] = self.value()
            if self.at("}"):
                self.advance()
            self.leave()
            return obj

        self.advance()
        if token.kind == "number":
            number = token.value
            return float(number) if any(c in number for c in ".eE") else int(number)
        if token.kind == "string":
            try:
                return json.loads(token.value)
            except ValueError:
                return token.value[1:-1]
        if token.kind == "block":
            return token.value[3:-3]
        if token.kind == "name":
            if token.value == "true":
                return True
            if token.value == "false":
                return False
            if token.value == "null":
                return None
            # Enum values are passed through as their names
            return token.value
        return token.value


def parse_document(text: str) -> List[OperationDefinition]:
    """Scan a query document into its operation definitions."""
    return _Scanner(text).document()


def select_operation(
    operations: List[OperationDefinition],
    operation_name: Optional[str] = None,
) -> Optional[OperationDefinition]:
    """Pick the operation named ``operation_name``, else the first one."""
    if operation_name:
        for operation in operations:
            if operation.name == operation_name:
                return operation
        return None
    return operations[0] if operations else None


def substitute_variables(value: Any, variables: Dict[str, Any]) -> Any:
    """Replace ``VariableRef`` placeholders with request variable values."""
    if isinstance(value, VariableRef):
        return variables.get(value.name)
    if isinstance(value, list):
        return [substitute_variables(item, variables) for item in value]
    if isinstance(value, dict):
        return {key: substitute_variables(item, variables) for key, item in value.items()}
    return value


def build_arguments(
    selection: FieldSelection,
    variables: Dict[str, Any],
    variable_defaults: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Resolver arguments: inline literals, overridden by request variables."""
    scope = {**(variable_defaults or {}), **variables}
    args = {key: substitute_variables(value, scope) for key, value in selection.arguments.items()}
    args.update(variables)
    return args


__all__ = [
    "MAX_NESTING",
    "Token",
    "VariableRef",
    "FieldSelection",
    "OperationDefinition",
    "tokenize",
    "parse_document",
    "select_operation",
    "substitute_variables",
    "build_arguments",
]
