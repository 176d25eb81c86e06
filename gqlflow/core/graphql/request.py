"""Request parsing.

The HTTP layer hands over ``{method, jsonBody, queryParams}``; this module
turns it into a ``GraphQLRequest``. Parsing never fails: a missing query is
left as None for the validator to reject.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class GraphQLRequest(BaseModel):
    """Per-request input to the pipeline."""

    query: Optional[str] = None
    variables: Dict[str, Any] = Field(default_factory=dict)
    operation_name: Optional[str] = Field(default=None, alias="operationName")

    model_config = {"populate_by_name": True}


def _get(request: Any, *names: str) -> Any:
    """Read the first present key/attribute from a mapping or object."""
    for name in names:
        if isinstance(request, Mapping):
            if name in request:
                return request[name]
        elif hasattr(request, name):
            return getattr(request, name)
    return None


def _coerce_variables(raw: Any) -> Dict[str, Any]:
    if raw is None or raw == "":
        return {}
    if isinstance(raw, (str, bytes)):
        # GET requests carry variables as a JSON-encoded string
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Discarding undecodable variables payload")
            return {}
    if not isinstance(raw, Mapping):
        logger.warning("Discarding non-object variables payload: %s", type(raw).__name__)
        return {}
    return dict(raw)


def _coerce_text(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return raw if isinstance(raw, str) else str(raw)


class RequestParser:
    """Extracts ``query``, ``variables`` and ``operationName`` from a request."""

    def parse(self, request: Any) -> GraphQLRequest:
        method = str(_get(request, "method") or "").upper()

        if method == "POST":
            payload = _get(request, "jsonBody", "json_body", "json")
            if callable(payload):
                payload = payload()
            if isinstance(payload, (str, bytes)):
                try:
                    payload = json.loads(payload)
                except ValueError:
                    logger.warning("POST body is not valid JSON")
                    payload = {}
        elif method == "GET":
            payload = _get(request, "queryParams", "query_params", "params")
        else:
            logger.debug("Unsupported request method %r", method)
            payload = None

        if not isinstance(payload, Mapping):
            payload = {}

        return GraphQLRequest(
            query=_coerce_text(payload.get("query")),
            variables=_coerce_variables(payload.get("variables")),
            operation_name=_coerce_text(payload.get("operationName")) or None,
        )


__all__ = ["GraphQLRequest", "RequestParser"]
