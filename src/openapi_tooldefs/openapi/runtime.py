from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional, Set

from ..errors import SchemaShapeError, UnknownParameterLocation
from .constants import DEFAULT_MAX_NAME_LENGTH, PARAMETER_LOCATIONS, PREFERRED_CONTENT_TYPE
from .models import OpenAPISpec, Operation

_JSON_LIKE_RE = re.compile(r"^[^/]+/([^;]+\+)?json(\s*;.*)?$", re.IGNORECASE)


def sanitize_tool_name(s: str, max_length: int = DEFAULT_MAX_NAME_LENGTH) -> str:
    """Return a safe tool name: ``[A-Za-z0-9_-]``, no leading/trailing underscores, capped length."""
    s = re.sub(r"[^A-Za-z0-9_-]+", "_", s.strip())
    s = re.sub(r"_+", "_", s)
    s = s.strip("_")[:max_length].rstrip("_")
    return s or "op"


def synthesize_operation_name(method: str, path: str) -> str:
    """Build ``<method>_<path>`` with braces dropped and separators turned into ``_``.

    >>> synthesize_operation_name("GET", "/users/{id}/posts")
    'get_users_id_posts'
    """
    cleaned = path.replace("{", "").replace("}", "")
    cleaned = re.sub(r"[^A-Za-z0-9]+", "_", cleaned).strip("_")
    name = f"{method}_{cleaned}" if cleaned else method
    return name.lower()


def op_tool_name(
    path: str,
    method: str,
    opid: Optional[str],
    max_length: int = DEFAULT_MAX_NAME_LENGTH,
) -> str:
    """Derive a tool name from operationId if present, else from method + path."""
    if opid and str(opid).strip():
        return sanitize_tool_name(str(opid), max_length)
    return sanitize_tool_name(synthesize_operation_name(method, path), max_length)


def unique_tool_name(
    base: str,
    taken: Set[str],
    max_length: int = DEFAULT_MAX_NAME_LENGTH,
) -> str:
    """Return ``base`` or the first free ``base_2``, ``base_3``, ... not in ``taken``.

    The base is shortened when needed so the suffixed name still fits ``max_length``.
    """
    if base not in taken:
        return base
    n = 2
    while True:
        suffix = f"_{n}"
        candidate = base[: max_length - len(suffix)].rstrip("_") + suffix
        if candidate not in taken:
            return candidate
        n += 1


def has_request_body(op: Operation) -> bool:
    """True if the operation defines at least one requestBody content entry."""
    body = op.get("requestBody")
    return isinstance(body, dict) and bool(body.get("content"))


def is_json_content_type(content_type: str) -> bool:
    return bool(_JSON_LIKE_RE.match(content_type.strip()))


def select_content_type(content: Dict[str, Any]) -> Optional[str]:
    """Pick the request body content type.

    Preference order: ``application/json``; then the first other JSON-like type
    (``application/vnd.api+json``, ``text/json``, ...) in declaration order;
    then the first declared type. ``None`` for an empty mapping.
    """
    if not content:
        return None
    if PREFERRED_CONTENT_TYPE in content:
        return PREFERRED_CONTENT_TYPE
    for ct in content:
        if is_json_content_type(ct):
            return ct
    return next(iter(content))


def _check_parameter(src: Any) -> Dict[str, Any]:
    if not isinstance(src, dict):
        raise SchemaShapeError(f"parameter must be a mapping, got {type(src).__name__}")
    if "$ref" in src:
        raise SchemaShapeError(f"unresolved parameter reference {src['$ref']!r}", pointer=src["$ref"])
    name = src.get("name")
    if not isinstance(name, str) or not name:
        raise SchemaShapeError("parameter without a name")
    if src.get("in") not in PARAMETER_LOCATIONS:
        raise UnknownParameterLocation(name, src.get("in"))
    return src


def merge_parameters(path_item: Dict[str, Any] | None, op: Operation) -> List[Dict[str, Any]]:
    """Merge path-level and operation-level parameters with op-level overriding.

    Identity is ``(in, name)``. An override keeps the inherited parameter's
    position; new operation parameters are appended. Invalid parameter objects
    raise :class:`SchemaShapeError` or :class:`UnknownParameterLocation`.
    """
    merged: List[Dict[str, Any]] = []
    index: Dict[tuple[str, str], int] = {}
    for src in (path_item.get("parameters") if path_item else None) or []:
        src = _check_parameter(src)
        key = (src["in"], src["name"])
        if key in index:
            merged[index[key]] = src
        else:
            index[key] = len(merged)
            merged.append(src)
    for src in op.get("parameters") or []:
        src = _check_parameter(src)
        key = (src["in"], src["name"])
        if key in index:
            merged[index[key]] = src
        else:
            index[key] = len(merged)
            merged.append(src)
    return merged


def split_params(params: Iterable[Dict[str, Any]]):
    """Group parameters by location, preserving order within each group."""
    groups: Dict[str, List[Dict[str, Any]]] = {loc: [] for loc in PARAMETER_LOCATIONS}
    for p in params:
        loc = p.get("in")
        if loc not in groups:
            raise UnknownParameterLocation(str(p.get("name")), loc)
        groups[loc].append(p)
    return groups["path"], groups["query"], groups["header"], groups["cookie"]


def resolve_security(spec: OpenAPISpec, op: Operation) -> List[Dict[str, List[str]]]:
    """Operation security when declared and non-empty, else the document's global list, else ``[]``."""
    op_security = op.get("security")
    effective = op_security if op_security else spec.get("security")
    if not effective:
        return []
    if not isinstance(effective, list):
        raise SchemaShapeError("security must be a list of requirement objects")
    resolved: List[Dict[str, List[str]]] = []
    for requirement in effective:
        if not isinstance(requirement, dict):
            raise SchemaShapeError("security requirement must be a mapping")
        scopes: Dict[str, List[str]] = {}
        for scheme, values in requirement.items():
            values = [] if values is None else values
            if not isinstance(values, list) or not all(isinstance(s, str) for s in values):
                raise SchemaShapeError(f"scopes of security scheme {scheme!r} must be a list of strings")
            scopes[str(scheme)] = list(values)
        resolved.append(scopes)
    return resolved


def operation_tags(op: Operation) -> List[str]:
    """The operation's ``tags``; raises :class:`SchemaShapeError` unless a list of strings."""
    tags = op.get("tags")
    if tags is None:
        return []
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise SchemaShapeError("tags must be a list of strings")
    return list(tags)


def operation_description(op: Operation) -> str:
    """``description``, else ``summary``, else empty string."""
    for key in ("description", "summary"):
        value = op.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


__all__ = [
    "sanitize_tool_name",
    "synthesize_operation_name",
    "op_tool_name",
    "unique_tool_name",
    "has_request_body",
    "is_json_content_type",
    "select_content_type",
    "merge_parameters",
    "split_params",
    "resolve_security",
    "operation_tags",
    "operation_description",
]
