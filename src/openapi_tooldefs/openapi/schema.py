"""OpenAPI schema → JSON schema helpers.

OpenAPI 3.0 schema objects are close to JSON schema but not identical:
``nullable`` has no JSON-schema meaning, ``example`` is singular, and
vendor extensions (``x-*``) and presentation keys (``xml``,
``externalDocs``, ``discriminator``) mean nothing to a tool runtime.
:func:`normalize_schema` rewrites those; :func:`merge_allof_schemas`
collapses object compositions so request bodies can be flattened.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Tuple

from ..errors import SchemaShapeError

__all__ = [
    "normalize_schema",
    "merge_allof_schemas",
    "is_object_schema",
    "flatten_object_schema",
]

_DROPPED_KEYS = frozenset({"xml", "externalDocs", "discriminator", "nullable", "example"})
_SCHEMA_MAP_KEYS = ("properties", "patternProperties", "definitions", "$defs")
_SCHEMA_LIST_KEYS = ("allOf", "anyOf", "oneOf", "prefixItems")
_SCHEMA_KEYS = ("not", "contains", "propertyNames", "if", "then", "else")


def _normalize(schema: Any, pointer: str) -> Any:
    if isinstance(schema, bool):
        return schema
    if not isinstance(schema, dict):
        raise SchemaShapeError(
            f"schema at {pointer} must be a mapping, got {type(schema).__name__}", pointer=pointer
        )
    if "$ref" in schema:
        raise SchemaShapeError(f"unresolved reference {schema['$ref']!r} at {pointer}", pointer=pointer)

    out: Dict[str, Any] = {}
    for key, value in schema.items():
        if (isinstance(key, str) and key.startswith("x-")) or key in _DROPPED_KEYS:
            continue
        if key in _SCHEMA_MAP_KEYS and isinstance(value, dict):
            out[key] = {k: _normalize(v, f"{pointer}/{key}/{k}") for k, v in value.items()}
        elif key in _SCHEMA_LIST_KEYS and isinstance(value, list):
            out[key] = [_normalize(v, f"{pointer}/{key}/{i}") for i, v in enumerate(value)]
        elif key in _SCHEMA_KEYS:
            out[key] = _normalize(value, f"{pointer}/{key}")
        elif key == "items":
            if isinstance(value, list):
                out[key] = [_normalize(v, f"{pointer}/items/{i}") for i, v in enumerate(value)]
            else:
                out[key] = _normalize(value, f"{pointer}/items")
        elif key == "additionalProperties" and not isinstance(value, bool):
            out[key] = _normalize(value, f"{pointer}/additionalProperties")
        elif key == "required":
            # Swagger-style ``required: true`` on a property is not JSON schema.
            if isinstance(value, list):
                out[key] = [str(v) for v in value]
        else:
            out[key] = copy.deepcopy(value)

    if "example" in schema and "examples" not in out:
        out["examples"] = [copy.deepcopy(schema["example"])]

    if schema.get("nullable") is True:
        t = out.get("type")
        if isinstance(t, str):
            out["type"] = [t, "null"]
        elif isinstance(t, list) and "null" not in t:
            out["type"] = [*t, "null"]
    return out


def normalize_schema(schema: Any, pointer: str = "#") -> Any:
    """Return a JSON-schema copy of an OpenAPI schema object.

    The input is never modified. Raises :class:`SchemaShapeError` for
    non-mapping fragments and leftover ``$ref`` pointers.
    """
    return _normalize(schema, pointer)


def is_object_schema(schema: Any) -> bool:
    """True for a plain object schema that can be flattened into named properties.

    Plain means ``type: object`` (or untyped with ``properties``), or an
    ``allOf`` whose parts are all plain objects. Schemas using
    ``anyOf``/``oneOf`` are ambiguous and never count as plain.
    """
    if not isinstance(schema, dict):
        return False
    if "anyOf" in schema or "oneOf" in schema:
        return False
    t = schema.get("type")
    if "allOf" in schema:
        parts = schema["allOf"]
        if t not in (None, "object") or not isinstance(parts, list) or not parts:
            return False
        return all(is_object_schema(p) for p in parts)
    if t == "object":
        return True
    return t is None and isinstance(schema.get("properties"), dict)


def merge_allof_schemas(parts: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge object schemas into one.

    ``properties`` are unioned (a later part overrides an earlier one),
    ``required`` is unioned in first-seen order, and the first
    ``description``/``title`` wins. Nested ``allOf`` parts are merged first.
    """
    merged: Dict[str, Any] = {"type": "object", "properties": {}}
    required: List[str] = []
    for part in parts:
        if not isinstance(part, dict):
            continue
        if "allOf" in part:
            inner = merge_allof_schemas(part["allOf"])
            siblings = {k: v for k, v in part.items() if k != "allOf"}
            part = merge_allof_schemas([inner, siblings])
        merged["properties"].update(copy.deepcopy(part.get("properties") or {}))
        for name in part.get("required") or []:
            if name not in required:
                required.append(name)
        for key in ("title", "description"):
            if key in part and key not in merged:
                merged[key] = part[key]
        if part.get("additionalProperties") is False:
            merged["additionalProperties"] = False
    if required:
        merged["required"] = required
    return merged


def flatten_object_schema(schema: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    """Return ``(properties, required)`` of a plain object schema."""
    if "allOf" in schema:
        siblings = {k: v for k, v in schema.items() if k != "allOf"}
        schema = merge_allof_schemas([*schema["allOf"], siblings])
    props = copy.deepcopy(schema.get("properties") or {})
    required = [r for r in (schema.get("required") or []) if r in props]
    return props, required
