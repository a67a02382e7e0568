"""Inline internal ``$ref`` pointers of an OpenAPI document.

Only same-document references (``#/components/schemas/Pet``) are resolved.
References to other files or URLs are left untouched; operations that still
contain one are skipped by the extractor.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple
from urllib.parse import unquote

from ..errors import OpenAPIValidationError
from ..logging import get_logger
from .models import OpenAPISpec

__all__ = ["dereference", "resolve_pointer"]

logger = get_logger("openapi.deref")


def resolve_pointer(document: OpenAPISpec, ref: str) -> Any:
    """Return the node a ``#/...`` JSON pointer designates.

    Raises:
        OpenAPIValidationError: when the pointer does not resolve.
    """
    if not ref.startswith("#"):
        raise OpenAPIValidationError(f"not an internal reference: {ref!r}")
    node: Any = document
    fragment = ref[1:]
    if not fragment:
        return node
    for raw in fragment.lstrip("/").split("/"):
        token = unquote(raw).replace("~1", "/").replace("~0", "~")
        if isinstance(node, dict) and token in node:
            node = node[token]
        elif isinstance(node, list) and token.isdigit() and int(token) < len(node):
            node = node[int(token)]
        else:
            raise OpenAPIValidationError(
                f"dangling reference {ref!r}",
                hint="Check that the referenced component exists",
                details={"ref": ref},
            )
    return node


class _Dereferencer:
    def __init__(self, document: OpenAPISpec):
        self.document = document
        self.cache: Dict[str, Any] = {}
        self.cycles = 0

    def walk(self, node: Any, stack: Tuple[str, ...]) -> Any:
        if isinstance(node, list):
            return [self.walk(v, stack) for v in node]
        if not isinstance(node, dict):
            return node

        ref = node.get("$ref")
        if not isinstance(ref, str):
            return {k: self.walk(v, stack) for k, v in node.items()}
        if not ref.startswith("#"):
            logger.debug("Leaving external reference unresolved", ref=ref)
            return {k: self.walk(v, stack) for k, v in node.items()}

        resolved = self._resolve(ref, stack)
        siblings = {k: self.walk(v, stack) for k, v in node.items() if k != "$ref"}
        if siblings and isinstance(resolved, dict):
            return {**resolved, **siblings}
        return resolved

    def _resolve(self, ref: str, stack: Tuple[str, ...]) -> Any:
        if ref in stack:
            # Break the cycle with an unconstrained schema.
            logger.debug("Breaking circular reference", ref=ref)
            self.cycles += 1
            return {}
        if ref in self.cache:
            return self.cache[ref]
        # Cached even when a cycle was cut inside; each ref is walked once.
        resolved = self.walk(resolve_pointer(self.document, ref), stack + (ref,))
        self.cache[ref] = resolved
        return resolved


def dereference(document: OpenAPISpec, *, root: Optional[OpenAPISpec] = None) -> OpenAPISpec:
    """Return a copy of ``document`` with every internal ``$ref`` inlined.

    Keys next to a ``$ref`` override the keys of its target. Circular
    references are replaced by ``{}`` at the point where they would recurse.
    Each reference target is resolved once and reused, so the first
    resolution decides where a cycle is cut. The input document is not
    modified; resolved nodes may be shared between several places in the
    result.

    Args:
        document: The parsed OpenAPI document.
        root: Document that pointers resolve against (defaults to ``document``).
    """
    resolver = _Dereferencer(root if root is not None else document)
    result = resolver.walk(document, ())
    if resolver.cycles:
        logger.info("Circular references replaced", count=resolver.cycles)
    return result
