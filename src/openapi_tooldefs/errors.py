"""Error hierarchy for openapi-tooldefs.

Every error raised by the package derives from :class:`ToolDefsError`, so
callers can catch one type at the boundary. Errors carry an optional
``hint`` (an actionable next step) and ``docs_url`` which are appended to
``str(error)`` for CLI output.

Hierarchy::

    ToolDefsError
    ├── ConfigurationError
    ├── OpenAPIError
    │   ├── OpenAPIParseError
    │   ├── OpenAPINetworkError
    │   └── OpenAPIValidationError
    │       └── MalformedSpecError
    └── ExtractionError
        ├── OperationSkipped
        ├── UnknownParameterLocation
        └── SchemaShapeError
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

__all__ = [
    "ToolDefsError",
    "ConfigurationError",
    "OpenAPIError",
    "OpenAPIParseError",
    "OpenAPINetworkError",
    "OpenAPIValidationError",
    "MalformedSpecError",
    "ExtractionError",
    "OperationSkipped",
    "SchemaShapeError",
    "UnknownParameterLocation",
    "log_exception",
]


class ToolDefsError(Exception):
    """Base exception for all openapi-tooldefs errors."""

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Dict[str, Any]] = None,
        hint: Optional[str] = None,
        docs_url: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.hint = hint
        self.docs_url = docs_url

    def __str__(self) -> str:
        parts = [self.message]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.docs_url:
            parts.append(f"Docs: {self.docs_url}")
        return "\n".join(parts)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class ConfigurationError(ToolDefsError):
    """Invalid configuration value (environment or arguments)."""

    def __init__(self, message: str, *, key: Optional[str] = None, **kwargs: Any):
        details = kwargs.pop("details", None) or {}
        if key:
            details["key"] = key
            kwargs.setdefault("hint", f"Check the value of {key}")
        super().__init__(message, details=details, **kwargs)
        self.key = key


# =============================================================================
# OpenAPI document errors
# =============================================================================

OPENAPI_DOCS_URL = "https://spec.openapis.org/oas/v3.1.0"


class OpenAPIError(ToolDefsError):
    """Base error for loading or validating an OpenAPI document."""


class OpenAPIParseError(OpenAPIError):
    """The document text could not be parsed."""

    def __init__(self, message: str, *, errors: Optional[List[str]] = None, **kwargs: Any):
        kwargs.setdefault("hint", "Make sure the document is valid JSON/YAML")
        details = kwargs.pop("details", None) or {}
        if errors:
            details["errors"] = list(errors)
        super().__init__(message, details=details, **kwargs)
        self.errors = list(errors or [])


class OpenAPINetworkError(OpenAPIError):
    """Fetching a remote document failed."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any,
    ):
        if "hint" not in kwargs:
            kwargs["hint"] = _network_hint(status_code)
        details = kwargs.pop("details", None) or {}
        if url:
            details["url"] = url
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details=details, **kwargs)
        self.url = url
        self.status_code = status_code


def _network_hint(status_code: Optional[int]) -> str:
    if status_code in (401, 403):
        return "Authentication failed: pass a session cookie with --cookie"
    if status_code == 404:
        return "Document not found: check the URL"
    if status_code is not None and status_code >= 500:
        return "The server failed to respond: retry later"
    return "Check the URL and your network connection"


class OpenAPIValidationError(OpenAPIError):
    """The document is structurally invalid."""

    def __init__(
        self,
        message: str,
        *,
        missing_fields: Optional[List[str]] = None,
        **kwargs: Any,
    ):
        kwargs.setdefault("docs_url", OPENAPI_DOCS_URL)
        details = kwargs.pop("details", None) or {}
        if missing_fields:
            details["missing_fields"] = list(missing_fields)
        super().__init__(message, details=details, **kwargs)
        self.missing_fields = list(missing_fields or [])


class MalformedSpecError(OpenAPIValidationError):
    """Fatal: the document cannot be extracted at all (e.g. no ``paths``)."""


# =============================================================================
# Extraction errors
# =============================================================================


class ExtractionError(ToolDefsError):
    """Base error for per-operation extraction problems."""


class OperationSkipped(ExtractionError):
    """A single operation could not be normalized and is left out."""

    def __init__(self, path: str, method: str, reason: str, **kwargs: Any):
        details = kwargs.pop("details", None) or {}
        details.update({"path": path, "method": method, "reason": reason})
        super().__init__(f"{method.upper()} {path}: {reason}", details=details, **kwargs)
        self.path = path
        self.method = method
        self.reason = reason


class SchemaShapeError(ExtractionError):
    """A schema fragment has a shape that cannot be turned into JSON schema."""

    def __init__(self, message: str, *, pointer: Optional[str] = None, **kwargs: Any):
        details = kwargs.pop("details", None) or {}
        if pointer:
            details["pointer"] = pointer
        super().__init__(message, details=details, **kwargs)
        self.pointer = pointer


class UnknownParameterLocation(ExtractionError):
    """A parameter's ``in`` is not one of path, query, header, cookie."""

    def __init__(self, name: str, location: Any, **kwargs: Any):
        details = kwargs.pop("details", None) or {}
        details.update({"name": name, "location": location})
        kwargs.setdefault("hint", "Parameter locations must be path, query, header or cookie")
        super().__init__(
            f"parameter {name!r} has unrecognized location {location!r}", details=details, **kwargs
        )
        self.name = name
        self.location = location


def log_exception(
    logger: logging.Logger | Any,
    msg: str,
    exc: BaseException,
    level: str = "warning",
    include_traceback: bool = True,
) -> None:
    """Log ``exc`` with a message, its type name and (optionally) its traceback."""
    log = getattr(logger, level.lower(), None) or logger.warning
    text = f"{msg}: {type(exc).__name__}: {exc}"
    if include_traceback:
        log(text, exc_info=(type(exc), exc, exc.__traceback__))
    else:
        log(text)
