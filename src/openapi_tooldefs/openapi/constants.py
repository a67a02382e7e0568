from __future__ import annotations

__all__ = [
    "ALLOWED_METHODS",
    "PARAMETER_LOCATIONS",
    "PREFERRED_CONTENT_TYPE",
    "BODY_PROPERTY",
    "DEFAULT_MAX_NAME_LENGTH",
]

# Canonical traversal order for operations under one path item.
ALLOWED_METHODS = ("get", "put", "post", "delete", "patch", "head", "options")

# Also the order parameters are laid out in the input schema.
PARAMETER_LOCATIONS = ("path", "query", "header", "cookie")

PREFERRED_CONTENT_TYPE = "application/json"

# Property name used when a request body is not flattened.
BODY_PROPERTY = "requestBody"

DEFAULT_MAX_NAME_LENGTH = 64
