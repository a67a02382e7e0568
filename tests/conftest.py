"""
Root conftest.py for openapi-tooldefs tests.

This file provides:
1. Common pytest markers for test categorization
2. Shared OpenAPI document fixtures
3. Environment isolation for OPENAPI_TOOLDEFS_* settings
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict

import pytest

# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        norm = str(item.fspath).replace("\\", "/")
        if "/tests/unit/cli/" in norm:
            item.add_marker(pytest.mark.cli)
        if "/tests/unit/openapi/" in norm:
            item.add_marker(pytest.mark.openapi)


# =============================================================================
# ENVIRONMENT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def clean_tooldefs_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove OPENAPI_TOOLDEFS_* variables so a developer's .env does not leak in."""
    for key in (
        "OPENAPI_TOOLDEFS_LOG_LEVEL",
        "OPENAPI_TOOLDEFS_LOG_FORMAT",
        "OPENAPI_TOOLDEFS_FETCH_TIMEOUT",
        "OPENAPI_TOOLDEFS_COOKIE",
        "OPENAPI_TOOLDEFS_MAX_NAME_LENGTH",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def reset_tooldefs_logging():
    """Drop handlers installed by configure_logging so streams don't outlive a test."""
    yield
    root = logging.getLogger("openapi_tooldefs")
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)


# =============================================================================
# OPENAPI DOCUMENT FIXTURES
# =============================================================================

_USERS_SPEC: Dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Users API", "version": "1.0.0"},
    "servers": [{"url": "https://api.example.com"}],
    "security": [{"ApiKeyAuth": []}],
    "components": {
        "securitySchemes": {
            "ApiKeyAuth": {"type": "apiKey", "in": "header", "name": "X-API-Key"},
            "BearerAuth": {"type": "http", "scheme": "bearer"},
        }
    },
    "paths": {
        "/users": {
            "get": {
                "operationId": "listUsers",
                "summary": "List all users",
                "tags": ["users"],
                "parameters": [
                    {"name": "limit", "in": "query", "schema": {"type": "integer"}},
                    {"name": "X-Trace-Id", "in": "header", "schema": {"type": "string"}},
                ],
                "responses": {"200": {"description": "OK"}},
            },
            "post": {
                "operationId": "createUser",
                "description": "Create a user",
                "tags": ["users", "admin"],
                "security": [{"BearerAuth": []}],
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/xml": {"schema": {"type": "string"}},
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "properties": {
                                    "name": {"type": "string"},
                                    "email": {"type": "string", "format": "email"},
                                },
                                "required": ["name"],
                            }
                        },
                    },
                },
                "responses": {"201": {"description": "Created"}},
            },
        },
        "/users/{id}": {
            "parameters": [
                {
                    "name": "id",
                    "in": "path",
                    "required": True,
                    "schema": {"type": "string"},
                    "description": "User identifier",
                }
            ],
            "summary": "Single user",
            "get": {
                "summary": "Get a user",
                "responses": {"200": {"description": "OK"}},
            },
            "delete": {
                "operationId": "deleteUser",
                "parameters": [
                    {"name": "id", "in": "path", "required": True, "schema": {"type": "integer"}},
                    {"name": "session", "in": "cookie", "schema": {"type": "string"}},
                ],
                "responses": {"204": {"description": "Deleted"}},
            },
        },
    },
}


@pytest.fixture
def users_spec() -> Dict[str, Any]:
    """Small dereferenced document with parameters, bodies and security."""
    return copy.deepcopy(_USERS_SPEC)


@pytest.fixture
def users_spec_file(tmp_path: Path, users_spec: Dict[str, Any]) -> Path:
    path = tmp_path / "users.json"
    path.write_text(json.dumps(users_spec), encoding="utf-8")
    return path
