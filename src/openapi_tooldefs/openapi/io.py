from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, Union

import httpx
import yaml

from ..errors import OpenAPINetworkError, OpenAPIParseError
from ..logging import get_logger
from .models import OpenAPISpec

__all__ = ["load_openapi", "load_spec"]

logger = get_logger("openapi.io")


def load_openapi(
    source: Union[str, Path, dict],
    *,
    cookie: Optional[str] = None,
    timeout: float = 30.0,
) -> OpenAPISpec:
    """Load OpenAPI spec from various sources.

    Supports:
    - Dict: Returns as-is (already parsed)
    - URL (http/https): Fetches from remote, sending ``cookie`` as the Cookie header
    - Local file path: Reads JSON or YAML
    - Raw JSON/YAML string: Parses directly

    Example:
        # URL behind a login
        spec = load_openapi("https://api.example.com/openapi.json", cookie="session=abc")

        # Local file
        spec = load_openapi(Path("./openapi.yaml"))

        # Raw JSON/YAML string
        spec = load_openapi('{"openapi": "3.1.0", ...}')
    """
    if isinstance(source, dict):
        return source

    source_str = str(source)

    if source_str.startswith(("http://", "https://")):
        return _fetch_openapi_url(source_str, cookie=cookie, timeout=timeout)

    p = Path(source_str)
    try:
        is_file = p.is_file()
    except (OSError, ValueError):
        # Raw documents can be too long or contain characters invalid in paths.
        is_file = False
    if is_file:
        return _load_openapi_file(p)

    return _parse_openapi_string(source_str)


def _fetch_openapi_url(url: str, *, cookie: Optional[str], timeout: float) -> OpenAPISpec:
    """Fetch OpenAPI spec from a URL."""
    headers = {"Cookie": cookie} if cookie else {}
    logger.info("Fetching OpenAPI document", url=url, with_cookie=bool(cookie))
    try:
        with httpx.Client(timeout=timeout, follow_redirects=True) as client:
            resp = client.get(url, headers=headers)
            resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise OpenAPINetworkError(
            f"Failed to fetch {url}: HTTP {e.response.status_code}",
            url=url,
            status_code=e.response.status_code,
        ) from e
    except httpx.HTTPError as e:
        raise OpenAPINetworkError(f"Failed to fetch {url}: {e}", url=url) from e

    content_type = resp.headers.get("content-type", "")

    if "json" in content_type or url.endswith(".json"):
        try:
            return _ensure_mapping(resp.json(), url)
        except json.JSONDecodeError as e:
            raise OpenAPIParseError(f"Invalid JSON from {url}", errors=[str(e)]) from e

    return _parse_openapi_string(resp.text, origin=url)


def _load_openapi_file(path: Path) -> OpenAPISpec:
    """Load OpenAPI spec from a local file."""
    text = path.read_text(encoding="utf-8")

    if path.suffix == ".json":
        try:
            return _ensure_mapping(json.loads(text), str(path))
        except json.JSONDecodeError as e:
            raise OpenAPIParseError(f"Invalid JSON in {path}", errors=[str(e)]) from e
    elif path.suffix in (".yaml", ".yml"):
        try:
            return _ensure_mapping(yaml.safe_load(text), str(path))
        except yaml.YAMLError as e:
            raise OpenAPIParseError(f"Invalid YAML in {path}", errors=[str(e)]) from e
    else:
        return _parse_openapi_string(text, origin=str(path))


def _parse_openapi_string(text: str, origin: str = "<string>") -> OpenAPISpec:
    """Parse OpenAPI spec from raw JSON or YAML string."""
    try:
        return _ensure_mapping(json.loads(text), origin)
    except json.JSONDecodeError:
        pass
    try:
        return _ensure_mapping(yaml.safe_load(text), origin)
    except yaml.YAMLError as e:
        raise OpenAPIParseError(f"Could not parse {origin} as JSON or YAML", errors=[str(e)]) from e


def _ensure_mapping(data: object, origin: str) -> OpenAPISpec:
    if not isinstance(data, dict):
        raise OpenAPIParseError(
            f"{origin} does not contain an OpenAPI document",
            errors=[f"expected a mapping at the top level, got {type(data).__name__}"],
        )
    return data


def load_spec(source: Union[str, Path, dict], **kwargs) -> OpenAPISpec:
    """Alias for load_openapi."""
    return load_openapi(source, **kwargs)
