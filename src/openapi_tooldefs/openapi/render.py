"""Serialize tool descriptors.

Two output formats:

- ``ts``: a TypeScript module exporting ``toolDefinitionMap`` (a ``Map`` keyed
  by tool name) and ``securitySchemes``. Descriptions are emitted as template
  literals, escaped with :func:`sanitize_for_template`.
- ``json``: ``{"tools": [...], "securitySchemes": {...}}``.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from .models import ToolDescriptor

__all__ = [
    "OUTPUT_FORMATS",
    "sanitize_for_template",
    "unescape_template",
    "render_typescript",
    "render_json",
    "render",
]

OUTPUT_FORMATS = ("ts", "json")

_UNESCAPE_RE = re.compile(r"\\([\\`$r])")

_TS_INTERFACE = """\
/**
 * Interface for MCP Tool Definition
 */
export interface McpToolDefinition {
  name: string;
  tags?: string[];
  description: string;
  inputSchema: any;
  method: string;
  pathTemplate: string;
  executionParameters: { name: string, in: string }[];
  requestBodyContentType?: string;
  securityRequirements: any[];

  defaults?: Record<string, { in: "query", value: string }>;
  fields?: string;
}
"""


def sanitize_for_template(text: Optional[str]) -> str:
    """Escape text for a JavaScript template literal.

    Backslashes, backticks and ``${`` are escaped so the literal cannot be
    terminated or interpolated; carriage returns are escaped because template
    literals normalize ``\\r\\n`` to ``\\n``. The cooked value of the literal
    equals the input.
    """
    return (
        (text or "")
        .replace("\\", "\\\\")
        .replace("`", "\\`")
        .replace("${", "\\${")
        .replace("\r", "\\r")
    )


def unescape_template(text: str) -> str:
    """Inverse of :func:`sanitize_for_template`."""
    return _UNESCAPE_RE.sub(lambda m: "\r" if m.group(1) == "r" else m.group(1), text)


def _compact(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def _render_entry(tool: ToolDescriptor) -> str:
    data = tool.to_dict()
    content_type = (
        json.dumps(tool.request_body_content_type) if tool.request_body_content_type else "undefined"
    )
    return f"""
  [{json.dumps(tool.name)}, {{
    name: {json.dumps(tool.name)},
    tags: {_compact(data["tags"])},
    description: `{sanitize_for_template(tool.description)}`,
    inputSchema: {_compact(data["inputSchema"])},
    method: {json.dumps(tool.method)},
    pathTemplate: {json.dumps(tool.path_template)},
    executionParameters: {_compact(data["executionParameters"])},
    requestBodyContentType: {content_type},
    securityRequirements: {_compact(data["securityRequirements"])}
  }}],"""


def render_typescript(
    tools: Iterable[ToolDescriptor],
    security_schemes: Optional[Dict[str, Any]] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """Render a TypeScript module with ``toolDefinitionMap`` and ``securitySchemes``."""
    generated_at = generated_at or datetime.now(timezone.utc)
    entries = "".join(_render_entry(t) for t in tools)
    schemes = json.dumps(security_schemes or {}, indent=2)
    return f"""/**
 * MCP Tool Definitions generated from OpenAPI spec
 * Generated on: {generated_at.isoformat()}
 */

{_TS_INTERFACE}
/**
 * Map of tool definitions by name
 */
export const toolDefinitionMap: Map<string, McpToolDefinition> = new Map([
{entries}
]);

/**
 * Security schemes from the OpenAPI spec
 */
export const securitySchemes = {schemes};
"""


def render_json(
    tools: Iterable[ToolDescriptor],
    security_schemes: Optional[Dict[str, Any]] = None,
) -> str:
    payload = {
        "tools": [t.to_dict() for t in tools],
        "securitySchemes": security_schemes or {},
    }
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def render(
    tools: Iterable[ToolDescriptor],
    security_schemes: Optional[Dict[str, Any]] = None,
    fmt: str = "ts",
) -> str:
    """Render in ``fmt`` (one of :data:`OUTPUT_FORMATS`)."""
    if fmt == "ts":
        return render_typescript(tools, security_schemes)
    if fmt == "json":
        return render_json(tools, security_schemes)
    raise ValueError(f"Unknown output format {fmt!r}; expected one of {', '.join(OUTPUT_FORMATS)}")
