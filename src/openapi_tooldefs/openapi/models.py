from __future__ import annotations

import re
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import ALLOWED_METHODS

__all__ = [
    "OpenAPISpec",
    "Operation",
    "ParameterLocation",
    "OperationContext",
    "ExecutionParameter",
    "ToolDescriptor",
    "SkippedOperation",
    "ExtractionReport",
]

OpenAPISpec = Dict[str, Any]
Operation = Dict[str, Any]
ParameterLocation = Literal["path", "query", "header", "cookie"]

_TOOL_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class OperationContext(BaseModel):
    """Normalized view of one operation before it becomes a descriptor.

    Parameters are already merged with the path-level ones and grouped by
    location; the body schema is the one for ``body_content_type``.
    """

    name: str
    description: str
    method: str
    path: str
    tags: List[str] = Field(default_factory=list)
    # "<in>:<name>" -> JSON pointer of the parameter in the source document
    param_pointers: Dict[str, str] = Field(default_factory=dict)
    path_params: List[Dict[str, Any]] = Field(default_factory=list)
    query_params: List[Dict[str, Any]] = Field(default_factory=list)
    header_params: List[Dict[str, Any]] = Field(default_factory=list)
    cookie_params: List[Dict[str, Any]] = Field(default_factory=list)
    wants_body: bool = False
    body_content_type: Optional[str] = None
    body_schema: Optional[Dict[str, Any]] = None
    body_required: bool = False
    security: List[Dict[str, List[str]]] = Field(default_factory=list)

    def ordered_params(self) -> List[Dict[str, Any]]:
        return self.path_params + self.query_params + self.header_params + self.cookie_params


class ExecutionParameter(BaseModel):
    """Where one input value goes when the tool is invoked."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    location: ParameterLocation = Field(alias="in")


class ToolDescriptor(BaseModel):
    """Invocation-ready description of one API operation.

    Field names are snake_case in Python and camelCase when dumped with
    ``by_alias=True`` (see :meth:`to_dict`), which is the shape tool runtimes
    expect.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    tags: Tuple[str, ...] = ()
    description: str = ""
    input_schema: Dict[str, Any] = Field(alias="inputSchema")
    method: str
    path_template: str = Field(alias="pathTemplate", min_length=1)
    execution_parameters: Tuple[ExecutionParameter, ...] = Field(
        default=(), alias="executionParameters"
    )
    request_body_content_type: Optional[str] = Field(default=None, alias="requestBodyContentType")
    security_requirements: Tuple[Dict[str, List[str]], ...] = Field(
        default=(), alias="securityRequirements"
    )

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        if not _TOOL_NAME_RE.match(v):
            raise ValueError(f"tool name must match [A-Za-z0-9_-]+, got {v!r}")
        return v

    @field_validator("method")
    @classmethod
    def _check_method(cls, v: str) -> str:
        if v not in ALLOWED_METHODS:
            raise ValueError(f"method must be one of {', '.join(ALLOWED_METHODS)}, got {v!r}")
        return v

    @field_validator("input_schema")
    @classmethod
    def _check_input_schema(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        if v.get("type") != "object":
            raise ValueError("inputSchema must have type 'object'")
        props = v.get("properties")
        if not isinstance(props, dict):
            raise ValueError("inputSchema.properties must be a mapping")
        required = v.get("required", [])
        if not isinstance(required, list):
            raise ValueError("inputSchema.required must be a list")
        unknown = [r for r in required if r not in props]
        if unknown:
            raise ValueError(f"inputSchema.required names unknown properties: {unknown}")
        return v

    @model_validator(mode="after")
    def _check_execution_parameters(self) -> "ToolDescriptor":
        names = [p.name for p in self.execution_parameters]
        missing = [n for n in names if n not in self.input_schema["properties"]]
        if missing:
            raise ValueError(f"execution parameters without a schema property: {missing}")
        return self

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dict with camelCase keys; ``requestBodyContentType`` omitted when absent."""
        data = self.model_dump(by_alias=True, mode="json")
        if data.get("requestBodyContentType") is None:
            data.pop("requestBodyContentType", None)
        return data


class SkippedOperation(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    method: str
    reason: str


class ExtractionReport(BaseModel):
    """Outcome of one extraction run.

    ``tools`` is the ordered output; ``skipped`` and ``filtered_ops`` let the
    caller decide whether a partial result is acceptable.
    """

    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    total_ops: int = 0
    filtered_ops: int = 0
    tools: List[ToolDescriptor] = Field(default_factory=list)
    skipped: List[SkippedOperation] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    security_schemes: Dict[str, Any] = Field(default_factory=dict)

    @property
    def extracted_count(self) -> int:
        return len(self.tools)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def tool_names(self) -> List[str]:
        return [t.name for t in self.tools]
