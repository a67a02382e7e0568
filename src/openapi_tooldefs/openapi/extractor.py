"""Turn a dereferenced OpenAPI document into tool descriptors.

One :class:`ToolDescriptor` is produced per operation, in document order
(paths as declared, methods in :data:`ALLOWED_METHODS` order). Each
descriptor merges the operation's parameters and request body into one
``inputSchema`` and records where every parameter goes at invocation time.

Input schema layout:

- parameters first, grouped path → query → header → cookie, each keyed by
  its name;
- a request body whose schema is a plain object (or an ``allOf`` of plain
  objects) has its properties merged at the top level;
- any other body, or an object body whose property names clash with a
  parameter, is nested under a single ``requestBody`` property.

Operations that cannot be normalized are skipped and reported; a document
without ``paths`` raises :class:`MalformedSpecError`.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional, Set, Tuple

from pydantic import ValidationError

from ..errors import (
    ExtractionError,
    MalformedSpecError,
    OperationSkipped,
    SchemaShapeError,
    UnknownParameterLocation,
)
from ..logging import get_logger
from .constants import ALLOWED_METHODS, BODY_PROPERTY
from .models import (
    ExecutionParameter,
    ExtractionReport,
    OpenAPISpec,
    Operation,
    OperationContext,
    SkippedOperation,
    ToolDescriptor,
)
from .options import ExtractionOptions
from .runtime import (
    has_request_body,
    merge_parameters,
    operation_description,
    operation_tags,
    resolve_security,
    select_content_type,
    split_params,
    unique_tool_name,
)
from .schema import flatten_object_schema, is_object_schema, normalize_schema

__all__ = ["extract", "extract_report"]

logger = get_logger("openapi.extractor")


# --------------- Operation Context --------------


def _escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _pointer(*tokens: str) -> str:
    return "#/" + "/".join(_escape(t) for t in tokens)


def _parameter_pointers(
    path: str, method: str, path_item: Dict[str, Any], op: Operation
) -> Dict[str, str]:
    """Source location of each effective parameter, keyed ``"<in>:<name>"``."""
    pointers: Dict[str, str] = {}
    sources = (((path,), path_item.get("parameters")), ((path, method), op.get("parameters")))
    for prefix, params in sources:
        for i, p in enumerate(params or []):
            pointers[f"{p['in']}:{p['name']}"] = _pointer("paths", *prefix, "parameters", str(i))
    return pointers


def _body_schema(body: Dict[str, Any], content_type: str, pointer: str) -> Dict[str, Any]:
    media = body["content"][content_type]
    if media is None:
        return {}
    if not isinstance(media, dict):
        raise SchemaShapeError(f"media type object at {pointer} must be a mapping", pointer=pointer)
    raw = media.get("schema")
    if raw is None:
        return {}
    schema = normalize_schema(raw, f"{pointer}/schema")
    if isinstance(schema, bool):
        return {} if schema else {"not": {}}
    return schema


def _make_operation_context(
    spec: OpenAPISpec,
    path: str,
    method: str,
    path_item: Dict[str, Any],
    op: Operation,
    name: str,
) -> OperationContext:
    merged = merge_parameters(path_item, op)
    path_params, query_params, header_params, cookie_params = split_params(merged)

    body = op.get("requestBody")
    if isinstance(body, dict) and "$ref" in body:
        raise SchemaShapeError(f"unresolved request body reference {body['$ref']!r}", pointer=body["$ref"])
    wants_body = has_request_body(op)
    body_ct: Optional[str] = None
    body_schema: Optional[Dict[str, Any]] = None
    if wants_body:
        if not isinstance(body["content"], dict):
            raise SchemaShapeError("requestBody.content must be a mapping")
        body_ct = select_content_type(body["content"])
        pointer = _pointer("paths", path, method, "requestBody", "content", body_ct)
        body_schema = _body_schema(body, body_ct, pointer)

    return OperationContext(
        name=name,
        description=operation_description(op),
        method=method,
        path=path,
        tags=operation_tags(op),
        param_pointers=_parameter_pointers(path, method, path_item, op),
        path_params=path_params,
        query_params=query_params,
        header_params=header_params,
        cookie_params=cookie_params,
        wants_body=wants_body,
        body_content_type=body_ct,
        body_schema=body_schema,
        body_required=bool(body.get("required")) if wants_body else False,
        security=resolve_security(spec, op),
    )


# --------------- Input Schema --------------


def _parameter_schema(param: Dict[str, Any], pointer: str) -> Dict[str, Any]:
    raw = param.get("schema")
    if raw is None and isinstance(param.get("content"), dict) and param["content"]:
        # Parameters may describe their value through a single media type instead.
        ct = select_content_type(param["content"])
        pointer = f"{pointer}/content/{_escape(ct)}"
        media = param["content"][ct]
        if media is not None and not isinstance(media, dict):
            raise SchemaShapeError(f"media type object at {pointer} must be a mapping", pointer=pointer)
        raw = (media or {}).get("schema")
    schema = normalize_schema(raw if raw is not None else {}, f"{pointer}/schema")
    if isinstance(schema, bool):
        schema = {} if schema else {"not": {}}
    if isinstance(param.get("description"), str) and "description" not in schema:
        schema["description"] = param["description"]
    if param.get("deprecated") is True:
        schema["deprecated"] = True
    return schema


def _build_input_schema(
    ctx: OperationContext, warnings: List[str]
) -> Tuple[Dict[str, Any], List[ExecutionParameter]]:
    label = f"{ctx.method.upper()} {ctx.path}"
    properties: Dict[str, Any] = {}
    required: List[str] = []
    exec_params: List[ExecutionParameter] = []

    for p in ctx.ordered_params():
        name, loc = p["name"], p["in"]
        exec_params.append(ExecutionParameter(name=name, location=loc))
        if name in properties:
            warnings.append(
                f"{label}: {loc} parameter {name!r} shares its name with an earlier parameter; "
                "the earlier schema is kept"
            )
        else:
            properties[name] = _parameter_schema(p, ctx.param_pointers[f"{loc}:{name}"])
        if p.get("required") is True and name not in required:
            required.append(name)

    if ctx.wants_body:
        body_schema = ctx.body_schema or {}
        body_props: Optional[Dict[str, Any]] = None
        body_required: List[str] = []
        if is_object_schema(body_schema):
            body_props, body_required = flatten_object_schema(body_schema)

        clash = sorted(set(body_props or {}) & set(properties))
        if body_props and not clash:
            properties.update(body_props)
            required.extend(r for r in body_required if r not in required)
        else:
            if clash:
                warnings.append(
                    f"{label}: request body fields {clash} clash with parameters; "
                    f"body nested under {BODY_PROPERTY!r}"
                )
            if BODY_PROPERTY in properties:
                raise SchemaShapeError(
                    f"parameter named {BODY_PROPERTY!r} collides with the nested request body"
                )
            properties[BODY_PROPERTY] = body_schema
            if ctx.body_required:
                required.append(BODY_PROPERTY)

    input_schema: Dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        input_schema["required"] = required
    return input_schema, exec_params


def _build_descriptor(ctx: OperationContext, warnings: List[str]) -> ToolDescriptor:
    input_schema, exec_params = _build_input_schema(ctx, warnings)
    return ToolDescriptor(
        name=ctx.name,
        tags=tuple(ctx.tags),
        description=ctx.description,
        input_schema=input_schema,
        method=ctx.method,
        path_template=ctx.path,
        execution_parameters=tuple(exec_params),
        request_body_content_type=ctx.body_content_type,
        security_requirements=tuple(ctx.security),
    )


# --------------- Extraction -----------------------


def _require_paths(document: Any) -> Dict[str, Any]:
    if not isinstance(document, dict):
        raise MalformedSpecError(
            f"OpenAPI document must be a mapping, got {type(document).__name__}",
            missing_fields=["paths"],
        )
    paths = document.get("paths")
    if not isinstance(paths, dict):
        raise MalformedSpecError(
            "OpenAPI document has no 'paths' object",
            missing_fields=["paths"],
            hint="A document needs a top-level 'paths' mapping to define operations",
        )
    return paths


def extract_report(
    document: OpenAPISpec,
    options: Optional[ExtractionOptions] = None,
) -> ExtractionReport:
    """Extract tool descriptors and report what was skipped or filtered.

    Args:
        document: A dereferenced OpenAPI v3 document (see
            :func:`openapi_tooldefs.openapi.deref.dereference`).
        options: Filters and naming options.

    Returns:
        An :class:`ExtractionReport`; ``report.tools`` is the descriptor sequence.

    Raises:
        MalformedSpecError: ``document`` has no ``paths`` mapping, or (with
            ``options.strict``) a parameter uses an unknown location.
    """
    paths = _require_paths(document)
    options = options or ExtractionOptions()

    tools: List[ToolDescriptor] = []
    skipped: List[SkippedOperation] = []
    warnings: List[str] = []
    taken: Set[str] = set()
    total_ops = 0
    filtered_ops = 0

    def skip(path: str, method: str, reason: str) -> None:
        err = OperationSkipped(path, method, reason)
        logger.warning("Skipping operation", operation=err.message)
        skipped.append(SkippedOperation(path=path, method=method, reason=reason))
        warnings.append(err.message)

    for path, path_item in paths.items():
        path = str(path)
        if not isinstance(path_item, dict):
            skip(path, "*", "path item must be a mapping")
            continue
        if "$ref" in path_item:
            skip(path, "*", f"unresolved path item reference {path_item['$ref']!r}")
            continue

        for method in ALLOWED_METHODS:
            if method not in path_item:
                continue
            op = path_item[method]
            total_ops += 1
            if not isinstance(op, dict):
                skip(path, method, "operation must be a mapping")
                continue
            try:
                if not options.should_include_operation(path, method, op):
                    filtered_ops += 1
                    continue
                base = options.get_tool_name(op.get("operationId"), method, path, op)
                name = unique_tool_name(base, taken, options.max_name_length)
                if name != base:
                    logger.debug("Tool name collision resolved", base_name=base, tool_name=name)
                ctx = _make_operation_context(document, path, method, path_item, op, name)
                descriptor = _build_descriptor(ctx, warnings)
            except UnknownParameterLocation as e:
                if options.strict:
                    raise MalformedSpecError(
                        f"{method.upper()} {path}: {e.message}", hint=e.hint
                    ) from e
                skip(path, method, e.message)
            except ExtractionError as e:
                skip(path, method, e.message)
            except ValidationError as e:
                first = e.errors()[0]
                skip(path, method, f"invalid tool descriptor: {first['msg']}")
            else:
                taken.add(descriptor.name)
                tools.append(descriptor)

    components = document.get("components") or {}
    schemes = components.get("securitySchemes") if isinstance(components, dict) else None
    info = document.get("info") or {}

    report = ExtractionReport(
        title=info.get("title") if isinstance(info, dict) else None,
        total_ops=total_ops,
        filtered_ops=filtered_ops,
        tools=tools,
        skipped=skipped,
        warnings=warnings,
        security_schemes=copy.deepcopy(schemes) if isinstance(schemes, dict) else {},
    )
    logger.info(
        "Extraction finished",
        extracted=report.extracted_count,
        skipped_ops=report.skipped_count,
        filtered_ops=filtered_ops,
    )
    return report


def extract(
    document: OpenAPISpec,
    options: Optional[ExtractionOptions] = None,
) -> List[ToolDescriptor]:
    """Return the ordered tool descriptors of ``document``.

    Same as ``extract_report(document, options).tools``; use
    :func:`extract_report` to see skipped operations.
    """
    return extract_report(document, options).tools
