from .deref import dereference
from .extractor import extract, extract_report
from .io import load_openapi, load_spec
from .models import ExecutionParameter, ExtractionReport, SkippedOperation, ToolDescriptor
from .options import ExtractionOptions
from .render import render, render_json, render_typescript, sanitize_for_template

__all__ = [
    "dereference",
    "extract",
    "extract_report",
    "load_openapi",
    "load_spec",
    "ExecutionParameter",
    "ExtractionOptions",
    "ExtractionReport",
    "SkippedOperation",
    "ToolDescriptor",
    "render",
    "render_json",
    "render_typescript",
    "sanitize_for_template",
]
