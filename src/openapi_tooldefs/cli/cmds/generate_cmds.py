"""
CLI commands that turn an OpenAPI document into tool definitions.

Usage:
    openapi-tooldefs generate -i openapi.yaml -o src/toolDefinitions.ts
    openapi-tooldefs generate -i https://api.example.com/openapi.json -o tools.json -f json
    openapi-tooldefs generate -i spec.json -o out.ts --force --exclude-tag internal
    openapi-tooldefs inspect -i openapi.yaml
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer

from openapi_tooldefs.cli.output import (
    print_cli_error,
    print_cli_info,
    print_cli_success,
    print_report,
    print_tools_table,
)
from openapi_tooldefs.errors import ConfigurationError, ToolDefsError, log_exception
from openapi_tooldefs.logging import configure_logging, get_logger
from openapi_tooldefs.openapi import (
    ExtractionOptions,
    ExtractionReport,
    dereference,
    extract_report,
    load_openapi,
    render,
)
from openapi_tooldefs.openapi.render import OUTPUT_FORMATS
from openapi_tooldefs.settings import Settings

app = typer.Typer(help="Generate tool definitions from OpenAPI documents")

logger = get_logger("cli")


def _load_settings(log_level: Optional[str], log_format: Optional[str]) -> Settings:
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        print_cli_error(e.message, hint=e.hint)
        raise typer.Exit(1)
    configure_logging(
        level=log_level or settings.log_level,
        format=log_format or settings.log_format,
    )
    return settings


def _check_input(source: str) -> None:
    if source.startswith(("http://", "https://")):
        return
    if not Path(source).is_file():
        print_cli_error(
            f"Input file {source} does not exist",
            hint="Pass a path to a JSON/YAML file or an http(s) URL",
        )
        raise typer.Exit(1)


def _run_extraction(
    source: str,
    settings: Settings,
    options: ExtractionOptions,
    cookie: Optional[str],
) -> ExtractionReport:
    try:
        spec = load_openapi(source, cookie=cookie or settings.cookie, timeout=settings.fetch_timeout)
        logger.debug("OpenAPI document parsed", source=source)
        return extract_report(dereference(spec), options)
    except ToolDefsError as e:
        log_exception(logger, "Extraction failed", e, level="debug")
        print_cli_error(e.message, hint=e.hint)
        raise typer.Exit(1)


def _options(
    prefix: Optional[str],
    include_tags: Optional[List[str]],
    exclude_tags: Optional[List[str]],
    strict: bool,
    settings: Settings,
) -> ExtractionOptions:
    return ExtractionOptions(
        tool_prefix=prefix,
        include_tags=list(include_tags) if include_tags else None,
        exclude_tags=list(exclude_tags) if exclude_tags else None,
        max_name_length=settings.max_name_length,
        strict=strict,
    )


@app.command("generate")
def generate_cmd(
    source: str = typer.Option(
        ...,
        "--input",
        "-i",
        help="Path or URL to the OpenAPI specification file (JSON or YAML)",
    ),
    output: Path = typer.Option(
        ...,
        "--output",
        "-o",
        help="Path to the output file (e.g., ./toolDefinitions.ts)",
    ),
    fmt: str = typer.Option(
        "ts",
        "--format",
        "-f",
        help="Output format: ts (TypeScript map) or json",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite existing files without prompting",
    ),
    cookie: Optional[str] = typer.Option(
        None,
        "--cookie",
        help="Cookie header sent when fetching a remote specification",
    ),
    prefix: Optional[str] = typer.Option(
        None,
        "--prefix",
        help="Prefix prepended to every tool name",
    ),
    include_tags: Optional[List[str]] = typer.Option(
        None,
        "--include-tag",
        help="Only extract operations with this tag (repeatable)",
    ),
    exclude_tags: Optional[List[str]] = typer.Option(
        None,
        "--exclude-tag",
        help="Skip operations with this tag (repeatable)",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Fail on unknown parameter locations instead of skipping the operation",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level (default: INFO)"),
    log_format: Optional[str] = typer.Option(None, "--log-format", help="Log format: human or json"),
):
    """Generate a tool definition file from an OpenAPI specification."""
    settings = _load_settings(log_level, log_format)

    if fmt not in OUTPUT_FORMATS:
        print_cli_error(f"Unknown format: {fmt}", hint=f"Supported: {', '.join(OUTPUT_FORMATS)}")
        raise typer.Exit(1)

    if output.exists() and not force:
        print_cli_error(f"Output file {output} already exists.", hint="Use --force to overwrite existing file.")
        raise typer.Exit(1)

    _check_input(source)
    print_cli_info(f"Parsing OpenAPI spec: {source}")
    report = _run_extraction(
        source, settings, _options(prefix, include_tags, exclude_tags, strict, settings), cookie
    )

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(render(report.tools, report.security_schemes, fmt), encoding="utf-8")

    print_report(report)
    print_cli_success(
        f"Tool definitions written to {output}",
        details=f"{report.extracted_count} tool definitions",
    )


@app.command("inspect")
def inspect_cmd(
    source: str = typer.Option(
        ...,
        "--input",
        "-i",
        help="Path or URL to the OpenAPI specification file (JSON or YAML)",
    ),
    cookie: Optional[str] = typer.Option(None, "--cookie", help="Cookie header for remote specs"),
    prefix: Optional[str] = typer.Option(None, "--prefix", help="Prefix prepended to every tool name"),
    output_json: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output the extraction report as JSON",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level (default: INFO)"),
):
    """List the tools a specification would produce, without writing anything."""
    settings = _load_settings(log_level, None)
    _check_input(source)
    report = _run_extraction(source, settings, _options(prefix, None, None, False, settings), cookie)

    if output_json:
        result = {
            "title": report.title,
            "total_ops": report.total_ops,
            "filtered_ops": report.filtered_ops,
            "tools": [t.to_dict() for t in report.tools],
            "skipped": [s.model_dump() for s in report.skipped],
        }
        typer.echo(json.dumps(result, indent=2))
        return

    print_tools_table(report)
    print_report(report)


def register(parent: typer.Typer):
    """Register generate commands with the parent CLI app."""
    parent.command("generate")(generate_cmd)
    parent.command("inspect")(inspect_cmd)
