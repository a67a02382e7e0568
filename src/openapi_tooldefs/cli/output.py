"""Terminal output helpers for the CLI (rich)."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from openapi_tooldefs.openapi.models import ExtractionReport

__all__ = [
    "console",
    "print_cli_error",
    "print_cli_warning",
    "print_cli_success",
    "print_cli_info",
    "print_report",
    "print_tools_table",
]

console = Console()


def print_cli_error(message: str, hint: Optional[str] = None) -> None:
    console.print(f"[bold red]Error:[/] {escape(message)}")
    if hint:
        console.print(f"  [dim]Hint: {escape(hint)}[/]")


def print_cli_warning(message: str) -> None:
    console.print(f"[yellow]Warning:[/] {escape(message)}")


def print_cli_success(message: str, details: Optional[str] = None) -> None:
    line = f"[green]✓[/] {escape(message)}"
    if details:
        line += f" [dim]({escape(details)})[/]"
    console.print(line)


def print_cli_info(message: str) -> None:
    console.print(f"[cyan]›[/] {escape(message)}")


def print_report(report: ExtractionReport) -> None:
    """Summary of extracted, filtered and skipped operations."""
    title = escape(report.title or "OpenAPI document")
    console.print(
        f"[bold]{title}[/]: {report.total_ops} operations, "
        f"[green]{report.extracted_count} extracted[/], "
        f"[dim]{report.filtered_ops} filtered[/], "
        f"[yellow]{report.skipped_count} skipped[/]"
    )
    for op in report.skipped:
        print_cli_warning(f"skipped {op.method.upper()} {op.path}: {op.reason}")


def print_tools_table(report: ExtractionReport) -> None:
    table = Table(title=escape(report.title or "Tools"), show_lines=False)
    table.add_column("Tool", style="bold")
    table.add_column("Method")
    table.add_column("Path")
    table.add_column("Parameters", style="dim")
    table.add_column("Body", style="dim")
    for tool in report.tools:
        params = ", ".join(f"{p.name} ({p.location})" for p in tool.execution_parameters)
        table.add_row(
            escape(tool.name),
            tool.method.upper(),
            escape(tool.path_template),
            escape(params) or "-",
            escape(tool.request_body_content_type or "-"),
        )
    console.print(table)
