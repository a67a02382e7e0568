from __future__ import annotations

import typer

from openapi_tooldefs import __version__
from openapi_tooldefs.cli.cmds import register_generate
from openapi_tooldefs.cli.output import console

app = typer.Typer(
    name="openapi-tooldefs",
    help="Convert OpenAPI specifications into tool definitions for function-calling runtimes.",
    no_args_is_help=True,
)


def _version_callback(value: bool):
    if value:
        console.print(f"openapi-tooldefs [dim]v{__version__}[/]")
        raise typer.Exit()


@app.callback()
def _root(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """openapi-tooldefs command line."""


register_generate(app)


def main():
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
