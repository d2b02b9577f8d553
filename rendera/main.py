"""rendera CLI entry point

Render configuration files from templates.

Usage:
    rendera template.yaml                  # render to standard output
    rendera template.yaml out.yaml         # render to a file
    rendera templates/ deploy/             # render every file in a folder
    cat template.ejs | rendera             # read the template from stdin
    cat template.ejs | rendera - out.ini   # stdin to a file

Values come from data.yaml (or data.yml) in the current folder unless -d is
given, and are available as ``values``. Environment variables are available
as ``env``, e.g. ``env.HOME``. Keys of the -e env file are added to both.
Defaults for every long option can be put in a YAML config file,
``.renderarc`` unless -c says otherwise.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from ._version import __version__
from .batch import render_source, validate
from .config import Flags, apply_config, load_values
from .errors import RenderaError
from .process import process_template

log = logging.getLogger(__name__)

err_console = Console(stderr=True)

STDIN = "-"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the rendera CLI.

    Log levels:
    - Normal: only warnings/errors shown
    - Verbose (--verbose): INFO, one line per rendered file
    - Debug (RENDERA_DEBUG=1): DEBUG, context and helper loading details
    """
    if os.environ.get("RENDERA_DEBUG"):
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Standard output carries rendered templates, so log to stderr
    handler = RichHandler(
        console=err_console,
        show_time=verbose,
        show_path=bool(os.environ.get("RENDERA_DEBUG")),
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("rendera")
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False


def exit_with_error(message: str, exit_code: int = 1) -> NoReturn:
    """Exit the program with an error message."""
    typer.echo(f"Error: {message}", err=True)
    sys.exit(exit_code)


def handle_error(error: Exception) -> NoReturn:
    """Report an error raised while rendering and exit."""
    if os.environ.get("RENDERA_DEBUG"):
        err_console.print_exception()
    if isinstance(error, RenderaError):
        exit_with_error(error.message, error.exit_code)
    typer.echo(f"Unexpected error: {error}", err=True)
    sys.exit(1)


typer_app = typer.Typer(add_completion=False)


@typer_app.command()
def cli(
    ctx: typer.Context,
    source: Optional[str] = typer.Argument(
        None, help="Template file or folder, '-' for standard input."
    ),
    output: Optional[Path] = typer.Argument(
        None, help="Output file, or folder when [SOURCE] is a folder."
    ),
    data: Optional[str] = typer.Option(
        None, "-d", "--data", help="YAML file containing substitution data."
    ),
    render: Optional[str] = typer.Option(
        None, "-r", "--render", help="Template engine (ejs or handlebars)."
    ),
    env: Optional[str] = typer.Option(
        None, "-e", "--env", help="YAML file containing environment variables."
    ),
    helpers: Optional[str] = typer.Option(
        None,
        "-H",
        "--helpers",
        help="Python file or folder with custom helpers (several joined with ':').",
    ),
    config: Optional[str] = typer.Option(
        None, "-c", "--config", help="Path to configuration file."
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log rendered files."),
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Render configuration files from templates (EJS or Handlebars style)."""
    if version:
        typer.echo(f"rendera {__version__}")
        raise typer.Exit()

    setup_logging(verbose)

    from_stdin = source == STDIN or (source is None and not sys.stdin.isatty())
    if source is None and not from_stdin:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=1)

    try:
        flags = apply_config(
            Flags(data=data, render=render, env=env, helpers=helpers, config=config)
        )
        values = load_values(flags)

        source_path = None if from_stdin else Path(source)
        validate(source_path, output, from_stdin)

        if source_path is None:
            rendered = process_template(sys.stdin.read(), values, flags, Path.cwd())
            if output is not None:
                output.write_text(rendered, encoding="utf-8")
            else:
                typer.echo(rendered)
        else:
            render_source(source_path, output, values, flags, echo=typer.echo)
    except Exception as e:
        handle_error(e)


def app() -> None:
    """Entry point for the installed ``rendera`` script."""
    typer_app()


if __name__ == "__main__":
    app()
