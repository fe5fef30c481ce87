"""Cucumis command line entry point."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from cucumis import __version__
from cucumis.cli import feature

logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
)

console = Console()

app = typer.Typer(
    name="cucumis",
    help="Run Gherkin feature files against HTTP APIs",
    no_args_is_help=True,
)
app.add_typer(feature.app, name="feature", help="Parse and run feature files")


def _show_version(value: bool):
    if value:
        console.print(f"cucumis {__version__}")
        raise typer.Exit()


def configure_verbosity(verbose: bool, quiet: bool) -> None:
    """Set the ``cucumis`` logger level from the global flags.

    ``--verbose`` adds request and response lines from the World,
    ``--quiet`` leaves only warnings and errors.
    """
    if verbose and quiet:
        raise typer.BadParameter("--verbose and --quiet are mutually exclusive")
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.getLogger("cucumis").setLevel(level)


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to config file", exists=True, dir_okay=False
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log every HTTP request and step argument"
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Print only the results table"
    ),
    version: bool = typer.Option(
        False, "--version", "-V", callback=_show_version, is_eager=True,
        help="Show version and exit",
    ),
):
    """Run Gherkin feature files against HTTP APIs."""
    configure_verbosity(verbose, quiet)
    ctx.ensure_object(dict)
    ctx.obj.update(config_file=config_file, verbose=verbose, quiet=quiet)


if __name__ == "__main__":
    app()
