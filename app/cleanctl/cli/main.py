"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from typing import Annotated

import typer

from cleanctl import __version__
from cleanctl.cli.commands import check, history, items, run, select
from cleanctl.utils.formatting import configure_logging

# Create main Typer app
app = typer.Typer(
    name="cleanctl",
    help="Selective cleanup of caches, temporary files and downloads.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"cleanctl version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """cleanctl - Selective cleanup of caches, temporary files and downloads.

    Every item in the catalog is bound to known locations; nothing else
    is ever touched, and protected system paths are never deleted.
    """
    configure_logging(verbose=verbose)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.command(name="run")(run.run)
app.command(name="items")(items.items)
app.command(name="check")(check.check)
app.command(name="select")(select.select)
app.command(name="history")(history.history)


if __name__ == "__main__":
    app()
