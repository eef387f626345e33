"""Typer CLI entrypoint for magic-opener."""

from __future__ import annotations

import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import load_config
from .exceptions import OpenerError
from .launcher import launch, map_for_client, passthrough
from .resolver import resolve

app = typer.Typer(add_completion=False)
err_console = Console(stderr=True)
log = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(console=err_console, show_time=False, show_path=False)
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"magic-opener {__version__}")
        raise typer.Exit()


@app.command(
    context_settings={
        "help_option_names": ["-h", "--help"],
        # Parsing stops at the first argument; unknown flags stay in `arguments`.
        "allow_interspersed_args": False,
        "ignore_unknown_options": True,
    }
)
def main(
    arguments: Optional[List[str]] = typer.Argument(
        None,
        metavar="[ARGUMENT]...",
        help=(
            "PR number, commit hash or path. Defaults to the current branch of the repository. "
            "Arguments starting with - are passed to the system opener."
        ),
    ),
    print_only: bool = typer.Option(
        False,
        "--print",
        "-p",
        help="Print the URL or path to stdout instead of opening it.",
    ),
    remote: Optional[str] = typer.Option(
        None,
        "--remote",
        "-r",
        help="Git remote to build URLs from (defaults to origin).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the magic-opener version and exit.",
    ),
) -> None:
    """An 'open' replacement that tries to do the right thing.

    Inside a git repository, a number opens that pull request, a commit hash
    opens the commit (or the pull request it was merged in), and no argument
    opens the current branch. Anything else is opened as a path.
    """

    _ = version  # handled via callback
    configure_logging(verbose)
    try:
        config = load_config(remote=remote)
        args = list(arguments or [])
        if args and args[0].startswith("-"):
            if print_only:
                typer.echo(" ".join(args))
                return
            passthrough(args, config)
            return
        argument = " ".join(args) or None
        resolution = resolve(argument, config)
        location = map_for_client(resolution.location, config)
        log.debug("Resolved %r to %s", argument, resolution.target)
        if print_only:
            typer.echo(location)
            return
        launch(location, config)
    except OpenerError as exc:
        _fail(str(exc))


def run() -> None:
    app()


def _fail(message: str, code: int = 1) -> None:
    first_line = message.strip().splitlines()[0] if message.strip() else "magic-opener failed"
    typer.secho(first_line, err=True, fg=typer.colors.RED)
    raise typer.Exit(code)


if __name__ == "__main__":
    run()
