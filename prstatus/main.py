"""pr-status CLI: all commands."""

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.console import Console
from rich.markup import escape

from prstatus.extension import PrStatusExtension, ThreadScheduler
from prstatus.providers.github import GitHubBackend
from prstatus.query import StatusQueryService
from prstatus.render import format_status, parse_pr_url
from prstatus.selector import PrSelector
from prstatus.settings import get_settings

app = typer.Typer(help="pr-status: CI, review and merge state of the current branch's pull request", no_args_is_help=True)

PathArg = Annotated[
    Path,
    typer.Argument(help="Working directory of the git checkout", file_okay=False, resolve_path=True),
]


@app.callback()
def _root(debug: Annotated[bool, typer.Option("--debug", help="Enable debug logging")] = False) -> None:
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")


# ---------------------------------------------------------------------------
# Service factory
# ---------------------------------------------------------------------------


def get_service() -> StatusQueryService:
    return StatusQueryService(GitHubBackend(get_settings()))


# ---------------------------------------------------------------------------
# Console sink for `watch`
# ---------------------------------------------------------------------------


class ConsoleSink:
    """Prints each status change as it happens."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def set_status(self, key: str, value: str | None) -> None:
        if value is None:
            self._console.print(f"[dim]{key}: no pull request[/dim]")
        else:
            self._console.print(escape(value), soft_wrap=True)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def show(
    path: PathArg = Path("."),
    text: Annotated[str | None, typer.Option("--text", "-t", help="Text that may mention a PR URL to pin")] = None,
) -> None:
    """Print the status line once. Prints nothing when there is no pull request."""
    selector = PrSelector(get_service())
    pr = selector.poll(str(path))
    if text:
        selection = selector.mention(text)
        if selection is not None:
            pr = selection.pull_request
    if pr is None:
        raise typer.Exit(0)
    typer.echo(format_status(pr))


@app.command()
def watch(
    path: PathArg = Path("."),
    interval: Annotated[float | None, typer.Option("--interval", "-i", help="Seconds between polls")] = None,
) -> None:
    """Poll and print status changes. Each line on stdin is treated as user input."""
    settings = get_settings()
    if interval is not None:
        settings = settings.model_copy(update={"poll_interval": interval})

    extension = PrStatusExtension(ConsoleSink(), get_service(), ThreadScheduler(), settings)
    rprint(f"[dim]Watching {path} every {settings.poll_interval:g}s. Ctrl-C to stop.[/dim]")
    extension.on_session_start(str(path))
    try:
        for line in sys.stdin:
            extension.on_input(line.strip(), source="user")
    except KeyboardInterrupt:
        pass
    finally:
        extension.on_session_shutdown()


@app.command("parse-url")
def parse_url(text: Annotated[str, typer.Argument(help="Text containing a pull request URL")]) -> None:
    """Print owner/repo#number for the first pull request URL in TEXT."""
    ref = parse_pr_url(text)
    if ref is None:
        typer.echo("error: no pull request URL found", err=True)
        raise typer.Exit(1)
    typer.echo(f"{ref.repo}#{ref.number}")
