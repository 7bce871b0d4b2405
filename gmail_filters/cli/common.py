"""Shared CLI types and utilities."""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

from rich.console import Console
from rich.markup import escape
import typer

from gmail_filters.dirs import default_config_file, default_token_file
from gmail_filters.errors import GmailFiltersError
from gmail_filters.gmail_client import GmailClient


def get_client(token_file: Path | None) -> GmailClient:
    return GmailClient(token_file or default_token_file())


def config_path(config_file: Path | None) -> Path:
    return config_file or default_config_file()


def print_error(console: Console, message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")


@contextmanager
def exit_on_error(console: Console) -> Iterator[None]:
    """Report pipeline errors (with their details) and exit with status 1."""
    try:
        yield
    except GmailFiltersError as e:
        print_error(console, str(e))
        if e.details:
            console.print(escape(e.details), highlight=False)
        raise typer.Exit(code=1) from e


# Reusable option type annotations
ConfigFileOption = Annotated[
    Path | None, typer.Option("--config", "-c", help="Path to the filters config file (YAML, JSON or Jsonnet)")
]
TokenFileOption = Annotated[Path | None, typer.Option("--token-file", "-t", help="Path to Gmail OAuth token file")]
ContextLinesOption = Annotated[int, typer.Option("--context", help="Number of context lines in the filters diff")]
ColorOption = Annotated[bool, typer.Option("--color/--no-color", help="Colorize the diff output")]
DebugOption = Annotated[bool, typer.Option("--debug", help="Show Gmail search strings and URLs for each filter")]
