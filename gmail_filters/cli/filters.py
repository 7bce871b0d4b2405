"""Filter management subcommands."""

from pathlib import Path
from typing import Annotated

from rich.console import Console
from rich.markup import escape
from rich.table import Table
import typer

from gmail_filters.apply import apply as apply_diff
from gmail_filters.cli.common import (
    ColorOption,
    ConfigFileOption,
    ContextLinesOption,
    DebugOption,
    TokenFileOption,
    config_path,
    exit_on_error,
    get_client,
)
from gmail_filters.diff import ConfigDiff, ConfigParseResult, diff, from_api, from_config
from gmail_filters.errors import FilterImportError
from gmail_filters.gmail_client import GmailClient
from gmail_filters.reader import read_config
from gmail_filters.rimport import dump_config, reverse_import
from gmail_filters.settings import DEFAULT_CONTEXT_LINES, DiffOptions

filters_app = typer.Typer(help="Manage Gmail filters")

DOWNLOAD_HEADER = "# Auto-imported filters by gmail-filters\n\n"


def load_local(config_file: Path | None, options: DiffOptions) -> ConfigParseResult:
    return from_config(read_config(config_path(config_file)), options.size_limit)


def compute_diff(config_file: Path | None, client: GmailClient, options: DiffOptions) -> ConfigDiff:
    local = load_local(config_file, options)
    upstream = from_api(client)
    return diff(local, upstream, options)


@filters_app.command("diff")
def diff_cmd(
    config_file: ConfigFileOption = None,
    token_file: TokenFileOption = None,
    context: ContextLinesOption = DEFAULT_CONTEXT_LINES,
    color: ColorOption = False,
    debug: DebugOption = False,
):
    """Show what would change in Gmail to match the config (read-only)."""
    console = Console()
    options = DiffOptions(context_lines=context, colorize=color, debug_info=debug)
    with exit_on_error(console):
        config_diff = compute_diff(config_file, get_client(token_file), options)
    if config_diff.empty():
        console.print("[green]✓[/green] Gmail is in sync with the config. No changes needed.")
        return
    typer.echo(config_diff.render())


@filters_app.command("apply")
def apply_cmd(
    config_file: ConfigFileOption = None,
    token_file: TokenFileOption = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Apply without asking for confirmation")] = False,
    remove_labels: Annotated[
        bool, typer.Option("--remove-labels", help="Also delete Gmail labels that are not in the config")
    ] = False,
    context: ContextLinesOption = DEFAULT_CONTEXT_LINES,
    color: ColorOption = False,
    debug: DebugOption = False,
):
    """Apply the config to Gmail."""
    console = Console()
    options = DiffOptions(context_lines=context, colorize=color, debug_info=debug)
    with exit_on_error(console):
        client = get_client(token_file)
        config_diff = compute_diff(config_file, client, options)
        config_diff.validate()

    if config_diff.empty():
        console.print("No changes have been made.")
        return

    typer.echo("You are going to apply the following changes to your settings:\n")
    typer.echo(config_diff.render())

    if config_diff.labels_diff.removed and not remove_labels:
        console.print(
            "[yellow]Note:[/yellow] labels not in the config will be kept. Pass --remove-labels to delete them."
        )

    if not yes and not typer.confirm("Do you want to apply them?"):
        console.print("[yellow]Cancelled[/yellow]")
        return

    console.print("Applying the changes...")
    with exit_on_error(console):
        apply_diff(config_diff, client, allow_remove_labels=remove_labels)
    console.print("[green]✓[/green] Done.")


@filters_app.command("download")
def download(
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output config file (default: stdout)")] = None,
    token_file: TokenFileOption = None,
):
    """Download the Gmail filters and labels as a config file."""
    console = Console(stderr=True)
    with exit_on_error(console):
        client = get_client(token_file)
        labels = client.list_labels()
        try:
            filters = client.list_filters()
        except FilterImportError as e:
            console.print(f"[yellow]Warning:[/yellow] {escape(str(e))}, exporting the rest")
            console.print(escape(e.details or ""), highlight=False)
            filters = e.filters
        text = dump_config(reverse_import(filters, labels), header=DOWNLOAD_HEADER)

    if output is None:
        typer.echo(text, nl=False)
        return
    output.write_text(text)
    console.print(f"[green]✓[/green] Exported {len(filters)} filters and {len(labels)} labels to {output}")


@filters_app.command("debug")
def debug_cmd(config_file: ConfigFileOption = None):
    """Show the filters compiled from the config, with the equivalent Gmail searches."""
    console = Console()
    with exit_on_error(console):
        local = load_local(config_file, DiffOptions())

    table = Table(title=f"{len(local.filters)} filters")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Filter")
    table.add_column("Search")
    for i, f in enumerate(local.filters):
        table.add_row(
            str(i),
            escape(f.render().rstrip("\n")),
            f"{escape(f.criteria.to_gmail_search())}\n[link={f.criteria.to_gmail_search_url()}]open in Gmail[/link]",
        )
    console.print(table)
