"""CLI entry point for gmail-filters."""

import logging
from typing import Annotated

import typer

from gmail_filters.cli import filters_app

app = typer.Typer(help="Declarative Gmail filters: compile a config and keep Gmail in sync with it")
app.add_typer(filters_app)


@app.callback()
def main(verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # The discovery client is very chatty at DEBUG
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)


if __name__ == "__main__":
    app()
