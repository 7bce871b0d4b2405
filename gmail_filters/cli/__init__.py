"""CLI subcommand modules for gmail-filters."""

from gmail_filters.cli.filters import filters_app

__all__ = ["filters_app"]
