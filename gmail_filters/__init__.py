"""Declarative Gmail filters: compile a config into Gmail filters and keep the account in sync."""
