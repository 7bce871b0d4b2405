"""Directory locations for gmail-filters."""

from pathlib import Path

import platformdirs

APP_NAME = "gmail-filters"
CONFIG_FILE_NAME = "config.yaml"
JSONNET_CONFIG_FILE_NAME = "config.jsonnet"
TOKEN_FILE_NAME = "token.json"


def get_config_dir() -> Path:
    """Get config directory for gmail-filters."""
    return platformdirs.user_config_path(APP_NAME)


def default_config_file() -> Path:
    """config.jsonnet if present, otherwise config.yaml."""
    config_dir = get_config_dir()
    if (jsonnet := config_dir / JSONNET_CONFIG_FILE_NAME).exists():
        return jsonnet
    return config_dir / CONFIG_FILE_NAME


def default_token_file() -> Path:
    return get_config_dir() / TOKEN_FILE_NAME
