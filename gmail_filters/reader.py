"""Loading the filters config document from disk."""

import json
import logging
from pathlib import Path
from typing import Any

import _jsonnet
from pydantic import ValidationError
import yaml

from gmail_filters.config_models import SUPPORTED_VERSION, Config
from gmail_filters.errors import ConfigError

logger = logging.getLogger(__name__)

JSONNET_SUFFIXES = frozenset({".jsonnet", ".libsonnet"})


def read_config(path: Path, lib_dir: Path | None = None) -> Config:
    """Read and validate a config file.

    ``.jsonnet``/``.libsonnet`` files are evaluated first, with imports resolved
    from ``lib_dir`` (default: the config's own directory). Anything else is
    read as YAML, or JSON which is a subset of it.
    """
    try:
        text = path.read_text()
    except FileNotFoundError as e:
        raise ConfigError(f"config not found: {path}") from e
    except OSError as e:
        raise ConfigError(f"reading config file {path}: {e}") from e
    logger.debug("Loaded config file %s (%d bytes)", path, len(text))
    if path.suffix in JSONNET_SUFFIXES:
        return parse_jsonnet(text, source=str(path), lib_dir=lib_dir or path.parent)
    return parse_config(text, source=str(path))


def parse_config(text: str, source: str = "<config>") -> Config:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"parsing {source}: {e}") from e
    return _validate(data, source)


def parse_jsonnet(text: str, source: str = "<config>", lib_dir: Path | None = None) -> Config:
    jpathdir = [str(lib_dir)] if lib_dir is not None else []
    try:
        evaluated = _jsonnet.evaluate_snippet(source, text, jpathdir=jpathdir)
    except RuntimeError as e:
        raise ConfigError(f"parsing jsonnet {source}", details=str(e)) from e
    return _validate(json.loads(evaluated), source)


def _validate(data: Any, source: str) -> Config:
    if not isinstance(data, dict):
        raise ConfigError(f"{source}: expected a mapping at the top level")

    # Check the version before strict validation: an old config would otherwise
    # fail with a pile of unknown-field errors instead of the real reason.
    version = data.get("version")
    if version != SUPPORTED_VERSION:
        raise ConfigError(f"unsupported config version: {version!r} (expected {SUPPORTED_VERSION!r})")

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid config {source}", details=str(e)) from e
