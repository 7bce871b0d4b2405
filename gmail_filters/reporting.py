"""Human-readable rendering helpers shared by errors and diffs."""

import dataclasses
from enum import Enum
import io
from typing import Any

from pydantic import BaseModel
from rich.console import Console
from rich.text import Text
import yaml


def _plain(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True, exclude_defaults=True, exclude_none=True)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: _plain(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, list | tuple):
        return [_plain(x) for x in obj]
    if isinstance(obj, dict):
        return {k: _plain(v) for k, v in obj.items()}
    return obj


def prettify(obj: Any) -> str:
    """Dump a config model or internal dataclass as YAML for error details."""
    return yaml.safe_dump(_plain(obj), default_flow_style=False, allow_unicode=True, sort_keys=False).rstrip("\n")


def _diff_line_style(line: str) -> str | None:
    if line.startswith(("---", "+++")):
        return "bold"
    if line.startswith("@@"):
        return "cyan"
    if line.startswith("-"):
        return "red"
    if line.startswith("+"):
        return "green"
    return None


def colorize_diff(diff: str) -> str:
    """Add ANSI colors to a unified diff, line by line."""
    text = Text()
    lines = diff.split("\n")
    for i, line in enumerate(lines):
        text.append(line, style=_diff_line_style(line))
        if i < len(lines) - 1:
            text.append("\n")

    console = Console(file=io.StringIO(), force_terminal=True, color_system="standard", soft_wrap=True)
    with console.capture() as capture:
        console.print(text, end="", soft_wrap=True, highlight=False)
    return capture.get()
