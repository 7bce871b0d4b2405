"""Options threaded explicitly through the compile/diff pipeline."""

from dataclasses import dataclass

# There is no documented limit on filter size in Gmail; this is an educated guess.
DEFAULT_SIZE_LIMIT = 20
DEFAULT_CONTEXT_LINES = 5
LABELS_CONTEXT_LINES = 3


@dataclass(frozen=True)
class DiffOptions:
    context_lines: int = DEFAULT_CONTEXT_LINES
    colorize: bool = False
    debug_info: bool = False
    size_limit: int = DEFAULT_SIZE_LIMIT
